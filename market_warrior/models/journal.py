"""
Trading journal models - lead sign-ups and members' trade entries
"""
from sqlalchemy import Column, String, Numeric, Text, DateTime, Uuid, func
from market_warrior.database import Base
import uuid


class JournalLead(Base):
    """Free journal template sign-ups (marketing leads)"""
    __tablename__ = "journal_leads"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False)  # stored lower-case
    name = Column(String(255))
    source = Column(String(64), default="website")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<JournalLead(email={self.email})>"


class JournalTrade(Base):
    """A single trade in a member's journal"""
    __tablename__ = "trading_journal"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), nullable=False, index=True)
    symbol = Column(String(32), nullable=False)
    trade_type = Column(String(8), nullable=False)  # long / short
    entry_date = Column(DateTime(timezone=True), nullable=False)
    exit_date = Column(DateTime(timezone=True))
    entry_price = Column(Numeric(14, 4), nullable=False)
    exit_price = Column(Numeric(14, 4))
    quantity = Column(Numeric(14, 4), nullable=False)
    pnl = Column(Numeric(14, 2))
    strategy = Column(String(255))
    emotions = Column(String(255))
    notes = Column(Text)
    lessons_learned = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<JournalTrade(user_id={self.user_id}, symbol={self.symbol}, pnl={self.pnl})>"
