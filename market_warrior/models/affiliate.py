"""
Affiliate and Referral models - commission tracking for referred payments
"""
from sqlalchemy import Column, String, Integer, Boolean, Numeric, DateTime, Uuid, func
from market_warrior.database import Base
import uuid


class Affiliate(Base):
    __tablename__ = "affiliates"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), index=True)
    affiliate_code = Column(String(64), unique=True, nullable=False)
    commission_rate = Column(Numeric(4, 2), default=0.30)
    total_referrals = Column(Integer, default=0, nullable=False)
    total_earnings = Column(Numeric(10, 2), default=0, nullable=False)
    pending_earnings = Column(Numeric(10, 2), default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Affiliate(code={self.affiliate_code}, referrals={self.total_referrals})>"


class Referral(Base):
    __tablename__ = "referrals"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    referrer_user_id = Column(String(64), index=True)
    referred_email = Column(String(255))
    commission_earned = Column(Numeric(10, 2))
    commission_rate = Column(Numeric(4, 2))
    status = Column(String(20), default="converted")
    stripe_session_id = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Referral(referrer={self.referrer_user_id}, commission={self.commission_earned})>"
