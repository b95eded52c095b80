"""
PromoCode model - admin-managed discount codes
"""
from sqlalchemy import Column, String, Integer, Boolean, DateTime, Uuid, func
from market_warrior.database import Base
import uuid


class PromoCode(Base):
    __tablename__ = "promo_codes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    code = Column(String(64), unique=True, nullable=False)  # stored upper-case
    discount_percent = Column(Integer, nullable=False)
    max_uses = Column(Integer)
    current_uses = Column(Integer, default=0, nullable=False)
    expires_at = Column(DateTime(timezone=True))
    is_active = Column(Boolean, default=True, nullable=False)
    created_by = Column(String(64))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<PromoCode(code={self.code}, discount={self.discount_percent}%)>"
