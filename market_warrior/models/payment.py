"""
Payment model - completed checkout sessions
"""
from sqlalchemy import Column, String, Numeric, DateTime, Uuid, func
from market_warrior.database import Base
import uuid


class Payment(Base):
    """
    Payments table - one row per Stripe checkout session
    """
    __tablename__ = "payments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), index=True)
    email = Column(String(255))
    amount = Column(Numeric(10, 2))
    currency = Column(String(8), default="usd")
    stripe_session_id = Column(String(255), unique=True, nullable=False)
    stripe_payment_intent_id = Column(String(255))
    promo_code = Column(String(64))
    affiliate_code = Column(String(64))
    status = Column(String(20), default="completed")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Payment(session={self.stripe_session_id}, email={self.email}, amount={self.amount})>"
