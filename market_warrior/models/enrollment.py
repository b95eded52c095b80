"""
Enrollment model - one row per user, keyed by the auth provider's user id
"""
from sqlalchemy import Column, String, Boolean, DateTime, func
from market_warrior.database import Base, JSONType


class Enrollment(Base):
    """
    Enrollments table - payment status, challenge start and access window

    challenge_start_date is written once (payment or terms acceptance) and
    never moved afterwards; access_expires_at is derived from it.
    """
    __tablename__ = "enrollments"

    user_id = Column(String(64), primary_key=True)
    email = Column(String(255), index=True)
    full_name = Column(String(255))
    is_paid = Column(Boolean, default=False, nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)
    agreed_to_terms = Column(Boolean, default=False, nullable=False)
    challenge_start_date = Column(DateTime(timezone=True))
    access_expires_at = Column(DateTime(timezone=True))
    stripe_customer_id = Column(String(255))
    device_ids = Column(JSONType, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Enrollment(user_id={self.user_id}, paid={self.is_paid}, start={self.challenge_start_date})>"
