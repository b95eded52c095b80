"""
Certificate model - at most one per user
"""
from sqlalchemy import Column, String, DateTime, Uuid, func
from market_warrior.database import Base
import uuid


class Certificate(Base):
    __tablename__ = "certificates"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), nullable=False, unique=True)
    certificate_id = Column(String(32), nullable=False, unique=True)
    issued_to_name = Column(String(255))
    issued_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Certificate(user_id={self.user_id}, certificate_id={self.certificate_id})>"
