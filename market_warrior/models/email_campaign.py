"""
EmailCampaign model - history of admin broadcast emails
"""
from sqlalchemy import Column, String, Integer, Text, DateTime, Uuid, func
from market_warrior.database import Base
import uuid


class EmailCampaign(Base):
    __tablename__ = "email_campaigns"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    subject = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    audience = Column(String(32), nullable=False)
    sent_count = Column(Integer, default=0, nullable=False)
    failed_count = Column(Integer, default=0, nullable=False)
    status = Column(String(20), default="sent")
    sent_by = Column(String(64))
    sent_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<EmailCampaign(subject={self.subject}, audience={self.audience}, sent={self.sent_count})>"
