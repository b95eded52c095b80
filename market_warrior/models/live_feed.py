"""
LiveFeedItem model - announcements shown on the member dashboard
"""
from sqlalchemy import Column, String, Boolean, Text, DateTime, Uuid, func
from market_warrior.database import Base
import uuid


class LiveFeedItem(Base):
    __tablename__ = "live_feed"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    link_url = Column(String(1024))
    link_text = Column(String(255))
    is_pinned = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_by = Column(String(64))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<LiveFeedItem(title={self.title}, pinned={self.is_pinned})>"
