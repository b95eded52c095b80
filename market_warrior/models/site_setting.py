"""
SiteSetting model - admin key/value settings
"""
from sqlalchemy import Column, String, DateTime, func
from market_warrior.database import Base, JSONType


class SiteSetting(Base):
    __tablename__ = "site_settings"

    key = Column(String(128), primary_key=True)
    value = Column(JSONType)
    updated_by = Column(String(64))
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<SiteSetting(key={self.key})>"
