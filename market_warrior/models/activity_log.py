"""
ActivityLog model - audit trail of user and admin actions
"""
from sqlalchemy import Column, String, DateTime, Uuid, func
from market_warrior.database import Base, JSONType
import uuid


class ActivityLog(Base):
    __tablename__ = "activity_log"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), index=True)
    action = Column(String(64), nullable=False)
    details = Column(JSONType)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<ActivityLog(user_id={self.user_id}, action={self.action})>"
