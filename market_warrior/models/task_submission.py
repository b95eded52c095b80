"""
TaskSubmission model - the practical task handed in for a day
"""
from sqlalchemy import Column, String, Integer, Text, DateTime, UniqueConstraint, Uuid, func
from market_warrior.database import Base
import uuid


class TaskSubmission(Base):
    __tablename__ = "task_submissions"
    __table_args__ = (
        UniqueConstraint("user_id", "day_number", name="uq_task_submission_user_day"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), nullable=False, index=True)
    day_number = Column(Integer, nullable=False)
    task_text = Column(Text)
    file_url = Column(String(1024))
    status = Column(String(20), default="pending")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<TaskSubmission(user_id={self.user_id}, day={self.day_number}, status={self.status})>"
