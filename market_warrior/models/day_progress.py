"""
DayProgress model - per-user, per-day quiz and task state
"""
from sqlalchemy import Column, String, Integer, Boolean, DateTime, UniqueConstraint, Uuid, func
from market_warrior.database import Base
import uuid


class DayProgress(Base):
    """
    Day progress table - one row per (user, day), created lazily on the
    first quiz attempt or task submission

    A day counts as completed once quiz_passed and task_completed are both set.
    """
    __tablename__ = "day_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "day_number", name="uq_day_progress_user_day"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), nullable=False, index=True)
    day_number = Column(Integer, nullable=False)
    quiz_completed = Column(Boolean, default=False, nullable=False)
    quiz_passed = Column(Boolean, default=False, nullable=False)
    quiz_score = Column(Integer)  # best score, 0-100
    quiz_attempts = Column(Integer, default=0, nullable=False)
    last_quiz_attempt = Column(DateTime(timezone=True))
    task_completed = Column(Boolean, default=False, nullable=False)
    task_completed_at = Column(DateTime(timezone=True))
    completed_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def is_completed(self) -> bool:
        return bool(self.quiz_passed and self.task_completed)

    def __repr__(self):
        return (
            f"<DayProgress(user_id={self.user_id}, day={self.day_number}, "
            f"quiz_passed={self.quiz_passed}, task_completed={self.task_completed})>"
        )
