"""
QuizAttempt model - stores quiz submissions and grading
"""
from sqlalchemy import Column, String, Integer, Boolean, DateTime, UniqueConstraint, Uuid, func
from market_warrior.database import Base, JSONType
import uuid


class QuizAttempt(Base):
    """
    Quiz attempts table - one row per grading event, read-only afterwards
    """
    __tablename__ = "quiz_attempts"
    __table_args__ = (
        UniqueConstraint("user_id", "day_number", "attempt_number", name="uq_quiz_attempt_number"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), nullable=False, index=True)
    day_number = Column(Integer, nullable=False)
    answers = Column(JSONType)  # Submitted answers, in question order
    results = Column(JSONType)  # Per-question correctness
    score = Column(Integer, nullable=False)
    passed = Column(Boolean, nullable=False)
    attempt_number = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<QuizAttempt(user_id={self.user_id}, day={self.day_number}, attempt={self.attempt_number}, score={self.score})>"
