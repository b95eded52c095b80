"""
CourseContent model - lesson, quiz and task content for each day
"""
from sqlalchemy import Column, String, Integer, Boolean, Text, DateTime, func
from market_warrior.database import Base, JSONType


class CourseContent(Base):
    """
    Course content table - one row per day

    quiz_answers and quiz_explanations form the answer key and are only
    read by the grading path and the admin content endpoints.
    """
    __tablename__ = "course_content"

    day_number = Column(Integer, primary_key=True, autoincrement=False)
    title = Column(String(255), nullable=False)
    content_html = Column(Text)
    youtube_video_id = Column(String(64))
    has_video = Column(Boolean, default=False)
    quiz_questions = Column(JSONType)  # [{"question": ..., "options": {"a": ..., "b": ...}}]
    quiz_answers = Column(JSONType)  # ["b", "c", ...]
    quiz_explanations = Column(JSONType)  # ["...", "...", ...]
    task_instructions = Column(Text)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<CourseContent(day={self.day_number}, title={self.title})>"
