"""
Pydantic schemas for day content
"""
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from datetime import datetime


class QuizQuestionOut(BaseModel):
    """Question as shown to the learner; never carries the answer"""
    question: str
    options: Any


class DayProgressOut(BaseModel):
    quiz_completed: bool = False
    quiz_passed: bool = False
    quiz_score: Optional[int] = None
    quiz_attempts: int = 0
    task_completed: bool = False
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TaskSubmissionOut(BaseModel):
    task_text: Optional[str] = None
    file_url: Optional[str] = None
    status: str

    class Config:
        from_attributes = True


class DayContentResponse(BaseModel):
    day_number: int
    title: str
    content_html: Optional[str] = None
    youtube_video_id: Optional[str] = None
    has_video: bool = False
    quiz_questions: List[QuizQuestionOut]
    task_instructions: Optional[str] = None
    progress: DayProgressOut
    task_submission: Optional[TaskSubmissionOut] = None


def strip_answers(questions: Optional[List[Dict[str, Any]]]) -> List[QuizQuestionOut]:
    """Keep only the question text and options of stored quiz questions"""
    return [
        QuizQuestionOut(question=q.get("question", ""), options=q.get("options", []))
        for q in (questions or [])
    ]
