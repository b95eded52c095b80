"""
Pydantic schemas for quiz-related requests and responses
"""
from pydantic import BaseModel, Field
from typing import List, Optional


class QuizSubmission(BaseModel):
    """Schema for quiz submission"""
    day_number: int = Field(..., ge=1, le=30, description="Day the quiz belongs to")
    answers: List[Optional[str]] = Field(..., description="Selected option ids, in question order")
    include_review: bool = Field(False, description="Request per-question review of a passed day")


class QuestionFeedback(BaseModel):
    """Grading details for a single question"""
    question: int
    your_answer: Optional[str] = None
    correct_answer: str
    is_correct: bool
    explanation: Optional[str] = None


class QuizSubmitResponse(BaseModel):
    """Response after quiz grading"""
    score: int
    passed: bool
    correct_count: int
    total_questions: int
    threshold: int
    attempt_number: int
    best_score: int
    message: str
    feedback: Optional[List[QuestionFeedback]] = None
