"""
Quiz submission API endpoints
"""
from datetime import datetime
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from market_warrior.api.deps import get_email_service, get_now, get_paid_enrollment
from market_warrior.database import get_db
from market_warrior.models import Enrollment
from market_warrior.schemas.quiz import QuestionFeedback, QuizSubmission, QuizSubmitResponse
from market_warrior.services.email_service import EmailService
from market_warrior.services.grading_service import PASS_THRESHOLD_PERCENT
from market_warrior.services.enrollment_service import enrollment_service
from market_warrior.services.progress_service import progress_service
from market_warrior.services.quiz_service import quiz_service

router = APIRouter(prefix="/quiz", tags=["quiz"])
logger = logging.getLogger(__name__)


@router.post("/submit", response_model=QuizSubmitResponse, response_model_exclude_none=True)
async def submit_quiz(
    submission: QuizSubmission,
    enrollment: Enrollment = Depends(get_paid_enrollment),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Submit and grade a day's quiz

    Grading strategy:
    - Answer key loaded server-side, never accepted from the client
    - Case-insensitive match per question, score rounded to whole percent
    - Pass at 60%; best score across attempts is kept

    Locked days are refused with 403. Feedback per question is only
    returned when the attempt passed, or when
    include_review is set for a day already passed.
    """
    logger.info(f"Grading day {submission.day_number} quiz for user {enrollment.user_id}")

    enrollment_service.require_terms(enrollment)
    progress_service.require_unlocked(db, enrollment, submission.day_number, now)

    outcome = quiz_service.submit(
        db,
        enrollment,
        submission.day_number,
        submission.answers,
        now,
        include_review=submission.include_review,
    )

    if outcome.day_completed:
        progress_service.notify_completion(enrollment, submission.day_number, email_service)

    result = outcome.result
    return QuizSubmitResponse(
        score=result.score,
        passed=result.passed,
        correct_count=result.correct_count,
        total_questions=result.total_questions,
        threshold=PASS_THRESHOLD_PERCENT,
        attempt_number=outcome.attempt_number,
        best_score=outcome.best_score,
        message=outcome.message,
        feedback=[QuestionFeedback(**item) for item in outcome.feedback] if outcome.feedback is not None else None,
    )
