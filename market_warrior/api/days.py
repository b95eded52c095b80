"""
Day content API endpoints
"""
from datetime import datetime
from fastapi import APIRouter, Depends, Path, Request
from sqlalchemy.orm import Session
import logging

from market_warrior.api.deps import get_now, get_paid_enrollment
from market_warrior.config import Settings, get_settings
from market_warrior.database import get_db
from market_warrior.errors import NotFoundError, PreconditionError
from market_warrior.models import CourseContent, Enrollment, TaskSubmission
from market_warrior.schemas.day import (
    DayContentResponse, DayProgressOut, TaskSubmissionOut, strip_answers
)
from market_warrior.services.device_service import device_service
from market_warrior.services.enrollment_service import enrollment_service
from market_warrior.services.progress_service import progress_service

router = APIRouter(prefix="/day", tags=["days"])
logger = logging.getLogger(__name__)


@router.get("/{day_number}", response_model=DayContentResponse)
async def get_day(
    request: Request,
    day_number: int = Path(..., ge=1, le=30),
    enrollment: Enrollment = Depends(get_paid_enrollment),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
    settings: Settings = Depends(get_settings),
):
    """
    Get lesson content for a day

    - Requires paid, unexpired access and accepted terms
    - Enforces the device limit
    - 403 with reason (and unlocks_at when time-locked) if the day is locked
    - Quiz questions are returned without the answer key
    """
    enrollment_service.require_terms(enrollment)

    check = device_service.check_device_limit(
        db, enrollment, device_service.fingerprint(request), settings.MAX_DEVICES
    )
    if not check.allowed:
        raise PreconditionError(check.message or "Device limit reached")

    progress_service.require_unlocked(db, enrollment, day_number, now)
    logger.info(f"Serving day {day_number} to {enrollment.user_id}")

    content = db.get(CourseContent, day_number)
    if content is None:
        raise NotFoundError("Day content not found")

    progress = progress_service.get_day(db, enrollment.user_id, day_number)
    submission = db.query(TaskSubmission).filter(
        TaskSubmission.user_id == enrollment.user_id,
        TaskSubmission.day_number == day_number,
    ).first()

    return DayContentResponse(
        day_number=content.day_number,
        title=content.title,
        content_html=content.content_html,
        youtube_video_id=content.youtube_video_id,
        has_video=bool(content.has_video),
        quiz_questions=strip_answers(content.quiz_questions),
        task_instructions=content.task_instructions,
        progress=DayProgressOut.model_validate(progress) if progress else DayProgressOut(),
        task_submission=TaskSubmissionOut.model_validate(submission) if submission else None,
    )
