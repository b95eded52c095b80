"""
Progress dashboard API endpoints
"""
from datetime import datetime
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from market_warrior.api.deps import get_now, get_paid_enrollment
from market_warrior.database import get_db
from market_warrior.models import Enrollment
from market_warrior.schemas.progress import DayStatusOut, ProgressStats, ProgressStatusResponse
from market_warrior.services.progress_service import progress_service
from market_warrior.services.unlock_service import compute_unlock_state, is_certificate_eligible

router = APIRouter(prefix="/progress", tags=["progress"])
logger = logging.getLogger(__name__)


@router.get("/status", response_model=ProgressStatusResponse)
async def get_progress_status(
    enrollment: Enrollment = Depends(get_paid_enrollment),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """
    Get the full 30-day grid for the caller

    Returns:
    - Per-day status (locked / unlocked / completed) with unlock times
    - Completed days, current day and completion percentage
    """
    progress = progress_service.get_progress_map(db, enrollment.user_id)
    state = compute_unlock_state(enrollment, progress, now)

    return ProgressStatusResponse(
        days=[DayStatusOut(**day.to_dict()) for day in state.days],
        stats=ProgressStats(
            completed_days=state.completed_days,
            current_day=state.current_day,
            progress_percent=state.progress_percent,
            certificate_eligible=is_certificate_eligible(progress),
            challenge_start_date=enrollment.challenge_start_date,
            access_expires_at=enrollment.access_expires_at,
        ),
    )
