"""
Task submission and upload API endpoints
"""
from datetime import datetime
from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session
import logging

from market_warrior.api.deps import get_email_service, get_now, get_paid_enrollment, get_storage_service
from market_warrior.database import get_db
from market_warrior.models import Enrollment
from market_warrior.schemas.task import TaskSubmission, TaskSubmitResponse, UploadResponse
from market_warrior.services.email_service import EmailService
from market_warrior.services.progress_service import progress_service
from market_warrior.services.storage_service import StorageService
from market_warrior.services.task_service import task_service

router = APIRouter(tags=["tasks"])
logger = logging.getLogger(__name__)


@router.post("/task/submit", response_model=TaskSubmitResponse)
async def submit_task(
    submission: TaskSubmission,
    enrollment: Enrollment = Depends(get_paid_enrollment),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Submit the practical task for a day

    - Requires the day's quiz to be passed (403 otherwise)
    - Text, an uploaded file URL, or both
    - Completes the day when the quiz is already passed
    """
    outcome = task_service.submit(
        db,
        enrollment,
        submission.day_number,
        submission.task_text,
        submission.file_url,
        now,
    )

    if outcome.day_completed:
        progress_service.notify_completion(enrollment, submission.day_number, email_service)

    return TaskSubmitResponse(
        day=outcome.day_number,
        day_completed=outcome.day_completed,
        message=outcome.message,
    )


@router.post("/upload", response_model=UploadResponse, status_code=201)
async def upload_task_file(
    file: UploadFile = File(...),
    day_number: int = Form(..., ge=1, le=30),
    enrollment: Enrollment = Depends(get_paid_enrollment),
    storage: StorageService = Depends(get_storage_service),
):
    """
    Upload evidence for a task

    - JPEG, PNG, GIF, WebP or PDF, 5MB max
    - Returns a URL to pass as file_url to /task/submit
    """
    logger.info(f"Uploading task file for user {enrollment.user_id}, day {day_number}")
    stored = await storage.save_task_file(enrollment.user_id, day_number, file)
    return UploadResponse(url=stored["url"], filename=stored["filename"])
