"""
Task submission service
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from market_warrior.errors import DependencyError, PreconditionError, ValidationError
from market_warrior.models import Enrollment, TaskSubmission
from market_warrior.services.activity_service import log_activity
from market_warrior.services.progress_service import progress_service
from market_warrior.services.unlock_service import TOTAL_DAYS

logger = logging.getLogger(__name__)


@dataclass
class TaskOutcome:
    day_number: int
    day_completed: bool
    course_completed: bool
    message: str


class TaskService:

    def submit(
        self,
        db: Session,
        enrollment: Enrollment,
        day_number: int,
        task_text: Optional[str],
        file_url: Optional[str],
        now: datetime,
    ) -> TaskOutcome:
        """
        Record the task for a day whose quiz has been passed

        Re-submission overwrites the previous text/file and resets review
        status to pending.
        """
        task_text = (task_text or "").strip() or None
        if not task_text and not file_url:
            raise ValidationError("Please provide task response or file")

        user_id = enrollment.user_id
        progress = progress_service.get_day(db, user_id, day_number)
        if progress is None or not progress.quiz_passed:
            raise PreconditionError("quiz not passed")

        try:
            submission = db.query(TaskSubmission).filter(
                TaskSubmission.user_id == user_id,
                TaskSubmission.day_number == day_number,
            ).first()
            if submission is None:
                submission = TaskSubmission(user_id=user_id, day_number=day_number)
                db.add(submission)
            submission.task_text = task_text
            submission.file_url = file_url or None
            submission.status = "pending"

            if not progress.task_completed:
                progress.task_completed = True
                progress.task_completed_at = now

            day_completed = progress_service.complete_day_if_ready(db, enrollment, progress, now)

            log_activity(db, user_id, "task_submit", {
                "day": day_number,
                "has_text": bool(task_text),
                "has_file": bool(file_url),
            })
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to record task for {user_id} day {day_number}: {str(e)}")
            raise DependencyError("Failed to submit task, please retry")

        course_completed = day_number == TOTAL_DAYS and progress.is_completed
        message = (
            "Congratulations! You have completed the 30-Day Market Warrior Challenge!"
            if course_completed
            else f"Day {day_number} task submitted!"
        )
        return TaskOutcome(
            day_number=day_number,
            day_completed=day_completed,
            course_completed=course_completed,
            message=message,
        )


# Global instance
task_service = TaskService()
