"""
Progress service - DayProgress persistence and the day-completion cascade
"""
import logging
from datetime import datetime
from typing import Dict, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from market_warrior.errors import DependencyError, PreconditionError
from market_warrior.models import DayProgress, Enrollment
from market_warrior.services.activity_service import log_activity
from market_warrior.services.email_service import EmailService
from market_warrior.services.unlock_service import TOTAL_DAYS, DayStatus, UnlockState, compute_unlock_state

logger = logging.getLogger(__name__)


class ProgressService:
    """Reads and upserts per-day progress for one user"""

    def get_progress_map(self, db: Session, user_id: str) -> Dict[int, DayProgress]:
        try:
            records = (
                db.query(DayProgress)
                .filter(DayProgress.user_id == user_id)
                .order_by(DayProgress.day_number)
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to load progress for {user_id}: {str(e)}")
            raise DependencyError("Failed to load progress")
        return {p.day_number: p for p in records}

    def get_day(self, db: Session, user_id: str, day_number: int) -> Optional[DayProgress]:
        return db.query(DayProgress).filter(
            DayProgress.user_id == user_id,
            DayProgress.day_number == day_number,
        ).first()

    def get_or_create_day(self, db: Session, user_id: str, day_number: int) -> DayProgress:
        """Upsert keyed by (user, day); the new row is staged, not committed"""
        progress = self.get_day(db, user_id, day_number)
        if progress is None:
            progress = DayProgress(
                user_id=user_id,
                day_number=day_number,
                quiz_completed=False,
                quiz_passed=False,
                quiz_attempts=0,
                task_completed=False,
            )
            db.add(progress)
        return progress

    def unlock_state(self, db: Session, enrollment: Enrollment, now: datetime) -> UnlockState:
        return compute_unlock_state(enrollment, self.get_progress_map(db, enrollment.user_id), now)

    def require_unlocked(self, db: Session, enrollment: Enrollment, day_number: int, now: datetime) -> DayStatus:
        """
        Raise PreconditionError unless the day is unlocked or completed

        The error carries the lock reason and, for time locks, unlocks_at.
        """
        status = self.unlock_state(db, enrollment, now).day(day_number)
        if not status.accessible:
            logger.info(f"Day {day_number} locked for {enrollment.user_id}: {status.reason}")
            raise PreconditionError(
                status.reason or "Day is locked",
                extra={
                    "day_number": day_number,
                    "reason": status.reason,
                    "unlocks_at": status.unlocks_at.isoformat() if status.unlocks_at else None,
                },
            )
        return status

    def complete_day_if_ready(
        self,
        db: Session,
        enrollment: Enrollment,
        progress: DayProgress,
        now: datetime,
    ) -> bool:
        """
        Stamp completed_at the first time a day has both quiz and task done

        The next day needs no write: its unlock is recomputed from the
        enrollment start on every read.

        Returns:
            True if the day transitioned to completed in this call
        """
        if not progress.is_completed or progress.completed_at is not None:
            return False

        progress.completed_at = now
        log_activity(db, enrollment.user_id, "day_completed", {"day": progress.day_number})
        logger.info(f"Day {progress.day_number} completed by {enrollment.user_id}")

        if progress.day_number == TOTAL_DAYS:
            log_activity(db, enrollment.user_id, "course_completed", {})

        return True

    def notify_completion(self, enrollment: Enrollment, day_number: int, email_service: EmailService) -> None:
        """Send the course completion email once day 30 has been committed"""
        if day_number == TOTAL_DAYS and enrollment.email:
            email_service.send_completion_email(enrollment.email, enrollment.full_name)


# Global instance
progress_service = ProgressService()
