"""
Day unlock / progress engine
Time-gated release combined with prerequisite completion
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional

from market_warrior.utils.clock import ensure_utc

logger = logging.getLogger(__name__)

TOTAL_DAYS = 30
DAY_LENGTH = timedelta(hours=24)

STATUS_LOCKED = "locked"
STATUS_UNLOCKED = "unlocked"
STATUS_COMPLETED = "completed"

REASON_NOT_STARTED = "challenge not started"
REASON_PREVIOUS_DAY = "complete previous day first"


@dataclass(frozen=True)
class DayStatus:
    """Accessibility of a single day as of a given server time"""
    day_number: int
    status: str
    reason: Optional[str] = None
    unlocks_at: Optional[datetime] = None
    quiz_passed: bool = False
    quiz_score: Optional[int] = None
    quiz_attempts: int = 0
    task_completed: bool = False

    @property
    def accessible(self) -> bool:
        return self.status != STATUS_LOCKED

    @property
    def completed(self) -> bool:
        return self.status == STATUS_COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day_number": self.day_number,
            "status": self.status,
            "unlocked": self.accessible,
            "completed": self.completed,
            "reason": self.reason,
            "unlocks_at": self.unlocks_at.isoformat() if self.unlocks_at else None,
            "quiz_passed": self.quiz_passed,
            "quiz_score": self.quiz_score,
            "quiz_attempts": self.quiz_attempts,
            "task_completed": self.task_completed,
        }


@dataclass(frozen=True)
class UnlockState:
    """Full 30-day grid plus summary statistics"""
    days: List[DayStatus] = field(default_factory=list)
    completed_days: int = 0
    current_day: int = 1
    progress_percent: int = 0

    def day(self, day_number: int) -> DayStatus:
        return self.days[day_number - 1]


def _is_completed(progress: Any) -> bool:
    return bool(
        progress is not None
        and getattr(progress, "quiz_passed", False)
        and getattr(progress, "task_completed", False)
    )


def _prerequisite_met(progress: Any) -> bool:
    # The previous day must be fully completed (quiz passed AND task done)
    return _is_completed(progress)


def unlock_time(challenge_start: datetime, day_number: int) -> datetime:
    """Instant at which day_number's time lock opens"""
    return ensure_utc(challenge_start) + (day_number - 1) * DAY_LENGTH


def compute_unlock_state(
    enrollment: Any,
    progress_by_day: Mapping[int, Any],
    now: datetime,
) -> UnlockState:
    """
    Compute which days are accessible for a user

    Args:
        enrollment: object exposing challenge_start_date (may be None)
        progress_by_day: {day_number: DayProgress}; missing days are not started
        now: trusted server time

    Returns:
        UnlockState with 30 ordered DayStatus records and summary stats
    """
    start = ensure_utc(getattr(enrollment, "challenge_start_date", None))
    now = ensure_utc(now)
    days: List[DayStatus] = []

    for day_number in range(1, TOTAL_DAYS + 1):
        progress = progress_by_day.get(day_number)
        snapshot = {
            "quiz_passed": bool(getattr(progress, "quiz_passed", False)),
            "quiz_score": getattr(progress, "quiz_score", None),
            "quiz_attempts": getattr(progress, "quiz_attempts", None) or 0,
            "task_completed": bool(getattr(progress, "task_completed", False)),
        }

        if start is None:
            days.append(DayStatus(day_number, STATUS_LOCKED, REASON_NOT_STARTED, **snapshot))
            continue

        if day_number > 1:
            if not _prerequisite_met(progress_by_day.get(day_number - 1)):
                days.append(DayStatus(day_number, STATUS_LOCKED, REASON_PREVIOUS_DAY, **snapshot))
                continue

            opens_at = unlock_time(start, day_number)
            if now < opens_at:
                days.append(DayStatus(
                    day_number,
                    STATUS_LOCKED,
                    f"unlocks at {opens_at.isoformat()}",
                    unlocks_at=opens_at,
                    **snapshot,
                ))
                continue

        status = STATUS_COMPLETED if _is_completed(progress) else STATUS_UNLOCKED
        days.append(DayStatus(day_number, status, **snapshot))

    completed_days = sum(1 for d in days if d.completed)
    current_day = next(
        (d.day_number for d in days if d.status == STATUS_UNLOCKED),
        min(completed_days + 1, TOTAL_DAYS),
    )
    progress_percent = round(completed_days / TOTAL_DAYS * 100)

    logger.debug(
        f"Unlock state: completed={completed_days}, current_day={current_day}, "
        f"percent={progress_percent}"
    )

    return UnlockState(
        days=days,
        completed_days=completed_days,
        current_day=current_day,
        progress_percent=progress_percent,
    )


def is_certificate_eligible(progress_by_day: Mapping[int, Any]) -> bool:
    """True iff every one of the 30 days is quiz-passed and task-completed"""
    return all(_is_completed(progress_by_day.get(d)) for d in range(1, TOTAL_DAYS + 1))
