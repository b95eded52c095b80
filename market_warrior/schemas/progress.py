"""
Pydantic schemas for the progress dashboard
"""
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class DayStatusOut(BaseModel):
    day_number: int
    status: str  # locked / unlocked / completed
    unlocked: bool
    completed: bool
    reason: Optional[str] = None
    unlocks_at: Optional[datetime] = None
    quiz_passed: bool
    quiz_score: Optional[int] = None
    quiz_attempts: int
    task_completed: bool


class ProgressStats(BaseModel):
    completed_days: int
    current_day: int
    progress_percent: int
    certificate_eligible: bool
    challenge_start_date: Optional[datetime] = None
    access_expires_at: Optional[datetime] = None


class ProgressStatusResponse(BaseModel):
    days: List[DayStatusOut]
    stats: ProgressStats
