"""
Shared FastAPI dependencies
"""
from datetime import datetime
from fastapi import Depends
from sqlalchemy.orm import Session

from market_warrior.auth import AuthUser, get_current_user
from market_warrior.config import Settings, get_settings
from market_warrior.database import get_db
from market_warrior.errors import PreconditionError
from market_warrior.models import Enrollment
from market_warrior.services.email_service import EmailService
from market_warrior.services.enrollment_service import enrollment_service
from market_warrior.services.storage_service import StorageService
from market_warrior.utils.clock import server_now


def get_now() -> datetime:
    """Trusted server time; overridden in tests"""
    return server_now()


def get_enrollment(
    user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Enrollment:
    return enrollment_service.get_or_create(db, user)


def get_paid_enrollment(
    enrollment: Enrollment = Depends(get_enrollment),
    now: datetime = Depends(get_now),
) -> Enrollment:
    enrollment_service.require_paid_access(enrollment, now)
    return enrollment


def require_admin(enrollment: Enrollment = Depends(get_enrollment)) -> Enrollment:
    if not enrollment.is_admin:
        raise PreconditionError("Admin access required")
    return enrollment


def get_email_service(settings: Settings = Depends(get_settings)) -> EmailService:
    return EmailService(settings)


def get_storage_service(settings: Settings = Depends(get_settings)) -> StorageService:
    return StorageService(settings)
