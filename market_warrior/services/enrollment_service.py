"""
Enrollment service - account records, access window and paywall checks
"""
import logging
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from market_warrior.auth import AuthUser
from market_warrior.errors import DependencyError, PreconditionError
from market_warrior.models import Enrollment
from market_warrior.utils.clock import ensure_utc

logger = logging.getLogger(__name__)


class EnrollmentService:
    """Service for reading and transitioning a user's enrollment"""

    def get_or_create(self, db: Session, user: AuthUser) -> Enrollment:
        """
        Load the caller's enrollment, creating it on first sight

        Profile fields (email, name) are refreshed from the token when the
        stored values are empty.
        """
        try:
            enrollment = db.get(Enrollment, user.id)
            if enrollment is None:
                enrollment = Enrollment(
                    user_id=user.id,
                    email=user.email,
                    full_name=user.full_name,
                    device_ids=[],
                )
                db.add(enrollment)
                db.commit()
                db.refresh(enrollment)
                logger.info(f"Enrollment created: {user.id}")
            elif (not enrollment.email and user.email) or (not enrollment.full_name and user.full_name):
                enrollment.email = enrollment.email or user.email
                enrollment.full_name = enrollment.full_name or user.full_name
                db.commit()
            return enrollment
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to load enrollment for {user.id}: {str(e)}")
            raise DependencyError("Failed to load account")

    def start_challenge(self, enrollment: Enrollment, now: datetime, window_days: int) -> bool:
        """
        Set the challenge start and access expiry, once

        Returns:
            True if the start was set by this call, False if already set
        """
        if enrollment.challenge_start_date is not None:
            return False
        enrollment.challenge_start_date = now
        enrollment.access_expires_at = now + timedelta(days=window_days)
        logger.info(f"Challenge started for {enrollment.user_id} at {now.isoformat()}")
        return True

    def is_expired(self, enrollment: Enrollment, now: datetime) -> bool:
        expires_at = ensure_utc(enrollment.access_expires_at)
        return expires_at is not None and expires_at < now

    def has_paid_access(self, enrollment: Optional[Enrollment], now: datetime) -> bool:
        return bool(enrollment and enrollment.is_paid and not self.is_expired(enrollment, now))

    def require_paid_access(self, enrollment: Enrollment, now: datetime) -> None:
        """Raise PreconditionError unless the user has paid, unexpired access"""
        if not enrollment.is_paid:
            raise PreconditionError("Payment required")
        if self.is_expired(enrollment, now):
            raise PreconditionError("Access has expired")

    def require_terms(self, enrollment: Enrollment) -> None:
        if not enrollment.agreed_to_terms:
            raise PreconditionError("Please accept terms first")


# Global instance
enrollment_service = EnrollmentService()
