"""
Certificate issuer
"""
import logging
import uuid
from typing import Optional, Tuple
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from market_warrior.errors import DependencyError, ValidationError
from market_warrior.models import Certificate, Enrollment
from market_warrior.services.activity_service import log_activity
from market_warrior.services.progress_service import progress_service
from market_warrior.services.unlock_service import TOTAL_DAYS, is_certificate_eligible

logger = logging.getLogger(__name__)

DEFAULT_GRADUATE_NAME = "Market Warrior Graduate"


class CertificateService:

    def get(self, db: Session, user_id: str) -> Optional[Certificate]:
        return db.query(Certificate).filter(Certificate.user_id == user_id).first()

    def _new_certificate_id(self) -> str:
        return f"MW-{uuid.uuid4().hex[:8].upper()}"

    def issue(self, db: Session, enrollment: Enrollment) -> Tuple[Certificate, bool]:
        """
        Issue the user's certificate once all 30 days are completed

        Idempotent: a repeated request returns the existing certificate.

        Returns:
            Tuple of (certificate, created)
        """
        existing = self.get(db, enrollment.user_id)
        if existing:
            return existing, False

        progress = progress_service.get_progress_map(db, enrollment.user_id)
        if not is_certificate_eligible(progress):
            completed = sum(1 for p in progress.values() if p.is_completed)
            raise ValidationError(
                f"You must complete all {TOTAL_DAYS} days. Currently completed: {completed}/{TOTAL_DAYS}"
            )

        certificate = Certificate(
            user_id=enrollment.user_id,
            certificate_id=self._new_certificate_id(),
            issued_to_name=enrollment.full_name or DEFAULT_GRADUATE_NAME,
        )
        try:
            db.add(certificate)
            log_activity(db, enrollment.user_id, "certificate_generated", {
                "certificate_id": certificate.certificate_id,
            })
            db.commit()
        except IntegrityError:
            # Concurrent request won the race; return its certificate
            db.rollback()
            return self.get(db, enrollment.user_id), False
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to issue certificate for {enrollment.user_id}: {str(e)}")
            raise DependencyError("Failed to generate certificate")

        db.refresh(certificate)
        logger.info(f"Certificate {certificate.certificate_id} issued to {enrollment.user_id}")
        return certificate, True


# Global instance
certificate_service = CertificateService()
