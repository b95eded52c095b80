"""
Account and certificate endpoints
"""
from datetime import datetime
from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from market_warrior.api.deps import get_enrollment, get_now, get_paid_enrollment
from market_warrior.config import Settings, get_settings
from market_warrior.database import get_db
from market_warrior.errors import DependencyError
from market_warrior.models import Enrollment
from market_warrior.schemas.account import AccountResponse, CertificateOut, CertificateResponse
from market_warrior.services.activity_service import log_activity
from market_warrior.services.certificate_service import certificate_service
from market_warrior.services.enrollment_service import enrollment_service

router = APIRouter(tags=["account"])
logger = logging.getLogger(__name__)


@router.get("/account/me", response_model=AccountResponse)
async def get_account(enrollment: Enrollment = Depends(get_enrollment)):
    """Get the caller's enrollment summary"""
    return AccountResponse.model_validate(enrollment)


@router.post("/account/accept-terms", response_model=AccountResponse)
async def accept_terms(
    enrollment: Enrollment = Depends(get_enrollment),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
    settings: Settings = Depends(get_settings),
):
    """
    Record terms acceptance

    For a paid user whose challenge has not started yet, this also starts
    the challenge clock.
    """
    enrollment.agreed_to_terms = True
    if enrollment.is_paid:
        enrollment_service.start_challenge(enrollment, now, settings.ACCESS_WINDOW_DAYS)

    try:
        log_activity(db, enrollment.user_id, "terms_accepted")
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to accept terms for {enrollment.user_id}: {str(e)}")
        raise DependencyError("Failed to update account")

    db.refresh(enrollment)
    return AccountResponse.model_validate(enrollment)


@router.get("/certificate", response_model=CertificateResponse)
async def get_certificate(
    enrollment: Enrollment = Depends(get_paid_enrollment),
    db: Session = Depends(get_db),
):
    """The caller's certificate, or null when none has been issued"""
    certificate = certificate_service.get(db, enrollment.user_id)
    if certificate is None:
        return CertificateResponse(certificate=None, message="Certificate not issued yet")
    return CertificateResponse(certificate=CertificateOut.model_validate(certificate))


@router.post("/certificate", response_model=CertificateResponse)
async def generate_certificate(
    enrollment: Enrollment = Depends(get_paid_enrollment),
    db: Session = Depends(get_db),
):
    """
    Issue the completion certificate

    - 400 until all 30 days are completed
    - Repeated calls return the same certificate
    """
    certificate, created = certificate_service.issue(db, enrollment)
    return CertificateResponse(
        certificate=CertificateOut.model_validate(certificate),
        message="Certificate generated successfully" if created else "Certificate already exists",
    )
