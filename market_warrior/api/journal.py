"""
Trading journal endpoints
"""
from typing import List
from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session
import logging

from market_warrior.api.deps import get_email_service, get_enrollment
from market_warrior.database import get_db
from market_warrior.models import Enrollment
from market_warrior.schemas.journal import JournalSignup, JournalSignupResponse, TradeCreate, TradeOut
from market_warrior.services.email_service import EmailService
from market_warrior.services.journal_service import journal_service

router = APIRouter(tags=["journal"])
logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.post("/journal-signup", response_model=JournalSignupResponse)
async def journal_signup(
    signup: JournalSignup,
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Capture a lead for the free journal template

    Signing up twice with the same email is accepted without a second email.
    """
    lead, created = journal_service.signup_lead(db, signup.email, signup.name, signup.source)
    if not created:
        return JournalSignupResponse(message="You're already signed up! Check your email for the template.")

    email_service.send_journal_template_email(lead.email, lead.name)
    return JournalSignupResponse(message="Check your email for the trading journal template!")


@router.get("/journal/trades", response_model=List[TradeOut])
async def list_trades(
    enrollment: Enrollment = Depends(get_enrollment),
    db: Session = Depends(get_db),
):
    return journal_service.list_trades(db, enrollment.user_id)


@router.post("/journal/trades", response_model=TradeOut, status_code=201)
async def add_trade(
    trade: TradeCreate,
    enrollment: Enrollment = Depends(get_enrollment),
    db: Session = Depends(get_db),
):
    """Record a trade; P&L is computed once an exit price is present"""
    return journal_service.add_trade(db, enrollment.user_id, **trade.model_dump())


@router.get("/journal/export")
async def export_journal(
    enrollment: Enrollment = Depends(get_enrollment),
    db: Session = Depends(get_db),
):
    """Download the journal as an .xlsx workbook"""
    trades = journal_service.list_trades(db, enrollment.user_id)
    content = journal_service.export_xlsx(trades)
    logger.info(f"Journal export for {enrollment.user_id}: {len(trades)} trades")
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="trading-journal.xlsx"'},
    )
