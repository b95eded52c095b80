"""
Checkout, promo code and Stripe webhook endpoints
"""
from datetime import datetime
import json
import logging

import stripe
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from market_warrior.api.deps import get_email_service, get_enrollment, get_now
from market_warrior.config import Settings, get_settings
from market_warrior.database import get_db
from market_warrior.errors import DependencyError, ValidationError
from market_warrior.models import Enrollment
from market_warrior.schemas.billing import (
    CheckoutRequest, CheckoutResponse, PromoValidateRequest, PromoValidateResponse
)
from market_warrior.services.email_service import EmailService
from market_warrior.services.payment_service import payment_service
from market_warrior.services.promo_service import promo_service

router = APIRouter(tags=["billing"])
logger = logging.getLogger(__name__)


@router.post("/checkout/stripe", response_model=CheckoutResponse)
async def create_checkout(
    request: CheckoutRequest,
    enrollment: Enrollment = Depends(get_enrollment),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
    settings: Settings = Depends(get_settings),
):
    """
    Start a Stripe checkout for the challenge

    The price comes from STRIPE_PRICE_ID; a valid promo code becomes a
    one-off percent-off coupon.
    """
    if enrollment.is_paid:
        raise ValidationError("You already have access to the challenge")

    session = payment_service.create_checkout_session(
        db,
        enrollment,
        settings,
        now,
        promo_code=request.promo_code,
        affiliate_code=request.affiliate_code,
    )
    return CheckoutResponse(**session)


@router.post("/promo/validate", response_model=PromoValidateResponse, response_model_exclude_none=True)
async def validate_promo(
    request: PromoValidateRequest,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Check a promo code without consuming it"""
    validation = promo_service.validate(db, request.code, now)
    return PromoValidateResponse(
        valid=validation.valid,
        message=validation.message,
        code=validation.code,
        discount_percent=validation.discount_percent,
    )


@router.post("/webhooks/stripe")
async def stripe_webhook(
    request: Request,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
    settings: Settings = Depends(get_settings),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Receive Stripe events

    - Signature verified against STRIPE_WEBHOOK_SECRET
    - checkout.session.completed grants paid access
    - Replays of the same session are acknowledged without side effects
    """
    if not settings.STRIPE_WEBHOOK_SECRET:
        logger.error("STRIPE_WEBHOOK_SECRET not configured")
        raise DependencyError("Webhook secret not configured")

    payload = await request.body()
    signature = request.headers.get("stripe-signature")
    if not signature:
        raise ValidationError("Missing stripe-signature header")

    try:
        stripe.Webhook.construct_event(payload, signature, settings.STRIPE_WEBHOOK_SECRET)
    except ValueError:
        logger.warning("Invalid webhook payload")
        raise ValidationError("Invalid payload")
    except stripe.SignatureVerificationError:
        logger.warning("Invalid webhook signature")
        raise ValidationError("Invalid signature")

    event = json.loads(payload)
    logger.info(f"Stripe webhook received: {event.get('type')}")

    payment_service.handle_event(db, event, settings, email_service, now)
    return {"received": True}
