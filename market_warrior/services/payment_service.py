"""
Stripe checkout and webhook handling
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

import stripe
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from market_warrior.config import Settings
from market_warrior.errors import DependencyError, ValidationError
from market_warrior.models import Affiliate, Enrollment, Payment, Referral
from market_warrior.services.activity_service import log_activity
from market_warrior.services.email_service import EmailService
from market_warrior.services.enrollment_service import enrollment_service
from market_warrior.services.promo_service import promo_service

logger = logging.getLogger(__name__)

DEFAULT_COMMISSION_RATE = Decimal("0.30")


def _init_stripe(settings: Settings) -> None:
    if not settings.STRIPE_SECRET_KEY:
        raise DependencyError("Payments are not configured")
    stripe.api_key = settings.STRIPE_SECRET_KEY


class PaymentService:
    """
    Checkout is priced server-side from STRIPE_PRICE_ID; the client only
    names a promo or affiliate code. The webhook is the source of truth
    for granting access.
    """

    def create_checkout_session(
        self,
        db: Session,
        enrollment: Enrollment,
        settings: Settings,
        now: datetime,
        promo_code: Optional[str] = None,
        affiliate_code: Optional[str] = None,
    ) -> Dict[str, Any]:
        _init_stripe(settings)

        params: Dict[str, Any] = {
            "mode": "payment",
            "payment_method_types": ["card"],
            "customer_email": enrollment.email,
            "client_reference_id": enrollment.user_id,
            "line_items": [{"price": settings.STRIPE_PRICE_ID, "quantity": 1}],
            "success_url": f"{settings.APP_URL}/welcome?session_id={{CHECKOUT_SESSION_ID}}",
            "cancel_url": f"{settings.APP_URL}/checkout",
            "metadata": {
                "user_id": enrollment.user_id,
                "user_email": enrollment.email or "",
                "affiliate_code": affiliate_code or "",
                "promo_code": "",
            },
        }

        if promo_code:
            validation = promo_service.validate(db, promo_code, now)
            if not validation.valid:
                raise ValidationError(validation.message)
            params["metadata"]["promo_code"] = validation.code

        try:
            if promo_code:
                coupon = stripe.Coupon.create(
                    percent_off=validation.discount_percent,
                    duration="once",
                )
                params["discounts"] = [{"coupon": coupon.id}]

            session = stripe.checkout.Session.create(**params)
        except stripe.StripeError as e:
            logger.error(f"Stripe checkout failed for {enrollment.user_id}: {str(e)}")
            raise DependencyError("Checkout failed, please try again")

        logger.info(f"Checkout session {session.id} created for {enrollment.user_id}")
        return {"url": session.url, "session_id": session.id}

    def handle_event(
        self,
        db: Session,
        event: Dict[str, Any],
        settings: Settings,
        email_service: EmailService,
        now: datetime,
    ) -> None:
        """Dispatch a verified webhook event"""
        event_type = event.get("type")
        data = (event.get("data") or {}).get("object") or {}

        if event_type == "checkout.session.completed":
            self.handle_checkout_completed(db, data, settings, email_service, now)
        elif event_type == "payment_intent.payment_failed":
            logger.warning(f"Payment failed: {data.get('id')}")
        else:
            logger.debug(f"Ignoring webhook event {event_type}")

    def _resolve_enrollment(self, db: Session, user_id: Optional[str], email: Optional[str]) -> Optional[Enrollment]:
        if user_id:
            enrollment = db.get(Enrollment, user_id)
            if enrollment is None:
                enrollment = Enrollment(user_id=user_id, email=email, device_ids=[])
                db.add(enrollment)
            return enrollment
        if email:
            return db.query(Enrollment).filter(Enrollment.email == email).first()
        return None

    def handle_checkout_completed(
        self,
        db: Session,
        session: Dict[str, Any],
        settings: Settings,
        email_service: EmailService,
        now: datetime,
    ) -> None:
        """
        Grant paid access for a completed checkout

        Replayed events for the same session are ignored; the challenge
        start is only ever set once per user.
        """
        metadata = session.get("metadata") or {}
        user_id = metadata.get("user_id") or session.get("client_reference_id")
        email = metadata.get("user_email") or (session.get("customer_details") or {}).get("email")
        promo_code = metadata.get("promo_code") or None
        affiliate_code = metadata.get("affiliate_code") or None
        session_id = session.get("id")

        if not session_id:
            logger.error("Checkout session without id")
            return
        if not user_id and not email:
            logger.error(f"No user or email found in session {session_id}")
            return

        try:
            if db.query(Payment).filter(Payment.stripe_session_id == session_id).first():
                logger.info(f"Checkout session {session_id} already processed")
                return

            enrollment = self._resolve_enrollment(db, user_id, email)
            if enrollment is not None:
                enrollment.is_paid = True
                if session.get("customer"):
                    enrollment.stripe_customer_id = session.get("customer")
                enrollment_service.start_challenge(enrollment, now, settings.ACCESS_WINDOW_DAYS)
                log_activity(db, enrollment.user_id, "payment_completed", {"session": session_id})
            else:
                logger.warning(f"No account found for paid session {session_id} ({email})")

            amount = Decimal(session.get("amount_total") or 0) / 100
            db.add(Payment(
                user_id=enrollment.user_id if enrollment else None,
                email=email,
                amount=amount,
                currency=session.get("currency") or "usd",
                stripe_session_id=session_id,
                stripe_payment_intent_id=session.get("payment_intent"),
                promo_code=promo_code,
                affiliate_code=affiliate_code,
                status="completed",
            ))

            if affiliate_code:
                self._credit_affiliate(db, affiliate_code, amount, email, session_id)
            if promo_code:
                promo_service.record_use(db, promo_code)

            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to record payment {session_id}: {str(e)}")
            raise DependencyError("Failed to record payment")

        logger.info(f"Payment completed for {email} (session {session_id})")

        recipient = (enrollment.email if enrollment else None) or email
        if recipient:
            email_service.send_welcome_email(recipient, enrollment.full_name if enrollment else None)

    def _credit_affiliate(
        self,
        db: Session,
        affiliate_code: str,
        amount: Decimal,
        referred_email: Optional[str],
        session_id: str,
    ) -> None:
        affiliate = db.query(Affiliate).filter(
            Affiliate.affiliate_code == affiliate_code,
            Affiliate.is_active.is_(True),
        ).first()
        if affiliate is None:
            logger.warning(f"Unknown or inactive affiliate code {affiliate_code}")
            return

        rate = Decimal(str(affiliate.commission_rate or DEFAULT_COMMISSION_RATE))
        commission = (amount * rate).quantize(Decimal("0.01"))

        db.add(Referral(
            referrer_user_id=affiliate.user_id,
            referred_email=referred_email,
            commission_earned=commission,
            commission_rate=rate,
            status="converted",
            stripe_session_id=session_id,
        ))
        affiliate.total_referrals = (affiliate.total_referrals or 0) + 1
        affiliate.total_earnings = Decimal(str(affiliate.total_earnings or 0)) + commission
        affiliate.pending_earnings = Decimal(str(affiliate.pending_earnings or 0)) + commission

        logger.info(f"Affiliate {affiliate_code} earned ${commission}")


# Global instance
payment_service = PaymentService()
