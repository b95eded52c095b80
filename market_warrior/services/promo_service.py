"""
Promo code validation
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from market_warrior.models import PromoCode
from market_warrior.utils.clock import ensure_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromoValidation:
    valid: bool
    message: str
    code: Optional[str] = None
    discount_percent: Optional[int] = None


class PromoService:

    def normalize(self, code: str) -> str:
        return code.strip().upper()

    def find(self, db: Session, code: str) -> Optional[PromoCode]:
        return db.query(PromoCode).filter(PromoCode.code == self.normalize(code)).first()

    def validate(self, db: Session, code: str, now: datetime) -> PromoValidation:
        """Check existence, active flag, expiry and usage limit"""
        promo = self.find(db, code)

        if promo is None:
            return PromoValidation(valid=False, message="Invalid promo code")
        if not promo.is_active:
            return PromoValidation(valid=False, message="Promo code is no longer active")

        expires_at = ensure_utc(promo.expires_at)
        if expires_at and expires_at < now:
            return PromoValidation(valid=False, message="Promo code has expired")
        if promo.max_uses and promo.current_uses >= promo.max_uses:
            return PromoValidation(valid=False, message="Promo code usage limit reached")

        return PromoValidation(
            valid=True,
            message=f"{promo.discount_percent}% discount applied!",
            code=promo.code,
            discount_percent=promo.discount_percent,
        )

    def record_use(self, db: Session, code: str) -> None:
        promo = self.find(db, code)
        if promo is None:
            logger.warning(f"Payment used unknown promo code {code}")
            return
        promo.current_uses = (promo.current_uses or 0) + 1


# Global instance
promo_service = PromoService()
