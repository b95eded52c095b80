"""
Admin back-office operations: user actions, content edits, campaigns
"""
import logging
import re
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from market_warrior.errors import DependencyError, NotFoundError, ValidationError
from market_warrior.models import (
    CourseContent, DayProgress, EmailCampaign, Enrollment, JournalLead,
    PromoCode, QuizAttempt, SiteSetting,
)
from market_warrior.services.activity_service import log_activity
from market_warrior.services.device_service import device_service
from market_warrior.services.email_service import EmailService

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION_DAYS = 30

EDITABLE_CONTENT_FIELDS = {
    "title", "content_html", "youtube_video_id", "has_video", "task_instructions",
}

AUDIENCES = ("all_users", "paid_users", "unpaid_users", "leads", "custom")


class AdminService:

    def commit(self, db: Session, what: str) -> None:
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Admin {what} failed: {str(e)}")
            raise DependencyError(f"Failed to {what}")

    # Users

    def list_users(self, db: Session, search: Optional[str], limit: int, offset: int):
        query = db.query(Enrollment)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(Enrollment.email.ilike(pattern), Enrollment.full_name.ilike(pattern)))
        total = query.count()
        users = query.order_by(Enrollment.created_at.desc()).offset(offset).limit(limit).all()
        return users, total

    def apply_user_action(
        self,
        db: Session,
        admin: Enrollment,
        user_id: str,
        action: str,
        data: Dict[str, Any],
        now: datetime,
    ) -> Enrollment:
        """
        Apply one back-office action to a user

        Actions: toggle_paid, toggle_admin, reset_devices,
        extend_access (data.days, default 30), reset_progress.
        """
        user = db.get(Enrollment, user_id)
        if user is None:
            raise NotFoundError("User not found")

        if action == "toggle_paid":
            user.is_paid = not user.is_paid
        elif action == "toggle_admin":
            user.is_admin = not user.is_admin
        elif action == "reset_devices":
            device_service.reset_devices(user)
        elif action == "extend_access":
            try:
                days = int(data.get("days", DEFAULT_EXTENSION_DAYS))
            except (TypeError, ValueError):
                raise ValidationError("days must be a number")
            if days < 1:
                raise ValidationError("days must be positive")
            user.access_expires_at = now + timedelta(days=days)
        elif action == "reset_progress":
            db.query(QuizAttempt).filter(QuizAttempt.user_id == user_id).delete(synchronize_session=False)
            db.query(DayProgress).filter(DayProgress.user_id == user_id).delete(synchronize_session=False)
        else:
            raise ValidationError(f"Unknown action: {action}")

        log_activity(db, admin.user_id, f"admin_{action}", {"target_user": user_id})
        self.commit(db, "update user")
        db.refresh(user)
        logger.info(f"Admin {admin.user_id} applied {action} to {user_id}")
        return user

    # Promo codes

    def create_promo(self, db: Session, admin: Enrollment, **fields) -> PromoCode:
        code = fields.pop("code").strip().upper()
        if db.query(PromoCode).filter(PromoCode.code == code).first():
            raise ValidationError("Promo code already exists")

        promo = PromoCode(code=code, created_by=admin.user_id, current_uses=0, is_active=True, **fields)
        db.add(promo)
        try:
            self.commit(db, "create promo code")
        except IntegrityError:
            raise ValidationError("Promo code already exists")
        db.refresh(promo)
        return promo

    def set_promo_active(self, db: Session, promo_id, is_active: bool) -> PromoCode:
        promo = db.get(PromoCode, promo_id)
        if promo is None:
            raise NotFoundError("Promo code not found")
        promo.is_active = is_active
        self.commit(db, "update promo code")
        db.refresh(promo)
        return promo

    # Content

    def update_content(self, db: Session, day_number: int, updates: Dict[str, Any]) -> CourseContent:
        """Apply whitelisted field updates; anything else is ignored"""
        content = db.get(CourseContent, day_number)
        if content is None:
            raise NotFoundError("Day content not found")

        allowed = {k: v for k, v in updates.items() if k in EDITABLE_CONTENT_FIELDS}
        if not allowed:
            raise ValidationError("No valid fields to update")

        for key, value in allowed.items():
            setattr(content, key, value)
        self.commit(db, "update content")
        db.refresh(content)
        return content

    # Settings

    def upsert_setting(self, db: Session, admin: Enrollment, key: str, value: Any) -> SiteSetting:
        setting = db.get(SiteSetting, key)
        if setting is None:
            setting = SiteSetting(key=key)
            db.add(setting)
        setting.value = value
        setting.updated_by = admin.user_id
        self.commit(db, "save setting")
        db.refresh(setting)
        return setting

    # Email campaigns

    def audience_stats(self, db: Session) -> Dict[str, int]:
        total = db.query(Enrollment).filter(Enrollment.email.isnot(None)).count()
        paid = db.query(Enrollment).filter(Enrollment.email.isnot(None), Enrollment.is_paid.is_(True)).count()
        return {
            "all_users": total,
            "paid_users": paid,
            "unpaid_users": total - paid,
            "leads": db.query(JournalLead).count(),
        }

    def resolve_recipients(
        self,
        db: Session,
        audience: str,
        custom_emails: Optional[str] = None,
    ) -> List[Dict[str, Optional[str]]]:
        """Recipients as {email, full_name} dicts, de-duplicated by email"""
        if audience == "custom":
            emails = [e.strip().lower() for e in re.split(r"[,\n;]", custom_emails or "") if e.strip()]
            recipients = [{"email": e, "full_name": None} for e in emails if "@" in e]
        elif audience == "leads":
            recipients = [{"email": lead.email, "full_name": lead.name} for lead in db.query(JournalLead).all()]
        elif audience in ("all_users", "paid_users", "unpaid_users"):
            query = db.query(Enrollment).filter(Enrollment.email.isnot(None))
            if audience == "paid_users":
                query = query.filter(Enrollment.is_paid.is_(True))
            elif audience == "unpaid_users":
                query = query.filter(Enrollment.is_paid.is_(False))
            recipients = [{"email": u.email, "full_name": u.full_name} for u in query.all()]
        else:
            raise ValidationError(f"Unknown audience: {audience}")

        seen = set()
        unique = []
        for recipient in recipients:
            key = recipient["email"].lower()
            if key not in seen:
                seen.add(key)
                unique.append(recipient)
        return unique

    def send_campaign(
        self,
        db: Session,
        admin: Enrollment,
        email_service: EmailService,
        subject: str,
        content: str,
        audience: str,
        custom_emails: Optional[str] = None,
    ) -> EmailCampaign:
        recipients = self.resolve_recipients(db, audience, custom_emails)
        if not recipients:
            raise ValidationError("No recipients found for this audience")

        sent, failed = email_service.send_campaign(recipients, subject, content)

        campaign = EmailCampaign(
            subject=subject,
            content=content,
            audience=audience,
            sent_count=sent,
            failed_count=len(failed),
            status="sent" if sent else "failed",
            sent_by=admin.user_id,
        )
        db.add(campaign)
        log_activity(db, admin.user_id, "email_campaign", {
            "audience": audience, "sent": sent, "failed": len(failed),
        })
        self.commit(db, "record campaign")
        db.refresh(campaign)
        return campaign


# Global instance
admin_service = AdminService()
