"""
Admin back-office API endpoints
Every route requires an admin bearer token (403 otherwise)
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
import logging

from market_warrior.api.deps import get_email_service, get_now, require_admin
from market_warrior.database import get_db
from market_warrior.errors import NotFoundError
from market_warrior.models import (
    Affiliate, CourseContent, EmailCampaign, Enrollment, LiveFeedItem,
    Payment, PromoCode, SiteSetting,
)
from market_warrior.schemas.admin import (
    AdminContentOut, AdminUserAction, AdminUserList, AdminUserOut, AffiliateOut,
    CampaignOut, CampaignSend, ContentUpdate, EmailOverview, FeedItemCreate,
    FeedItemOut, FeedItemUpdate, PaymentOut, PromoCodeCreate, PromoCodeOut,
    PromoCodeUpdate, SettingUpdate,
)
from market_warrior.services.admin_service import admin_service
from market_warrior.services.email_service import EmailService

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)


# Users

@router.get("/users", response_model=AdminUserList)
async def list_users(
    search: Optional[str] = Query(None, max_length=255),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    admin: Enrollment = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """List enrollments, newest first, optionally filtered by email or name"""
    users, total = admin_service.list_users(db, search, limit, offset)
    return AdminUserList(users=[AdminUserOut.model_validate(u) for u in users], total=total)


@router.patch("/users", response_model=AdminUserOut)
async def update_user(
    body: AdminUserAction,
    admin: Enrollment = Depends(require_admin),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """
    Apply an action to a user

    Actions:
    - toggle_paid / toggle_admin
    - reset_devices
    - extend_access: expiry = now + data.days (default 30)
    - reset_progress: delete all quiz attempts and day progress
    """
    user = admin_service.apply_user_action(db, admin, body.user_id, body.action, body.data, now)
    return AdminUserOut.model_validate(user)


# Promo codes

@router.get("/promo", response_model=List[PromoCodeOut])
async def list_promo_codes(
    admin: Enrollment = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return db.query(PromoCode).order_by(PromoCode.created_at.desc()).all()


@router.post("/promo", response_model=PromoCodeOut, status_code=201)
async def create_promo_code(
    body: PromoCodeCreate,
    admin: Enrollment = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Create a promo code; codes are stored upper-case and must be unique"""
    return admin_service.create_promo(db, admin, **body.model_dump())


@router.patch("/promo", response_model=PromoCodeOut)
async def toggle_promo_code(
    body: PromoCodeUpdate,
    admin: Enrollment = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return admin_service.set_promo_active(db, body.id, body.is_active)


# Course content

@router.get("/content", response_model=List[AdminContentOut])
async def get_content(
    day: Optional[int] = Query(None, ge=1, le=30),
    admin: Enrollment = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """All days, or a single day with ?day=n; includes the answer key"""
    query = db.query(CourseContent)
    if day is not None:
        content = query.filter(CourseContent.day_number == day).first()
        if content is None:
            raise NotFoundError("Day content not found")
        return [content]
    return query.order_by(CourseContent.day_number).all()


@router.patch("/content", response_model=AdminContentOut)
async def update_content(
    body: ContentUpdate,
    admin: Enrollment = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Only title, content_html, youtube_video_id, has_video and task_instructions are editable"""
    content = admin_service.update_content(db, body.day_number, body.updates)
    logger.info(f"Admin {admin.user_id} updated day {body.day_number} content")
    return content


# Settings

@router.get("/settings")
async def get_settings_map(
    admin: Enrollment = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    return {s.key: s.value for s in db.query(SiteSetting).all()}


@router.post("/settings")
async def save_setting(
    body: SettingUpdate,
    admin: Enrollment = Depends(require_admin),
    db: Session = Depends(get_db),
):
    setting = admin_service.upsert_setting(db, admin, body.key, body.value)
    return {"success": True, "key": setting.key, "value": setting.value}


# Affiliates and payments

@router.get("/affiliates", response_model=List[AffiliateOut])
async def list_affiliates(
    admin: Enrollment = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return db.query(Affiliate).order_by(Affiliate.total_earnings.desc()).all()


@router.get("/payments", response_model=List[PaymentOut])
async def list_payments(
    limit: int = Query(100, ge=1, le=500),
    admin: Enrollment = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return db.query(Payment).order_by(Payment.created_at.desc()).limit(limit).all()


# Live feed

@router.get("/live-feed", response_model=List[FeedItemOut])
async def list_feed_items(
    admin: Enrollment = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """All items, including inactive ones"""
    return db.query(LiveFeedItem).order_by(LiveFeedItem.created_at.desc()).all()


@router.post("/live-feed", response_model=FeedItemOut, status_code=201)
async def create_feed_item(
    body: FeedItemCreate,
    admin: Enrollment = Depends(require_admin),
    db: Session = Depends(get_db),
):
    item = LiveFeedItem(**body.model_dump(), is_active=True, created_by=admin.user_id)
    db.add(item)
    admin_service.commit(db, "create feed item")
    db.refresh(item)
    return item


@router.patch("/live-feed", response_model=FeedItemOut)
async def update_feed_item(
    body: FeedItemUpdate,
    admin: Enrollment = Depends(require_admin),
    db: Session = Depends(get_db),
):
    item = db.get(LiveFeedItem, body.id)
    if item is None:
        raise NotFoundError("Feed item not found")

    for key, value in body.model_dump(exclude={"id"}, exclude_none=True).items():
        setattr(item, key, value)
    admin_service.commit(db, "update feed item")
    db.refresh(item)
    return item


@router.delete("/live-feed")
async def delete_feed_item(
    id: UUID = Query(...),
    admin: Enrollment = Depends(require_admin),
    db: Session = Depends(get_db),
):
    item = db.get(LiveFeedItem, id)
    if item is None:
        raise NotFoundError("Feed item not found")
    db.delete(item)
    admin_service.commit(db, "delete feed item")
    return {"success": True}


# Email campaigns

@router.get("/emails", response_model=EmailOverview)
async def email_overview(
    admin: Enrollment = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Audience sizes and the 50 most recent campaigns"""
    campaigns = db.query(EmailCampaign).order_by(EmailCampaign.sent_at.desc()).limit(50).all()
    return EmailOverview(
        stats=admin_service.audience_stats(db),
        campaigns=[CampaignOut.model_validate(c) for c in campaigns],
    )


@router.post("/emails", response_model=CampaignOut)
def send_campaign(
    body: CampaignSend,
    admin: Enrollment = Depends(require_admin),
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Send a campaign to an audience

    Placeholders {name}, {email} and {app_url} are filled per recipient.
    Runs in the threadpool since batches pause between sends.
    """
    logger.info(f"Admin {admin.user_id} sending campaign '{body.subject}' to {body.audience}")
    return admin_service.send_campaign(
        db, admin, email_service, body.subject, body.content, body.audience, body.custom_emails
    )
