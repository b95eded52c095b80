"""
Pydantic schemas for the admin back-office
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime
from uuid import UUID


class AdminUserOut(BaseModel):
    user_id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    is_paid: bool
    is_admin: bool
    agreed_to_terms: bool
    challenge_start_date: Optional[datetime] = None
    access_expires_at: Optional[datetime] = None
    device_ids: Optional[List[str]] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AdminUserList(BaseModel):
    users: List[AdminUserOut]
    total: int


class AdminUserAction(BaseModel):
    user_id: str
    action: str = Field(..., pattern="^(toggle_paid|toggle_admin|reset_devices|extend_access|reset_progress)$")
    data: Dict[str, Any] = Field(default_factory=dict)


class PromoCodeCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    discount_percent: int = Field(..., ge=1, le=100)
    max_uses: Optional[int] = Field(None, ge=1)
    expires_at: Optional[datetime] = None


class PromoCodeUpdate(BaseModel):
    id: UUID
    is_active: bool


class PromoCodeOut(BaseModel):
    id: UUID
    code: str
    discount_percent: int
    max_uses: Optional[int] = None
    current_uses: int
    expires_at: Optional[datetime] = None
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ContentUpdate(BaseModel):
    day_number: int = Field(..., ge=1, le=30)
    updates: Dict[str, Any]


class SettingUpdate(BaseModel):
    key: str = Field(..., min_length=1, max_length=128)
    value: Any = None


class FeedItemCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    link_url: Optional[str] = None
    link_text: Optional[str] = None
    is_pinned: bool = False


class FeedItemUpdate(BaseModel):
    id: UUID
    title: Optional[str] = None
    content: Optional[str] = None
    link_url: Optional[str] = None
    link_text: Optional[str] = None
    is_pinned: Optional[bool] = None
    is_active: Optional[bool] = None


class FeedItemOut(BaseModel):
    id: UUID
    title: str
    content: str
    link_url: Optional[str] = None
    link_text: Optional[str] = None
    is_pinned: bool
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CampaignSend(BaseModel):
    action: str = Field("send", pattern="^send$")
    subject: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    audience: str = Field(..., pattern="^(all_users|paid_users|unpaid_users|leads|custom)$")
    custom_emails: Optional[str] = None


class CampaignOut(BaseModel):
    id: UUID
    subject: str
    audience: str
    sent_count: int
    failed_count: int
    status: str
    sent_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AffiliateOut(BaseModel):
    id: UUID
    user_id: Optional[str] = None
    affiliate_code: str
    commission_rate: float
    total_referrals: int
    total_earnings: float
    pending_earnings: float
    is_active: bool

    class Config:
        from_attributes = True


class PaymentOut(BaseModel):
    id: UUID
    user_id: Optional[str] = None
    email: Optional[str] = None
    amount: Optional[float] = None
    currency: Optional[str] = None
    promo_code: Optional[str] = None
    affiliate_code: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AdminContentOut(BaseModel):
    """Full day content including the answer key"""
    day_number: int
    title: str
    content_html: Optional[str] = None
    youtube_video_id: Optional[str] = None
    has_video: Optional[bool] = None
    quiz_questions: Optional[List[Dict[str, Any]]] = None
    quiz_answers: Optional[List[str]] = None
    quiz_explanations: Optional[List[Optional[str]]] = None
    task_instructions: Optional[str] = None

    class Config:
        from_attributes = True


class EmailOverview(BaseModel):
    stats: Dict[str, int]
    campaigns: List[CampaignOut]
