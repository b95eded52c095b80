"""
Pydantic schemas for checkout and promo codes
"""
from pydantic import BaseModel, Field
from typing import Optional


class CheckoutRequest(BaseModel):
    """No price here: the amount is fixed server-side"""
    promo_code: Optional[str] = Field(None, max_length=64)
    affiliate_code: Optional[str] = Field(None, max_length=64)


class CheckoutResponse(BaseModel):
    url: Optional[str] = None
    session_id: str


class PromoValidateRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)


class PromoValidateResponse(BaseModel):
    valid: bool
    message: str
    code: Optional[str] = None
    discount_percent: Optional[int] = None
