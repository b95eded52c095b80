"""
Pydantic schemas for account and certificate endpoints
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class AccountResponse(BaseModel):
    user_id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    is_paid: bool
    is_admin: bool
    agreed_to_terms: bool
    challenge_start_date: Optional[datetime] = None
    access_expires_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CertificateOut(BaseModel):
    certificate_id: str
    issued_to_name: Optional[str] = None
    issued_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CertificateResponse(BaseModel):
    certificate: Optional[CertificateOut] = None
    message: Optional[str] = None
