"""
Pydantic schemas for the trading journal
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from uuid import UUID


class JournalSignup(BaseModel):
    email: str = Field(..., max_length=255)
    name: Optional[str] = Field(None, max_length=255)
    source: Optional[str] = Field(None, max_length=64)


class JournalSignupResponse(BaseModel):
    success: bool = True
    message: str


class TradeCreate(BaseModel):
    symbol: str = Field(..., min_length=1, max_length=32)
    trade_type: str = Field(..., pattern="^(long|short)$")
    entry_date: datetime
    exit_date: Optional[datetime] = None
    entry_price: Decimal = Field(..., gt=0)
    exit_price: Optional[Decimal] = Field(None, gt=0)
    quantity: Decimal = Field(..., gt=0)
    strategy: Optional[str] = None
    emotions: Optional[str] = None
    notes: Optional[str] = None
    lessons_learned: Optional[str] = None


class TradeOut(BaseModel):
    id: UUID
    symbol: str
    trade_type: str
    entry_date: datetime
    exit_date: Optional[datetime] = None
    entry_price: float
    exit_price: Optional[float] = None
    quantity: float
    pnl: Optional[float] = None
    strategy: Optional[str] = None
    emotions: Optional[str] = None
    notes: Optional[str] = None
    lessons_learned: Optional[str] = None

    class Config:
        from_attributes = True
