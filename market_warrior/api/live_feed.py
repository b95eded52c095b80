"""
Public live feed endpoint
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from market_warrior.database import get_db
from market_warrior.models import LiveFeedItem
from market_warrior.schemas.admin import FeedItemOut

router = APIRouter(tags=["live-feed"])

FEED_LIMIT = 50


@router.get("/live-feed", response_model=List[FeedItemOut])
async def get_live_feed(db: Session = Depends(get_db)):
    """Active announcements, pinned first, then newest first"""
    return (
        db.query(LiveFeedItem)
        .filter(LiveFeedItem.is_active.is_(True))
        .order_by(LiveFeedItem.is_pinned.desc(), LiveFeedItem.created_at.desc())
        .limit(FEED_LIMIT)
        .all()
    )
