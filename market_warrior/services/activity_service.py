"""
Activity log helper
"""
import logging
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session

from market_warrior.models import ActivityLog

logger = logging.getLogger(__name__)


def log_activity(db: Session, user_id: Optional[str], action: str, details: Optional[Dict[str, Any]] = None) -> None:
    """Stage an activity row; committed with the caller's transaction"""
    db.add(ActivityLog(user_id=user_id, action=action, details=details or {}))
    logger.info(f"Activity: user={user_id}, action={action}, details={details or {}}")
