"""
Trusted server clock

All unlock and expiry decisions go through here; client-supplied
timestamps are never used.
"""
from datetime import datetime, timezone
from typing import Optional


def server_now() -> datetime:
    """Current server time, timezone-aware UTC"""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes read back from storage"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
