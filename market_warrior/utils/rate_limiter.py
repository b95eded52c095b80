"""
Per-client request rate limiting
"""
import time
from collections import defaultdict, deque
from typing import Deque, Dict, Optional, Tuple
from fastapi import Request
import logging

logger = logging.getLogger(__name__)

MINUTE = 60
HOUR = 3600


class RateLimitExceeded(Exception):
    def __init__(self, limit: int, window: str, retry_after: int):
        super().__init__(f"Too many requests. Limit: {limit} requests per {window}")
        self.message = str(self)
        self.retry_after = retry_after

    def to_dict(self) -> dict:
        return {
            "error": "rate_limit_exceeded",
            "message": self.message,
            "retry_after": self.retry_after,
        }


class RateLimiter:
    """
    Sliding-window limiter kept in process memory

    Limits are per worker process; the client key is the socket peer IP.
    X-Forwarded-For is only honoured with trust_forwarded, i.e. when a
    trusted proxy overwrites it.
    """

    def __init__(
        self,
        requests_per_minute: int = 60,
        requests_per_hour: int = 1000,
        enabled: bool = True,
        trust_forwarded: bool = False,
    ):
        self.enabled = enabled
        self.trust_forwarded = trust_forwarded
        self.windows: Tuple[Tuple[int, int, str], ...] = (
            (MINUTE, requests_per_minute, "minute"),
            (HOUR, requests_per_hour, "hour"),
        )
        self.hits: Dict[str, Deque[float]] = defaultdict(deque)
        self.last_cleanup = 0.0

    def client_key(self, request: Request) -> str:
        forwarded = request.headers.get("x-forwarded-for") if self.trust_forwarded else None
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    def _cleanup_old_entries(self, now: float) -> None:
        """Drop hits older than the longest window and forget idle clients"""
        if now - self.last_cleanup < MINUTE:
            return
        self.last_cleanup = now

        cutoff = now - HOUR
        for key in list(self.hits):
            hits = self.hits[key]
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if not hits:
                del self.hits[key]

    def check(self, key: str, now: Optional[float] = None) -> None:
        """
        Record a hit for key

        Raises:
            RateLimitExceeded: when any window is already full
        """
        if not self.enabled:
            return

        now = time.time() if now is None else now
        self._cleanup_old_entries(now)
        hits = self.hits[key]

        for seconds, limit, label in self.windows:
            in_window = sum(1 for ts in hits if ts > now - seconds)
            if in_window >= limit:
                logger.warning(f"Rate limit exceeded ({label}): {key}")
                raise RateLimitExceeded(limit, label, seconds)

        hits.append(now)

    async def check_rate_limit(self, request: Request) -> None:
        self.check(self.client_key(request))

    def reset(self) -> None:
        self.hits.clear()
