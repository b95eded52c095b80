"""
Device fingerprint limiter
Caps the number of distinct devices a paid account can use
"""
import hashlib
import logging
from dataclasses import dataclass, field
from typing import List, Optional
from fastapi import Request
from sqlalchemy.orm import Session

from market_warrior.models import Enrollment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceCheck:
    allowed: bool
    message: Optional[str] = None
    devices: List[str] = field(default_factory=list)


class DeviceService:
    """
    Fingerprint = hash of user agent, accept-language and client IP.
    Coarse by nature; good enough to stop casual account sharing.
    """

    def client_ip(self, request: Request) -> str:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip
        return request.client.host if request.client else "unknown"

    def fingerprint(self, request: Request) -> str:
        raw = "|".join([
            request.headers.get("user-agent", ""),
            request.headers.get("accept-language", ""),
            self.client_ip(request),
        ])
        return "fp_" + hashlib.sha256(raw.encode()).hexdigest()[:16]

    def check_device_limit(
        self,
        db: Session,
        enrollment: Enrollment,
        fingerprint: str,
        max_devices: int,
    ) -> DeviceCheck:
        """
        Allow known devices, register new ones until the limit is reached

        Registration is committed immediately.
        """
        devices = list(enrollment.device_ids or [])

        if fingerprint in devices:
            return DeviceCheck(allowed=True, devices=devices)

        if len(devices) >= max_devices:
            logger.warning(f"Device limit reached for {enrollment.user_id}")
            return DeviceCheck(
                allowed=False,
                message=(
                    f"You have reached the maximum of {max_devices} devices. "
                    "Please contact support to reset your devices."
                ),
                devices=devices,
            )

        devices.append(fingerprint)
        enrollment.device_ids = devices
        db.commit()
        logger.info(f"Registered device {fingerprint} for {enrollment.user_id} ({len(devices)}/{max_devices})")
        return DeviceCheck(allowed=True, devices=devices)

    def reset_devices(self, enrollment: Enrollment) -> None:
        enrollment.device_ids = []


# Global instance
device_service = DeviceService()
