"""
Task evidence file storage on the local upload directory
"""
import logging
import os
import time

import aiofiles
from fastapi import UploadFile

from market_warrior.config import Settings
from market_warrior.errors import DependencyError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "application/pdf": "pdf",
}


class StorageService:

    def __init__(self, settings: Settings):
        self.root = settings.UPLOAD_DIR
        self.max_bytes = settings.MAX_UPLOAD_BYTES
        self.public_base = f"{settings.API_URL.rstrip('/')}/uploads"

    async def save_task_file(self, user_id: str, day_number: int, file: UploadFile) -> dict:
        """
        Validate and store an uploaded task file

        Returns:
            {"url": public URL, "filename": storage-relative path}
        """
        extension = ALLOWED_CONTENT_TYPES.get(file.content_type or "")
        if extension is None:
            raise ValidationError("Invalid file type. Allowed: JPEG, PNG, GIF, WebP, PDF")

        too_large = f"File too large. Maximum size: {self.max_bytes // (1024 * 1024)}MB"
        if file.size is not None and file.size > self.max_bytes:
            raise ValidationError(too_large)

        # Never buffer more than one byte past the limit
        content = await file.read(self.max_bytes + 1)
        if len(content) > self.max_bytes:
            raise ValidationError(too_large)
        if not content:
            raise ValidationError("No file provided")

        relative = f"tasks/{user_id}/day{day_number}_{int(time.time() * 1000)}.{extension}"
        path = os.path.join(self.root, *relative.split("/"))

        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error(f"Upload failed for {user_id}: {str(e)}")
            raise DependencyError("Upload failed")

        logger.info(f"Stored task file {relative} ({len(content)} bytes)")
        return {"url": f"{self.public_base}/{relative}", "filename": relative}
