"""
Domain error taxonomy

Services raise these; the transport layer maps them to status codes
(see the exception handler in main.py).
"""
from typing import Any, Dict, Optional


class AppError(Exception):
    """Base class for errors with a user-facing message"""

    status_code = 500
    error = "app_error"

    def __init__(self, message: str, extra: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}

    def to_dict(self) -> Dict[str, Any]:
        body = {"error": self.error, "message": self.message}
        body.update(self.extra)
        return body


class AuthError(AppError):
    """Missing, invalid or expired credential"""

    status_code = 401
    error = "unauthorized"


class PreconditionError(AppError):
    """Unpaid, terms not accepted, day locked, quiz not passed, ..."""

    status_code = 403
    error = "forbidden"


class ValidationError(AppError):
    """Malformed input; the caller must fix it before retrying"""

    status_code = 400
    error = "invalid_request"


class NotFoundError(AppError):
    status_code = 404
    error = "not_found"


class DependencyError(AppError):
    """Storage, auth or payment provider unreachable or misconfigured"""

    status_code = 500
    error = "dependency_error"
