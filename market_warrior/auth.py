"""
Bearer token authentication against the identity provider's JWTs
"""
from dataclasses import dataclass
from typing import Optional
import logging

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from market_warrior.config import Settings, get_settings
from market_warrior.errors import AuthError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthUser:
    """Identity resolved from a verified access token"""
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None


def decode_access_token(token: str, settings: Settings) -> AuthUser:
    """
    Verify an access token and extract the user identity

    Raises:
        AuthError: token missing a subject, expired, or badly signed
    """
    try:
        claims = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=["HS256"],
            audience=settings.JWT_AUDIENCE,
        )
    except jwt.ExpiredSignatureError:
        raise AuthError("Session expired")
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected access token: {str(e)}")
        raise AuthError("Unauthorized")

    user_id = claims.get("sub")
    if not user_id:
        raise AuthError("Unauthorized")

    metadata = claims.get("user_metadata") or {}
    return AuthUser(
        id=str(user_id),
        email=claims.get("email"),
        full_name=metadata.get("full_name"),
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> AuthUser:
    """FastAPI dependency: require a valid bearer token"""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthError("Unauthorized")
    return decode_access_token(credentials.credentials, settings)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> Optional[AuthUser]:
    """FastAPI dependency: identity if a valid token is present, else None"""
    if credentials is None:
        return None
    try:
        return decode_access_token(credentials.credentials, settings)
    except AuthError:
        return None
