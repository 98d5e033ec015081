"""Auth middleware -- FastAPI dependencies for the platform and current user.

Callers authenticate with ``Authorization: Bearer <session_token>``.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Header

from civichub.auth.models import User
from civichub.config import get_settings
from civichub.errors import AuthenticationRequired
from civichub.platform import Platform

logger = logging.getLogger(__name__)

# Shared platform instance
_platform: Optional[Platform] = None


def get_platform() -> Platform:
    """Return the singleton Platform built from the current settings."""
    global _platform
    if _platform is None:
        settings = get_settings()
        _platform = Platform.from_settings(settings)
        logger.info("Platform ready (store=%s)", settings.store_backend)
    return _platform


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return None


async def get_current_user(
    authorization: Optional[str] = Header(None),
    platform: Platform = Depends(get_platform),
) -> User:
    """FastAPI dependency that resolves the calling user.

    Raises ``AuthenticationRequired`` (401) if no valid session is presented.
    """
    token = _bearer_token(authorization)
    if token:
        user = platform.users.validate_session(token)
        if user is not None:
            return user
    raise AuthenticationRequired()


async def get_session_token(authorization: Optional[str] = Header(None)) -> str:
    token = _bearer_token(authorization)
    if token is None:
        raise AuthenticationRequired()
    return token
