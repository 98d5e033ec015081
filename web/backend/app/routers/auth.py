"""Auth router -- current user and logout.

Sessions are issued out of band (``civichub users token``); the API only
resolves and revokes them.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from civichub.auth import User
from civichub.platform import Platform
from web.backend.app.middleware.auth import get_current_user, get_platform, get_session_token
from web.backend.app.models.api import ApiResponse, UserResponse

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _user_response(u: User) -> UserResponse:
    return UserResponse(
        id=u.id,
        email=u.email,
        name=u.name,
        role=u.role.value,
        created_at=u.created_at,
    )


@router.get("/me", response_model=ApiResponse[UserResponse], summary="Get current user")
async def me(user: User = Depends(get_current_user)):
    return ApiResponse(data=_user_response(user))


@router.delete("/session", response_model=ApiResponse, summary="Log out")
async def logout(
    user: User = Depends(get_current_user),
    token: str = Depends(get_session_token),
    platform: Platform = Depends(get_platform),
):
    platform.users.delete_session(token)
    return ApiResponse(message="Logged out")
