"""Notifications router -- the caller's own notifications."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query

from civichub.auth import User
from civichub.platform import Platform
from web.backend.app.middleware.auth import get_current_user, get_platform
from web.backend.app.models.api import ApiResponse, NotificationResponse

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=ApiResponse[list[NotificationResponse]], summary="List my notifications")
async def list_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    user: User = Depends(get_current_user),
    platform: Platform = Depends(get_platform),
):
    notifications = platform.notifier.list_for_user(user.id, unread_only=unread_only)
    return ApiResponse(data=[NotificationResponse(**asdict(n)) for n in notifications])


@router.patch(
    "/{notification_id}/read",
    response_model=ApiResponse[NotificationResponse],
    summary="Mark a notification as read",
)
async def mark_read(
    notification_id: str,
    user: User = Depends(get_current_user),
    platform: Platform = Depends(get_platform),
):
    n = platform.notifier.mark_read(notification_id, user.id)
    return ApiResponse(data=NotificationResponse(**asdict(n)))
