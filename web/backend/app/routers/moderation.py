"""Moderation router -- bulk actions and the action history."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from civichub.auth import MODERATOR_ROLES, User, require_role
from civichub.errors import ValidationError
from civichub.moderation.models import ItemRef, ModerationAction
from civichub.platform import Platform
from web.backend.app.middleware.auth import get_current_user, get_platform
from web.backend.app.models.api import (
    ApiResponse,
    BulkActionRequest,
    BulkActionResponse,
    BulkItemResultResponse,
    BulkSummaryResponse,
    ModerationActionResponse,
)

router = APIRouter(prefix="/api/admin/moderation", tags=["moderation"])


def _action_response(a: ModerationAction) -> ModerationActionResponse:
    return ModerationActionResponse(**a.to_dict())


@router.post(
    "/bulk",
    response_model=ApiResponse[BulkActionResponse],
    summary="Apply one moderation action to many items",
)
async def bulk_action(
    body: BulkActionRequest,
    user: User = Depends(get_current_user),
    platform: Platform = Depends(get_platform),
):
    require_role(user, MODERATOR_ROLES)
    if not body.action or not body.item_ids:
        raise ValidationError("Action and itemIds array are required")

    outcome = platform.bulk.apply(body.action, body.item_ids, body.type, user, reason=body.reason)
    summary = outcome.summary
    return ApiResponse(
        data=BulkActionResponse(
            results=[
                BulkItemResultResponse(id=r.id, success=r.success, error=r.error)
                for r in outcome.results
            ],
            summary=BulkSummaryResponse(
                total=summary.total, success=summary.success, failed=summary.failed
            ),
        ),
        message=f"Bulk action completed: {summary.success} succeeded, {summary.failed} failed",
    )


@router.get(
    "/history",
    response_model=ApiResponse[list[ModerationActionResponse]],
    summary="Moderation action history",
)
async def moderation_history(
    item_id: Optional[str] = Query(None, alias="itemId"),
    item_type: Optional[str] = Query(None, alias="type"),
    admin_id: Optional[str] = Query(None, alias="adminId"),
    limit: int = Query(200, ge=1, le=10000),
    user: User = Depends(get_current_user),
    platform: Platform = Depends(get_platform),
):
    """Filter by item (``itemId`` + ``type``) or by admin; otherwise list all."""
    require_role(user, MODERATOR_ROLES)
    log = platform.action_log
    if item_id and item_type:
        actions = log.query_by_item(ItemRef.parse(item_type, item_id))
    elif admin_id:
        actions = log.query_by_admin(admin_id)
    else:
        actions = log.list_recent()
    return ApiResponse(data=[_action_response(a) for a in actions[:limit]])
