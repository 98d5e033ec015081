"""Content flags router -- reporting and review."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from civichub.auth import MODERATOR_ROLES, User, require_role
from civichub.moderation.models import ContentFlag, ItemRef, RuleMatch
from civichub.platform import Platform
from web.backend.app.middleware.auth import get_current_user, get_platform
from web.backend.app.models.api import (
    ApiResponse,
    CreateFlagRequest,
    FlagResponse,
    RuleMatchResponse,
    UpdateFlagRequest,
)

router = APIRouter(prefix="/api/admin/moderation/flags", tags=["flags"])


def _flag_response(f: ContentFlag, matches: Optional[list[RuleMatch]] = None) -> FlagResponse:
    return FlagResponse(
        **f.to_dict(),
        matched_rules=[
            RuleMatchResponse(
                rule_id=m.rule_id,
                rule_name=m.rule_name,
                action=m.action.value,
                priority=m.priority,
            )
            for m in matches or []
        ],
    )


@router.post(
    "",
    response_model=ApiResponse[FlagResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Flag content for moderation",
)
async def create_flag(
    body: CreateFlagRequest,
    user: User = Depends(get_current_user),
    platform: Platform = Depends(get_platform),
):
    receipt = platform.flags.file_flag(
        ItemRef.parse(body.type, body.item_id),
        user,
        body.reason,
        priority=body.priority,
    )
    return ApiResponse(
        data=_flag_response(receipt.flag, receipt.matches),
        message="Content flagged successfully",
    )


@router.get(
    "",
    response_model=ApiResponse[list[FlagResponse]],
    summary="List content flags",
)
async def list_flags(
    status_filter: Optional[str] = Query(None, alias="status"),
    user: User = Depends(get_current_user),
    platform: Platform = Depends(get_platform),
):
    require_role(user, MODERATOR_ROLES)
    return ApiResponse(data=[_flag_response(f) for f in platform.flags.list_flags(status_filter)])


@router.get("/{flag_id}", response_model=ApiResponse[FlagResponse], summary="Get a content flag")
async def get_flag(
    flag_id: str,
    user: User = Depends(get_current_user),
    platform: Platform = Depends(get_platform),
):
    require_role(user, MODERATOR_ROLES)
    return ApiResponse(data=_flag_response(platform.flags.get_flag(flag_id)))


@router.patch(
    "/{flag_id}",
    response_model=ApiResponse[FlagResponse],
    summary="Update a flag's review status",
)
async def update_flag(
    flag_id: str,
    body: UpdateFlagRequest,
    user: User = Depends(get_current_user),
    platform: Platform = Depends(get_platform),
):
    require_role(user, MODERATOR_ROLES)
    flag = platform.flags.update_status(flag_id, body.status, user)
    return ApiResponse(data=_flag_response(flag), message="Flag updated successfully")
