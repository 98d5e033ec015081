"""Moderation rules router -- rule CRUD."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from civichub.auth import MODERATOR_ROLES, User, require_role
from civichub.moderation.models import ModerationRule
from civichub.platform import Platform
from web.backend.app.middleware.auth import get_current_user, get_platform
from web.backend.app.models.api import (
    ApiResponse,
    CreateRuleRequest,
    RuleResponse,
    ToggleRuleRequest,
    UpdateRuleRequest,
)

router = APIRouter(prefix="/api/admin/moderation/rules", tags=["rules"])


def _rule_response(r: ModerationRule) -> RuleResponse:
    return RuleResponse(**r.to_dict())


def _moderator(user: User = Depends(get_current_user)) -> User:
    return require_role(user, MODERATOR_ROLES)


@router.post(
    "",
    response_model=ApiResponse[RuleResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a moderation rule",
)
async def create_rule(
    body: CreateRuleRequest,
    user: User = Depends(_moderator),
    platform: Platform = Depends(get_platform),
):
    rule = platform.rules.create_rule(
        name=body.name,
        pattern=body.pattern,
        type=body.type,
        action=body.action,
        enabled=body.enabled,
        priority=body.priority,
    )
    return ApiResponse(data=_rule_response(rule), message="Rule created")


@router.get("", response_model=ApiResponse[list[RuleResponse]], summary="List moderation rules")
async def list_rules(user: User = Depends(_moderator), platform: Platform = Depends(get_platform)):
    return ApiResponse(data=[_rule_response(r) for r in platform.rules.list_rules()])


@router.get("/{rule_id}", response_model=ApiResponse[RuleResponse], summary="Get a moderation rule")
async def get_rule(
    rule_id: str,
    user: User = Depends(_moderator),
    platform: Platform = Depends(get_platform),
):
    return ApiResponse(data=_rule_response(platform.rules.get_rule(rule_id)))


@router.put("/{rule_id}", response_model=ApiResponse[RuleResponse], summary="Update a moderation rule")
async def update_rule(
    rule_id: str,
    body: UpdateRuleRequest,
    user: User = Depends(_moderator),
    platform: Platform = Depends(get_platform),
):
    rule = platform.rules.update_rule(rule_id, **body.model_dump(exclude_none=True))
    return ApiResponse(data=_rule_response(rule), message="Rule updated")


@router.put(
    "/{rule_id}/toggle",
    response_model=ApiResponse[RuleResponse],
    summary="Enable or disable a moderation rule",
)
async def toggle_rule(
    rule_id: str,
    body: ToggleRuleRequest,
    user: User = Depends(_moderator),
    platform: Platform = Depends(get_platform),
):
    return ApiResponse(data=_rule_response(platform.rules.toggle_rule(rule_id, body.enabled)))


@router.delete("/{rule_id}", response_model=ApiResponse, summary="Delete a moderation rule")
async def delete_rule(
    rule_id: str,
    user: User = Depends(_moderator),
    platform: Platform = Depends(get_platform),
):
    platform.rules.delete_rule(rule_id)
    return ApiResponse(message="Rule deleted")
