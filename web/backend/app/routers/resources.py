"""Published resources router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from civichub.auth import MODERATOR_ROLES, User, require_role
from civichub.errors import NotFound
from civichub.moderation.models import Resource
from civichub.platform import Platform
from web.backend.app.middleware.auth import get_current_user, get_platform
from web.backend.app.models.api import ApiResponse, ResourceResponse

router = APIRouter(prefix="/api", tags=["resources"])


def _resource_response(r: Resource) -> ResourceResponse:
    return ResourceResponse(**r.to_dict())


@router.get(
    "/resources",
    response_model=ApiResponse[list[ResourceResponse]],
    summary="List verified resources",
)
async def list_resources(
    category: Optional[str] = Query(None),
    platform: Platform = Depends(get_platform),
):
    resources = platform.repository.list_resources(verified=True)
    if category:
        resources = [r for r in resources if r.draft.category == category]
    return ApiResponse(data=[_resource_response(r) for r in resources])


@router.get(
    "/resources/{resource_id}",
    response_model=ApiResponse[ResourceResponse],
    summary="Get a verified resource",
)
async def get_resource(resource_id: str, platform: Platform = Depends(get_platform)):
    resource = platform.repository.get_resource(resource_id)
    if resource is None or not resource.verified:
        raise NotFound("Resource not found")
    return ApiResponse(data=_resource_response(resource))


@router.get(
    "/admin/resources",
    response_model=ApiResponse[list[ResourceResponse]],
    summary="List resources for moderation",
)
async def admin_list_resources(
    verified: Optional[bool] = Query(None),
    user: User = Depends(get_current_user),
    platform: Platform = Depends(get_platform),
):
    """``verified=false`` returns the resources still awaiting approval."""
    require_role(user, MODERATOR_ROLES)
    return ApiResponse(
        data=[_resource_response(r) for r in platform.repository.list_resources(verified)]
    )
