"""Community posts router -- posting and post moderation."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from civichub.auth import MODERATOR_ROLES, User, require_role
from civichub.moderation.models import Post
from civichub.platform import Platform
from web.backend.app.middleware.auth import get_current_user, get_platform
from web.backend.app.models.api import (
    ApiResponse,
    CreatePostRequest,
    ModeratePostRequest,
    PostResponse,
)

router = APIRouter(prefix="/api", tags=["posts"])


def _post_response(p: Post) -> PostResponse:
    return PostResponse(**p.to_dict())


@router.post(
    "/posts",
    response_model=ApiResponse[PostResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a community post",
)
async def create_post(
    body: CreatePostRequest,
    user: User = Depends(get_current_user),
    platform: Platform = Depends(get_platform),
):
    post = platform.posts.create_post(user, body.title, body.content)
    return ApiResponse(data=_post_response(post))


@router.get("/posts", response_model=ApiResponse[list[PostResponse]], summary="List community posts")
async def list_posts(
    status_filter: Optional[str] = Query("active", alias="status"),
    platform: Platform = Depends(get_platform),
):
    """Public listing; ``status=all`` includes archived and flagged posts."""
    wanted = None if status_filter in (None, "", "all") else status_filter
    return ApiResponse(data=[_post_response(p) for p in platform.posts.list_posts(wanted)])


@router.post(
    "/admin/moderate/post/{post_id}",
    response_model=ApiResponse[PostResponse],
    summary="Approve, reject or flag a post",
)
async def moderate_post(
    post_id: str,
    body: ModeratePostRequest,
    user: User = Depends(get_current_user),
    platform: Platform = Depends(get_platform),
):
    require_role(user, MODERATOR_ROLES)
    post = platform.posts.moderate_post(post_id, body.action, user, reason=body.reason)
    return ApiResponse(data=_post_response(post), message="Post moderated successfully")
