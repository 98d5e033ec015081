"""Pydantic models for API request/response serialization.

These models mirror the CivicHub dataclasses.  JSON keys are camelCase on
the wire (``itemIds``, ``adminNotes``); snake_case names are accepted too.
"""

from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(ApiModel, Generic[T]):
    """Envelope shared by every endpoint."""

    success: bool = True
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None


# ---------------------------------------------------------------------------
# Resource & submission models
# ---------------------------------------------------------------------------


class ResourceFields(ApiModel):
    """Resource payload as proposed by a member."""

    name: str = ""
    category: str = ""
    description: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    website: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    hours: Optional[str] = None
    services: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    accessibility: list[str] = Field(default_factory=list)
    location: Optional[dict[str, Any]] = None


class SubmissionResponse(ApiModel):
    """Mirrors civichub.moderation.models.Submission."""

    id: str
    draft: ResourceFields
    submitted_by: str
    status: str
    created_at: str
    processed_by: Optional[str] = None
    processed_at: Optional[str] = None
    resource_id: Optional[str] = None
    rejection_reason: Optional[str] = None
    admin_notes: Optional[str] = None


class ResourceResponse(ResourceFields):
    """Mirrors civichub.moderation.models.Resource."""

    id: str
    verified: bool = False
    featured: bool = False
    submitted_by: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""


class ApproveSubmissionRequest(ApiModel):
    featured: bool = False
    admin_notes: Optional[str] = None


class RejectSubmissionRequest(ApiModel):
    reason: Optional[str] = None


class ApprovalData(ApiModel):
    resource_id: str


# ---------------------------------------------------------------------------
# Flag models
# ---------------------------------------------------------------------------


class CreateFlagRequest(ApiModel):
    type: str
    item_id: str
    reason: str
    priority: Optional[str] = None


class UpdateFlagRequest(ApiModel):
    status: str


class RuleMatchResponse(ApiModel):
    rule_id: str
    rule_name: str
    action: str
    priority: int


class FlagResponse(ApiModel):
    """Mirrors civichub.moderation.models.ContentFlag."""

    id: str
    type: str
    item_id: str
    reported_by: str
    reported_by_name: str
    reason: str
    status: str
    priority: str
    created_at: str
    reviewed_at: Optional[str] = None
    reviewed_by: Optional[str] = None
    matched_rules: list[RuleMatchResponse] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Bulk & history models
# ---------------------------------------------------------------------------


class BulkActionRequest(ApiModel):
    action: str
    item_ids: list[str] = Field(default_factory=list)
    type: str = "resource"
    reason: Optional[str] = None


class BulkItemResultResponse(ApiModel):
    id: str
    success: bool
    error: Optional[str] = None


class BulkSummaryResponse(ApiModel):
    total: int
    success: int
    failed: int


class BulkActionResponse(ApiModel):
    results: list[BulkItemResultResponse] = Field(default_factory=list)
    summary: BulkSummaryResponse


class ModerationActionResponse(ApiModel):
    """Mirrors civichub.moderation.models.ModerationAction."""

    id: str
    type: str
    item_id: str
    action: str
    admin_id: str
    admin_name: str
    reason: Optional[str] = None
    automated: bool = False
    created_at: str


# ---------------------------------------------------------------------------
# Rule models
# ---------------------------------------------------------------------------


class RuleResponse(ApiModel):
    """Mirrors civichub.moderation.models.ModerationRule."""

    id: str
    name: str
    type: str
    pattern: str
    action: str
    enabled: bool
    priority: int
    created_at: str
    updated_at: str


class CreateRuleRequest(ApiModel):
    name: str
    pattern: str
    type: str = "keyword"
    action: str = "flag"
    enabled: bool = True
    priority: int = 0


class UpdateRuleRequest(ApiModel):
    name: Optional[str] = None
    pattern: Optional[str] = None
    type: Optional[str] = None
    action: Optional[str] = None
    priority: Optional[int] = None


class ToggleRuleRequest(ApiModel):
    enabled: bool


# ---------------------------------------------------------------------------
# Post & notification models
# ---------------------------------------------------------------------------


class CreatePostRequest(ApiModel):
    title: str
    content: str


class ModeratePostRequest(ApiModel):
    action: str
    reason: Optional[str] = None


class PostResponse(ApiModel):
    """Mirrors civichub.moderation.models.Post."""

    id: str
    author_id: str
    author_name: str = ""
    title: str
    content: str
    status: str
    created_at: str
    updated_at: str


class NotificationResponse(ApiModel):
    """Mirrors civichub.notifications.Notification."""

    id: str
    user_id: str
    type: str
    title: str
    message: str
    read: bool = False
    created_at: str


# ---------------------------------------------------------------------------
# User models
# ---------------------------------------------------------------------------


class UserResponse(ApiModel):
    id: str
    email: str
    name: str
    role: str
    created_at: str
