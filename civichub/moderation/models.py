"""Data models for submissions, published content and moderation records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from civichub.errors import ValidationError


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class TargetKind(str, Enum):
    """Kinds of content a moderation record can point at."""

    resource = "resource"
    post = "post"
    comment = "comment"
    campaign = "campaign"
    event = "event"
    submission = "submission"


class ActionType(str, Enum):
    approve = "approve"
    reject = "reject"
    flag = "flag"
    delete = "delete"
    edit = "edit"


class SubmissionStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class FlagStatus(str, Enum):
    pending = "pending"
    reviewed = "reviewed"
    resolved = "resolved"
    dismissed = "dismissed"


class FlagPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


class RuleType(str, Enum):
    keyword = "keyword"
    pattern = "pattern"
    spam = "spam"
    profanity = "profanity"
    custom = "custom"


class RuleAction(str, Enum):
    flag = "flag"
    auto_reject = "auto-reject"
    auto_approve = "auto-approve"
    notify = "notify"


class PostStatus(str, Enum):
    active = "active"
    archived = "archived"
    flagged = "flagged"


def parse_enum(enum_cls: type[Enum], value: Any, field_name: str) -> Any:
    """Coerce *value* into *enum_cls* or raise ``ValidationError``."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {field_name} '{value}'. Must be one of: {allowed}") from None


# ---------------------------------------------------------------------------
# Targets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ItemRef:
    """A typed reference to a moderated item."""

    kind: TargetKind
    id: str

    @classmethod
    def parse(cls, kind: Any, item_id: str) -> ItemRef:
        if not item_id:
            raise ValidationError("itemId is required")
        return cls(kind=parse_enum(TargetKind, kind, "type"), id=item_id)

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.id}"


# ---------------------------------------------------------------------------
# Submissions and published content
# ---------------------------------------------------------------------------

REQUIRED_DRAFT_FIELDS = ("name", "category", "description", "address", "phone", "email")


@dataclass
class ResourceDraft:
    """The user-proposed payload of a resource submission."""

    name: str
    category: str
    description: str
    address: str = ""
    phone: str = ""
    email: str = ""
    website: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    hours: Optional[str] = None
    services: list[str] = field(default_factory=list)
    languages: list[str] = field(default_factory=list)
    accessibility: list[str] = field(default_factory=list)
    location: Optional[dict] = None

    @classmethod
    def from_dict(cls, d: dict) -> ResourceDraft:
        return cls(
            name=d.get("name", ""),
            category=d.get("category", ""),
            description=d.get("description", ""),
            address=d.get("address") or "",
            phone=d.get("phone") or "",
            email=d.get("email") or "",
            website=d.get("website") or None,
            tags=list(d.get("tags") or []),
            hours=d.get("hours") or None,
            services=list(d.get("services") or []),
            languages=list(d.get("languages") or []),
            accessibility=list(d.get("accessibility") or []),
            location=d.get("location"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
            "website": self.website,
            "tags": self.tags,
            "hours": self.hours,
            "services": self.services,
            "languages": self.languages,
            "accessibility": self.accessibility,
            "location": self.location,
        }


@dataclass
class Submission:
    """A resource proposal awaiting admin review."""

    id: str
    draft: ResourceDraft
    submitted_by: str
    status: SubmissionStatus = SubmissionStatus.pending
    created_at: str = ""
    processed_by: Optional[str] = None
    processed_at: Optional[str] = None
    resource_id: Optional[str] = None
    rejection_reason: Optional[str] = None
    admin_notes: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = utc_now()

    @property
    def is_pending(self) -> bool:
        return self.status == SubmissionStatus.pending

    @classmethod
    def from_dict(cls, d: dict) -> Submission:
        return cls(
            id=d["id"],
            draft=ResourceDraft.from_dict(d.get("draft", {})),
            submitted_by=d.get("submitted_by", ""),
            status=SubmissionStatus(d.get("status", "pending")),
            created_at=d.get("created_at", ""),
            processed_by=d.get("processed_by"),
            processed_at=d.get("processed_at"),
            resource_id=d.get("resource_id"),
            rejection_reason=d.get("rejection_reason"),
            admin_notes=d.get("admin_notes"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "draft": self.draft.to_dict(),
            "submitted_by": self.submitted_by,
            "status": self.status.value,
            "created_at": self.created_at,
            "processed_by": self.processed_by,
            "processed_at": self.processed_at,
            "resource_id": self.resource_id,
            "rejection_reason": self.rejection_reason,
            "admin_notes": self.admin_notes,
        }


@dataclass
class Resource:
    """A live directory entry."""

    id: str
    draft: ResourceDraft
    verified: bool = False
    featured: bool = False
    submitted_by: Optional[str] = None  # weak back-reference, lookup only
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = utc_now()
        if not self.updated_at:
            self.updated_at = self.created_at

    @property
    def name(self) -> str:
        return self.draft.name

    @classmethod
    def from_dict(cls, d: dict) -> Resource:
        return cls(
            id=d["id"],
            draft=ResourceDraft.from_dict(d),
            verified=bool(d.get("verified", False)),
            featured=bool(d.get("featured", False)),
            submitted_by=d.get("submitted_by"),
            created_at=d.get("created_at", ""),
            updated_at=d.get("updated_at", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        data = {"id": self.id}
        data.update(self.draft.to_dict())
        data.update(
            {
                "verified": self.verified,
                "featured": self.featured,
                "submitted_by": self.submitted_by,
                "created_at": self.created_at,
                "updated_at": self.updated_at,
            }
        )
        return data


@dataclass
class Post:
    """A community board post."""

    id: str
    author_id: str
    title: str
    content: str
    author_name: str = ""
    status: PostStatus = PostStatus.active
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = utc_now()
        if not self.updated_at:
            self.updated_at = self.created_at

    @classmethod
    def from_dict(cls, d: dict) -> Post:
        return cls(
            id=d["id"],
            author_id=d.get("author_id", ""),
            title=d.get("title", ""),
            content=d.get("content", ""),
            author_name=d.get("author_name", ""),
            status=PostStatus(d.get("status", "active")),
            created_at=d.get("created_at", ""),
            updated_at=d.get("updated_at", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "author_id": self.author_id,
            "title": self.title,
            "content": self.content,
            "author_name": self.author_name,
            "status": self.status.value,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


# ---------------------------------------------------------------------------
# Moderation records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ModerationAction:
    """Immutable audit entry for one moderation decision."""

    id: str
    target: ItemRef
    action: ActionType
    admin_id: str
    admin_name: str
    reason: Optional[str] = None
    automated: bool = False
    created_at: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> ModerationAction:
        return cls(
            id=d["id"],
            target=ItemRef(TargetKind(d["type"]), d["item_id"]),
            action=ActionType(d["action"]),
            admin_id=d.get("admin_id", ""),
            admin_name=d.get("admin_name", ""),
            reason=d.get("reason"),
            automated=bool(d.get("automated", False)),
            created_at=d.get("created_at", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.target.kind.value,
            "item_id": self.target.id,
            "action": self.action.value,
            "admin_id": self.admin_id,
            "admin_name": self.admin_name,
            "reason": self.reason,
            "automated": self.automated,
            "created_at": self.created_at,
        }


@dataclass
class ContentFlag:
    """A user report against an item."""

    id: str
    target: ItemRef
    reported_by: str
    reported_by_name: str
    reason: str
    status: FlagStatus = FlagStatus.pending
    priority: FlagPriority = FlagPriority.medium
    created_at: str = ""
    reviewed_at: Optional[str] = None
    reviewed_by: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = utc_now()

    @classmethod
    def from_dict(cls, d: dict) -> ContentFlag:
        return cls(
            id=d["id"],
            target=ItemRef(TargetKind(d["type"]), d["item_id"]),
            reported_by=d.get("reported_by", ""),
            reported_by_name=d.get("reported_by_name", ""),
            reason=d.get("reason", ""),
            status=FlagStatus(d.get("status", "pending")),
            priority=FlagPriority(d.get("priority", "medium")),
            created_at=d.get("created_at", ""),
            reviewed_at=d.get("reviewed_at"),
            reviewed_by=d.get("reviewed_by"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.target.kind.value,
            "item_id": self.target.id,
            "reported_by": self.reported_by,
            "reported_by_name": self.reported_by_name,
            "reason": self.reason,
            "status": self.status.value,
            "priority": self.priority.value,
            "created_at": self.created_at,
            "reviewed_at": self.reviewed_at,
            "reviewed_by": self.reviewed_by,
        }


@dataclass
class ModerationRule:
    """An admin-defined automated classifier."""

    id: str
    name: str
    type: RuleType
    pattern: str
    action: RuleAction = RuleAction.flag
    enabled: bool = True
    priority: int = 0
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = utc_now()
        if not self.updated_at:
            self.updated_at = self.created_at

    @classmethod
    def from_dict(cls, d: dict) -> ModerationRule:
        return cls(
            id=d["id"],
            name=d.get("name", ""),
            type=RuleType(d.get("type", "keyword")),
            pattern=d.get("pattern", ""),
            action=RuleAction(d.get("action", "flag")),
            enabled=bool(d.get("enabled", True)),
            priority=int(d.get("priority", 0)),
            created_at=d.get("created_at", ""),
            updated_at=d.get("updated_at", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "pattern": self.pattern,
            "action": self.action.value,
            "enabled": self.enabled,
            "priority": self.priority,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


# ---------------------------------------------------------------------------
# Operation results
# ---------------------------------------------------------------------------


@dataclass
class ApprovalResult:
    resource_id: str
    submission: Submission


@dataclass
class RuleMatch:
    """A rule that matched some content (advisory)."""

    rule_id: str
    rule_name: str
    action: RuleAction
    priority: int


@dataclass
class FlagReceipt:
    flag: ContentFlag
    matches: list[RuleMatch] = field(default_factory=list)


@dataclass
class BulkItemResult:
    id: str
    success: bool
    error: Optional[str] = None


@dataclass
class BulkSummary:
    total: int = 0
    success: int = 0
    failed: int = 0


@dataclass
class BulkOutcome:
    results: list[BulkItemResult] = field(default_factory=list)
    summary: BulkSummary = field(default_factory=BulkSummary)
