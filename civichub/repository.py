"""Typed repository over the entity store.

Every component goes through these methods instead of touching store
collections directly, so the mutation path for each entity is explicit.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from civichub.moderation.models import (
    ContentFlag,
    FlagStatus,
    ItemRef,
    ModerationAction,
    ModerationRule,
    Post,
    PostStatus,
    Resource,
    Submission,
    SubmissionStatus,
    utc_now,
)
from civichub.store import Collection, EntityStore


def _newest_first(records: list[dict], key: str = "created_at") -> list[dict]:
    # Reverse first so equal timestamps keep the most recent insert on top.
    return sorted(reversed(records), key=lambda r: r.get(key) or "", reverse=True)


class Repository:
    """Explicit persistence operations for content and moderation entities."""

    def __init__(self, store: EntityStore) -> None:
        self._store = store

    @contextmanager
    def lock(self, collection: Collection, key: str) -> Iterator[None]:
        with self._store.lock(collection, key):
            yield

    # ------------------------------------------------------------------
    # Submissions
    # ------------------------------------------------------------------

    def create_submission(self, submission: Submission) -> Submission:
        self._store.put(Collection.submissions, submission.to_dict())
        return submission

    def get_submission(self, submission_id: str) -> Optional[Submission]:
        d = self._store.get(Collection.submissions, submission_id)
        return Submission.from_dict(d) if d else None

    def list_submissions(self, status: Optional[SubmissionStatus] = None) -> list[Submission]:
        records = self._store.list_where(
            Collection.submissions,
            None if status is None else (lambda d: d.get("status") == status.value),
        )
        return [Submission.from_dict(d) for d in _newest_first(records)]

    def finish_submission(
        self, submission_id: str, status: SubmissionStatus, **changes: Any
    ) -> Optional[Submission]:
        """Move a submission out of ``pending``.

        Compare-and-set: returns None if the submission is missing or no
        longer pending.
        """
        changes["status"] = status.value
        d = self._store.update_if(
            Collection.submissions,
            submission_id,
            {"status": SubmissionStatus.pending.value},
            changes,
        )
        return Submission.from_dict(d) if d else None

    def reopen_submission(
        self, submission_id: str, from_status: SubmissionStatus
    ) -> Optional[Submission]:
        """Put a decided submission back to ``pending``, clearing the decision.

        Compare-and-set on *from_status*; returns None if it no longer holds.
        """
        d = self._store.update_if(
            Collection.submissions,
            submission_id,
            {"status": from_status.value},
            {
                "status": SubmissionStatus.pending.value,
                "processed_by": None,
                "processed_at": None,
                "resource_id": None,
                "rejection_reason": None,
                "admin_notes": None,
            },
        )
        return Submission.from_dict(d) if d else None

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    def create_resource(self, resource: Resource) -> Resource:
        self._store.put(Collection.resources, resource.to_dict())
        return resource

    def get_resource(self, resource_id: str) -> Optional[Resource]:
        d = self._store.get(Collection.resources, resource_id)
        return Resource.from_dict(d) if d else None

    def list_resources(self, verified: Optional[bool] = None) -> list[Resource]:
        records = self._store.list_where(
            Collection.resources,
            None if verified is None else (lambda d: bool(d.get("verified")) == verified),
        )
        return [Resource.from_dict(d) for d in _newest_first(records)]

    def verify_resource(self, resource_id: str) -> Optional[Resource]:
        d = self._store.update_if(
            Collection.resources,
            resource_id,
            {},
            {"verified": True, "updated_at": utc_now()},
        )
        return Resource.from_dict(d) if d else None

    def delete_resource(self, resource_id: str) -> bool:
        return self._store.delete(Collection.resources, resource_id)

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    def create_post(self, post: Post) -> Post:
        self._store.put(Collection.posts, post.to_dict())
        return post

    def get_post(self, post_id: str) -> Optional[Post]:
        d = self._store.get(Collection.posts, post_id)
        return Post.from_dict(d) if d else None

    def list_posts(self, status: Optional[PostStatus] = None) -> list[Post]:
        records = self._store.list_where(
            Collection.posts,
            None if status is None else (lambda d: d.get("status") == status.value),
        )
        return [Post.from_dict(d) for d in _newest_first(records)]

    def set_post_status(self, post_id: str, status: PostStatus) -> Optional[Post]:
        d = self._store.update_if(
            Collection.posts,
            post_id,
            {},
            {"status": status.value, "updated_at": utc_now()},
        )
        return Post.from_dict(d) if d else None

    # ------------------------------------------------------------------
    # Moderation actions (append-only)
    # ------------------------------------------------------------------

    def append_action(self, action: ModerationAction) -> ModerationAction:
        self._store.put(Collection.moderation_actions, action.to_dict())
        return action

    def list_actions(
        self, predicate: Optional[Callable[[ModerationAction], bool]] = None
    ) -> list[ModerationAction]:
        records = _newest_first(self._store.list_where(Collection.moderation_actions))
        actions = [ModerationAction.from_dict(d) for d in records]
        if predicate is not None:
            actions = [a for a in actions if predicate(a)]
        return actions

    # ------------------------------------------------------------------
    # Content flags
    # ------------------------------------------------------------------

    def create_flag(self, flag: ContentFlag) -> ContentFlag:
        self._store.put(Collection.content_flags, flag.to_dict())
        return flag

    def get_flag(self, flag_id: str) -> Optional[ContentFlag]:
        d = self._store.get(Collection.content_flags, flag_id)
        return ContentFlag.from_dict(d) if d else None

    def list_flags(self, status: Optional[FlagStatus] = None) -> list[ContentFlag]:
        records = self._store.list_where(
            Collection.content_flags,
            None if status is None else (lambda d: d.get("status") == status.value),
        )
        return [ContentFlag.from_dict(d) for d in _newest_first(records)]

    def find_pending_flag(self, target: ItemRef, reporter_id: str) -> Optional[ContentFlag]:
        records = self._store.list_where(
            Collection.content_flags,
            lambda d: (
                d.get("status") == FlagStatus.pending.value
                and d.get("type") == target.kind.value
                and d.get("item_id") == target.id
                and d.get("reported_by") == reporter_id
            ),
        )
        return ContentFlag.from_dict(records[0]) if records else None

    def review_flag(
        self, flag_id: str, status: FlagStatus, reviewer_id: str
    ) -> Optional[ContentFlag]:
        d = self._store.update_if(
            Collection.content_flags,
            flag_id,
            {},
            {"status": status.value, "reviewed_at": utc_now(), "reviewed_by": reviewer_id},
        )
        return ContentFlag.from_dict(d) if d else None

    # ------------------------------------------------------------------
    # Moderation rules
    # ------------------------------------------------------------------

    def save_rule(self, rule: ModerationRule) -> ModerationRule:
        self._store.put(Collection.moderation_rules, rule.to_dict())
        return rule

    def get_rule(self, rule_id: str) -> Optional[ModerationRule]:
        d = self._store.get(Collection.moderation_rules, rule_id)
        return ModerationRule.from_dict(d) if d else None

    def list_rules(self) -> list[ModerationRule]:
        return [
            ModerationRule.from_dict(d)
            for d in self._store.list_where(Collection.moderation_rules)
        ]

    def delete_rule(self, rule_id: str) -> bool:
        return self._store.delete(Collection.moderation_rules, rule_id)
