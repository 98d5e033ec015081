"""Bulk moderation.

One admin command is applied to many items.  Each item succeeds or fails on
its own; a failing item is reported in its result entry and the batch
carries on.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from civichub.auth.models import User
from civichub.errors import CivicHubError, NotFound
from civichub.hooks import PostCommitHooks
from civichub.moderation.action_log import ModerationLog
from civichub.moderation.models import (
    ActionType,
    BulkItemResult,
    BulkOutcome,
    BulkSummary,
    ItemRef,
    TargetKind,
)
from civichub.notifications import NotificationType, Notifier
from civichub.repository import Repository

logger = logging.getLogger(__name__)

DEFAULT_REJECT_REASON = "Bulk rejection"

Handler = Callable[[str, User, Optional[str], PostCommitHooks], None]


class BulkActionCoordinator:
    """Applies one moderation action to a list of items."""

    def __init__(
        self,
        repository: Repository,
        action_log: ModerationLog,
        notifier: Notifier,
        default_reject_reason: str = DEFAULT_REJECT_REASON,
    ) -> None:
        self._repo = repository
        self._log = action_log
        self._notifier = notifier
        self._default_reject_reason = default_reject_reason
        self._handlers: dict[tuple[TargetKind, ActionType], Handler] = {
            (TargetKind.resource, ActionType.approve): self._approve_resource,
            (TargetKind.resource, ActionType.reject): self._reject_resource,
        }

    def apply(
        self,
        action: Any,
        item_ids: list[str],
        item_type: Any,
        actor: User,
        reason: Optional[str] = None,
    ) -> BulkOutcome:
        """Run *action* on every id in *item_ids*.

        ``summary.total`` always equals ``len(item_ids)`` and
        ``summary.success + summary.failed == summary.total``.
        """
        handler = self._resolve(action, item_type)
        results: list[BulkItemResult] = []

        for item_id in item_ids:
            hooks = PostCommitHooks()
            try:
                if handler is None:
                    raise CivicHubError(
                        f"Unsupported bulk action '{action}' for type '{item_type}'"
                    )
                handler(item_id, actor, reason, hooks)
            except CivicHubError as exc:
                results.append(BulkItemResult(id=item_id, success=False, error=exc.message))
                continue
            except Exception:
                logger.exception("Bulk %s failed for %s %s", action, item_type, item_id)
                results.append(BulkItemResult(id=item_id, success=False, error="Unexpected error"))
                continue
            results.append(BulkItemResult(id=item_id, success=True))
            hooks.run()

        succeeded = sum(1 for r in results if r.success)
        summary = BulkSummary(total=len(item_ids), success=succeeded, failed=len(results) - succeeded)
        logger.info(
            "Bulk %s on %d %s item(s): %d succeeded, %d failed",
            action,
            summary.total,
            item_type,
            summary.success,
            summary.failed,
        )
        return BulkOutcome(results=results, summary=summary)

    def _resolve(self, action: Any, item_type: Any) -> Optional[Handler]:
        try:
            key = (TargetKind(item_type), ActionType(action))
        except ValueError:
            return None
        return self._handlers.get(key)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _approve_resource(
        self, item_id: str, actor: User, reason: Optional[str], hooks: PostCommitHooks
    ) -> None:
        resource = self._repo.verify_resource(item_id)
        if resource is None:
            raise NotFound("Resource not found")
        self._log.record(
            ItemRef(TargetKind.resource, item_id),
            ActionType.approve,
            actor.id,
            actor.display_name,
            reason=reason,
        )
        if resource.submitted_by:
            hooks.defer(
                "notify_resource_approved",
                self._notifier.send,
                resource.submitted_by,
                NotificationType.resource_approved,
                "Resource Approved",
                f'Your resource "{resource.name}" has been approved and is now live.',
            )

    def _reject_resource(
        self, item_id: str, actor: User, reason: Optional[str], hooks: PostCommitHooks
    ) -> None:
        resource = self._repo.get_resource(item_id)
        if resource is None or not self._repo.delete_resource(item_id):
            raise NotFound("Resource not found")
        reason = reason or self._default_reject_reason
        self._log.record(
            ItemRef(TargetKind.resource, item_id),
            ActionType.reject,
            actor.id,
            actor.display_name,
            reason=reason,
        )
        if resource.submitted_by:
            hooks.defer(
                "notify_resource_denied",
                self._notifier.send,
                resource.submitted_by,
                NotificationType.resource_denied,
                "Resource Submission Denied",
                f'Your resource submission "{resource.name}" was denied. Reason: {reason}',
            )
