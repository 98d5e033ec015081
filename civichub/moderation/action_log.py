"""Append-only moderation action log.

Every moderation decision, human or automated, ends up here.  Entries are
never updated or deleted; all queries return newest first.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from civichub.moderation.models import ActionType, ItemRef, ModerationAction, utc_now
from civichub.repository import Repository

logger = logging.getLogger(__name__)

SYSTEM_ACTOR_ID = "system"
SYSTEM_ACTOR_NAME = "Automated moderation"


class ModerationLog:
    """Audit trail of moderation decisions."""

    def __init__(self, repository: Repository) -> None:
        self._repo = repository

    def record(
        self,
        target: ItemRef,
        action: ActionType,
        admin_id: str,
        admin_name: str,
        reason: Optional[str] = None,
        automated: bool = False,
    ) -> ModerationAction:
        """Append an entry and return it."""
        entry = ModerationAction(
            id=f"mod_{uuid.uuid4().hex[:16]}",
            target=target,
            action=action,
            admin_id=admin_id,
            admin_name=admin_name,
            reason=reason,
            automated=automated,
            created_at=utc_now(),
        )
        self._repo.append_action(entry)
        logger.info(
            "Moderation %s on %s by %s%s",
            action.value,
            target,
            admin_id,
            " (automated)" if automated else "",
        )
        return entry

    def query_by_item(self, target: ItemRef) -> list[ModerationAction]:
        return self._repo.list_actions(lambda a: a.target == target)

    def query_by_admin(self, admin_id: str) -> list[ModerationAction]:
        return self._repo.list_actions(lambda a: a.admin_id == admin_id)

    def list_recent(self, limit: Optional[int] = None) -> list[ModerationAction]:
        actions = self._repo.list_actions()
        return actions if limit is None else actions[:limit]
