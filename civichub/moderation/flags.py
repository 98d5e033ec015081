"""Content flag registry.

Members report content; moderators review the reports.  A reporter may hold
at most one pending flag per item.  Flag reasons are run through the
keyword rules and any matches are surfaced to reviewers (advisory only).
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

from civichub.auth.models import User
from civichub.errors import DuplicateFlag, NotFound, ValidationError
from civichub.moderation.action_log import SYSTEM_ACTOR_ID, SYSTEM_ACTOR_NAME, ModerationLog
from civichub.moderation.models import (
    ActionType,
    ContentFlag,
    FlagPriority,
    FlagReceipt,
    FlagStatus,
    ItemRef,
    parse_enum,
)
from civichub.moderation.rules import evaluate
from civichub.repository import Repository
from civichub.store import Collection

logger = logging.getLogger(__name__)


def _reporter_key(target: ItemRef, reporter_id: str) -> str:
    return f"{target}:{reporter_id}"


class FlagRegistry:
    """Files, lists and reviews content flags."""

    def __init__(self, repository: Repository, action_log: ModerationLog) -> None:
        self._repo = repository
        self._log = action_log

    def file_flag(
        self,
        target: ItemRef,
        reporter: User,
        reason: str,
        priority: Any = None,
    ) -> FlagReceipt:
        """Report *target* on behalf of *reporter*."""
        if not reason or not reason.strip():
            raise ValidationError("Type, itemId, and reason are required")
        level = FlagPriority.medium if priority is None else parse_enum(FlagPriority, priority, "priority")

        with self._repo.lock(Collection.content_flags, _reporter_key(target, reporter.id)):
            if self._repo.find_pending_flag(target, reporter.id) is not None:
                raise DuplicateFlag()
            flag = self._repo.create_flag(
                ContentFlag(
                    id=f"flag_{uuid.uuid4().hex[:16]}",
                    target=target,
                    reported_by=reporter.id,
                    reported_by_name=reporter.display_name,
                    reason=reason.strip(),
                    priority=level,
                )
            )

        matches = evaluate(flag.reason, self._repo.list_rules())
        for match in matches:
            logger.warning(
                "Flag %s on %s matched rule '%s' (suggests %s)",
                flag.id,
                target,
                match.rule_name,
                match.action.value,
            )
            self._log.record(
                target,
                ActionType.flag,
                SYSTEM_ACTOR_ID,
                SYSTEM_ACTOR_NAME,
                reason=f"Matched rule '{match.rule_name}' (suggests {match.action.value})",
                automated=True,
            )
        return FlagReceipt(flag=flag, matches=matches)

    def list_flags(self, status: Any = None) -> list[ContentFlag]:
        """Return flags newest first; ``None`` returns every status."""
        level: Optional[FlagStatus] = None
        if status is not None:
            level = parse_enum(FlagStatus, status, "status")
        return self._repo.list_flags(level)

    def get_flag(self, flag_id: str) -> ContentFlag:
        flag = self._repo.get_flag(flag_id)
        if flag is None:
            raise NotFound("Flag not found")
        return flag

    def update_status(self, flag_id: str, new_status: Any, reviewer: User) -> ContentFlag:
        """Move a flag to *new_status*.

        Any status may follow any other; the reviewer and time are stamped
        on every change.  Reopening a flag raises ``DuplicateFlag`` if the
        same reporter already has another pending flag on the item.
        """
        status = parse_enum(FlagStatus, new_status, "status")
        if status == FlagStatus.pending:
            current = self.get_flag(flag_id)
            with self._repo.lock(
                Collection.content_flags, _reporter_key(current.target, current.reported_by)
            ):
                other = self._repo.find_pending_flag(current.target, current.reported_by)
                if other is not None and other.id != flag_id:
                    raise DuplicateFlag()
                flag = self._repo.review_flag(flag_id, status, reviewer.id)
        else:
            flag = self._repo.review_flag(flag_id, status, reviewer.id)
        if flag is None:
            raise NotFound("Flag not found")
        self._log.record(
            flag.target,
            ActionType.flag,
            reviewer.id,
            reviewer.display_name,
            reason=f"Flag {flag.id} marked {status.value}",
        )
        return flag
