"""Community board posts and their moderation."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

from civichub.auth.models import User
from civichub.errors import NotFound, ValidationError
from civichub.hooks import PostCommitHooks
from civichub.moderation.action_log import ModerationLog
from civichub.moderation.models import (
    ActionType,
    ItemRef,
    Post,
    PostStatus,
    TargetKind,
    parse_enum,
)
from civichub.notifications import NotificationType, Notifier
from civichub.repository import Repository

logger = logging.getLogger(__name__)

# Moderator decision -> resulting post status
_POST_TRANSITIONS = {
    ActionType.approve: PostStatus.active,
    ActionType.reject: PostStatus.archived,
    ActionType.flag: PostStatus.flagged,
}


class PostBoard:
    def __init__(self, repository: Repository, action_log: ModerationLog, notifier: Notifier) -> None:
        self._repo = repository
        self._log = action_log
        self._notifier = notifier

    def create_post(self, author: User, title: str, content: str) -> Post:
        if not title or not title.strip() or not content or not content.strip():
            raise ValidationError("Title and content are required")
        post = Post(
            id=str(uuid.uuid4()),
            author_id=author.id,
            author_name=author.display_name,
            title=title.strip(),
            content=content.strip(),
        )
        return self._repo.create_post(post)

    def list_posts(self, status: Any = PostStatus.active) -> list[Post]:
        if status is not None:
            status = parse_enum(PostStatus, status, "status")
        return self._repo.list_posts(status)

    def moderate_post(
        self,
        post_id: str,
        action: Any,
        moderator: User,
        reason: Optional[str] = None,
    ) -> Post:
        """Approve, reject (archive) or flag a post."""
        decision = parse_enum(ActionType, action, "action")
        if decision not in _POST_TRANSITIONS:
            raise ValidationError("Invalid action. Must be approve, reject, or flag")

        post = self._repo.set_post_status(post_id, _POST_TRANSITIONS[decision])
        if post is None:
            raise NotFound("Post not found")
        self._log.record(
            ItemRef(TargetKind.post, post_id),
            decision,
            moderator.id,
            moderator.display_name,
            reason=reason,
        )

        hooks = PostCommitHooks()
        if post.author_id:
            message = f'Your post "{post.title}" is now {post.status.value}.'
            if reason:
                message += f" Reason: {reason}"
            hooks.defer(
                "notify_post_moderated",
                self._notifier.send,
                post.author_id,
                NotificationType.post_moderated,
                "Post Moderated",
                message,
            )
        hooks.run()
        return post
