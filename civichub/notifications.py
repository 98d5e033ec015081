"""User notifications.

The notifier only records notifications in the entity store; delivering
them (email, push, websocket) is somebody else's job.
"""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass
from enum import Enum

from civichub.errors import NotFound
from civichub.moderation.models import utc_now
from civichub.store import Collection, EntityStore


class NotificationType(str, Enum):
    resource_approved = "resource_approved"
    resource_denied = "resource_denied"
    post_moderated = "post_moderated"


@dataclass
class Notification:
    """A message addressed to one user."""

    id: str
    user_id: str
    type: str
    title: str
    message: str
    read: bool = False
    created_at: str = ""


class Notifier:
    """Creates and queries notification records."""

    def __init__(self, store: EntityStore) -> None:
        self._store = store

    @staticmethod
    def _from_dict(d: dict) -> Notification:
        return Notification(**{k: v for k, v in d.items() if k in Notification.__dataclass_fields__})

    def send(
        self, user_id: str, type: NotificationType, title: str, message: str
    ) -> Notification:
        notification = Notification(
            id=uuid.uuid4().hex,
            user_id=user_id,
            type=type.value,
            title=title,
            message=message,
            created_at=utc_now(),
        )
        self._store.put(Collection.notifications, asdict(notification))
        return notification

    def list_for_user(self, user_id: str, unread_only: bool = False) -> list[Notification]:
        """Return *user_id*'s notifications, newest first."""
        records = self._store.list_where(
            Collection.notifications,
            lambda d: d.get("user_id") == user_id and not (unread_only and d.get("read")),
        )
        records = sorted(reversed(records), key=lambda d: d.get("created_at", ""), reverse=True)
        return [self._from_dict(d) for d in records]

    def mark_read(self, notification_id: str, user_id: str) -> Notification:
        """Mark one of *user_id*'s notifications as read."""
        d = self._store.update_if(
            Collection.notifications,
            notification_id,
            {"user_id": user_id},
            {"read": True},
        )
        if d is None:
            raise NotFound("Notification not found")
        return self._from_dict(d)

