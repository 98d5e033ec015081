"""User directory and session storage on top of the entity store."""

from __future__ import annotations

import logging
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from civichub.auth.models import Role, Session, User
from civichub.errors import NotFound, ValidationError
from civichub.store import Collection, EntityStore

logger = logging.getLogger(__name__)


class UserStore:
    """Storage for users and their bearer sessions."""

    def __init__(self, store: EntityStore, session_ttl_hours: int = 24) -> None:
        self._store = store
        self._session_ttl = timedelta(hours=session_ttl_hours)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _user_from_dict(d: dict) -> User:
        role_val = d.get("role", "volunteer")
        try:
            role = Role(role_val)
        except ValueError:
            role = Role.volunteer
        return User(
            id=d["id"],
            email=d.get("email", ""),
            name=d.get("name", ""),
            role=role,
            created_at=d.get("created_at", ""),
        )

    @staticmethod
    def _user_to_dict(u: User) -> dict:
        return {
            "id": u.id,
            "email": u.email,
            "name": u.name,
            "role": u.role.value,
            "created_at": u.created_at,
        }

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def create_user(self, email: str, name: str = "", role: Role = Role.volunteer) -> User:
        """Persist a new user. Emails are unique (case-insensitive)."""
        if not email or "@" not in email:
            raise ValidationError("A valid email is required")
        if self.get_user_by_email(email) is not None:
            raise ValidationError(f"User '{email}' already exists")
        user = User(id=str(uuid.uuid4()), email=email, name=name, role=role)
        self._store.put(Collection.users, self._user_to_dict(user))
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        d = self._store.get(Collection.users, user_id)
        return self._user_from_dict(d) if d else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        matches = self._store.list_where(
            Collection.users, lambda d: d.get("email", "").lower() == email.lower()
        )
        return self._user_from_dict(matches[0]) if matches else None

    def list_users(self) -> list[User]:
        return [self._user_from_dict(d) for d in self._store.list_where(Collection.users)]

    def set_role(self, user_id: str, role: Role) -> User:
        """Unconditionally set a user's role."""
        d = self._store.update_if(Collection.users, user_id, {}, {"role": role.value})
        if d is None:
            raise NotFound("User not found")
        return self._user_from_dict(d)

    def promote(self, user_id: str, from_role: Role, to_role: Role) -> bool:
        """Move *user_id* from *from_role* to *to_role*.

        Only applies when the stored role still equals *from_role*, so the
        call is idempotent and never demotes anyone.  Returns True if the
        role changed.
        """
        updated = self._store.update_if(
            Collection.users,
            user_id,
            {"role": from_role.value},
            {"role": to_role.value},
        )
        if updated is not None:
            logger.info("Promoted user %s from %s to %s", user_id, from_role.value, to_role.value)
        return updated is not None

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def create_session(self, user_id: str) -> Session:
        """Issue a new bearer session for an existing user."""
        if self.get_user(user_id) is None:
            raise NotFound("User not found")
        now = datetime.now(timezone.utc)
        session = Session(
            token=secrets.token_urlsafe(32),
            user_id=user_id,
            created_at=now.isoformat(),
            expires_at=(now + self._session_ttl).isoformat(),
        )
        self._store.put(
            Collection.sessions,
            {
                "id": session.token,
                "user_id": session.user_id,
                "created_at": session.created_at,
                "expires_at": session.expires_at,
            },
        )
        return session

    def validate_session(self, token: str) -> Optional[User]:
        """Return the user behind *token*, or None if unknown or expired."""
        d = self._store.get(Collection.sessions, token)
        if d is None:
            return None
        if d.get("expires_at") and d["expires_at"] < datetime.now(timezone.utc).isoformat():
            # Expired -- clean it up
            self._store.delete(Collection.sessions, token)
            return None
        return self.get_user(d["user_id"])

    def delete_session(self, token: str) -> bool:
        return self._store.delete(Collection.sessions, token)
