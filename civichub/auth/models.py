"""Auth domain models for users and sessions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class Role(str, Enum):
    """Permission tiers: volunteer < organizer < moderator < admin."""

    volunteer = "volunteer"
    organizer = "organizer"
    moderator = "moderator"
    admin = "admin"


@dataclass
class User:
    """A platform member."""

    id: str
    email: str
    name: str = ""
    role: Role = Role.volunteer
    created_at: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = datetime.now(timezone.utc).isoformat()
        if isinstance(self.role, str):
            self.role = Role(self.role)

    @property
    def display_name(self) -> str:
        return self.name or self.email.split("@")[0]


@dataclass
class Session:
    """An issued bearer session."""

    token: str
    user_id: str
    created_at: str = ""
    expires_at: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = datetime.now(timezone.utc).isoformat()
