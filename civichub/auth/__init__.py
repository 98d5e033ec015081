"""Users, sessions and role checks."""

from civichub.auth.models import Role, Session, User
from civichub.auth.permissions import MODERATOR_ROLES, require_role
from civichub.auth.store import UserStore

__all__ = ["MODERATOR_ROLES", "Role", "Session", "User", "UserStore", "require_role"]
