"""Role checks shared by the web routers and the services."""

from __future__ import annotations

from typing import Iterable, Optional

from civichub.auth.models import Role, User
from civichub.errors import AuthenticationRequired, AuthorizationDenied

MODERATOR_ROLES: tuple[Role, ...] = (Role.admin, Role.moderator)


def require_role(
    user: Optional[User],
    allowed: Iterable[Role],
    message: str = "Admin access required",
) -> User:
    """Return *user* if their role is one of *allowed*.

    Raises ``AuthenticationRequired`` when there is no caller and
    ``AuthorizationDenied`` when the caller's role is not allowed.

    Usage in a router::

        @router.get("/admin-only")
        async def admin_only(user: User = Depends(get_current_user)):
            require_role(user, [Role.admin])
            ...
    """
    if user is None:
        raise AuthenticationRequired()
    if user.role not in tuple(allowed):
        raise AuthorizationDenied(message)
    return user
