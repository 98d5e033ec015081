"""Shared fixtures: an in-memory platform, a few users and an API client."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from civichub.auth.models import Role
from civichub.platform import Platform


@pytest.fixture
def platform() -> Platform:
    return Platform.build()


@pytest.fixture
def admin(platform):
    return platform.users.create_user("admin@civichub.org", name="Ada Admin", role=Role.admin)


@pytest.fixture
def moderator(platform):
    return platform.users.create_user("mod@civichub.org", name="Mo Moderator", role=Role.moderator)


@pytest.fixture
def volunteer(platform):
    return platform.users.create_user("vol@civichub.org", name="Val Volunteer")


@pytest.fixture
def client(platform):
    from web.backend.app.main import app
    from web.backend.app.middleware.auth import get_platform

    app.dependency_overrides[get_platform] = lambda: platform
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(platform):
    """Return a helper building ``Authorization`` headers for a user."""

    def _headers(user) -> dict[str, str]:
        token = platform.users.create_session(user.id).token
        return {"Authorization": f"Bearer {token}"}

    return _headers
