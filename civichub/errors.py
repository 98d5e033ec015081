"""Error taxonomy shared by the moderation services and the web layer.

Every error carries a stable ``code`` and the HTTP status it maps to, so
routers never have to translate exceptions by hand.
"""

from __future__ import annotations


class CivicHubError(Exception):
    """Base class for all expected failures."""

    status_code = 500
    code = "internal_error"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthenticationRequired(CivicHubError):
    status_code = 401
    code = "auth_required"
    default_message = "Authentication required"


class AuthorizationDenied(CivicHubError):
    status_code = 403
    code = "forbidden"
    default_message = "Admin access required"


class NotFound(CivicHubError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class AlreadyProcessed(CivicHubError):
    status_code = 400
    code = "already_processed"
    default_message = "Submission already processed"


class ValidationError(CivicHubError):
    status_code = 400
    code = "validation_error"
    default_message = "Invalid input"


class DuplicateFlag(CivicHubError):
    status_code = 400
    code = "duplicate_flag"
    default_message = "Content already flagged by you"


class StoreError(CivicHubError):
    """The underlying persistence layer failed (I/O, constraint violation)."""

    status_code = 500
    code = "store_error"
    default_message = "Storage failure"
