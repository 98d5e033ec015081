"""CivicHub -- moderation and content-lifecycle services for a community platform."""

__version__ = "0.1.0"
