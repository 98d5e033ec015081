"""Abstract entity store.

Records are plain ``dict`` objects carrying an ``"id"`` key.  Callers get
copies; mutating a returned record never changes the stored one.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from enum import Enum
from typing import Any, Callable, Iterator, Optional


class Collection(str, Enum):
    """Names of the stored collections."""

    users = "users"
    sessions = "sessions"
    submissions = "submissions"
    resources = "resources"
    posts = "posts"
    moderation_actions = "moderation_actions"
    content_flags = "content_flags"
    moderation_rules = "moderation_rules"
    notifications = "notifications"


Predicate = Callable[[dict], bool]


class _KeyLock:
    """A lock plus the number of threads holding or waiting for it."""

    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.holders = 0


class EntityStore(ABC):
    """Key-value persistence with per-key locks and conditional updates."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._key_locks: dict[tuple[str, str], _KeyLock] = {}

    # ------------------------------------------------------------------
    # Backend primitives
    # ------------------------------------------------------------------

    @abstractmethod
    def get(self, collection: Collection, record_id: str) -> Optional[dict]:
        """Return a copy of the record, or None."""

    @abstractmethod
    def put(self, collection: Collection, record: dict) -> dict:
        """Insert or replace the record keyed by ``record["id"]``."""

    @abstractmethod
    def delete(self, collection: Collection, record_id: str) -> bool:
        """Remove a record. Returns True if it existed."""

    @abstractmethod
    def list_where(
        self, collection: Collection, predicate: Optional[Predicate] = None
    ) -> list[dict]:
        """Return copies of all matching records in insertion order."""

    @abstractmethod
    def update_if(
        self,
        collection: Collection,
        record_id: str,
        expected: dict[str, Any],
        changes: dict[str, Any],
    ) -> Optional[dict]:
        """Atomically apply *changes* if every *expected* field matches.

        Returns the updated record, or None when the record is missing or
        one of the expected values differs.
        """

    # ------------------------------------------------------------------
    # Locking
    # ------------------------------------------------------------------

    @contextmanager
    def lock(self, collection: Collection, key: str) -> Iterator[None]:
        """Hold an exclusive, process-local lock for ``(collection, key)``."""
        name = (collection.value, key)
        with self._guard:
            entry = self._key_locks.get(name)
            if entry is None:
                entry = self._key_locks[name] = _KeyLock()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            # Drop the entry once nobody holds or waits for it.
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._key_locks[name]

    @staticmethod
    def _matches(record: dict, expected: dict[str, Any]) -> bool:
        return all(record.get(k) == v for k, v in expected.items())
