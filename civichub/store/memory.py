"""In-memory entity store."""

from __future__ import annotations

import copy
import threading
from typing import Any, Optional

from civichub.errors import ValidationError
from civichub.store.base import Collection, EntityStore, Predicate


class MemoryStore(EntityStore):
    """Dict-backed store living for the lifetime of the process."""

    def __init__(self) -> None:
        super().__init__()
        self._data: dict[str, dict[str, dict]] = {c.value: {} for c in Collection}
        self._mutex = threading.RLock()

    def get(self, collection: Collection, record_id: str) -> Optional[dict]:
        with self._mutex:
            record = self._data[collection.value].get(record_id)
            return copy.deepcopy(record) if record is not None else None

    def put(self, collection: Collection, record: dict) -> dict:
        if not record.get("id"):
            raise ValidationError("Record id is required")
        with self._mutex:
            self._data[collection.value][record["id"]] = copy.deepcopy(record)
        return copy.deepcopy(record)

    def delete(self, collection: Collection, record_id: str) -> bool:
        with self._mutex:
            return self._data[collection.value].pop(record_id, None) is not None

    def list_where(
        self, collection: Collection, predicate: Optional[Predicate] = None
    ) -> list[dict]:
        with self._mutex:
            records = list(self._data[collection.value].values())
            return [copy.deepcopy(r) for r in records if predicate is None or predicate(r)]

    def update_if(
        self,
        collection: Collection,
        record_id: str,
        expected: dict[str, Any],
        changes: dict[str, Any],
    ) -> Optional[dict]:
        with self._mutex:
            record = self._data[collection.value].get(record_id)
            if record is None or not self._matches(record, expected):
                return None
            record.update(copy.deepcopy(changes))
            return copy.deepcopy(record)
