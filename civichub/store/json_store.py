"""File-based JSON entity store.

Storage path: ``~/.civichub/`` (or the configured data directory) with one
``<collection>.json`` file per collection, each holding a list of dicts.

Files are replaced atomically.  A file that cannot be parsed raises
``StoreError`` instead of being overwritten.

Locks and ``update_if`` are atomic within one process only.  Two processes
(for example the API server and the CLI) sharing a data directory are not
serialized against each other; run review commands against one process at
a time.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Optional

from civichub.errors import StoreError, ValidationError
from civichub.store.base import Collection, EntityStore, Predicate

logger = logging.getLogger(__name__)


class JsonFileStore(EntityStore):
    """Persist each collection as a JSON list on disk."""

    def __init__(self, base_dir: Optional[str | Path] = None) -> None:
        super().__init__()
        if base_dir is None:
            self._base = Path.home() / ".civichub"
        else:
            self._base = Path(base_dir)
        self._base.mkdir(parents=True, exist_ok=True)
        self._mutex = threading.RLock()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _path(self, collection: Collection) -> Path:
        return self._base / f"{collection.value}.json"

    def _read_json(self, path: Path) -> list[dict]:
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text())
        except (json.JSONDecodeError, OSError) as exc:
            logger.error("Unreadable store file %s", path)
            raise StoreError(f"Failed to read {path.name}") from exc
        if not isinstance(data, list):
            logger.error("Store file %s does not hold a list", path)
            raise StoreError(f"Corrupt store file {path.name}")
        return data

    def _write_json(self, path: Path, data: list[dict]) -> None:
        # Temp file + rename: the collection file is always a complete list.
        tmp = path.with_name(f".{path.name}.{os.getpid()}.tmp")
        try:
            tmp.write_text(json.dumps(data, indent=2, default=str))
            os.replace(tmp, path)
        except OSError as exc:
            tmp.unlink(missing_ok=True)
            raise StoreError(f"Failed to write {path.name}") from exc

    # ------------------------------------------------------------------
    # EntityStore
    # ------------------------------------------------------------------

    def get(self, collection: Collection, record_id: str) -> Optional[dict]:
        with self._mutex:
            for r in self._read_json(self._path(collection)):
                if r.get("id") == record_id:
                    return r
        return None

    def put(self, collection: Collection, record: dict) -> dict:
        if not record.get("id"):
            raise ValidationError("Record id is required")
        path = self._path(collection)
        with self._mutex:
            records = self._read_json(path)
            # A replaced record keeps its original position.
            for i, r in enumerate(records):
                if r.get("id") == record["id"]:
                    records[i] = record
                    break
            else:
                records.append(record)
            self._write_json(path, records)
        return dict(record)

    def delete(self, collection: Collection, record_id: str) -> bool:
        path = self._path(collection)
        with self._mutex:
            records = self._read_json(path)
            remaining = [r for r in records if r.get("id") != record_id]
            if len(remaining) < len(records):
                self._write_json(path, remaining)
                return True
        return False

    def list_where(
        self, collection: Collection, predicate: Optional[Predicate] = None
    ) -> list[dict]:
        with self._mutex:
            records = self._read_json(self._path(collection))
        return [r for r in records if predicate is None or predicate(r)]

    def update_if(
        self,
        collection: Collection,
        record_id: str,
        expected: dict[str, Any],
        changes: dict[str, Any],
    ) -> Optional[dict]:
        path = self._path(collection)
        with self._mutex:
            records = self._read_json(path)
            for r in records:
                if r.get("id") == record_id:
                    if not self._matches(r, expected):
                        return None
                    r.update(changes)
                    self._write_json(path, records)
                    return r
        return None
