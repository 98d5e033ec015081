"""Entity store -- key-value persistence for every CivicHub collection.

Two backends share one interface:
- ``MemoryStore``: process-local dicts (default and fallback)
- ``JsonFileStore``: one JSON file per collection under a data directory
"""

from civichub.store.base import Collection, EntityStore
from civichub.store.json_store import JsonFileStore
from civichub.store.memory import MemoryStore

__all__ = ["Collection", "EntityStore", "JsonFileStore", "MemoryStore", "open_store"]


def open_store(backend: str, data_dir=None) -> EntityStore:
    """Build the store named by *backend* (``memory`` or ``json``)."""
    if backend == "json":
        return JsonFileStore(data_dir)
    return MemoryStore()
