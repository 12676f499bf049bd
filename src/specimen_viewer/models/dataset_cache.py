"""Per-dataset cache of fetched details and the structures built from them."""

import threading
from collections.abc import Callable
from typing import Any, Optional


class DatasetEntry:
    """Cached state for one dataset, keyed by persistent identifier.

    Entries visible in a cache are replaced, never reset: a fresh detail
    means a fresh entry.
    """

    def __init__(
        self,
        persistent_id: str,
        identifier: Optional[str] = None,
        title: Optional[str] = None,
        detail: Optional[dict] = None,
        files: Optional[list] = None,
        catalog: Optional[Any] = None,
        models: Optional[list] = None,
    ) -> None:
        self.persistent_id = persistent_id
        self.identifier = identifier
        self.title = title
        self.detail = detail
        self.files: list = files or []

        self.catalog = catalog
        self.models = models
        self.model_map: Optional[dict] = (
            {model.key: model for model in models} if models is not None else None
        )

        # Memoised on first use; recomputing gives the same result
        self.metadata_sections: Optional[list] = None
        self.summary: Optional[Any] = None
        self.summary_ready: bool = False

    def is_prepared(self) -> bool:
        return (
            self.catalog is not None
            and self.models is not None
            and self.model_map is not None
        )


class DatasetCache:
    """Explicit cache of DatasetEntry objects with per-dataset build locks."""

    def __init__(self) -> None:
        self._entries: dict[str, DatasetEntry] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def get(self, persistent_id: str) -> Optional[DatasetEntry]:
        return self._entries.get(persistent_id)

    def put(self, entry: DatasetEntry) -> DatasetEntry:
        """Swap in an entry, waiting for any preparation of the same dataset."""
        with self._lock_for(entry.persistent_id):
            self._entries[entry.persistent_id] = entry
        return entry

    def entries(self) -> list[DatasetEntry]:
        return list(self._entries.values())

    def invalidate(self, persistent_id: Optional[str] = None) -> int:
        """Drop one dataset, or every dataset when no id is given.

        Returns the number of entries removed.
        """
        with self._guard:
            if persistent_id is None:
                removed = len(self._entries)
                self._entries.clear()
                self._locks.clear()
                return removed
            self._locks.pop(persistent_id, None)
            return 1 if self._entries.pop(persistent_id, None) is not None else 0

    def _lock_for(self, persistent_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(persistent_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[persistent_id] = lock
            return lock

    def get_or_prepare(
        self,
        persistent_id: str,
        build: Callable[[Optional[DatasetEntry]], DatasetEntry],
    ) -> DatasetEntry:
        """
        Return a prepared entry, building it at most once at a time per dataset.

        ``build`` receives the existing (possibly partial) entry or None and
        must return a new prepared entry. Requests for different datasets
        never wait on each other.
        """
        entry = self._entries.get(persistent_id)
        if entry is not None and entry.is_prepared():
            return entry

        with self._lock_for(persistent_id):
            entry = self._entries.get(persistent_id)
            if entry is not None and entry.is_prepared():
                return entry
            entry = build(entry)
            self._entries[persistent_id] = entry
            return entry
