"""Indexed view over a dataset's flat file listing."""

import logging
import re
from collections.abc import Iterable
from typing import Any, Optional

from ..models.files import FileRecord
from .paths import normalize_slashes

logger = logging.getLogger(__name__)

_DOT_PREFIX = re.compile(r"^\./+")


class CatalogIndex:
    """
    Read-only lookup structures over a set of FileRecords.

    Exact and lower-cased path maps keep the last record written for a
    path. The basename multimap keeps every record in insertion order.
    Build a new index when the file list changes; never mutate one.
    """

    def __init__(
        self,
        records: list[FileRecord],
        by_path: dict[str, FileRecord],
        by_path_lower: dict[str, FileRecord],
        by_name: dict[str, list[FileRecord]],
    ) -> None:
        self._records = tuple(records)
        self._by_path = by_path
        self._by_path_lower = by_path_lower
        self._by_name = by_name

    @property
    def records(self) -> tuple[FileRecord, ...]:
        """All indexed records in listing order."""
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def get_exact(self, path: str) -> Optional[FileRecord]:
        return self._by_path.get(path)

    def get_case_insensitive(self, path: str) -> Optional[FileRecord]:
        return self._by_path_lower.get(path.lower())

    def get_by_name(self, name: str) -> list[FileRecord]:
        return list(self._by_name.get(name.lower(), ()))


def build_catalog(files: Iterable[Any]) -> CatalogIndex:
    """
    Index a flat file listing.

    Entries lacking an id or a label are skipped silently.

    Args:
        files: Raw listing entries or FileRecords

    Returns:
        CatalogIndex over the accepted records
    """
    records: list[FileRecord] = []
    by_path: dict[str, FileRecord] = {}
    by_path_lower: dict[str, FileRecord] = {}
    by_name: dict[str, list[FileRecord]] = {}

    for entry in files or ():
        record = FileRecord.from_listing(entry)
        if record is None:
            logger.debug("Skipping listing entry without id or label: %r", entry)
            continue

        path = record.path
        if not path:
            continue

        records.append(record)
        by_path[path] = record
        by_path_lower[path.lower()] = record

        name_key = normalize_slashes(record.label).strip().lower()
        if name_key:
            by_name.setdefault(name_key, []).append(record)

    return CatalogIndex(records, by_path, by_path_lower, by_name)


def lookup(
    index: CatalogIndex,
    path: Optional[str],
    preferred_directory: Optional[str] = None,
) -> Optional[FileRecord]:
    """
    Find a cataloged file by path, falling back through looser matches.

    Order: exact path, path without one leading slash, case-insensitive
    path, case-insensitive without leading slash, then basename only.
    Basename candidates are narrowed to an exact ``preferred_directory``
    match when given, else the first inserted candidate wins.
    """
    if not path:
        return None
    normalized = normalize_slashes(path).strip()
    if not normalized:
        return None
    normalized = _DOT_PREFIX.sub("", normalized)

    trimmed = normalized[1:] if normalized.startswith("/") else normalized

    for candidate in (
        index.get_exact(normalized),
        index.get_exact(trimmed),
        index.get_case_insensitive(normalized),
        index.get_case_insensitive(trimmed),
    ):
        if candidate is not None:
            return candidate

    filename = normalized.split("/")[-1]
    if not filename:
        return None
    candidates = index.get_by_name(filename)
    if not candidates:
        logger.debug("No catalog match for %s", path)
        return None

    preferred = normalize_slashes(preferred_directory).strip() if preferred_directory else ""
    if preferred:
        for record in candidates:
            if normalize_slashes(record.directory_label).strip() == preferred:
                return record
    return candidates[0]
