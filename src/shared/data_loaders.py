"""
Data loading utilities for local dataset snapshots.

A snapshot directory mirrors what the repository API returns:
``datasets/<name>.json`` holds a dataset detail payload and
``files/<fileId>`` holds the original bytes of a data file.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


def get_available_datasets(data_dir: Path) -> list[str]:
    """
    Discover dataset snapshots in the datasets directory.

    Args:
        data_dir: Path to the data directory

    Returns:
        Sorted list of snapshot names (file stems)
    """
    datasets_dir = data_dir / "datasets"
    if not datasets_dir.exists():
        return []
    return sorted(path.stem for path in datasets_dir.glob("*.json"))


def load_dataset_detail(data_dir: Path, name: str) -> Optional[dict[str, Any]]:
    """
    Load a dataset detail snapshot.

    Args:
        data_dir: Path to the data directory
        name: Snapshot name

    Returns:
        Detail payload or None if not found
    """
    detail_file = data_dir / "datasets" / f"{name}.json"
    if not detail_file.exists():
        return None

    with open(detail_file, "r", encoding="utf-8") as f:
        return json.load(f)


def load_file_text(data_dir: Path, file_id: Union[int, str]) -> Optional[str]:
    """
    Load the text content of a data file snapshot.

    Args:
        data_dir: Path to the data directory
        file_id: Repository file id

    Returns:
        File content or None if not found
    """
    data_file = data_dir / "files" / str(file_id)
    if not data_file.exists():
        logger.debug("No snapshot for file %s", file_id)
        return None
    return data_file.read_text(encoding="utf-8", errors="replace")


def snapshot_persistent_id(detail: Optional[dict[str, Any]], fallback: str) -> str:
    """
    Read the persistent identifier recorded in a detail payload.

    Falls back to the snapshot name when the payload does not carry
    ``protocol``/``authority``/``identifier``.
    """
    data = (detail or {}).get("data")
    if not isinstance(data, dict):
        return fallback
    protocol = data.get("protocol")
    authority = data.get("authority")
    identifier = data.get("identifier")
    if protocol and authority and identifier:
        return f"{protocol}:{authority}/{identifier}"
    return fallback
