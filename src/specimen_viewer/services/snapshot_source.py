"""Dataset source backed by local JSON snapshots instead of HTTP."""

import logging
from pathlib import Path
from typing import Union

from shared.data_loaders import (
    get_available_datasets,
    load_dataset_detail,
    load_file_text,
    snapshot_persistent_id,
)

from ..config import DEFAULT_API_ROOT
from ..errors import DatasetNotFoundError

logger = logging.getLogger(__name__)


class SnapshotSource:
    """Serves dataset details and file contents from a data directory."""

    def __init__(self, data_dir: Path, api_root: str = DEFAULT_API_ROOT) -> None:
        self.data_dir = Path(data_dir)
        self.api_root = api_root.rstrip("/")
        self._names: dict[str, str] = {}

    def _index(self) -> dict[str, str]:
        names = {}
        for name in get_available_datasets(self.data_dir):
            detail = load_dataset_detail(self.data_dir, name)
            names[snapshot_persistent_id(detail, name)] = name
        self._names = names
        return names

    def list_dataset_refs(self) -> list[dict[str, str]]:
        refs = [
            {"identifier": name, "persistentId": persistent_id}
            for persistent_id, name in self._index().items()
        ]
        logger.info("Found %d dataset snapshots in %s", len(refs), self.data_dir)
        return refs

    def fetch_dataset_detail(self, persistent_id: str) -> dict:
        name = self._names.get(persistent_id) or self._index().get(persistent_id)
        detail = load_dataset_detail(self.data_dir, name) if name else None
        if detail is None:
            raise DatasetNotFoundError(f"No snapshot for dataset {persistent_id}")
        return detail

    def datafile_url(self, file_id: Union[int, str]) -> str:
        return f"{self.api_root}/access/datafile/{file_id}?format=original"

    def fetch_text(self, url: str) -> str:
        """Read a data file by the id embedded in its download URL."""
        file_id = url.split("/access/datafile/")[-1].split("?")[0]
        text = load_file_text(self.data_dir, file_id)
        if text is None:
            raise DatasetNotFoundError(f"No snapshot for data file {file_id}")
        return text
