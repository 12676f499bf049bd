"""Dataset sources and the service that prepares datasets for the API."""

from .dataset_service import DatasetService, DatasetSource
from .dataverse_client import DataverseClient
from .external_links import (
    build_external_links,
    derive_gbif_url,
    derive_uberon_url,
    extract_uberon_code,
)
from .snapshot_source import SnapshotSource

__all__ = [
    "DatasetService",
    "DatasetSource",
    "DataverseClient",
    "SnapshotSource",
    "build_external_links",
    "derive_gbif_url",
    "derive_uberon_url",
    "extract_uberon_code",
]
