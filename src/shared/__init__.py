"""
Shared modules for the specimen viewer.

This package contains FastAPI bootstrap helpers and loaders for local
dataset snapshots.
"""

from .fastapi_utils import (
    create_app,
    add_cors_middleware,
    get_data_dir,
    find_available_port,
    run_server,
)
from .data_loaders import (
    get_available_datasets,
    load_dataset_detail,
    load_file_text,
    snapshot_persistent_id,
)

__all__ = [
    # FastAPI utilities
    "create_app",
    "add_cors_middleware",
    "get_data_dir",
    "find_available_port",
    "run_server",
    # Snapshot loaders
    "get_available_datasets",
    "load_dataset_detail",
    "load_file_text",
    "snapshot_persistent_id",
]
