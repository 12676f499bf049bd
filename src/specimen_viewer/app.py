#!/usr/bin/env python3
"""
Dataverse Specimen Viewer API
FastAPI application that indexes repository datasets into loadable 3D specimen models
"""

import argparse
import logging
from typing import Optional

from fastapi import FastAPI

from shared.fastapi_utils import (
    add_cors_middleware,
    create_app,
    find_available_port,
    get_data_dir,
    run_server,
)

from . import __version__
from .config import ViewerSettings, load_settings
from .logging_config import setup_logging
from .routes import api_router
from .services.dataset_service import DatasetService, DatasetSource
from .services.dataverse_client import DataverseClient
from .services.snapshot_source import SnapshotSource

logger = logging.getLogger(__name__)


def build_source(settings: ViewerSettings) -> DatasetSource:
    """Pick the local snapshot source in offline mode, the HTTP client otherwise."""
    if settings.offline:
        data_dir = settings.data_dir or get_data_dir(__file__)
        logger.info("Serving dataset snapshots from %s", data_dir)
        return SnapshotSource(data_dir, settings.api_root)
    return DataverseClient(
        settings.api_root, settings.dataverse_id, timeout=settings.request_timeout
    )


def create_viewer_app(
    settings: Optional[ViewerSettings] = None,
    source: Optional[DatasetSource] = None,
) -> FastAPI:
    """
    Create the API application.

    Args:
        settings: Runtime settings (default: loaded from the environment)
        source: Dataset source to use instead of the one settings select

    Returns:
        Configured FastAPI application
    """
    settings = settings or load_settings()
    app = create_app(
        title="Dataverse Specimen Viewer",
        description="Browse repository datasets as loadable 3D specimen models",
        version=__version__,
    )
    add_cors_middleware(app)

    app.state.settings = settings
    app.state.dataset_service = DatasetService(source or build_source(settings))
    app.include_router(api_router)

    @app.get("/api/health")
    async def health():
        """Report liveness and how many datasets are cached."""
        return {
            "status": "ok",
            "version": __version__,
            "offline": settings.offline,
            "cachedDatasets": len(app.state.dataset_service.cache.entries()),
        }

    return app


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Dataverse specimen viewer API server")
    parser.add_argument("--host", default=None, help="Host address to bind to")
    parser.add_argument(
        "--port", type=int, default=None, help="Port to listen on (0 picks a free one)"
    )
    parser.add_argument("--api-root", default=None, help="Repository API root URL")
    parser.add_argument("--dataverse-id", default=None, help="Collection to list")
    parser.add_argument("--data-dir", default=None, help="Snapshot directory for --offline")
    parser.add_argument(
        "--offline",
        action="store_true",
        default=None,
        help="Serve local snapshots instead of calling the repository",
    )
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the specimen viewer API server."""
    args = parse_args(argv)
    settings = load_settings(
        host=args.host,
        port=args.port,
        api_root=args.api_root,
        dataverse_id=args.dataverse_id,
        data_dir=args.data_dir,
        offline=args.offline,
        log_level=args.log_level,
    )
    setup_logging(settings.log_level, args.log_file)

    app = create_viewer_app(settings)
    port = settings.port or find_available_port(8000)
    run_server(
        app,
        host=settings.host,
        port=port,
        app_name="Dataverse Specimen Viewer",
        features=[
            "List repository datasets with specimen labels",
            "Group OBJ/MTL files into model bundles",
            "Resolve material libraries and textures",
            "Normalise metadata blocks for display",
        ],
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
