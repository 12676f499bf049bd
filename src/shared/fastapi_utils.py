"""
Bootstrap helpers for the specimen viewer API.

Builds the FastAPI application with its documentation under the API
prefix, opens it to viewer pages served from other origins, locates the
offline snapshot directory and starts uvicorn.
"""

import logging
import socket
from pathlib import Path
from typing import Optional, Sequence

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


def create_app(
    title: str,
    description: str,
    version: str = "1.0.0",
    api_prefix: str = API_PREFIX,
) -> FastAPI:
    """
    Create the FastAPI application.

    The OpenAPI schema and the interactive docs live under ``api_prefix``
    next to the endpoints, so a single reverse-proxy rule covers both.

    Args:
        title: Application title
        description: Application description
        version: Application version (default: "1.0.0")
        api_prefix: Path prefix shared by every endpoint

    Returns:
        FastAPI application with no routers attached yet
    """
    return FastAPI(
        title=title,
        description=description,
        version=version,
        docs_url=f"{api_prefix}/docs",
        redoc_url=None,
        openapi_url=f"{api_prefix}/openapi.json",
    )


def add_cors_middleware(app: FastAPI, allow_origins: Optional[Sequence[str]] = None) -> None:
    """
    Let browser viewers on other origins call the API.

    Requests carry no cookies, so credentials stay disabled and the
    wildcard origin is valid.

    Args:
        app: FastAPI application instance
        allow_origins: Origins to accept (default: any)
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(allow_origins or ["*"]),
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )


def get_data_dir(app_file: str) -> Path:
    """
    Default snapshot directory for offline mode.

    Snapshots sit in ``data/`` at the project root, two levels above the
    package that calls this, with ``datasets/`` and ``files/`` inside.

    Args:
        app_file: The __file__ of the calling module (typically app.py)
    """
    return Path(app_file).resolve().parent.parent.parent / "data"


def find_available_port(
    start_port: int = 8000, max_attempts: int = 100, host: str = "127.0.0.1"
) -> int:
    """
    Return the first port from ``start_port`` that can be bound on ``host``.

    Raises:
        RuntimeError: If every port in the range is taken
    """
    for port in range(start_port, start_port + max_attempts):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            try:
                sock.bind((host, port))
            except OSError:
                continue
            return port
    raise RuntimeError(
        f"Could not find available port in range {start_port}-{start_port + max_attempts - 1}"
    )


def run_server(
    app: FastAPI,
    host: str = "0.0.0.0",
    port: int = 8000,
    app_name: Optional[str] = None,
    features: Optional[list[str]] = None,
    log_level: str = "info",
) -> None:
    """
    Log where the API and its docs are reachable, then block in uvicorn.

    Args:
        app: FastAPI application instance
        host: Host address to bind to
        port: Port number to listen on
        app_name: Name to log instead of the app title
        features: Capabilities to list in the startup log
        log_level: Level name, passed on to uvicorn in lower case
    """
    logger.info("Starting %s %s", app_name or app.title, app.version)
    logger.info("API available at http://localhost:%d%s", port, API_PREFIX)
    if app.docs_url:
        logger.info("Docs available at http://localhost:%d%s", port, app.docs_url)

    for feature in features or []:
        logger.info("  - %s", feature)

    uvicorn.run(app, host=host, port=port, log_level=log_level.lower())
