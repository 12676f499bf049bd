"""Helpers shared by the API route modules."""

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from fastapi import HTTPException, Request
from fastapi.concurrency import run_in_threadpool

from ..errors import DatasetNotFoundError, DataverseRequestError, ModelNotFoundError
from ..services.dataset_service import DatasetService

logger = logging.getLogger(__name__)

T = TypeVar("T")


def get_dataset_service(request: Request) -> DatasetService:
    """Return the DatasetService attached to the running application."""
    return request.app.state.dataset_service


async def call_service(func: Callable[..., T], *args: Any) -> T:
    """
    Run a blocking service call off the event loop and map its errors.

    Raises:
        HTTPException: 404 for unknown datasets or models, 400 for bad
            input, 502 when the repository fails, 500 otherwise
    """
    try:
        return await run_in_threadpool(func, *args)
    except HTTPException:
        raise
    except (DatasetNotFoundError, ModelNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DataverseRequestError as e:
        logger.error("Repository request failed: %s", e)
        raise HTTPException(status_code=502, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Unexpected error in %s", getattr(func, "__name__", func))
        raise HTTPException(status_code=500, detail=str(e))
