"""Dataset listing, metadata and cache routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..services.dataset_service import DatasetService
from .dependencies import call_service, get_dataset_service

router = APIRouter(prefix="/api")


class InvalidateRequest(BaseModel):
    """Request model for clearing cached datasets."""

    model_config = ConfigDict(populate_by_name=True)

    persistent_id: Optional[str] = Field(default=None, alias="persistentId")


@router.get("/datasets")
async def list_datasets(
    force: bool = Query(False, description="Drop cached datasets before listing"),
    service: DatasetService = Depends(get_dataset_service),
):
    """List datasets in the collection, sorted by title."""
    datasets = await call_service(service.list_datasets, force)
    return JSONResponse({"datasets": datasets, "count": len(datasets)})


@router.get("/metadata")
async def get_metadata(
    persistent_id: str = Query(..., alias="persistentId"),
    service: DatasetService = Depends(get_dataset_service),
):
    """Get the display-ready metadata sections of a dataset."""
    sections = await call_service(service.get_metadata_sections, persistent_id)
    return JSONResponse(
        {
            "persistentId": persistent_id,
            "sections": [section.model_dump(by_alias=True) for section in sections],
        }
    )


@router.get("/specimen-summary")
async def get_specimen_summary(
    persistent_id: str = Query(..., alias="persistentId"),
    service: DatasetService = Depends(get_dataset_service),
):
    """Get the sex, life stage, age class and identifiers of a specimen."""
    summary = await call_service(service.get_specimen_summary, persistent_id)
    return JSONResponse(
        {
            "persistentId": persistent_id,
            "summary": summary.model_dump(by_alias=True) if summary else None,
        }
    )


@router.post("/cache/invalidate")
async def invalidate_cache(
    request: Optional[InvalidateRequest] = None,
    service: DatasetService = Depends(get_dataset_service),
):
    """Drop one cached dataset, or all of them when no id is given."""
    persistent_id = request.persistent_id if request else None
    removed = await call_service(service.invalidate, persistent_id)
    return JSONResponse({"success": True, "removed": removed})
