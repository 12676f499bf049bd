"""Model listing and model loading routes."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from ..services.dataset_service import DatasetService
from .dependencies import call_service, get_dataset_service

router = APIRouter(prefix="/api")


@router.get("/models")
async def list_models(
    persistent_id: str = Query(..., alias="persistentId"),
    service: DatasetService = Depends(get_dataset_service),
):
    """List the OBJ/MTL bundles of a dataset in display order."""
    models = await call_service(service.list_models, persistent_id)
    return JSONResponse(
        {
            "persistentId": persistent_id,
            "models": [model.model_dump(by_alias=True, mode="json") for model in models],
            "count": len(models),
        }
    )


@router.get("/model-source")
async def get_model_source(
    persistent_id: str = Query(..., alias="persistentId"),
    model_key: str = Query(..., alias="modelKey"),
    service: DatasetService = Depends(get_dataset_service),
):
    """Get the OBJ URL and default material library of one model."""
    source = await call_service(service.create_model_source, persistent_id, model_key)
    return JSONResponse(source.describe())


@router.get("/resolve-texture")
async def resolve_texture(
    persistent_id: str = Query(..., alias="persistentId"),
    model_key: str = Query(..., alias="modelKey"),
    path: str = Query(..., description="Texture path as written in the MTL"),
    texture_base_dir: Optional[str] = Query(None, alias="textureBaseDir"),
    service: DatasetService = Depends(get_dataset_service),
):
    """Resolve a texture path against a model's directories and the catalog."""
    source = await call_service(service.create_model_source, persistent_id, model_key)
    resolved = source.resolve_texture_path(path, texture_base_dir)
    if resolved is None:
        raise HTTPException(status_code=404, detail=f"Texture {path} not found")
    return JSONResponse(resolved.model_dump(by_alias=True))


@router.get("/textures")
async def get_textures(
    persistent_id: str = Query(..., alias="persistentId"),
    model_key: str = Query(..., alias="modelKey"),
    service: DatasetService = Depends(get_dataset_service),
):
    """Parse the model's material library and list every texture it needs."""
    manifest = await call_service(service.texture_manifest, persistent_id, model_key)
    return JSONResponse(manifest)


@router.get("/external-links")
async def get_external_links(
    persistent_id: str = Query(..., alias="persistentId"),
    model_key: Optional[str] = Query(None, alias="modelKey"),
    service: DatasetService = Depends(get_dataset_service),
):
    """Get repository, GBIF and UBERON links for a dataset or model."""
    links = await call_service(service.external_links, persistent_id, model_key)
    return JSONResponse(links)
