"""Route modules for the specimen viewer API."""

from fastapi import APIRouter

from .datasets import router as datasets_router
from .models import router as models_router

api_router = APIRouter()
api_router.include_router(datasets_router)
api_router.include_router(models_router)

__all__ = ["api_router", "datasets_router", "models_router"]
