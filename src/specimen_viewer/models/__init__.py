"""Data models for the specimen viewer."""

from .files import FileRecord, ModelBundle
from .metadata import MetadataNode, MetadataSection, SpecimenSummary
from .materials import (
    MaterialDefinition,
    MaterialLibraryReference,
    TextureMapSpec,
    TextureReference,
    TextureRequirement,
)
from .dataset_cache import DatasetCache, DatasetEntry

__all__ = [
    "FileRecord",
    "ModelBundle",
    "MetadataNode",
    "MetadataSection",
    "SpecimenSummary",
    "MaterialDefinition",
    "MaterialLibraryReference",
    "TextureMapSpec",
    "TextureReference",
    "TextureRequirement",
    "DatasetCache",
    "DatasetEntry",
]
