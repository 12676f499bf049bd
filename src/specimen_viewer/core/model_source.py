"""Describe how to load one model bundle: OBJ, material library and textures."""

import logging
from collections.abc import Callable
from typing import Optional, Union
from urllib.parse import urljoin

from ..models.files import FileRecord, ModelBundle
from ..models.materials import (
    MaterialDefinition,
    MaterialLibraryReference,
    TextureReference,
    TextureRequirement,
)
from .catalog import CatalogIndex, lookup
from .paths import derive_directory, is_absolute_url, normalize_slashes, resolve_relative

logger = logging.getLogger(__name__)

FileUrlBuilder = Callable[[Union[int, str]], str]

# (kind, MaterialDefinition attribute)
TEXTURE_SLOTS = (
    ("diffuse", "map_kd"),
    ("normal", "map_normal"),
    ("roughness", "map_roughness"),
    ("ao", "map_ao"),
)


class ModelSource:
    """Resolves the files a renderer needs for a single ModelBundle."""

    def __init__(
        self,
        dataset_id: str,
        bundle: ModelBundle,
        catalog: CatalogIndex,
        file_url: FileUrlBuilder,
    ) -> None:
        self.dataset_id = dataset_id
        self.bundle = bundle
        self.catalog = catalog
        self.file_url = file_url

        self.obj_directory = normalize_slashes(bundle.geometry.directory or bundle.directory)
        material = bundle.material
        self.default_mtl_directory = normalize_slashes(
            (material.directory if material else "")
            or bundle.geometry.directory
            or bundle.directory
        )
        self.obj_url = file_url(bundle.geometry.file_id)
        self.default_material_library = (
            MaterialLibraryReference(
                url=file_url(material.file_id),
                texture_base_dir=self.default_mtl_directory,
            )
            if material
            else None
        )

    @property
    def preferred_texture_directory(self) -> str:
        return self.default_mtl_directory or self.obj_directory

    def _file_reference(self, record: FileRecord) -> TextureReference:
        return TextureReference(
            url=self.file_url(record.file_id),
            cache_key=f"dataset:{self.dataset_id}:file:{record.file_id}",
        )

    def _resolve_library(
        self, reference: Optional[str], obj_directory: Optional[str]
    ) -> Optional[MaterialLibraryReference]:
        if not reference:
            return None
        if is_absolute_url(reference):
            url = reference.strip()
            return MaterialLibraryReference(url=url, texture_base_dir=derive_directory(url))

        base_dir = normalize_slashes(obj_directory or self.obj_directory)
        resolved = resolve_relative(base_dir, reference)
        record = lookup(self.catalog, resolved, base_dir)
        if record is None:
            return None
        return MaterialLibraryReference(
            url=self.file_url(record.file_id),
            texture_base_dir=normalize_slashes(record.directory_label),
        )

    def resolve_material_library(
        self, reference: Optional[str], obj_directory: Optional[str] = None
    ) -> Optional[MaterialLibraryReference]:
        """Resolve an OBJ ``mtllib`` reference, falling back to the paired MTL."""
        resolved = self._resolve_library(reference, obj_directory)
        if resolved is None:
            logger.debug("mtllib %r unresolved, using default library", reference)
            return self.default_material_library
        return resolved

    def resolve_texture_path(
        self, relative_path: Optional[str], texture_base_dir: Optional[str] = None
    ) -> Optional[TextureReference]:
        """
        Resolve a texture path found in a material library.

        Absolute URLs pass through; a URL base directory is joined as a URL;
        anything else is resolved inside the dataset and looked up in the
        catalog with the base directory preferred.
        """
        if not relative_path or not relative_path.strip():
            return None
        if is_absolute_url(relative_path):
            url = relative_path.strip()
            return TextureReference(url=url, cache_key=f"url:{url}")

        base_raw = texture_base_dir or self.default_mtl_directory or self.obj_directory
        if is_absolute_url(base_raw):
            absolute = urljoin(base_raw, relative_path.strip())
            return TextureReference(url=absolute, cache_key=f"url:{absolute}")

        base_dir = normalize_slashes(base_raw)
        resolved = resolve_relative(base_dir, relative_path)
        if not resolved:
            return None
        if is_absolute_url(resolved):
            return TextureReference(url=resolved, cache_key=f"url:{resolved}")

        record = lookup(self.catalog, resolved, base_dir)
        if record is None:
            logger.debug("Texture %r not found in dataset %s", relative_path, self.dataset_id)
            return None
        return self._file_reference(record)

    def texture_requirements(
        self,
        materials: dict[str, MaterialDefinition],
        library: Optional[MaterialLibraryReference] = None,
    ) -> list[TextureRequirement]:
        """List the distinct textures the given materials reference."""
        library = library or self.default_material_library
        base_dir = library.texture_base_dir if library else None

        needed: dict[str, TextureRequirement] = {}
        for definition in materials.values():
            for kind, attribute in TEXTURE_SLOTS:
                spec = getattr(definition, attribute)
                if spec is None or not spec.path:
                    continue
                resolved = self.resolve_texture_path(spec.path, base_dir)
                if resolved is None or resolved.cache_key in needed:
                    continue
                needed[resolved.cache_key] = TextureRequirement(
                    cache_key=resolved.cache_key,
                    url=resolved.url,
                    kind=kind,
                    color_space="srgb" if kind == "diffuse" else "linear",
                )
        return list(needed.values())

    def describe(self) -> dict:
        """JSON-ready descriptor for the renderer."""
        library = self.default_material_library
        return {
            "datasetId": self.dataset_id,
            "modelKey": self.bundle.key,
            "displayName": self.bundle.display_name,
            "objUrl": self.obj_url,
            "objDirectory": self.obj_directory,
            "defaultMaterialLibrary": library.model_dump(by_alias=True) if library else None,
            "preferredTextureDirectory": self.preferred_texture_directory,
            "lateralityTag": self.bundle.laterality_tag.value
            if self.bundle.laterality_tag
            else None,
        }
