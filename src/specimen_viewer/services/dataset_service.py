"""Orchestrates fetching, preparing and caching datasets for the API."""

import logging
from typing import Any, Optional, Protocol, Union

from ..core.catalog import build_catalog
from ..core.grouping import group_models, sort_key
from ..core.materials import extract_mtllib_references, parse_mtl
from ..core.metadata import (
    extract_title,
    get_dataset_files,
    get_metadata_blocks,
    normalize_metadata_blocks,
)
from ..core.model_source import ModelSource
from ..core.specimen import extract_specimen_summary, format_specimen_label
from ..errors import DatasetNotFoundError, DataverseRequestError, ModelNotFoundError
from ..models.dataset_cache import DatasetCache, DatasetEntry
from ..models.files import ModelBundle
from ..models.metadata import MetadataSection, SpecimenSummary
from .external_links import build_external_links

logger = logging.getLogger(__name__)


class DatasetSource(Protocol):
    """Where dataset listings, details and file contents come from."""

    def list_dataset_refs(self) -> list[dict[str, str]]: ...

    def fetch_dataset_detail(self, persistent_id: str) -> dict: ...

    def fetch_text(self, url: str) -> str: ...

    def datafile_url(self, file_id: Union[int, str]) -> str: ...


class DatasetService:
    """Builds and memoises per-dataset structures on top of a DatasetSource."""

    def __init__(self, source: DatasetSource, cache: Optional[DatasetCache] = None) -> None:
        self.source = source
        self.cache = cache or DatasetCache()

    def list_datasets(self, force: bool = False) -> list[dict[str, Any]]:
        """
        List datasets with their titles and specimen labels.

        A dataset whose detail cannot be fetched is still listed under
        its identifier.

        Args:
            force: Clear the cache before listing
        """
        if force:
            self.cache.invalidate()

        infos = []
        for ref in self.source.list_dataset_refs():
            persistent_id = ref["persistentId"]
            identifier = ref.get("identifier") or persistent_id

            try:
                detail = self.source.fetch_dataset_detail(persistent_id)
            except (DataverseRequestError, DatasetNotFoundError) as e:
                logger.warning("Failed to fetch dataset details for %s: %s", persistent_id, e)
                entry = self.cache.get(persistent_id) or self.cache.put(
                    DatasetEntry(persistent_id, identifier=identifier)
                )
            else:
                # Requests already holding the previous entry keep using it
                entry = self.cache.put(
                    DatasetEntry(
                        persistent_id,
                        identifier=identifier,
                        title=extract_title(detail),
                        detail=detail,
                        files=get_dataset_files(detail),
                    )
                )

            label = entry.title or identifier
            summary = self._summary_for(entry)
            infos.append(
                {
                    "label": label,
                    "value": persistent_id,
                    "identifier": identifier,
                    "specimenLabel": format_specimen_label(label, summary),
                    "summary": summary.model_dump(by_alias=True) if summary else None,
                }
            )

        infos.sort(key=lambda info: sort_key(info["label"]))
        return infos

    def _build(self, persistent_id: str, entry: Optional[DatasetEntry]) -> DatasetEntry:
        identifier = entry.identifier if entry else None
        detail = entry.detail if entry else None
        if detail is None:
            detail = self.source.fetch_dataset_detail(persistent_id)

        files = get_dataset_files(detail)
        catalog = build_catalog(files)
        models = group_models(catalog)
        logger.info(
            "Prepared %s: %d files, %d models", persistent_id, len(catalog), len(models)
        )
        return DatasetEntry(
            persistent_id,
            identifier=identifier,
            title=extract_title(detail) or identifier or persistent_id,
            detail=detail,
            files=files,
            catalog=catalog,
            models=models,
        )

    def prepare(self, persistent_id: str) -> DatasetEntry:
        """Return the cached entry for a dataset, fetching and indexing it once."""
        if not persistent_id:
            raise ValueError("A dataset persistentId is required")
        return self.cache.get_or_prepare(
            persistent_id, lambda entry: self._build(persistent_id, entry)
        )

    def invalidate(self, persistent_id: Optional[str] = None) -> int:
        return self.cache.invalidate(persistent_id)

    def list_models(self, persistent_id: str) -> list[ModelBundle]:
        return list(self.prepare(persistent_id).models or [])

    @staticmethod
    def _find_model(entry: DatasetEntry, model_key: str) -> ModelBundle:
        model = (entry.model_map or {}).get(model_key)
        if model is None:
            raise ModelNotFoundError(
                f"Model {model_key} not found in dataset {entry.persistent_id}"
            )
        return model

    def get_model(self, persistent_id: str, model_key: str) -> ModelBundle:
        return self._find_model(self.prepare(persistent_id), model_key)

    def get_metadata_sections(self, persistent_id: str) -> list[MetadataSection]:
        entry = self.prepare(persistent_id)
        if entry.metadata_sections is None:
            entry.metadata_sections = normalize_metadata_blocks(entry.detail)
        return entry.metadata_sections

    def _summary_for(self, entry: DatasetEntry) -> Optional[SpecimenSummary]:
        if not entry.summary_ready:
            entry.summary = extract_specimen_summary(get_metadata_blocks(entry.detail))
            entry.summary_ready = True
        return entry.summary

    def get_specimen_summary(self, persistent_id: str) -> Optional[SpecimenSummary]:
        return self._summary_for(self.prepare(persistent_id))

    def create_model_source(self, persistent_id: str, model_key: str) -> ModelSource:
        entry = self.prepare(persistent_id)
        model = self._find_model(entry, model_key)
        return ModelSource(persistent_id, model, entry.catalog, self.source.datafile_url)

    def texture_manifest(self, persistent_id: str, model_key: str) -> dict[str, Any]:
        """
        Read the model's ``mtllib`` statement and resolve every texture it needs.

        The OBJ's first material library reference wins; without one, or
        when it cannot be resolved, the paired MTL is used. Models without
        any material library yield an empty manifest.
        """
        source = self.create_model_source(persistent_id, model_key)
        references = extract_mtllib_references(self.source.fetch_text(source.obj_url))
        library = source.resolve_material_library(references[0] if references else None)
        if library is None:
            return {
                "materialLibrary": None,
                "mtllib": references,
                "materials": [],
                "textures": [],
            }

        materials = parse_mtl(self.source.fetch_text(library.url))
        textures = source.texture_requirements(materials, library)
        return {
            "materialLibrary": library.model_dump(by_alias=True),
            "mtllib": references,
            "materials": [m.model_dump(by_alias=True) for m in materials.values()],
            "textures": [t.model_dump(by_alias=True) for t in textures],
        }

    def external_links(
        self, persistent_id: str, model_key: Optional[str] = None
    ) -> dict[str, Optional[str]]:
        entry = self.prepare(persistent_id)
        bundle = self._find_model(entry, model_key) if model_key else None
        return build_external_links(entry.detail, bundle)
