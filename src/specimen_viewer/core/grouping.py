"""Group a flat file listing into geometry + material model bundles."""

import logging
import re
import unicodedata
from typing import Optional

from ..models.files import FileRecord, ModelBundle
from .catalog import CatalogIndex
from .laterality import infer_laterality

logger = logging.getLogger(__name__)

GEOMETRY_EXTENSION = "obj"
MATERIAL_EXTENSION = "mtl"

_GEOMETRY_SUFFIX = re.compile(rf"\.{GEOMETRY_EXTENSION}$", re.IGNORECASE)


def specificity(record: FileRecord) -> int:
    """Rank geometry candidates: deeper and longer-named files score higher."""
    return len(record.directory_parts) * 10 + len(record.base_trim)


def group_key(record: FileRecord) -> tuple[str, str]:
    """
    Return ``(key, display_name)`` for the candidate group of a file.

    Files share a group when they share their first directory segment;
    files at the dataset root are grouped by trimmed basename.
    """
    parts = record.directory_parts
    if parts:
        top_name = parts[0]
    else:
        top_name = record.base_trim or record.base or record.label
    display_name = top_name.strip() or top_name or record.base_trim or record.base
    return top_name.strip().lower(), display_name


def sort_key(text: str) -> str:
    """Case- and accent-insensitive ordering key."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return stripped.casefold()


class _CandidateGroup:
    def __init__(self, key: str, display_name: str) -> None:
        self.key = key
        self.display_name = display_name
        self.geometry: Optional[FileRecord] = None
        self.specificity = -1

    def offer(self, record: FileRecord) -> None:
        # Strictly greater: the first inserted candidate keeps ties
        score = specificity(record)
        if score > self.specificity:
            self.geometry = record
            self.specificity = score


class MaterialIndex:
    """Material files bucketed by directory and basename variants."""

    def __init__(self) -> None:
        self.by_dir_base: dict[tuple[str, str], list[FileRecord]] = {}
        self.by_dir_base_trim: dict[tuple[str, str], list[FileRecord]] = {}
        self.by_base: dict[str, list[FileRecord]] = {}
        self.by_base_trim: dict[str, list[FileRecord]] = {}

    def add(self, record: FileRecord) -> None:
        directory = record.directory
        self.by_dir_base.setdefault((directory, record.base_lower), []).append(record)
        self.by_dir_base_trim.setdefault(
            (directory, record.base_trim_lower), []
        ).append(record)
        if record.base_lower:
            self.by_base.setdefault(record.base_lower, []).append(record)
        if record.base_trim_lower:
            self.by_base_trim.setdefault(record.base_trim_lower, []).append(record)


def pick_mate(
    candidates: Optional[list[FileRecord]], preferred_directory: str
) -> Optional[FileRecord]:
    """Prefer the candidate in ``preferred_directory``, else the first inserted."""
    if not candidates:
        return None
    if preferred_directory:
        for record in candidates:
            if record.directory == preferred_directory:
                return record
    return candidates[0]


def find_material_mate(
    geometry: FileRecord, catalog: CatalogIndex, materials: MaterialIndex
) -> Optional[FileRecord]:
    """
    Find the material file paired with a geometry file.

    Tries the same path with the extension swapped, then same-directory
    basename matches, then basename matches anywhere in the dataset.
    """
    expected_path = _GEOMETRY_SUFFIX.sub(f".{MATERIAL_EXTENSION}", geometry.path)
    if expected_path != geometry.path:
        direct = catalog.get_exact(expected_path) or catalog.get_case_insensitive(
            expected_path
        )
        if direct is not None:
            return direct

    directory = geometry.directory
    return (
        pick_mate(materials.by_dir_base.get((directory, geometry.base_lower)), directory)
        or pick_mate(
            materials.by_dir_base_trim.get((directory, geometry.base_trim_lower)),
            directory,
        )
        or pick_mate(materials.by_base.get(geometry.base_lower), directory)
        or pick_mate(materials.by_base_trim.get(geometry.base_trim_lower), directory)
    )


def group_models(catalog: CatalogIndex) -> list[ModelBundle]:
    """
    Partition cataloged files into model bundles.

    Only geometry and material files take part in grouping; every other
    file stays resolvable through the catalog. Each group yields at most
    one bundle, built around its most specific geometry file.

    Args:
        catalog: Index built by ``build_catalog``

    Returns:
        Bundles sorted by display name, case-insensitively
    """
    groups: dict[str, _CandidateGroup] = {}
    materials = MaterialIndex()

    for record in catalog.records:
        if record.extension not in (GEOMETRY_EXTENSION, MATERIAL_EXTENSION):
            continue

        key, display_name = group_key(record)
        group = groups.get(key)
        if group is None:
            group = _CandidateGroup(key, display_name)
            groups[key] = group

        if record.extension == GEOMETRY_EXTENSION:
            group.offer(record)
        else:
            materials.add(record)

    bundles: list[ModelBundle] = []
    for group in groups.values():
        geometry = group.geometry
        if geometry is None:
            logger.debug("Group %r has material files but no geometry", group.key)
            continue

        material = find_material_mate(geometry, catalog, materials)
        directory = geometry.directory or (material.directory if material else "")
        display_name = (
            group.display_name or geometry.base_trim or geometry.label or geometry.path
        )

        bundles.append(
            ModelBundle(
                key=str(geometry.file_id),
                display_name=display_name,
                directory=directory,
                geometry=geometry,
                material=material,
                laterality_tag=infer_laterality(
                    [
                        display_name,
                        directory,
                        geometry.label,
                        geometry.path,
                        geometry.description,
                    ]
                ),
            )
        )

    bundles.sort(key=lambda bundle: sort_key(bundle.display_name))
    return bundles
