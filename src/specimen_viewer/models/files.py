"""File listing records and grouped 3D model bundles."""

from enum import Enum
from typing import Any, Optional, Union

from pydantic import Field, ValidationError, computed_field

from ..core.paths import normalize_directory_label, normalize_slashes
from .base import CamelModel


class Laterality(str, Enum):
    """Anatomical side inferred from free-text naming."""

    LEFT = "left"
    RIGHT = "right"
    BILATERAL = "bilateral"


class FileRecord(CamelModel):
    """One entry of a dataset's flat file listing."""

    file_id: Union[int, str]
    label: str
    directory_label: str = ""
    description: Optional[str] = None

    @classmethod
    def from_listing(cls, entry: Any) -> Optional["FileRecord"]:
        """
        Build a record from a raw listing entry.

        Accepts both the Dataverse shape (``dataFile.id``) and the flat
        ``fileId`` shape. Entries without an id or label yield None.
        """
        if isinstance(entry, FileRecord):
            return entry
        if not isinstance(entry, dict):
            return None

        data_file = entry.get("dataFile")
        file_id = entry.get("fileId")
        if file_id is None and isinstance(data_file, dict):
            file_id = data_file.get("id")
        label = entry.get("label")
        if file_id in (None, "") or not label:
            return None

        try:
            return cls(
                file_id=file_id,
                label=label,
                directory_label=entry.get("directoryLabel") or "",
                description=entry.get("description"),
            )
        except ValidationError:
            return None

    @computed_field
    @property
    def path(self) -> str:
        """Dataset-relative slash-separated path."""
        label = normalize_slashes(self.label).strip()
        directory = self.directory
        return f"{directory}/{label}" if directory else label

    @computed_field
    @property
    def extension(self) -> Optional[str]:
        dot = self.label.rfind(".")
        if dot < 0 or dot == len(self.label) - 1:
            return None
        return self.label[dot + 1 :].lower()

    @property
    def directory(self) -> str:
        return "/".join(self.directory_parts)

    @property
    def directory_parts(self) -> list[str]:
        clean = normalize_directory_label(self.directory_label)
        if not clean:
            return []
        return [segment.strip() for segment in clean.split("/") if segment.strip()]

    @property
    def base(self) -> str:
        """Label without its extension."""
        safe = normalize_slashes(self.label)
        dot = safe.rfind(".")
        return safe[:dot] if dot >= 0 else safe

    @property
    def base_trim(self) -> str:
        return self.base.strip()

    @property
    def base_lower(self) -> str:
        return self.base.lower()

    @property
    def base_trim_lower(self) -> str:
        return self.base_trim.lower()


class ModelBundle(CamelModel):
    """A geometry file optionally paired with its material library."""

    key: str
    display_name: str
    directory: str = ""
    geometry: FileRecord = Field(exclude=True)
    material: Optional[FileRecord] = Field(default=None, exclude=True)
    laterality_tag: Optional[Laterality] = None

    @computed_field
    @property
    def geometry_file_id(self) -> Union[int, str]:
        return self.geometry.file_id

    @computed_field
    @property
    def material_file_id(self) -> Optional[Union[int, str]]:
        return self.material.file_id if self.material else None
