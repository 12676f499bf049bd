"""Display-ready metadata records."""

from typing import Optional

from .base import CamelModel


class MetadataNode(CamelModel):
    """One labelled row of the metadata tree.

    A node always carries values, children, or both.
    """

    label: str
    breadcrumb_path: str
    values: list[str] = []
    children: list["MetadataNode"] = []

    @property
    def has_values(self) -> bool:
        return bool(self.values)

    @property
    def has_children(self) -> bool:
        return bool(self.children)


class MetadataSection(CamelModel):
    """A titled metadata block (citation, darwincore, ...)."""

    title: str
    fields: list[MetadataNode]


class SpecimenSummary(CamelModel):
    """Semantic specimen attributes used to label listings."""

    sex: Optional[str] = None
    life_stage: Optional[str] = None
    age_class: Optional[str] = None
    catalog_number: Optional[str] = None
    other_catalog_numbers: Optional[list[str]] = None
    individual_id: Optional[str] = None
    primary_id: Optional[str] = None


MetadataNode.model_rebuild()
