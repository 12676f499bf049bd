"""Extract semantic specimen attributes from a metadata graph."""

import re
from collections.abc import Iterator
from typing import Any, Optional

from ..models.metadata import SpecimenSummary
from .metadata import extract_metadata_values

SEX_FIELDS = ("sex", "dwc:sex", "dwcSex", "specimenSex")
LIFE_STAGE_FIELDS = (
    "lifeStage",
    "dwc:lifeStage",
    "dwcLifeStage",
    "life_stage",
    "developmentalStage",
)
AGE_CLASS_FIELDS = ("ageClass", "age_class", "dwcAgeClass", "ageCategory", "estimatedAge")
CATALOG_NUMBER_FIELDS = (
    "catalogNumber",
    "dwc:catalogNumber",
    "dwcCatalogNumber",
    "catalog_number",
    "specimenNumber",
)
OTHER_CATALOG_NUMBER_FIELDS = (
    "otherCatalogNumbers",
    "dwc:otherCatalogNumbers",
    "dwcOtherCatalogNumbers",
    "other_catalog_numbers",
    "alternativeCatalogNumbers",
)
INDIVIDUAL_ID_FIELDS = (
    "individualID",
    "dwc:individualID",
    "dwcIndividualID",
    "individual_id",
    "organismID",
    "dwc:organismID",
)

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_WHITESPACE = re.compile(r"\s+")
_LIST_SEPARATORS = re.compile(r"[;,|\n]")


def normalize_key(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return _NON_ALNUM.sub("", value.lower())


def humanize_value(value: str) -> str:
    """``"ADULT_MALE"`` -> ``"Adult male"``; mixed case is kept as written."""
    text = _WHITESPACE.sub(" ", value.replace("_", " ")).strip()
    if text.isupper():
        text = text.lower()
    return text[:1].upper() + text[1:]


def iter_fields(graph: Any) -> Iterator[dict]:
    """Yield every declared field (a dict with a ``typeName``), depth first."""
    if isinstance(graph, list):
        for item in graph:
            yield from iter_fields(item)
        return
    if not isinstance(graph, dict):
        return

    if isinstance(graph.get("typeName"), str):
        yield graph
        yield from iter_fields(graph.get("value"))
        yield from iter_fields(graph.get("fields"))
        return

    for value in graph.values():
        yield from iter_fields(value)


def _flatten(field: dict) -> list[str]:
    values = extract_metadata_values(field)
    return [value.strip() for value in values if value and value.strip()]


def find_field_values(fields: list[dict], variants: tuple[str, ...]) -> list[str]:
    """Return the flattened values of the first matching field that has any."""
    wanted = {normalize_key(variant) for variant in variants}
    for field in fields:
        names = (normalize_key(field.get("typeName")), normalize_key(field.get("displayName")))
        if not any(name and name in wanted for name in names):
            continue
        values = _flatten(field)
        if values:
            return values
    return []


def _first(values: list[str]) -> Optional[str]:
    return values[0] if values else None


def split_catalog_numbers(values: list[str]) -> list[str]:
    """Split on ``;``, ``,``, ``|`` or newlines and de-duplicate in order."""
    seen = set()
    result = []
    for value in values:
        for part in _LIST_SEPARATORS.split(value):
            token = part.strip()
            if token and token not in seen:
                seen.add(token)
                result.append(token)
    return result


def extract_specimen_summary(graph: Any) -> Optional[SpecimenSummary]:
    """
    Pull sex, life stage, age class and identifiers from a metadata graph.

    Field names are matched under several historical conventions. The
    primary id falls back from catalog number to the first other catalog
    number to the individual id.

    Returns:
        SpecimenSummary, or None when nothing resolved
    """
    fields = list(iter_fields(graph))
    if not fields:
        return None

    sex = _first(find_field_values(fields, SEX_FIELDS))
    life_stage = _first(find_field_values(fields, LIFE_STAGE_FIELDS))
    age_class = _first(find_field_values(fields, AGE_CLASS_FIELDS))
    catalog_number = _first(find_field_values(fields, CATALOG_NUMBER_FIELDS))
    other_numbers = split_catalog_numbers(
        find_field_values(fields, OTHER_CATALOG_NUMBER_FIELDS)
    )
    individual_id = _first(find_field_values(fields, INDIVIDUAL_ID_FIELDS))

    if not any((sex, life_stage, age_class, catalog_number, other_numbers, individual_id)):
        return None

    primary_id = catalog_number or _first(other_numbers) or individual_id
    return SpecimenSummary(
        sex=humanize_value(sex) if sex else None,
        life_stage=humanize_value(life_stage) if life_stage else None,
        age_class=humanize_value(age_class) if age_class else None,
        catalog_number=catalog_number,
        other_catalog_numbers=other_numbers or None,
        individual_id=individual_id,
        primary_id=primary_id,
    )


def format_specimen_attributes(summary: Optional[SpecimenSummary]) -> str:
    """Join sex, life stage and age class, skipping case-insensitive repeats."""
    if summary is None:
        return ""
    seen = set()
    tokens = []
    for value in (summary.sex, summary.life_stage, summary.age_class):
        if not value:
            continue
        key = value.lower()
        if key in seen:
            continue
        seen.add(key)
        tokens.append(value)
    return " · ".join(tokens)


def format_specimen_label(base_label: Optional[str], summary: Optional[SpecimenSummary]) -> str:
    label = base_label or ""
    attributes = format_specimen_attributes(summary)
    if not attributes:
        return label
    return f"{label} ({attributes})"
