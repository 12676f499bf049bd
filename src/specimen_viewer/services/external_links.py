"""Links from a specimen to the repository, GBIF and the UBERON ontology."""

import re
from typing import Any, Optional

from ..core.metadata import get_metadata_block, get_metadata_blocks
from ..models.files import ModelBundle

GBIF_SPECIES_URL = "https://www.gbif.org/species/"
UBERON_URL = "http://purl.obolibrary.org/obo/UBERON_"
TAXON_ID_FIELDS = ("dwcTaxonID", "dwc:taxonID", "taxonID")

_UBERON_PATTERNS = (
    re.compile(r"uberon[:_ -]?\s*([0-9]+)", re.IGNORECASE),
    re.compile(r"^([0-9]{5,})\b"),
    re.compile(r"(?:^|[_\s-])([0-9]{5,})(?=[_\s-]|$)"),
    re.compile(r"\b([0-9]{5,})$"),
    re.compile(r"\(([0-9]{5,})\)"),
)


def extract_uberon_code(text: Optional[str]) -> Optional[str]:
    """Find an UBERON code in free text and zero-pad it to seven digits."""
    if not text:
        return None
    normalized = str(text).strip()
    if not normalized:
        return None

    for pattern in _UBERON_PATTERNS:
        match = pattern.search(normalized)
        if match:
            digits = re.sub(r"\D", "", match.group(1))
            if digits:
                return digits.zfill(7)
    return None


def _candidates(value: Optional[str]) -> list[str]:
    if not value or not isinstance(value, str) or not value.strip():
        return []
    trimmed = value.strip()
    segments = [s.strip() for s in re.split(r"[\\/]", trimmed) if s.strip()]
    return [trimmed, *segments]


def derive_uberon_url(bundle: Optional[ModelBundle]) -> Optional[str]:
    """Look for an UBERON code in a bundle's directory and file names."""
    if bundle is None:
        return None

    sources = [bundle.directory, bundle.display_name, bundle.geometry.label]
    if bundle.material is not None:
        sources.append(bundle.material.directory)

    for source in sources:
        for candidate in _candidates(source):
            code = extract_uberon_code(candidate)
            if code:
                return f"{UBERON_URL}{code}"
    return None


def extract_field_value(block: Optional[dict], field_name: str) -> Optional[str]:
    """Return the first scalar value of a block field matched by name."""
    if not block or not isinstance(block.get("fields"), list):
        return None

    lower = field_name.lower()
    field = next(
        (
            f
            for f in block["fields"]
            if isinstance(f, dict)
            and (
                f.get("typeName") == field_name
                or f.get("displayName") == field_name
                or str(f.get("typeName") or "").lower() == lower
            )
        ),
        None,
    )
    if field is None:
        return None

    value = field.get("value")
    if not value:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        first = value[0]
        if isinstance(first, str):
            return first
        if isinstance(first, dict) and first.get("value"):
            return str(first["value"])
    if isinstance(value, dict) and value.get("value"):
        return str(value["value"])
    return None


def derive_gbif_url(detail: Any) -> Optional[str]:
    block = get_metadata_block(get_metadata_blocks(detail), "darwincore")
    for name in TAXON_ID_FIELDS:
        taxon_id = extract_field_value(block, name)
        if taxon_id and taxon_id.strip():
            clean = taxon_id.strip()
            return clean if clean.startswith("http") else f"{GBIF_SPECIES_URL}{clean}"
    return None


def build_external_links(detail: Any, bundle: Optional[ModelBundle] = None) -> dict:
    """Collect repository, GBIF and UBERON links; missing ones are None."""
    persistent_url = None
    if isinstance(detail, dict) and isinstance(detail.get("data"), dict):
        persistent_url = detail["data"].get("persistentUrl")

    return {
        "repository": persistent_url or None,
        "gbif": derive_gbif_url(detail),
        "uberon": derive_uberon_url(bundle),
    }
