"""
Flatten schema-less metadata graphs into display trees.

The graph mixes typed fields (``{"typeName", "typeClass", "value"}``),
nested ``fields`` collections, arrays of primitives, arrays of objects
and plain untyped objects. Each value is classified into one of a closed
set of shapes and normalised by the matching rule; anything that does
not fit contributes nothing.
"""

import logging
import re
from enum import Enum
from typing import Any, Optional

from ..models.metadata import MetadataNode, MetadataSection

logger = logging.getLogger(__name__)

PATH_SEPARATOR = " › "
ITEM_LABEL = "Item"

LEAF_TYPE_CLASSES = frozenset(
    {"primitive", "string", "controlledVocabulary", "date", "int", "number"}
)
STRUCTURAL_KEYS = frozenset({"fields", "typeClass", "typeName", "multiple", "displayName"})

# dcterms must be tried before dc
_ONTOLOGY_PREFIXES = (
    re.compile(r"^dwc[_\-.:]?", re.IGNORECASE),
    re.compile(r"^dcterms[_\-.:]?", re.IGNORECASE),
    re.compile(r"^dc[_\-.:]?", re.IGNORECASE),
)
_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATORS = re.compile(r"[._:\-]+")
_WHITESPACE = re.compile(r"\s+")
_ITEM_LABEL = re.compile(r"^item\b")


class Shape(Enum):
    """Recognised shapes of a metadata value."""

    EMPTY = "empty"
    PRIMITIVE = "primitive"
    PRIMITIVE_ARRAY = "primitive_array"
    OBJECT_ARRAY = "object_array"
    OBJECT = "object"


def classify(value: Any) -> Shape:
    if value is None:
        return Shape.EMPTY
    if isinstance(value, dict):
        return Shape.OBJECT if value else Shape.EMPTY
    if isinstance(value, (list, tuple)):
        if not value:
            return Shape.EMPTY
        if any(isinstance(item, (dict, list, tuple)) for item in value):
            return Shape.OBJECT_ARRAY
        return Shape.PRIMITIVE_ARRAY
    if isinstance(value, str) and not value.strip():
        return Shape.EMPTY
    return Shape.PRIMITIVE


def stringify(value: Any) -> str:
    """Render a scalar the way the repository's JSON would print it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def humanize_label(label: Optional[str]) -> str:
    """
    Turn a metadata key into a display label.

    Strips ``dwc``/``dcterms``/``dc`` prefixes, splits camelCase and
    separator characters, collapses whitespace and capitalises.
    """
    if not label or not isinstance(label, str):
        return ""

    clean = label
    for prefix in _ONTOLOGY_PREFIXES:
        stripped = prefix.sub("", clean, count=1)
        if stripped != clean:
            clean = stripped
            break

    clean = _CAMEL_BOUNDARY.sub(r"\1 \2", clean)
    clean = _SEPARATORS.sub(" ", clean)
    clean = _WHITESPACE.sub(" ", clean).strip()
    return clean[:1].upper() + clean[1:]


def _join_primitives(values: list) -> str:
    return ", ".join(stringify(v) for v in values if v is not None and v != "")


def extract_typed_value(type_class: Optional[str], value: Any) -> list[str]:
    """Flatten the value of a typed field into strings."""
    if value is None:
        return []

    if type_class == "controlledVocabulary":
        if isinstance(value, (list, tuple)):
            return [stringify(v) for v in value if v]
        return [stringify(value)] if value else []

    if type_class in LEAF_TYPE_CLASSES:
        if isinstance(value, dict):
            return extract_metadata_values(value)
        if isinstance(value, (list, tuple)):
            if classify(value) is Shape.OBJECT_ARRAY:
                return [v for item in value for v in extract_metadata_values(item) if v]
            joined = _join_primitives(list(value))
            return [joined] if joined else []
        return [stringify(value)]

    if isinstance(value, (list, tuple)):
        return [v for item in value for v in extract_metadata_values(item) if v]
    if isinstance(value, dict):
        return extract_metadata_values(value)
    return [stringify(value)] if value else []


def extract_metadata_values(source: Any) -> list[str]:
    """
    Recursively flatten any metadata value into a list of strings.

    Typed fields defer to ``extract_typed_value``; untyped objects use
    their ``value`` key when present, otherwise every non-structural value.
    """
    if source is None:
        return []
    if isinstance(source, (list, tuple)):
        return [v for item in source for v in extract_metadata_values(item) if v]
    if isinstance(source, dict):
        if source.get("typeClass") and "value" in source:
            return extract_typed_value(source["typeClass"], source["value"])
        if "value" in source:
            return extract_metadata_values(source["value"])
        return [
            v
            for key, item in source.items()
            if key not in STRUCTURAL_KEYS
            for v in extract_metadata_values(item)
            if v
        ]
    return [stringify(source)]


def _child_path(parent_path: str, label: str) -> str:
    return f"{parent_path}{PATH_SEPARATOR}{label}" if parent_path else label


def _item_nodes(items: list, field_path: str) -> list[MetadataNode]:
    nodes = []
    for index, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            continue
        node = normalize_object(item, _child_path(field_path, f"{ITEM_LABEL} {index}"))
        if node is not None:
            nodes.append(node)
    return nodes


def _normalize_entry(label: str, field_path: str, value: Any) -> Optional[MetadataNode]:
    shape = classify(value)
    if shape is Shape.EMPTY:
        return None
    if shape is Shape.OBJECT:
        return normalize_object(value, field_path)
    if shape is Shape.OBJECT_ARRAY:
        children = _item_nodes(list(value), field_path)
        if not children:
            return None
        return MetadataNode(label=label, breadcrumb_path=field_path, children=children)
    if shape is Shape.PRIMITIVE_ARRAY:
        joined = _join_primitives(list(value))
        if not joined:
            return None
        return MetadataNode(label=label, breadcrumb_path=field_path, values=[joined])
    return MetadataNode(label=label, breadcrumb_path=field_path, values=[stringify(value)])


def normalize_object(obj: Any, parent_path: str) -> Optional[MetadataNode]:
    """
    Normalise an untyped object: each non-structural key becomes a child.

    The node is labelled with the last segment of ``parent_path``.
    """
    if not isinstance(obj, dict):
        return None

    children = []
    for key, value in obj.items():
        if key in STRUCTURAL_KEYS:
            continue
        label = humanize_label(key)
        if not label:
            continue
        node = _normalize_entry(label, _child_path(parent_path, label), value)
        if node is not None:
            children.append(node)

    if not children:
        return None
    return MetadataNode(
        label=parent_path.split(PATH_SEPARATOR)[-1],
        breadcrumb_path=parent_path,
        children=children,
    )


def normalize_field(field: Any, parent_path: str = "") -> Optional[MetadataNode]:
    """Normalise one declared field, including its nested ``fields``."""
    if not isinstance(field, dict):
        return None

    label = humanize_label(field.get("displayName") or field.get("typeName"))
    if not label:
        return None
    field_path = _child_path(parent_path, label)

    values: list[str] = []
    children: list[MetadataNode] = []

    type_class = field.get("typeClass")
    value = field.get("value")
    if type_class in LEAF_TYPE_CLASSES:
        values = [v for v in extract_typed_value(type_class, value) if v.strip()]
    else:
        shape = classify(value)
        if shape is Shape.OBJECT_ARRAY:
            children.extend(_item_nodes(list(value), field_path))
        elif shape is Shape.OBJECT:
            node = normalize_object(value, field_path)
            if node is not None:
                children.append(node)
        elif shape is Shape.PRIMITIVE_ARRAY:
            joined = _join_primitives(list(value))
            if joined:
                values = [joined]
        elif shape is Shape.PRIMITIVE:
            values = [stringify(value)]

    sub_fields = field.get("fields")
    if isinstance(sub_fields, list):
        for sub_field in sub_fields:
            node = normalize_field(sub_field, field_path)
            if node is not None:
                children.append(node)

    if not values and not children:
        return None
    return MetadataNode(
        label=label, breadcrumb_path=field_path, values=values, children=children
    )


def normalize_metadata(graph: Any) -> list[MetadataNode]:
    """
    Normalise a metadata block (or a bare list of fields) into nodes.

    Declared ``fields`` come first, followed by any other object-valued
    keys treated as untyped objects. Empty nodes are never produced.
    """
    if isinstance(graph, list):
        graph = {"fields": graph}
    if not isinstance(graph, dict):
        return []

    results: list[MetadataNode] = []
    fields = graph.get("fields")
    if isinstance(fields, list):
        for field in fields:
            node = normalize_field(field)
            if node is not None:
                results.append(node)

    for key, value in graph.items():
        if key in STRUCTURAL_KEYS or not isinstance(value, (dict, list)):
            continue
        label = humanize_label(key)
        if not label:
            continue
        node = _normalize_entry(label, label, value)
        if node is not None:
            results.append(node)

    return results


def _sanitize(values: list[str]) -> list[str]:
    return [value.strip() for value in values if value is not None and value.strip()]


def inline_node(node: MetadataNode) -> Optional[MetadataNode]:
    """
    Fold structural children into their parent for display.

    ``Value`` leaves merge into the parent's values; ``Item N`` and
    ``Expanded value`` children contribute their values and hand their
    own children up to the parent. Other children stay nested rows.
    """
    base_values = _sanitize(node.values)
    value_values: list[str] = []
    item_values: list[str] = []
    expanded_values: list[str] = []
    nested: list[MetadataNode] = []

    for child in node.children:
        raw_label = child.label.strip()
        lower = raw_label.lower()
        compact = _WHITESPACE.sub("", raw_label).lower()
        child_values = _sanitize(child.values)

        if lower == "value" and not child.children and child.values:
            value_values.extend(child_values)
        elif _ITEM_LABEL.match(lower):
            item_values.extend(child_values)
            nested.extend(child.children)
        elif compact == "expandedvalue":
            expanded_values.extend(child_values)
            nested.extend(child.children)
        else:
            nested.append(child)

    values = base_values + value_values + item_values + expanded_values
    children = [n for n in (inline_node(c) for c in nested) if n is not None]
    if not values and not children:
        return None
    return MetadataNode(
        label=node.label,
        breadcrumb_path=node.breadcrumb_path,
        values=values,
        children=children,
    )


def build_display_tree(nodes: list[MetadataNode]) -> list[MetadataNode]:
    """Apply ``inline_node`` to every root node."""
    return [n for n in (inline_node(node) for node in nodes) if n is not None]


def get_metadata_blocks(detail: Any) -> dict:
    """Locate ``metadataBlocks`` in a dataset detail payload."""
    if not isinstance(detail, dict):
        return {}
    if isinstance(detail.get("metadataBlocks"), dict):
        return detail["metadataBlocks"]
    data = detail.get("data")
    if not isinstance(data, dict):
        return {}
    version = data.get("latestVersion")
    if not isinstance(version, dict):
        return {}
    blocks = version.get("metadataBlocks")
    return blocks if isinstance(blocks, dict) else {}


def get_metadata_block(blocks: dict, name: str) -> Optional[dict]:
    """Find a block by key, or by its ``name`` case-insensitively."""
    if not blocks:
        return None
    block = blocks.get(name)
    if isinstance(block, dict):
        return block
    lower = name.lower()
    for block in blocks.values():
        if isinstance(block, dict) and str(block.get("name", "")).lower() == lower:
            return block
    return None


def normalize_metadata_blocks(detail: Any, inline: bool = True) -> list[MetadataSection]:
    """
    Build one titled section per metadata block that has displayable fields.

    Args:
        detail: Dataset detail payload (or a bare ``metadataBlocks`` dict)
        inline: Apply the display inlining pass to each section

    Returns:
        Sections in block order
    """
    sections = []
    for block_key, block in get_metadata_blocks(detail).items():
        if not isinstance(block, dict) or not block.get("fields"):
            continue
        nodes = normalize_metadata(block)
        if inline:
            nodes = build_display_tree(nodes)
        if not nodes:
            continue
        title = block.get("displayName") or block.get("name") or humanize_label(block_key)
        sections.append(MetadataSection(title=str(title), fields=nodes))
    logger.debug("Normalised %d metadata sections", len(sections))
    return sections


def extract_title(detail: Any) -> Optional[str]:
    """Read the dataset title from the citation block of a detail payload."""
    citation = get_metadata_blocks(detail).get("citation")
    fields = citation.get("fields") if isinstance(citation, dict) else None
    if not isinstance(fields, list):
        return None

    title_field = next(
        (f for f in fields if isinstance(f, dict) and f.get("typeName") == "title"),
        None,
    )
    if title_field is None:
        return None

    value = title_field.get("value")
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        for item in value:
            if isinstance(item, str) and item:
                return item
            if isinstance(item, dict) and isinstance(item.get("value"), str) and item["value"]:
                return item["value"]
    return None


def get_dataset_files(detail: Any) -> list:
    """Return the flat file listing of the latest dataset version."""
    if not isinstance(detail, dict) or not isinstance(detail.get("data"), dict):
        return []
    version = detail["data"].get("latestVersion")
    files = version.get("files") if isinstance(version, dict) else None
    return files if isinstance(files, list) else []
