"""Parse OBJ ``mtllib`` statements and MTL material libraries."""

import re
from typing import Optional

from ..models.materials import MaterialDefinition, TextureMapSpec

_MTLLIB = re.compile(r"^[ \t]*mtllib\s+(.+?)\s*$", re.IGNORECASE | re.MULTILINE)
_NUMBER = re.compile(r"^-?\d*\.?\d+(e[-+]?\d+)?$", re.IGNORECASE)

_MAP_KEYWORDS = {
    "map_kd": "map_kd",
    "map_ao": "map_ao",
    "map_roughness": "map_roughness",
    "map_pr": "map_roughness",
    "map_tangentspacenormal": "map_normal",
    "map_normal": "map_normal",
    "map_bump": "map_normal",
    "bump": "map_normal",
    "norm": "map_normal",
}


def extract_mtllib_references(obj_text: Optional[str]) -> list[str]:
    """Return the material library references declared in an OBJ file."""
    if not obj_text:
        return []
    return [match.strip() for match in _MTLLIB.findall(obj_text) if match.strip()]


def _to_float(token: str, default: float) -> float:
    try:
        return float(token)
    except ValueError:
        return default


def parse_map_spec(raw: Optional[str]) -> TextureMapSpec:
    """
    Parse the arguments of a ``map_*`` statement.

    Understands ``-s``/``-scale``, ``-o``/``-offset``/``-t`` and ``-clamp``;
    other options and their numeric argument are skipped. The remaining
    tokens form the texture path.
    """
    if not raw or not raw.strip():
        return TextureMapSpec()

    tokens = raw.strip().split()
    path = None
    scale = (1.0, 1.0)
    offset = (0.0, 0.0)
    clamp = False

    i = 0
    while i < len(tokens):
        lower = tokens[i].lower()
        if lower in ("-s", "-scale", "-o", "-offset", "-t"):
            vector = []
            while len(vector) < 3 and i + 1 < len(tokens) and _NUMBER.match(tokens[i + 1]):
                vector.append(float(tokens[i + 1]))
                i += 1
            if lower in ("-s", "-scale"):
                u = vector[0] if vector else 1.0
                scale = (u, vector[1] if len(vector) > 1 else u)
            else:
                offset = (
                    vector[0] if vector else 0.0,
                    vector[1] if len(vector) > 1 else 0.0,
                )
        elif lower == "-clamp":
            value = tokens[i + 1].lower() if i + 1 < len(tokens) else ""
            clamp = value in ("on", "1")
            i += 1
        elif lower.startswith("-"):
            if i + 1 < len(tokens) and _NUMBER.match(tokens[i + 1]):
                i += 1
        else:
            path = " ".join(tokens[i:])
            break
        i += 1

    if not path:
        path = tokens[-1]
    return TextureMapSpec(path=path, scale=scale, offset=offset, clamp=clamp)


def parse_mtl(content: Optional[str]) -> dict[str, MaterialDefinition]:
    """Parse an MTL file into material definitions keyed by name, in file order."""
    materials: dict[str, dict] = {}
    current: Optional[dict] = None

    for line in (content or "").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        parts = stripped.split()
        keyword = parts[0].lower()
        value = " ".join(parts[1:])

        if keyword == "newmtl":
            name = value.strip()
            if not name:
                continue
            current = {"name": name}
            materials[name] = current
        elif current is None:
            continue
        elif keyword == "kd" and len(parts) >= 4:
            current["kd"] = tuple(_to_float(token, 1.0) for token in parts[1:4])
        elif keyword in _MAP_KEYWORDS:
            current[_MAP_KEYWORDS[keyword]] = parse_map_spec(value)

    return {name: MaterialDefinition(**fields) for name, fields in materials.items()}
