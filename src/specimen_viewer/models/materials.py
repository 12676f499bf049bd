"""Material library and texture reference records."""

from typing import Optional

from .base import CamelModel


class TextureMapSpec(CamelModel):
    """A parsed ``map_*`` statement: texture path plus UV options."""

    path: Optional[str] = None
    scale: tuple[float, float] = (1.0, 1.0)
    offset: tuple[float, float] = (0.0, 0.0)
    clamp: bool = False


class MaterialDefinition(CamelModel):
    """One ``newmtl`` block of an MTL file."""

    name: str
    kd: tuple[float, float, float] = (1.0, 1.0, 1.0)
    map_kd: Optional[TextureMapSpec] = None
    map_ao: Optional[TextureMapSpec] = None
    map_roughness: Optional[TextureMapSpec] = None
    map_normal: Optional[TextureMapSpec] = None


class MaterialLibraryReference(CamelModel):
    """Where to fetch an MTL file and which directory its textures live in."""

    url: str
    texture_base_dir: str = ""


class TextureReference(CamelModel):
    """A resolved texture URL and the key under which it is cached."""

    url: str
    cache_key: str


class TextureRequirement(CamelModel):
    """A texture the renderer must load for a model."""

    cache_key: str
    url: str
    kind: str
    color_space: str
