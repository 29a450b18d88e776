"""
Atlasmith - Pack sprites into texture atlases for games

Packs many small sprite images into a few large atlas pages with a
deterministic best-fit heuristic and writes a layout index (JSON or binary)
a game engine can use to slice the sprites back out.
"""

from atlasmith.build import BuildResult, build_atlas
from atlasmith.config import AtlasConfig, load_config
from atlasmith.exceptions import (
    AtlasError,
    InvalidCatalogError,
    PackError,
    PackFailedError,
    SerializationError,
    SourceError,
)
from atlasmith.packing import LayoutResult, PageSpec, SpriteCatalog, SpriteSpec, pack

__version__ = "0.1.0"
__all__ = [
    "pack",
    "SpriteSpec",
    "SpriteCatalog",
    "PageSpec",
    "LayoutResult",
    "AtlasConfig",
    "load_config",
    "build_atlas",
    "BuildResult",
    "AtlasError",
    "PackError",
    "InvalidCatalogError",
    "PackFailedError",
    "SourceError",
    "SerializationError",
]
