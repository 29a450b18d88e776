"""Shared types for sprite sources."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from PIL import Image

from atlasmith.packing.catalog import SpriteSpec


@dataclass
class SourceSprite:
    """A decoded sprite ready to be packed: pixels plus pass-through metadata."""
    id: str
    image: Image.Image
    metadata: Dict[str, Any] = field(default_factory=dict)
    source: Optional[Path] = None

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def to_spec(self, padding: int = 0, allow_rotation: bool = False) -> SpriteSpec:
        return SpriteSpec(
            id=self.id,
            width=self.width,
            height=self.height,
            padding=padding,
            allow_rotation=allow_rotation,
            metadata=self.metadata,
        )
