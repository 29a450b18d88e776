"""
Sprite catalog: the immutable input of a pack invocation.
"""

from collections import Counter
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from atlasmith.exceptions import InvalidCatalogError
from .grower import PageSpec
from .layout import FailureReason, SpriteFailure


class SpriteSpec(BaseModel):
    """
    One input sprite.

    Sizes are deliberately unconstrained here: the catalog validates every
    sprite at once so that a bad catalog is reported in full.
    """
    model_config = ConfigDict(extra='forbid', frozen=True)

    id: str = Field(..., description="Stable identifier, unique within the catalog.")
    width: int = Field(..., description="Width in pixels, padding excluded.")
    height: int = Field(..., description="Height in pixels, padding excluded.")
    allow_rotation: bool = Field(False, description="May be placed turned 90 degrees clockwise.")
    padding: int = Field(0, description="Border reserved on every side inside the atlas.")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Opaque caller data.")

    @property
    def footprint_width(self) -> int:
        return self.width + 2 * self.padding

    @property
    def footprint_height(self) -> int:
        return self.height + 2 * self.padding

    @property
    def footprint_area(self) -> int:
        return self.footprint_width * self.footprint_height

    def fits_within(self, max_width: int, max_height: int) -> bool:
        """True if the footprint fits the given box in some allowed orientation."""
        w, h = self.footprint_width, self.footprint_height
        if w <= max_width and h <= max_height:
            return True
        return self.allow_rotation and h <= max_width and w <= max_height


class SpriteCatalog:
    """Ordered, immutable collection of SpriteSpec."""

    def __init__(self, sprites: Iterable[SpriteSpec] = ()):
        self._sprites: Tuple[SpriteSpec, ...] = tuple(sprites)

    @classmethod
    def from_sizes(
        cls,
        sizes: Mapping[str, Tuple[int, int]],
        padding: int = 0,
        allow_rotation: bool = False
    ) -> "SpriteCatalog":
        """Build a catalog from {id: (width, height)} with uniform settings."""
        return cls(
            SpriteSpec(id=sprite_id, width=w, height=h, padding=padding, allow_rotation=allow_rotation)
            for sprite_id, (w, h) in sizes.items()
        )

    def __len__(self) -> int:
        return len(self._sprites)

    def __iter__(self) -> Iterator[SpriteSpec]:
        return iter(self._sprites)

    def __getitem__(self, index: int) -> SpriteSpec:
        return self._sprites[index]

    def __repr__(self) -> str:
        return f"SpriteCatalog({len(self._sprites)} sprites)"

    @property
    def ids(self) -> List[str]:
        return [s.id for s in self._sprites]

    def find_issues(self, page_spec: Optional[PageSpec] = None) -> List[SpriteFailure]:
        """
        Collect every structural problem in the catalog.

        Duplicate ids are reported once per id. Sizes are checked per sprite:
        non-positive width/height, negative padding, and (given a page_spec)
        footprints larger than the page ceiling in every allowed orientation.
        """
        issues: List[SpriteFailure] = []

        counts = Counter(s.id for s in self._sprites)
        reported = set()
        for sprite in self._sprites:
            if counts[sprite.id] > 1 and sprite.id not in reported:
                reported.add(sprite.id)
                issues.append(SpriteFailure(
                    sprite_id=sprite.id,
                    reason=FailureReason.DUPLICATE_SPRITE_ID,
                    message=f"id appears {counts[sprite.id]} times in the catalog",
                ))

        for sprite in self._sprites:
            problem = None
            if sprite.width < 1 or sprite.height < 1:
                problem = f"size {sprite.width}x{sprite.height} is not positive"
            elif sprite.padding < 0:
                problem = f"padding {sprite.padding} is negative"
            elif page_spec is not None and not sprite.fits_within(page_spec.max_width, page_spec.max_height):
                problem = (
                    f"footprint {sprite.footprint_width}x{sprite.footprint_height} exceeds "
                    f"maximum page size {page_spec.max_width}x{page_spec.max_height}"
                )
            if problem:
                issues.append(SpriteFailure(
                    sprite_id=sprite.id,
                    reason=FailureReason.INVALID_SPRITE,
                    message=problem,
                ))
        return issues

    def validate(self, page_spec: Optional[PageSpec] = None) -> None:
        """
        Raises:
            InvalidCatalogError: Carrying every issue found by find_issues()
        """
        issues = self.find_issues(page_spec)
        if issues:
            ids = ", ".join(sorted({f.sprite_id for f in issues}))
            raise InvalidCatalogError(f"Invalid sprite catalog ({len(issues)} issues): {ids}", issues)
