"""
Layout result models.

A LayoutResult is pure data: pages with their final sizes and the placements
on each, one failure entry for every sprite that was not placed, and the text
layout data of any packed fonts. The models validate themselves on
construction (footprints inside their page, no overlapping footprints, no
sprite listed twice) independently of the packer that produced them.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .geometry import Rect


class FailureReason(str, Enum):
    INVALID_SPRITE = "invalid_sprite"
    DUPLICATE_SPRITE_ID = "duplicate_sprite_id"
    PAGE_CAPACITY_EXHAUSTED = "page_capacity_exhausted"


class SpriteFailure(BaseModel):
    model_config = ConfigDict(extra='forbid', frozen=True, populate_by_name=True)

    sprite_id: str = Field(..., alias='id', description="Id of the sprite that was not placed.")
    reason: FailureReason
    message: str = ""


class Placement(BaseModel):
    """
    Where one sprite ended up.

    x/y locate the sprite's own pixels (the padding offset is already applied);
    width/height are the occupied footprint including padding on both sides,
    swapped if the sprite was rotated 90 degrees clockwise.
    """
    model_config = ConfigDict(extra='forbid', frozen=True, populate_by_name=True)

    sprite_id: str = Field(..., alias='id')
    page_index: int = Field(..., ge=0)
    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)
    width: int = Field(..., gt=0, description="Footprint width, padding included.")
    height: int = Field(..., gt=0, description="Footprint height, padding included.")
    rotated: bool = False
    padding: int = Field(0, ge=0)
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Caller data, passed through untouched.")

    @model_validator(mode='after')
    def validate_padding(self):
        if self.width <= 2 * self.padding or self.height <= 2 * self.padding:
            raise ValueError(f"Footprint of '{self.sprite_id}' leaves no room inside its padding")
        if self.x < self.padding or self.y < self.padding:
            raise ValueError(f"Padding of '{self.sprite_id}' would start outside the page")
        return self

    @property
    def footprint(self) -> Rect:
        """Occupied rectangle, padding included."""
        return Rect(self.x - self.padding, self.y - self.padding, self.width, self.height)

    @property
    def frame(self) -> Rect:
        """Rectangle holding the sprite's pixels (as stored, i.e. after rotation)."""
        return Rect(self.x, self.y, self.width - 2 * self.padding, self.height - 2 * self.padding)


class Page(BaseModel):
    model_config = ConfigDict(extra='forbid', frozen=True, populate_by_name=True)

    index: int = Field(..., ge=0)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    placements: List[Placement] = Field(default_factory=list, alias='sprites')
    texture: Optional[str] = Field(None, description="Image file written for this page, if any.")

    @model_validator(mode='after')
    def validate_placements(self):
        bounds = Rect(0, 0, self.width, self.height)
        for p in self.placements:
            if p.page_index != self.index:
                raise ValueError(f"'{p.sprite_id}' claims page {p.page_index} but sits on page {self.index}")
            if not bounds.contains(p.footprint):
                raise ValueError(f"'{p.sprite_id}' footprint {p.footprint} leaves page {self.index}")

        # Sweep along x so only horizontally overlapping pairs are compared
        ordered = sorted(self.placements, key=lambda p: p.footprint.x)
        for i, a in enumerate(ordered):
            fa = a.footprint
            for b in ordered[i + 1:]:
                fb = b.footprint
                if fb.x >= fa.right:
                    break
                if fa.intersects(fb):
                    raise ValueError(f"'{a.sprite_id}' and '{b.sprite_id}' overlap on page {self.index}")
        return self

    @property
    def used_area(self) -> int:
        return sum(p.width * p.height for p in self.placements)

    @property
    def fill_ratio(self) -> float:
        return self.used_area / (self.width * self.height)


class GlyphMetrics(BaseModel):
    """Layout metrics of a character that has no pixels (e.g. space)."""
    model_config = ConfigDict(extra='forbid', frozen=True)

    char_code: int
    x_offset: int = 0
    y_offset: int = 0
    x_advance: int = 0


class KerningPair(BaseModel):
    model_config = ConfigDict(extra='forbid', frozen=True)

    first: int
    second: int
    amount: int


class FontMetrics(BaseModel):
    """
    Font-level data a game needs to lay out text with the packed glyphs.

    Glyph sprites themselves are ordinary placements ("<name>/<char code>");
    this block adds the line metrics, the empty glyphs and the kerning table.
    """
    model_config = ConfigDict(extra='forbid', frozen=True)

    name: str
    line_height: int = 0
    base: int = 0
    glyph_only: List[GlyphMetrics] = Field(default_factory=list)
    kernings: List[KerningPair] = Field(default_factory=list)


class LayoutResult(BaseModel):
    """Output of one pack invocation."""
    model_config = ConfigDict(extra='forbid', frozen=True)

    pages: List[Page] = Field(default_factory=list)
    failures: List[SpriteFailure] = Field(default_factory=list)
    fonts: List[FontMetrics] = Field(default_factory=list, description="Text layout data of packed fonts.")

    @model_validator(mode='after')
    def validate_layout(self):
        for position, page in enumerate(self.pages):
            if page.index != position:
                raise ValueError(f"Page at position {position} has index {page.index}")
        seen = set()
        for sprite_id in self._listed_ids():
            if sprite_id in seen:
                raise ValueError(f"Sprite '{sprite_id}' is listed more than once")
            seen.add(sprite_id)
        names = [f.name for f in self.fonts]
        if len(set(names)) != len(names):
            raise ValueError(f"Font names must be unique, got {names}")
        return self

    def _listed_ids(self) -> Iterable[str]:
        for page in self.pages:
            for p in page.placements:
                yield p.sprite_id
        for f in self.failures:
            yield f.sprite_id

    @property
    def placements(self) -> List[Placement]:
        return [p for page in self.pages for p in page.placements]

    @property
    def ok(self) -> bool:
        return not self.failures

    def placement_for(self, sprite_id: str) -> Optional[Placement]:
        for p in self.placements:
            if p.sprite_id == sprite_id:
                return p
        return None

    def check_complete(self, sprite_ids: Iterable[str]) -> None:
        """
        Verify every catalog id shows up exactly once as a placement or failure.

        Raises:
            ValueError: Listing missing and unexpected ids
        """
        expected = set(sprite_ids)
        listed = set(self._listed_ids())
        missing = sorted(expected - listed)
        unexpected = sorted(listed - expected)
        if missing or unexpected:
            raise ValueError(f"Layout does not match catalog (missing: {missing}, unexpected: {unexpected})")

    def with_textures(self, textures: List[Optional[str]]) -> "LayoutResult":
        """Copy of this layout with page texture names filled in, in page order."""
        if len(textures) != len(self.pages):
            raise ValueError(f"Expected {len(self.pages)} texture names, got {len(textures)}")
        pages = [page.model_copy(update={'texture': name}) for page, name in zip(self.pages, textures)]
        return self.model_copy(update={'pages': pages})

    def with_fonts(self, fonts: List[FontMetrics]) -> "LayoutResult":
        """Copy of this layout carrying the given font blocks (validated like a new layout)."""
        return LayoutResult(pages=self.pages, failures=self.failures, fonts=list(fonts))
