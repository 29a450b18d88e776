"""
Page size constraints and the growth policy applied when a sprite overflows.

Order of preference when no existing page can host a sprite:
    1. grow the current (last opened) page, as little as possible
    2. open a new page at the initial size (grown at once if the sprite is bigger)
    3. give up on the sprite (page capacity exhausted)
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .free_space import FreeSpaceTracker

logger = logging.getLogger(__name__)


def next_power_of_2(n: int) -> int:
    """Return the next power of 2 >= n."""
    if n <= 0:
        return 1
    return 2 ** math.ceil(math.log2(n))


class PageSpec(BaseModel):
    """Packing constraints for atlas pages."""
    model_config = ConfigDict(extra='forbid', frozen=True)

    initial_width: int = Field(256, gt=0, description="Width of a freshly opened page.")
    initial_height: int = Field(256, gt=0, description="Height of a freshly opened page.")
    max_width: int = Field(2048, gt=0, description="Hard ceiling for page width.")
    max_height: int = Field(2048, gt=0, description="Hard ceiling for page height.")
    growth_step: Union[Literal['pow2'], int] = Field(
        'pow2', description="'pow2' for power-of-two growth, or a fixed pixel increment."
    )
    allow_new_pages: bool = Field(True, description="If false, every sprite must fit on one page.")

    @field_validator('growth_step')
    @classmethod
    def validate_growth_step(cls, v):
        if isinstance(v, int) and v <= 0:
            raise ValueError("growth_step must be 'pow2' or a positive integer")
        return v

    @model_validator(mode='after')
    def validate_bounds(self):
        if self.initial_width > self.max_width or self.initial_height > self.max_height:
            raise ValueError(
                f"Initial page size {self.initial_width}x{self.initial_height} exceeds "
                f"maximum {self.max_width}x{self.max_height}"
            )
        return self

    def fits_ceiling(self, width: int, height: int) -> bool:
        return width <= self.max_width and height <= self.max_height

    def round_up(self, current: int, required: int, ceiling: int) -> int:
        """Quantize a required dimension to the growth step, never past the ceiling."""
        if required <= current:
            return current
        if self.growth_step == 'pow2':
            size = next_power_of_2(required)
        else:
            steps = math.ceil((required - current) / self.growth_step)
            size = current + steps * self.growth_step
        return min(size, ceiling)


class GrowthKind(str, Enum):
    GROW_PAGE = "grow_page"
    NEW_PAGE = "new_page"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class GrowthPlan:
    """What the grower decided; width/height are the page size to use."""
    kind: GrowthKind
    width: int = 0
    height: int = 0


class PageGrower:
    """Decides how to make room for a sprite that fits on no existing page."""

    def __init__(self, page_spec: PageSpec):
        self.page_spec = page_spec

    def grown_size(
        self,
        tracker: FreeSpaceTracker,
        width: int,
        height: int,
        allow_rotation: bool = False
    ) -> Optional[Tuple[int, int]]:
        """
        Smallest page size (by area, then longer side, then width) that fits the footprint.

        Width-only, height-only and combined growth are all considered; each
        dimension is rounded to the growth step and clamped to the ceiling.

        Returns:
            (width, height), or None if no size within the ceiling works
        """
        spec = self.page_spec
        orientations = [(width, height)]
        if allow_rotation and width != height:
            orientations.append((height, width))

        best = None
        best_key = None
        for w, h in orientations:
            for need_w, need_h in tracker.growth_candidates(w, h):
                if not spec.fits_ceiling(need_w, need_h):
                    continue
                size = (
                    spec.round_up(tracker.width, need_w, spec.max_width),
                    spec.round_up(tracker.height, need_h, spec.max_height),
                )
                key = (size[0] * size[1], max(size), size[0])
                if best_key is None or key < best_key:
                    best, best_key = size, key
        return best

    def plan(
        self,
        current: Optional[FreeSpaceTracker],
        width: int,
        height: int,
        allow_rotation: bool = False
    ) -> GrowthPlan:
        """
        Decide how to fit a footprint that no existing page can host.

        Args:
            current: Tracker of the last opened page, or None before the first page
            width: Footprint width (padding included)
            height: Footprint height (padding included)
            allow_rotation: Whether the sprite may be turned by 90 degrees
        """
        spec = self.page_spec

        if current is not None:
            size = self.grown_size(current, width, height, allow_rotation)
            if size is not None:
                return GrowthPlan(GrowthKind.GROW_PAGE, *size)

        # The first page is always allowed, even in single-page mode
        if current is None or spec.allow_new_pages:
            fresh = FreeSpaceTracker(spec.initial_width, spec.initial_height)
            if fresh.can_fit(width, height, allow_rotation):
                return GrowthPlan(GrowthKind.NEW_PAGE, spec.initial_width, spec.initial_height)
            size = self.grown_size(fresh, width, height, allow_rotation)
            if size is not None:
                return GrowthPlan(GrowthKind.NEW_PAGE, *size)

        return GrowthPlan(GrowthKind.EXHAUSTED)
