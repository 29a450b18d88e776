"""
Free-space bookkeeping for a single atlas page.

Uses the maximal-rectangles representation: the free area of a page is kept as
a list of rectangles that may overlap each other but never overlap a placed
footprint, and whose union is exactly the unused area of the page.

    +---------------+-------+
    |  placed       |       |
    +-------+-------+   B   |     A = free rect below the placement
    |       A               |     B = free rect right of the placement
    +-----------------------+     A and B overlap in the lower right corner
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Set, Tuple

from .geometry import FreeRect, Rect

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fit:
    """A candidate placement: a free rectangle and the footprint placed in its corner."""
    rect: FreeRect
    width: int
    height: int
    rotated: bool

    @property
    def target(self) -> Rect:
        """The footprint as it will be occupied (top-left corner of the free rect)."""
        return Rect(self.rect.x, self.rect.y, self.width, self.height)

    @property
    def leftover_area(self) -> int:
        return self.rect.area - self.width * self.height

    @property
    def short_side_leftover(self) -> int:
        return min(self.rect.width - self.width, self.rect.height - self.height)


class FreeSpaceTracker:
    """
    Tracks the free rectangles of one page.

    Owned by exactly one page of one pack invocation. Both mutating
    operations (occupy, grow) keep the free set equal to the true free area.
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Page size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._free: List[FreeRect] = [FreeRect(0, 0, width, height)]

    @property
    def free_rects(self) -> List[FreeRect]:
        return list(self._free)

    @property
    def free_area_upper_bound(self) -> int:
        """Sum of free rect areas (overcounts where rects overlap)."""
        return sum(r.area for r in self._free)

    def best_fit(self, width: int, height: int, allow_rotation: bool = False) -> Optional[Fit]:
        """
        Find the best free rectangle for a width x height footprint.

        Ranking, lowest wins:
            1. leftover area of the free rect after placement
            2. shorter leftover side
            3. y, then x of the free rect (top-left bias)
            4. unrotated before rotated

        Args:
            width: Footprint width in pixels (padding included)
            height: Footprint height in pixels (padding included)
            allow_rotation: Also consider the footprint turned by 90 degrees

        Returns:
            The winning Fit, or None if nothing on this page can host it
        """
        orientations = [(width, height, False)]
        if allow_rotation and width != height:
            orientations.append((height, width, True))

        best = None
        best_key = None
        for rect in self._free:
            for w, h, rotated in orientations:
                if not rect.fits(w, h):
                    continue
                fit = Fit(rect, w, h, rotated)
                key = (fit.leftover_area, fit.short_side_leftover, rect.y, rect.x, rotated)
                if best_key is None or key < best_key:
                    best, best_key = fit, key
        return best

    def can_fit(self, width: int, height: int, allow_rotation: bool = False) -> bool:
        return self.best_fit(width, height, allow_rotation) is not None

    def occupy(self, rect: Rect) -> None:
        """
        Mark a footprint as used, splitting every free rect it touches.

        Raises:
            ValueError: If the footprint is not entirely inside one free rect
        """
        if not any(free.contains(rect) for free in self._free):
            raise ValueError(f"Cannot occupy {rect}: region is not free")

        remaining: List[FreeRect] = []
        for free in self._free:
            if free.intersects(rect):
                remaining.extend(_split(free, rect))
            else:
                remaining.append(free)
        self._free = _prune(remaining)

    def grow(self, new_width: int, new_height: int) -> None:
        """
        Extend the page to new_width x new_height.

        Existing placements keep their coordinates: free rects touching the old
        right or bottom edge are stretched into the new area, and the new
        strips along the right and bottom edges are added.
        """
        if new_width < self.width or new_height < self.height:
            raise ValueError(
                f"Pages only grow: {self.width}x{self.height} -> {new_width}x{new_height}"
            )
        if (new_width, new_height) == (self.width, self.height):
            return

        old_width, old_height = self.width, self.height
        grown: List[FreeRect] = []
        for r in self._free:
            w = new_width - r.x if r.right == old_width else r.width
            h = new_height - r.y if r.bottom == old_height else r.height
            grown.append(FreeRect(r.x, r.y, w, h))

        if new_width > old_width:
            grown.append(FreeRect(old_width, 0, new_width - old_width, new_height))
        if new_height > old_height:
            grown.append(FreeRect(0, old_height, new_width, new_height - old_height))

        self.width, self.height = new_width, new_height
        self._free = _prune(grown)
        logger.debug(f"Grew page {old_width}x{old_height} -> {new_width}x{new_height}")

    def growth_candidates(self, width: int, height: int) -> List[Tuple[int, int]]:
        """
        Minimal page sizes at which a width x height footprint would fit after grow().

        Every free rect touching the right/bottom edge can be stretched, and the
        fresh strips to the right of and below the page are always available.
        Sizes are unquantized; the caller rounds them to its growth step.
        """
        candidates: Set[Tuple[int, int]] = set()
        for r in self._free:
            if r.right == self.width:
                need_w = r.x + width
            elif r.width >= width:
                need_w = self.width
            else:
                continue
            if r.bottom == self.height:
                need_h = r.y + height
            elif r.height >= height:
                need_h = self.height
            else:
                continue
            candidates.add((max(need_w, self.width), max(need_h, self.height)))

        candidates.add((self.width + width, max(self.height, height)))
        candidates.add((max(self.width, width), self.height + height))
        return sorted(candidates)


def _split(free: FreeRect, used: Rect) -> List[FreeRect]:
    """Maximal rects covering free minus used (up to four, each spanning free fully on one axis)."""
    pieces = []
    if used.x > free.x:
        pieces.append(FreeRect(free.x, free.y, used.x - free.x, free.height))
    if used.right < free.right:
        pieces.append(FreeRect(used.right, free.y, free.right - used.right, free.height))
    if used.y > free.y:
        pieces.append(FreeRect(free.x, free.y, free.width, used.y - free.y))
    if used.bottom < free.bottom:
        pieces.append(FreeRect(free.x, used.bottom, free.width, free.bottom - used.bottom))
    return pieces


def _prune(rects: List[FreeRect]) -> List[FreeRect]:
    """Drop rects contained in another rect; of identical rects keep the first."""
    kept = []
    for i, r in enumerate(rects):
        redundant = False
        for j, other in enumerate(rects):
            if i == j or not other.contains(r):
                continue
            if other != r or j < i:
                redundant = True
                break
        if not redundant:
            kept.append(r)
    return kept
