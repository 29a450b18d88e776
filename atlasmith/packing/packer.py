"""
Placement algorithm.

Greedy best-area-fit over maximal free rectangles:

    1. validate the whole catalog up front
    2. sort sprites: longest footprint side desc, footprint area desc, catalog index
    3. for each sprite, take the first page (by index) with a fitting free rect,
       choosing the best rect on that page (see FreeSpaceTracker.best_fit)
    4. otherwise ask the PageGrower to grow the last page or open a new one
    5. sprites that still fit nowhere are recorded as failures; packing goes on

Sort order and every tie-break are fixed, so packing the same catalog twice
gives identical layouts.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Union

from atlasmith.exceptions import PackFailedError
from .catalog import SpriteCatalog, SpriteSpec
from .free_space import Fit, FreeSpaceTracker
from .grower import GrowthKind, PageGrower, PageSpec
from .layout import FailureReason, LayoutResult, Page, Placement, SpriteFailure

logger = logging.getLogger(__name__)


@dataclass
class PageState:
    """Mutable per-page state, owned by a single Packer."""
    index: int
    tracker: FreeSpaceTracker
    placements: List[Placement] = field(default_factory=list)

    @property
    def width(self) -> int:
        return self.tracker.width

    @property
    def height(self) -> int:
        return self.tracker.height


def sort_for_packing(catalog: Iterable[SpriteSpec]) -> List[SpriteSpec]:
    """Sprites in placement order (stable: ties keep catalog order)."""
    indexed = list(enumerate(catalog))
    indexed.sort(key=lambda item: (
        -max(item[1].footprint_width, item[1].footprint_height),
        -item[1].footprint_area,
        item[0],
    ))
    return [sprite for _, sprite in indexed]


class Packer:
    """
    Runs one pack invocation.

    A Packer is single-use: its pages and free-space trackers belong to the
    run and are exposed afterwards only for inspection.

    Example:
        >>> packer = Packer(PageSpec(initial_width=128, initial_height=128))
        >>> layout = packer.run(catalog)
        >>> packer.pages[0].tracker.free_rects
    """

    def __init__(self, page_spec: Optional[PageSpec] = None):
        self.page_spec = page_spec or PageSpec()
        self.grower = PageGrower(self.page_spec)
        self.pages: List[PageState] = []
        self.failures: List[SpriteFailure] = []
        self._used = False

    def run(self, catalog: SpriteCatalog) -> LayoutResult:
        """
        Pack every sprite of the catalog.

        Returns:
            LayoutResult with every sprite placed (empty for an empty catalog)

        Raises:
            InvalidCatalogError: Duplicate ids or invalid sprites; nothing was placed
            PackFailedError: Some sprites fit nowhere; carries the partial layout
        """
        if self._used:
            raise RuntimeError("Packer instances are single-use; create a new one per catalog")
        self._used = True

        catalog.validate(self.page_spec)

        for sprite in sort_for_packing(catalog):
            self.place(sprite)

        layout = self.layout()
        layout.check_complete(catalog.ids)

        if self.failures:
            logger.warning(
                f"Packed {len(layout.placements)}/{len(catalog)} sprites; "
                f"{len(self.failures)} did not fit"
            )
            raise PackFailedError(
                f"{len(self.failures)} sprite(s) could not be placed: "
                + ", ".join(f.sprite_id for f in self.failures),
                layout,
            )

        if layout.pages:
            sizes = ", ".join(f"{p.width}x{p.height}" for p in layout.pages)
            logger.info(f"Packed {len(catalog)} sprites into {len(layout.pages)} page(s): {sizes}")
        return layout

    def place(self, sprite: SpriteSpec) -> Optional[Placement]:
        """Place one sprite, growing or opening pages as needed; None if it fits nowhere."""
        w, h = sprite.footprint_width, sprite.footprint_height

        for page in self.pages:
            fit = page.tracker.best_fit(w, h, sprite.allow_rotation)
            if fit is not None:
                return self._commit(page, sprite, fit)

        current = self.pages[-1].tracker if self.pages else None
        plan = self.grower.plan(current, w, h, sprite.allow_rotation)

        if plan.kind is GrowthKind.GROW_PAGE:
            page = self.pages[-1]
            logger.debug(
                f"Growing page {page.index} from {page.width}x{page.height} "
                f"to {plan.width}x{plan.height} for '{sprite.id}'"
            )
            page.tracker.grow(plan.width, plan.height)
        elif plan.kind is GrowthKind.NEW_PAGE:
            page = self._open_page(plan.width, plan.height)
            logger.debug(f"Opened page {page.index} at {plan.width}x{plan.height} for '{sprite.id}'")
        else:
            self.failures.append(SpriteFailure(
                sprite_id=sprite.id,
                reason=FailureReason.PAGE_CAPACITY_EXHAUSTED,
                message=f"footprint {w}x{h} fits on no page within the growth policy",
            ))
            logger.warning(f"No room for sprite '{sprite.id}' ({w}x{h})")
            return None

        fit = page.tracker.best_fit(w, h, sprite.allow_rotation)
        if fit is None:
            raise RuntimeError(f"Page {page.index} was resized for '{sprite.id}' but still has no room")
        return self._commit(page, sprite, fit)

    def layout(self) -> LayoutResult:
        """Snapshot of the current pages and failures."""
        return LayoutResult(
            pages=[
                Page(index=p.index, width=p.width, height=p.height, placements=list(p.placements))
                for p in self.pages
            ],
            failures=list(self.failures),
        )

    def _open_page(self, width: int, height: int) -> PageState:
        page = PageState(index=len(self.pages), tracker=FreeSpaceTracker(width, height))
        self.pages.append(page)
        return page

    def _commit(self, page: PageState, sprite: SpriteSpec, fit: Fit) -> Placement:
        target = fit.target
        page.tracker.occupy(target)
        placement = Placement(
            sprite_id=sprite.id,
            page_index=page.index,
            x=target.x + sprite.padding,
            y=target.y + sprite.padding,
            width=target.width,
            height=target.height,
            rotated=fit.rotated,
            padding=sprite.padding,
            metadata=sprite.metadata,
        )
        page.placements.append(placement)
        return placement


def pack(
    catalog: Union[SpriteCatalog, Iterable[SpriteSpec]],
    page_spec: Optional[PageSpec] = None
) -> LayoutResult:
    """
    Pack sprites into atlas pages.

    Args:
        catalog: SpriteCatalog (or any iterable of SpriteSpec)
        page_spec: Page constraints (defaults: 256x256 growing to 2048x2048, power-of-two)

    Returns:
        LayoutResult

    Raises:
        InvalidCatalogError: Catalog-level problems, reported for every offending sprite
        PackFailedError: Sprites left over; the partial layout is on the exception

    Example:
        >>> catalog = SpriteCatalog.from_sizes({"a": (64, 64), "b": (32, 32)})
        >>> layout = pack(catalog, PageSpec(initial_width=128, initial_height=128))
        >>> layout.placement_for("a").x
        0
    """
    if not isinstance(catalog, SpriteCatalog):
        catalog = SpriteCatalog(catalog)
    return Packer(page_spec).run(catalog)
