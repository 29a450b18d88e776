"""
Packing engine.

Places sprite footprints onto growable atlas pages with a deterministic
best-area-fit heuristic over maximal free rectangles.
"""
from .catalog import SpriteCatalog, SpriteSpec
from .free_space import Fit, FreeSpaceTracker
from .geometry import FreeRect, Rect
from .grower import GrowthKind, GrowthPlan, PageGrower, PageSpec
from .layout import (
    FailureReason,
    FontMetrics,
    GlyphMetrics,
    KerningPair,
    LayoutResult,
    Page,
    Placement,
    SpriteFailure,
)
from .packer import Packer, pack, sort_for_packing

__all__ = [
    'SpriteCatalog',
    'SpriteSpec',
    'Fit',
    'FreeSpaceTracker',
    'FreeRect',
    'Rect',
    'GrowthKind',
    'GrowthPlan',
    'PageGrower',
    'PageSpec',
    'FailureReason',
    'FontMetrics',
    'GlyphMetrics',
    'KerningPair',
    'LayoutResult',
    'Page',
    'Placement',
    'SpriteFailure',
    'Packer',
    'pack',
    'sort_for_packing',
]
