"""
Atlasmith Quick Start Example

Packs a handful of sprites described only by their sizes and prints where
each one landed.
"""

from atlasmith import PageSpec, SpriteCatalog, pack

catalog = SpriteCatalog.from_sizes({
    "hero": (32, 48),
    "coin": (16, 16),
    "chest": (64, 32),
    "tree": (48, 96),
}, padding=1)

layout = pack(catalog, PageSpec(initial_width=128, initial_height=128, max_width=512, max_height=512))

for page in layout.pages:
    print(f"Page {page.index}: {page.width}x{page.height} ({page.fill_ratio:.0%} filled)")
    for p in page.placements:
        print(f"  {p.sprite_id:<6} at ({p.x}, {p.y})  footprint {p.width}x{p.height}")
