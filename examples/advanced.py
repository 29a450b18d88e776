"""
Atlasmith Advanced Example

Builds a real atlas from a sprite directory and a bitmap font, writes both
index formats and shows how to handle sprites that do not fit.

Usage:
    python examples/advanced.py sprites/ fonts/m5x7.fnt
"""

import sys

from atlasmith import AtlasConfig, PackFailedError, PageSpec, build_atlas
from atlasmith.sources import SourceSet

sources = SourceSet()
for path in sys.argv[1:]:
    sources.load(path)

print(f"Loaded {len(sources)} sprites")
for font in sources.fonts:
    print(f"  font '{font.name}': line height {font.line_height}, {len(font.glyph_only)} empty glyphs")

config = AtlasConfig(
    name="game",
    page=PageSpec(initial_width=256, initial_height=256, max_width=1024, max_height=1024),
    padding=2,
    allow_rotation=True,
    extrude=True,
)

try:
    result = build_atlas(config, "output", sources=sources)
except PackFailedError as e:
    print(f"Some sprites did not fit: {e}")
    for failure in e.failures:
        print(f"  {failure.sprite_id}: {failure.message}")
    sys.exit(1)

print(f"✅ Wrote {len(result.textures)} page(s) and {result.index}")

binary = build_atlas(config.model_copy(update={"format": "bin", "name": "game_bin"}), "output", sources=sources)
print(f"✅ Wrote binary index {binary.index}")
