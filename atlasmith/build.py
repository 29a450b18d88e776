"""
Atlas build pipeline

Loads sources, packs them, renders the pages and writes page images plus the
layout index (page textures plus the text layout data of any fonts):

    <output_dir>/<name>_0.png
    <output_dir>/<name>_1.png      (only if a second page was needed)
    <output_dir>/<name>.json       (or <name>.bin)
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from atlasmith.compositor import compose_pages
from atlasmith.config import AtlasConfig
from atlasmith.packing.layout import LayoutResult
from atlasmith.packing.packer import pack
from atlasmith.schema.layout_io import save_layout
from atlasmith.sources.source_set import SourceSet

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """
    Files written by one build.

    Attributes:
        layout: Final layout (page texture names filled in)
        textures: Paths of the page images, in page order
        index: Path of the layout index
    """
    layout: LayoutResult
    textures: List[Path] = field(default_factory=list)
    index: Optional[Path] = None


def build_atlas(
    config: AtlasConfig,
    output_dir: Union[str, Path],
    sources: Optional[SourceSet] = None
) -> BuildResult:
    """
    Build an atlas from a configuration.

    Args:
        config: What to pack and how
        output_dir: Directory receiving page images and the index (created if missing)
        sources: Pre-loaded sources; config.sources are loaded into it as well

    Returns:
        BuildResult

    Raises:
        SourceError: If a source cannot be loaded
        PackError: If the catalog is invalid or sprites do not fit
    """
    output_dir = Path(output_dir)
    if sources is None:
        sources = SourceSet()
    for path in config.sources:
        sources.load(path)

    catalog = sources.catalog(padding=config.padding, allow_rotation=config.allow_rotation)
    layout = pack(catalog, config.page)

    images = compose_pages(layout, sources.images, extrude=config.extrude)

    output_dir.mkdir(parents=True, exist_ok=True)
    textures = []
    for page, image in zip(layout.pages, images):
        texture_path = output_dir / f"{config.name}_{page.index}.png"
        image.save(texture_path, format='PNG')
        textures.append(texture_path)

    layout = layout.with_textures([p.name for p in textures])
    layout = layout.with_fonts([font.to_metrics() for font in sources.fonts])
    index_path = output_dir / f"{config.name}.{config.format}"
    save_layout(layout, index_path)

    if layout.pages:
        fill = sum(p.used_area for p in layout.pages) / sum(p.width * p.height for p in layout.pages)
        logger.info(f"Built atlas '{config.name}': {len(catalog)} sprites, {len(layout.pages)} page(s), {fill:.0%} filled")
    else:
        logger.warning(f"Built atlas '{config.name}' with no sprites")

    return BuildResult(layout=layout, textures=textures, index=index_path)
