"""
Sprite importers.

Turn images, image directories, BMFont descriptors and Tiled tilesets into
SourceSprite entries (pixels plus metadata) for the packer.
"""
from .base import SourceSprite
from .fnt import FntFile, FontSource, load_font_sprites
from .images import load_image_sprites
from .source_set import SUPPORTED_EXTENSIONS, SourceSet
from .tileset import load_tileset_sprites

__all__ = [
    'SourceSprite',
    'FntFile',
    'FontSource',
    'load_font_sprites',
    'load_image_sprites',
    'load_tileset_sprites',
    'SourceSet',
    'SUPPORTED_EXTENSIONS',
]
