"""
Registry of loaded sprite sources.

Dispatches on file extension, loads each file once (by resolved path) and
turns everything loaded into one SpriteCatalog plus the image lookup the
compositor draws from.
"""

import logging
from pathlib import Path
from typing import Dict, List, Union

from PIL import Image

from atlasmith.exceptions import SourceError
from atlasmith.packing.catalog import SpriteCatalog
from .base import SourceSprite
from .fnt import FontSource, load_font_sprites
from .images import IMAGE_EXTENSIONS, load_image_sprites
from .tileset import load_tileset_sprites

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = IMAGE_EXTENSIONS + ('.fnt', '.tsj')


class SourceSet:
    """
    Sprites gathered from any mix of images, image directories, fonts and tilesets.

    Example:
        >>> sources = SourceSet()
        >>> sources.load("sprites/")
        >>> sources.load("fonts/m5x7.fnt")
        >>> catalog = sources.catalog(padding=1)
    """

    def __init__(self):
        self.sprites: List[SourceSprite] = []
        self.fonts: List[FontSource] = []
        self._loaded: Dict[Path, List[SourceSprite]] = {}

    def __len__(self) -> int:
        return len(self.sprites)

    def load(self, path: Union[str, Path]) -> List[SourceSprite]:
        """
        Load a source file or image directory.

        Loading the same file twice is a no-op returning the first result.

        Raises:
            SourceError: Missing path, unsupported extension, or a sprite id
                that another source already uses
        """
        path = Path(path)
        if not path.exists():
            raise SourceError(f"Source not found: {path}")

        resolved = path.resolve()
        if resolved in self._loaded:
            logger.info(f"Source '{path}' has been loaded already")
            return self._loaded[resolved]

        suffix = path.suffix.lower()
        font = None
        if path.is_dir() or suffix in IMAGE_EXTENSIONS:
            loaded = load_image_sprites(path)
        elif suffix == '.fnt':
            font = load_font_sprites(path)
            loaded = font.sprites
        elif suffix == '.tsj':
            loaded = load_tileset_sprites(path)
        else:
            raise SourceError(
                f"Unrecognized source file extension '{suffix}'. "
                f"Supported: {', '.join(SUPPORTED_EXTENSIONS)} or a directory"
            )

        known = {s.id: s.source for s in self.sprites}
        for sprite in loaded:
            if sprite.id in known:
                raise SourceError(
                    f"Sprite id '{sprite.id}' from '{path}' is already taken by '{known[sprite.id]}'"
                )
            known[sprite.id] = sprite.source

        if font is not None and any(f.name == font.name for f in self.fonts):
            raise SourceError(f"Font name '{font.name}' from '{path}' is already taken")

        self._loaded[resolved] = loaded
        self.sprites.extend(loaded)
        if font is not None:
            self.fonts.append(font)
        return loaded

    @property
    def images(self) -> Dict[str, Image.Image]:
        return {s.id: s.image for s in self.sprites}

    def catalog(self, padding: int = 0, allow_rotation: bool = False) -> SpriteCatalog:
        """All loaded sprites, in load order, with uniform padding/rotation settings."""
        return SpriteCatalog(s.to_spec(padding, allow_rotation) for s in self.sprites)
