"""
Plain image sources: a PNG file, or a directory tree of PNG files.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from PIL import Image

from atlasmith.exceptions import SourceError
from .base import SourceSprite

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ('.png',)


def open_rgba(path: Path) -> Image.Image:
    """Decode an image file fully into memory as RGBA."""
    try:
        with Image.open(path) as img:
            img.load()
            return img.convert('RGBA')
    except (OSError, ValueError) as e:
        raise SourceError(f"Failed to read image '{path}': {e}") from e


def load_image_sprites(path: Union[str, Path], prefix: Optional[str] = None) -> List[SourceSprite]:
    """
    Load one sprite per image.

    A single file gives a sprite named after its stem. A directory is walked
    recursively in sorted order; ids are the relative path without extension
    (e.g. "hero/walk_0").

    Args:
        path: Image file or directory
        prefix: Optional id prefix, joined with "/"
    """
    path = Path(path)
    if path.is_dir():
        files = sorted(
            p for p in path.rglob('*')
            if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS
        )
        if not files:
            logger.warning(f"No images found in {path}")
        entries = [(p, p.relative_to(path).with_suffix('').as_posix()) for p in files]
    elif path.is_file():
        entries = [(path, path.stem)]
    else:
        raise SourceError(f"Image source not found: {path}")

    sprites = []
    for file_path, name in entries:
        sprite_id = f"{prefix}/{name}" if prefix else name
        sprites.append(SourceSprite(
            id=sprite_id,
            image=open_rgba(file_path),
            metadata={"source": file_path.name},
            source=file_path,
        ))
    logger.info(f"Loaded {len(sprites)} image sprite(s) from {path}")
    return sprites
