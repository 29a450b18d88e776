"""
Pixel compositor.

Draws sprite images into page-sized RGBA buffers according to a LayoutResult.
Rotated placements store the sprite turned 90 degrees clockwise; a consumer
undoes that with a counter-clockwise turn after cropping the frame.
"""

import logging
from typing import List, Mapping

from PIL import Image

from atlasmith.exceptions import AtlasError
from atlasmith.packing.geometry import Rect
from atlasmith.packing.layout import LayoutResult, Placement

logger = logging.getLogger(__name__)


def compose_pages(
    layout: LayoutResult,
    images: Mapping[str, Image.Image],
    extrude: bool = False
) -> List[Image.Image]:
    """
    Render every page of a layout.

    Args:
        layout: Packed layout
        images: sprite_id -> source image (unrotated)
        extrude: Copy each sprite's edge pixels into its padding border

    Returns:
        One RGBA image per page, in page order

    Raises:
        AtlasError: If an image is missing or does not match its placement
    """
    pages = []
    for page in layout.pages:
        canvas = Image.new('RGBA', (page.width, page.height), (0, 0, 0, 0))
        for placement in page.placements:
            sprite = _prepare_sprite(placement, images)
            if extrude and placement.padding:
                _extrude(canvas, sprite, placement.frame, placement.padding)
            canvas.paste(sprite, (placement.x, placement.y))
        pages.append(canvas)
        logger.info(
            f"Composed page {page.index} ({page.width}x{page.height}, "
            f"{len(page.placements)} sprites, {page.fill_ratio:.0%} filled)"
        )
    return pages


def _prepare_sprite(placement: Placement, images: Mapping[str, Image.Image]) -> Image.Image:
    image = images.get(placement.sprite_id)
    if image is None:
        raise AtlasError(f"No image for sprite '{placement.sprite_id}'")
    if image.mode != 'RGBA':
        image = image.convert('RGBA')
    if placement.rotated:
        image = image.transpose(Image.Transpose.ROTATE_270)

    frame = placement.frame
    if image.size != (frame.width, frame.height):
        raise AtlasError(
            f"Image for '{placement.sprite_id}' is {image.width}x{image.height}, "
            f"placement expects {frame.width}x{frame.height}"
        )
    return image


def _extrude(canvas: Image.Image, sprite: Image.Image, frame: Rect, padding: int) -> None:
    """Stretch the outermost rows/columns of the sprite across its padding."""
    w, h = sprite.size
    x, y = frame.x, frame.y

    top = sprite.crop((0, 0, w, 1)).resize((w, padding), Image.NEAREST)
    bottom = sprite.crop((0, h - 1, w, h)).resize((w, padding), Image.NEAREST)
    left = sprite.crop((0, 0, 1, h)).resize((padding, h), Image.NEAREST)
    right = sprite.crop((w - 1, 0, w, h)).resize((padding, h), Image.NEAREST)
    canvas.paste(top, (x, y - padding))
    canvas.paste(bottom, (x, y + h))
    canvas.paste(left, (x - padding, y))
    canvas.paste(right, (x + w, y))

    corners = [
        ((0, 0), (x - padding, y - padding)),
        ((w - 1, 0), (x + w, y - padding)),
        ((0, h - 1), (x - padding, y + h)),
        ((w - 1, h - 1), (x + w, y + h)),
    ]
    for source, target in corners:
        canvas.paste(Image.new('RGBA', (padding, padding), sprite.getpixel(source)), target)
