"""
Tests for rendering atlas pages
"""
import pytest
from PIL import Image
from atlasmith.compositor import compose_pages
from atlasmith.exceptions import AtlasError
from atlasmith.packing import LayoutResult, Page, Placement

RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)
WHITE = (255, 255, 255, 255)
CLEAR = (0, 0, 0, 0)


def single_page(*placements, size=(8, 8)):
    return LayoutResult(pages=[Page(index=0, width=size[0], height=size[1], placements=list(placements))])


def checker():
    """2x2 image with a distinct color in each pixel."""
    image = Image.new('RGBA', (2, 2))
    image.putpixel((0, 0), RED)
    image.putpixel((1, 0), GREEN)
    image.putpixel((0, 1), BLUE)
    image.putpixel((1, 1), WHITE)
    return image


class TestComposePages:
    """Test pixel placement"""

    def test_sprite_pasted_at_origin(self):
        layout = single_page(Placement(sprite_id="a", page_index=0, x=3, y=2, width=2, height=2))
        page = compose_pages(layout, {"a": checker()})[0]

        assert page.size == (8, 8)
        assert page.mode == 'RGBA'
        assert page.getpixel((3, 2)) == RED
        assert page.getpixel((4, 3)) == WHITE
        assert page.getpixel((0, 0)) == CLEAR

    def test_one_image_per_page(self):
        layout = LayoutResult(pages=[
            Page(index=0, width=4, height=4),
            Page(index=1, width=2, height=6),
        ])
        pages = compose_pages(layout, {})
        assert [p.size for p in pages] == [(4, 4), (2, 6)]

    def test_rotated_sprite_turned_clockwise(self):
        image = Image.new('RGBA', (4, 2), BLUE)
        image.putpixel((0, 0), RED)
        layout = single_page(Placement(sprite_id="a", page_index=0, x=0, y=0, width=2, height=4, rotated=True))

        page = compose_pages(layout, {"a": image})[0]
        assert page.getpixel((1, 0)) == RED
        assert page.getpixel((0, 0)) == BLUE
        assert page.getpixel((0, 3)) == BLUE

    def test_padding_left_clear_without_extrude(self):
        layout = single_page(Placement(sprite_id="a", page_index=0, x=1, y=1, width=4, height=4, padding=1))
        page = compose_pages(layout, {"a": checker()})[0]
        assert page.getpixel((0, 0)) == CLEAR
        assert page.getpixel((1, 0)) == CLEAR
        assert page.getpixel((1, 1)) == RED

    def test_extrude_fills_padding(self):
        layout = single_page(Placement(sprite_id="a", page_index=0, x=1, y=1, width=4, height=4, padding=1))
        page = compose_pages(layout, {"a": checker()}, extrude=True)[0]

        assert page.getpixel((0, 0)) == RED
        assert page.getpixel((1, 0)) == RED
        assert page.getpixel((2, 0)) == GREEN
        assert page.getpixel((3, 0)) == GREEN
        assert page.getpixel((0, 2)) == BLUE
        assert page.getpixel((3, 3)) == WHITE
        assert page.getpixel((1, 3)) == BLUE
        assert page.getpixel((4, 4)) == CLEAR

    def test_non_rgba_source_converted(self):
        layout = single_page(Placement(sprite_id="a", page_index=0, x=0, y=0, width=2, height=2))
        page = compose_pages(layout, {"a": Image.new('RGB', (2, 2), (0, 255, 0))})[0]
        assert page.getpixel((1, 1)) == GREEN

    def test_missing_image(self):
        layout = single_page(Placement(sprite_id="a", page_index=0, x=0, y=0, width=2, height=2))
        with pytest.raises(AtlasError, match="No image"):
            compose_pages(layout, {})

    def test_size_mismatch(self):
        layout = single_page(Placement(sprite_id="a", page_index=0, x=0, y=0, width=3, height=2))
        with pytest.raises(AtlasError, match="expects 3x2"):
            compose_pages(layout, {"a": checker()})
