"""
Tests for layout index serialization (JSON and binary)
"""
import json

import pytest
from atlasmith.exceptions import SerializationError
from atlasmith.packing import (
    FailureReason,
    FontMetrics,
    GlyphMetrics,
    KerningPair,
    LayoutResult,
    Page,
    Placement,
    SpriteFailure,
)
from atlasmith.schema import (
    dump_binary,
    dump_json,
    layout_to_dict,
    load_binary,
    load_json,
    load_layout,
    save_layout,
)


@pytest.fixture
def layout():
    return LayoutResult(
        pages=[
            Page(index=0, width=64, height=32, texture="atlas_0.png", placements=[
                Placement(sprite_id="hero", page_index=0, x=1, y=1, width=18, height=30,
                          padding=1, metadata={"pivot": [0.5, 1.0], "tags": ["player"]}),
                Placement(sprite_id="ĉapelo/ñ", page_index=0, x=18, y=0, width=30, height=10,
                          rotated=True),
            ]),
            Page(index=1, width=16, height=16, placements=[
                Placement(sprite_id="coin", page_index=1, x=0, y=0, width=16, height=16),
            ]),
        ],
        failures=[
            SpriteFailure(sprite_id="boss", reason=FailureReason.PAGE_CAPACITY_EXHAUSTED,
                          message="footprint 200x200 fits on no page"),
        ],
        fonts=[
            FontMetrics(
                name="m5x7", line_height=16, base=12,
                glyph_only=[
                    GlyphMetrics(char_code=32, x_advance=4),
                    GlyphMetrics(char_code=9, x_offset=-1, x_advance=16),
                ],
                kernings=[KerningPair(first=65, second=86, amount=-1)],
            ),
            FontMetrics(name="empty"),
        ],
    )


class TestJson:
    """Test the JSON index"""

    def test_document_shape(self, layout):
        document = json.loads(dump_json(layout))
        assert document["meta"] == {"app": "atlasmith", "format": 1}
        page = document["pages"][0]
        assert page["texture"] == "atlas_0.png"
        assert page["sprites"][0]["id"] == "hero"
        assert page["sprites"][0]["metadata"] == {"pivot": [0.5, 1.0], "tags": ["player"]}
        assert document["failures"][0] == {
            "id": "boss",
            "reason": "page_capacity_exhausted",
            "message": "footprint 200x200 fits on no page",
        }
        assert document["fonts"][0] == {
            "name": "m5x7", "line_height": 16, "base": 12,
            "glyph_only": [
                {"char_code": 32, "x_offset": 0, "y_offset": 0, "x_advance": 4},
                {"char_code": 9, "x_offset": -1, "y_offset": 0, "x_advance": 16},
            ],
            "kernings": [{"first": 65, "second": 86, "amount": -1}],
        }

    def test_roundtrip(self, layout):
        assert load_json(dump_json(layout)) == layout

    def test_compact_output(self, layout):
        assert "\n" not in dump_json(layout, indent=None)

    def test_empty_layout(self):
        assert layout_to_dict(LayoutResult())["pages"] == []
        assert load_json(dump_json(LayoutResult())) == LayoutResult()

    def test_invalid_json(self):
        with pytest.raises(SerializationError):
            load_json("{not json")

    @pytest.mark.parametrize("meta", [[], "atlasmith", 1])
    def test_meta_must_be_object(self, meta):
        with pytest.raises(SerializationError, match="meta"):
            load_json(json.dumps({"meta": meta, "pages": []}))

    def test_document_without_fonts(self, layout):
        document = layout_to_dict(layout)
        del document["fonts"]
        assert load_json(json.dumps(document)).fonts == []

    def test_duplicate_font_names_rejected(self, layout):
        document = layout_to_dict(layout)
        document["fonts"][1]["name"] = "m5x7"
        with pytest.raises(SerializationError):
            load_json(json.dumps(document))

    def test_unknown_version(self, layout):
        document = layout_to_dict(layout)
        document["meta"]["format"] = 99
        with pytest.raises(SerializationError, match="version"):
            load_json(json.dumps(document))

    def test_overlapping_document_rejected(self, layout):
        document = layout_to_dict(layout)
        document["pages"][1]["sprites"].append(dict(document["pages"][1]["sprites"][0], id="coin2"))
        with pytest.raises(SerializationError):
            load_json(json.dumps(document))

    def test_unserializable_metadata(self):
        layout = LayoutResult(pages=[Page(index=0, width=8, height=8, placements=[
            Placement(sprite_id="a", page_index=0, x=0, y=0, width=8, height=8, metadata={"bad": object()}),
        ])])
        with pytest.raises(SerializationError):
            dump_json(layout)
        with pytest.raises(SerializationError):
            dump_binary(layout)


class TestBinary:
    """Test the binary index"""

    def test_roundtrip(self, layout):
        data = dump_binary(layout)
        assert data[:4] == b"ATLS"
        assert load_binary(data) == layout
        assert load_binary(data).fonts[0].glyph_only[1].x_offset == -1

    def test_bad_magic(self, layout):
        data = dump_binary(layout)
        with pytest.raises(SerializationError, match="magic"):
            load_binary(b"XXXX" + data[4:])

    def test_truncated(self, layout):
        data = dump_binary(layout)
        for cut in (2, 12, len(data) // 2, len(data) - 1):
            with pytest.raises(SerializationError):
                load_binary(data[:cut])

    def test_trailing_bytes(self, layout):
        with pytest.raises(SerializationError, match="trailing"):
            load_binary(dump_binary(layout) + b"\x00")

    def test_page_size_out_of_range(self):
        layout = LayoutResult(pages=[Page(index=0, width=2 ** 32, height=8)])
        with pytest.raises(SerializationError, match="out of range"):
            dump_binary(layout)

    def test_font_metric_out_of_range(self):
        layout = LayoutResult(fonts=[FontMetrics(name="f", line_height=2 ** 31)])
        with pytest.raises(SerializationError, match="out of range"):
            dump_binary(layout)

    def test_unsupported_version(self, layout):
        data = bytearray(dump_binary(layout))
        data[4] = 7
        with pytest.raises(SerializationError, match="version"):
            load_binary(bytes(data))


class TestFiles:
    """Test saving and loading by extension"""

    @pytest.mark.parametrize("name", ["atlas.json", "atlas.bin", "ATLAS.JSON"])
    def test_save_and_load(self, tmp_path, layout, name):
        path = tmp_path / name
        save_layout(layout, path)
        assert load_layout(path) == layout

    def test_unknown_extension(self, tmp_path, layout):
        with pytest.raises(ValueError, match="Unsupported"):
            save_layout(layout, tmp_path / "atlas.xml")
        (tmp_path / "atlas.xml").write_text("<atlas/>")
        with pytest.raises(ValueError, match="Unsupported"):
            load_layout(tmp_path / "atlas.xml")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_layout(tmp_path / "nope.json")
