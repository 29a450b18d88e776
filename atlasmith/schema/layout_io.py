"""
Layout index serialization.

Two lossless encodings of a LayoutResult:

JSON (human readable, what game engines usually load):
    {
      "meta": {"app": "atlasmith", "format": 1},
      "pages": [
        {"index": 0, "width": 256, "height": 256, "texture": "atlas_0.png",
         "sprites": [{"id": "hero", "page_index": 0, "x": 1, "y": 1,
                      "width": 34, "height": 50, "rotated": false,
                      "padding": 1, "metadata": {...}}]}
      ],
      "failures": [],
      "fonts": [{"name": "m5x7", "line_height": 16, "base": 12,
                 "glyph_only": [{"char_code": 32, "x_offset": 0, "y_offset": 0, "x_advance": 4}],
                 "kernings": [{"first": 65, "second": 86, "amount": -1}]}]
    }

Binary (compact, little-endian):
    header   b"ATLS" | u8 version | u32 page count | u32 failure count
    page     u32 index | u32 width | u32 height | str texture | u32 placement count
    sprite   str id | u32 x | u32 y | u32 width | u32 height | u32 padding
             | u8 rotated | str metadata (compact JSON)
    failure  str id | str reason | str message
    fonts    u32 font count, then per font:
             str name | i32 line height | i32 base
             | u32 glyph count | (i32 char code, x offset, y offset, x advance) per glyph
             | u32 kerning count | (i32 first, second, amount) per pair

    str = u32 byte length + UTF-8 bytes; an absent texture has length 0xFFFFFFFF
"""

import json
import logging
import struct
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from atlasmith.exceptions import SerializationError
from atlasmith.packing.layout import LayoutResult

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1
MAGIC = b"ATLS"

_HEADER = struct.Struct("<4sBII")
_PAGE = struct.Struct("<III")
_COUNT = struct.Struct("<I")
_PLACEMENT = struct.Struct("<IIIIIB")
_FONT = struct.Struct("<ii")
_GLYPH = struct.Struct("<iiii")
_KERNING = struct.Struct("<iii")
_NONE_LENGTH = 0xFFFFFFFF


#########################
# JSON
#########################

def layout_to_dict(layout: LayoutResult) -> Dict[str, Any]:
    """LayoutResult -> JSON-ready dict (the document written by dump_json)."""
    body = layout.model_dump(mode='json', by_alias=True)
    return {
        "meta": {"app": "atlasmith", "format": FORMAT_VERSION},
        "pages": body["pages"],
        "failures": body["failures"],
        "fonts": body["fonts"],
    }


def layout_from_dict(document: Dict[str, Any]) -> LayoutResult:
    if not isinstance(document, dict):
        raise SerializationError("Layout document must be a JSON object")
    meta = document.get("meta", {})
    if not isinstance(meta, dict):
        raise SerializationError("Layout 'meta' must be a JSON object")
    version = meta.get("format", FORMAT_VERSION)
    if version != FORMAT_VERSION:
        raise SerializationError(f"Unsupported layout format version: {version}")
    try:
        return LayoutResult.model_validate({
            "pages": document.get("pages", []),
            "failures": document.get("failures", []),
            "fonts": document.get("fonts", []),
        })
    except ValidationError as e:
        raise SerializationError(f"Invalid layout document: {e}") from e


def dump_json(layout: LayoutResult, indent: Optional[int] = 2) -> str:
    try:
        return json.dumps(layout_to_dict(layout), indent=indent)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Sprite metadata is not JSON serializable: {e}") from e


def load_json(text: str) -> LayoutResult:
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise SerializationError(f"Layout is not valid JSON: {e}") from e
    return layout_from_dict(document)


#########################
# BINARY
#########################

class _Writer:
    def __init__(self):
        self.chunks = []

    def pack(self, fmt: struct.Struct, *values) -> None:
        try:
            self.chunks.append(fmt.pack(*values))
        except struct.error as e:
            raise SerializationError(f"Value out of range for the binary layout {values}: {e}") from e

    def string(self, value: Optional[str]) -> None:
        if value is None:
            self.pack(_COUNT, _NONE_LENGTH)
            return
        data = value.encode('utf-8')
        self.pack(_COUNT, len(data))
        self.chunks.append(data)

    def getvalue(self) -> bytes:
        return b"".join(self.chunks)


class _Reader:
    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    def unpack(self, fmt: struct.Struct) -> tuple:
        try:
            values = fmt.unpack_from(self.data, self.offset)
        except struct.error as e:
            raise SerializationError(f"Truncated layout data at byte {self.offset}") from e
        self.offset += fmt.size
        return values

    def string(self) -> Optional[str]:
        (length,) = self.unpack(_COUNT)
        if length == _NONE_LENGTH:
            return None
        end = self.offset + length
        if end > len(self.data):
            raise SerializationError(f"Truncated string at byte {self.offset}")
        raw = self.data[self.offset:end]
        self.offset = end
        try:
            return raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise SerializationError(f"Invalid UTF-8 at byte {self.offset - length}") from e


def dump_binary(layout: LayoutResult) -> bytes:
    out = _Writer()
    out.pack(_HEADER, MAGIC, FORMAT_VERSION, len(layout.pages), len(layout.failures))
    for page in layout.pages:
        out.pack(_PAGE, page.index, page.width, page.height)
        out.string(page.texture)
        out.pack(_COUNT, len(page.placements))
        for p in page.placements:
            out.string(p.sprite_id)
            out.pack(_PLACEMENT, p.x, p.y, p.width, p.height, p.padding, int(p.rotated))
            try:
                out.string(json.dumps(p.metadata, separators=(',', ':')))
            except (TypeError, ValueError) as e:
                raise SerializationError(f"Metadata of '{p.sprite_id}' is not JSON serializable: {e}") from e
    for f in layout.failures:
        out.string(f.sprite_id)
        out.string(f.reason.value)
        out.string(f.message)
    out.pack(_COUNT, len(layout.fonts))
    for font in layout.fonts:
        out.string(font.name)
        out.pack(_FONT, font.line_height, font.base)
        out.pack(_COUNT, len(font.glyph_only))
        for g in font.glyph_only:
            out.pack(_GLYPH, g.char_code, g.x_offset, g.y_offset, g.x_advance)
        out.pack(_COUNT, len(font.kernings))
        for k in font.kernings:
            out.pack(_KERNING, k.first, k.second, k.amount)
    return out.getvalue()


def load_binary(data: bytes) -> LayoutResult:
    reader = _Reader(data)
    magic, version, page_count, failure_count = reader.unpack(_HEADER)
    if magic != MAGIC:
        raise SerializationError(f"Not an atlas layout (magic {magic!r})")
    if version != FORMAT_VERSION:
        raise SerializationError(f"Unsupported layout format version: {version}")

    pages = []
    for _ in range(page_count):
        index, width, height = reader.unpack(_PAGE)
        texture = reader.string()
        (count,) = reader.unpack(_COUNT)
        placements = []
        for _ in range(count):
            sprite_id = reader.string()
            x, y, w, h, padding, rotated = reader.unpack(_PLACEMENT)
            try:
                metadata = json.loads(reader.string())
            except (TypeError, json.JSONDecodeError) as e:
                raise SerializationError(f"Corrupt metadata for '{sprite_id}'") from e
            placements.append({
                "id": sprite_id, "page_index": index, "x": x, "y": y,
                "width": w, "height": h, "padding": padding,
                "rotated": bool(rotated), "metadata": metadata,
            })
        pages.append({
            "index": index, "width": width, "height": height,
            "texture": texture, "sprites": placements,
        })

    failures = []
    for _ in range(failure_count):
        failures.append({"id": reader.string(), "reason": reader.string(), "message": reader.string()})

    fonts = []
    (font_count,) = reader.unpack(_COUNT)
    for _ in range(font_count):
        name = reader.string()
        line_height, base = reader.unpack(_FONT)
        (glyph_count,) = reader.unpack(_COUNT)
        glyphs = []
        for _ in range(glyph_count):
            char_code, x_offset, y_offset, x_advance = reader.unpack(_GLYPH)
            glyphs.append({"char_code": char_code, "x_offset": x_offset,
                           "y_offset": y_offset, "x_advance": x_advance})
        (kerning_count,) = reader.unpack(_COUNT)
        kernings = [dict(zip(("first", "second", "amount"), reader.unpack(_KERNING)))
                    for _ in range(kerning_count)]
        fonts.append({"name": name, "line_height": line_height, "base": base,
                      "glyph_only": glyphs, "kernings": kernings})

    if reader.offset != len(data):
        raise SerializationError(f"{len(data) - reader.offset} trailing bytes after layout")

    try:
        return LayoutResult.model_validate({"pages": pages, "failures": failures, "fonts": fonts})
    except ValidationError as e:
        raise SerializationError(f"Invalid layout data: {e}") from e


#########################
# FILES
#########################

def save_layout(layout: LayoutResult, path: Union[str, Path]) -> None:
    """Write a layout index, format chosen by extension (.json or .bin)."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == '.json':
        path.write_text(dump_json(layout), encoding='utf-8')
    elif suffix == '.bin':
        path.write_bytes(dump_binary(layout))
    else:
        raise ValueError(f"Unsupported layout format: {suffix}. Supported: .json, .bin")
    logger.info(f"Wrote layout index {path}")


def load_layout(path: Union[str, Path]) -> LayoutResult:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Layout file not found: {path}")
    suffix = path.suffix.lower()
    if suffix == '.json':
        return load_json(path.read_text(encoding='utf-8'))
    if suffix == '.bin':
        return load_binary(path.read_bytes())
    raise ValueError(f"Unsupported layout format: {suffix}. Supported: .json, .bin")
