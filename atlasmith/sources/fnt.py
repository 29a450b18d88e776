"""
BMFont text descriptor (.fnt) importer.

Format (one declaration per line, attributes as key=value):

    info face="m5x7" size=16 bold=0 italic=0 charset="" unicode=1 stretchH=100 smooth=0 aa=1 padding=0,0,0,0 spacing=0,0
    common lineHeight=16 base=12 scaleW=128 scaleH=128 pages=1 packed=0
    page id=0 file="m5x7_0.png"
    chars count=95
    char id=65 x=0 y=0 width=5 height=9 xoffset=0 yoffset=3 xadvance=6 page=0 chnl=15
    kernings count=1
    kerning first=65 second=86 amount=-1

Every glyph becomes one sprite cropped from its page image. Glyphs with no
pixels (space) are kept aside with their metrics since they have nothing to pack.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple, Union

from atlasmith.exceptions import SourceError
from atlasmith.packing.layout import FontMetrics, GlyphMetrics, KerningPair
from .base import SourceSprite
from .images import open_rgba

logger = logging.getLogger(__name__)

_ATTRIBUTE = re.compile(r'(\w+)=("[^"]*"|\S+)')


@dataclass
class FntInfo:
    face: str = ""
    size: int = 0
    bold: int = 0
    italic: int = 0
    charset: str = ""
    unicode: int = 0
    stretch_h: int = 100
    smooth: int = 0
    aa: int = 0
    padding: Tuple[int, ...] = (0, 0, 0, 0)
    spacing: Tuple[int, ...] = (0, 0)


@dataclass
class FntCommon:
    line_height: int = 0
    base: int = 0
    scale_w: int = 0
    scale_h: int = 0
    num_pages: int = 0
    packed: int = 0


@dataclass
class FntPage:
    id: int = 0
    file: str = ""


@dataclass
class FntChar:
    id: int = 0
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0
    x_offset: int = 0
    y_offset: int = 0
    x_advance: int = 0
    page: int = 0
    chnl: int = 0


@dataclass
class FntKerning:
    first: int = 0
    second: int = 0
    amount: int = 0


def _int(value: str) -> int:
    return int(value)


def _string(value: str) -> str:
    if len(value) < 2 or not (value.startswith('"') and value.endswith('"')):
        raise ValueError(f"expected a quoted string, got {value}")
    return value[1:-1]


def _int_list(value: str) -> Tuple[int, ...]:
    return tuple(int(v) for v in value.split(','))


# keyword -> (record type, {attribute: (field, converter)})
_DECLARATIONS: Dict[str, Tuple[type, Dict[str, Tuple[str, Callable[[str], Any]]]]] = {
    "info": (FntInfo, {
        "face": ("face", _string),
        "size": ("size", _int),
        "bold": ("bold", _int),
        "italic": ("italic", _int),
        "charset": ("charset", _string),
        "unicode": ("unicode", _int),
        "stretchH": ("stretch_h", _int),
        "smooth": ("smooth", _int),
        "aa": ("aa", _int),
        "padding": ("padding", _int_list),
        "spacing": ("spacing", _int_list),
    }),
    "common": (FntCommon, {
        "lineHeight": ("line_height", _int),
        "base": ("base", _int),
        "scaleW": ("scale_w", _int),
        "scaleH": ("scale_h", _int),
        "pages": ("num_pages", _int),
        "packed": ("packed", _int),
    }),
    "page": (FntPage, {
        "id": ("id", _int),
        "file": ("file", _string),
    }),
    "char": (FntChar, {
        "id": ("id", _int),
        "x": ("x", _int),
        "y": ("y", _int),
        "width": ("width", _int),
        "height": ("height", _int),
        "xoffset": ("x_offset", _int),
        "yoffset": ("y_offset", _int),
        "xadvance": ("x_advance", _int),
        "page": ("page", _int),
        "chnl": ("chnl", _int),
    }),
    "kerning": (FntKerning, {
        "first": ("first", _int),
        "second": ("second", _int),
        "amount": ("amount", _int),
    }),
}

# Count lines carry nothing the importer needs
_IGNORED = {"chars", "kernings"}


def _parse_declaration(keyword: str, rest: str, line_no: int):
    record_type, attributes = _DECLARATIONS[keyword]
    record = record_type()
    for key, value in _ATTRIBUTE.findall(rest):
        if key not in attributes:
            logger.debug(f"Ignoring unknown attribute '{key}' in fnt '{keyword}' (line {line_no})")
            continue
        field_name, convert = attributes[key]
        try:
            setattr(record, field_name, convert(value))
        except ValueError as e:
            raise SourceError(f"fnt line {line_no}: bad value for '{key}': {e}") from e
    return record


@dataclass
class FntFile:
    info: FntInfo = field(default_factory=FntInfo)
    common: FntCommon = field(default_factory=FntCommon)
    pages: List[FntPage] = field(default_factory=list)
    chars: List[FntChar] = field(default_factory=list)
    kernings: List[FntKerning] = field(default_factory=list)

    @classmethod
    def parse(cls, text: str) -> "FntFile":
        """
        Parse a BMFont text descriptor.

        Raises:
            SourceError: On malformed attribute values
        """
        fnt = cls()
        for line_no, line in enumerate(text.splitlines(), start=1):
            line = line.strip()
            if not line:
                continue
            keyword, _, rest = line.partition(' ')
            if keyword in _IGNORED:
                continue
            if keyword not in _DECLARATIONS:
                logger.warning(f"Unrecognized fnt declaration '{keyword}' (line {line_no})")
                continue

            record = _parse_declaration(keyword, rest, line_no)
            if keyword == "info":
                fnt.info = record
            elif keyword == "common":
                fnt.common = record
            elif keyword == "page":
                fnt.pages.append(record)
            elif keyword == "char":
                fnt.chars.append(record)
            else:
                fnt.kernings.append(record)
        return fnt

    def dependencies(self) -> List[str]:
        """Page image files referenced by this font, relative to the .fnt file."""
        return [page.file for page in self.pages]


@dataclass
class FontSource:
    """Sprites of one font plus the font-level metrics a game needs to lay out text."""
    name: str
    line_height: int
    base: int
    sprites: List[SourceSprite] = field(default_factory=list)
    glyph_only: List[Dict[str, Any]] = field(default_factory=list)
    kernings: List[FntKerning] = field(default_factory=list)

    def to_metrics(self) -> FontMetrics:
        """The font block written into the layout index."""
        return FontMetrics(
            name=self.name,
            line_height=self.line_height,
            base=self.base,
            glyph_only=[
                GlyphMetrics(
                    char_code=g["char_code"],
                    x_offset=g["x_offset"],
                    y_offset=g["y_offset"],
                    x_advance=g["x_advance"],
                )
                for g in self.glyph_only
            ],
            kernings=[KerningPair(first=k.first, second=k.second, amount=k.amount) for k in self.kernings],
        )


def _printable(code: int) -> str:
    try:
        ch = chr(code)
    except (ValueError, OverflowError):
        return '?'
    return ch if ch.isprintable() else '⌧'


def load_font_sprites(path: Union[str, Path]) -> FontSource:
    """
    Load a .fnt file and cut every glyph out of its page images.

    Sprite ids are "<face>/<char code>"; metadata holds the glyph metrics.

    Raises:
        SourceError: Unreadable file, missing page image or glyph outside its page
    """
    path = Path(path)
    try:
        text = path.read_text(encoding='utf-8')
    except OSError as e:
        raise SourceError(f"Failed to read fnt file '{path}': {e}") from e

    fnt = FntFile.parse(text)
    name = fnt.info.face or path.stem

    page_images = {}
    for page in fnt.pages:
        page_path = path.parent / page.file
        if not page_path.exists():
            raise SourceError(f"Font '{name}' references missing page image '{page_path}'")
        page_images[page.id] = open_rgba(page_path)

    font = FontSource(
        name=name,
        line_height=fnt.common.line_height,
        base=fnt.common.base,
        kernings=list(fnt.kernings),
    )

    for ch in fnt.chars:
        metrics = {
            "font": name,
            "char_code": ch.id,
            "x_offset": ch.x_offset,
            "y_offset": ch.y_offset,
            "x_advance": ch.x_advance,
            "line_height": fnt.common.line_height,
            "base": fnt.common.base,
        }
        if ch.width <= 0 or ch.height <= 0:
            font.glyph_only.append(metrics)
            continue

        page_image = page_images.get(ch.page)
        if page_image is None:
            raise SourceError(
                f"Character '{_printable(ch.id)}' (#{ch.id}) of font '{name}' is on unknown page {ch.page}"
            )
        box = (ch.x, ch.y, ch.x + ch.width, ch.y + ch.height)
        if ch.x < 0 or ch.y < 0 or box[2] > page_image.width or box[3] > page_image.height:
            raise SourceError(
                f"Character '{_printable(ch.id)}' (#{ch.id}) of font '{name}' lies outside its page image"
            )
        font.sprites.append(SourceSprite(
            id=f"{name}/{ch.id}",
            image=page_image.crop(box),
            metadata=metrics,
            source=path,
        ))

    logger.info(
        f"Loaded font '{name}': {len(font.sprites)} glyph sprites, "
        f"{len(font.glyph_only)} empty glyphs"
    )
    return font
