"""
Tiled tileset (.tsj) importer.

Supports both tileset kinds Tiled writes:
- single-image tilesets, sliced on a grid using tilewidth/tileheight,
  margin, spacing and columns
- image-collection tilesets, where each tile entry names its own image

Tile ids become sprite ids "<tileset name>/<tile id>". Tile properties and
animation frames are passed through as metadata, e.g.

    {"tileset": "terrain", "tile_id": 4,
     "properties": {"solid": true},
     "animation": [{"tile": 4, "duration": 100}, {"tile": 5, "duration": 100}]}
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from atlasmith.exceptions import SourceError
from .base import SourceSprite
from .images import open_rgba

logger = logging.getLogger(__name__)


def _tile_metadata(name: str, tile_id: int, entry: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    metadata: Dict[str, Any] = {"tileset": name, "tile_id": tile_id}
    if not entry:
        return metadata
    if entry.get("type"):
        metadata["type"] = entry["type"]

    properties = entry.get("properties")
    if properties:
        if not isinstance(properties, list):
            raise SourceError(f"Tile {tile_id} of tileset '{name}' has malformed properties")
        metadata["properties"] = {}
        for prop in properties:
            if not isinstance(prop, dict) or not isinstance(prop.get("name"), str):
                raise SourceError(f"Tile {tile_id} of tileset '{name}' has a property without a name")
            metadata["properties"][prop["name"]] = prop.get("value")

    animation = entry.get("animation")
    if animation:
        if not isinstance(animation, list):
            raise SourceError(f"Tile {tile_id} of tileset '{name}' has a malformed animation")
        frames = []
        for frame in animation:
            if not isinstance(frame, dict) or not all(
                isinstance(frame.get(key), int) for key in ("tileid", "duration")
            ):
                raise SourceError(
                    f"Tile {tile_id} of tileset '{name}' has an animation frame without tileid/duration"
                )
            frames.append({"tile": frame["tileid"], "duration": frame["duration"]})
        metadata["animation"] = frames
    return metadata


def _tile_entries(data: Dict[str, Any], name: str) -> Dict[int, Dict[str, Any]]:
    """Per-tile entries of the "tiles" array, keyed by tile id."""
    tiles = data.get("tiles", [])
    if not isinstance(tiles, list):
        raise SourceError(f"Tileset '{name}' has a 'tiles' value that is not a list")
    entries = {}
    for position, tile in enumerate(tiles):
        if not isinstance(tile, dict):
            raise SourceError(f"Entry {position} of tileset '{name}' tiles is not an object")
        tile_id = tile.get("id")
        if not isinstance(tile_id, int) or isinstance(tile_id, bool):
            raise SourceError(f"Entry {position} of tileset '{name}' tiles has no integer id")
        entries[tile_id] = tile
    return entries


def _require_int(data: Dict[str, Any], key: str, path: Path, default: Optional[int] = None) -> int:
    value = data.get(key, default)
    if not isinstance(value, int) or isinstance(value, bool):
        raise SourceError(f"Tileset '{path}' has no valid '{key}'")
    return value


def load_tileset_sprites(path: Union[str, Path]) -> List[SourceSprite]:
    """
    Load every tile of a Tiled JSON tileset as a sprite.

    Raises:
        SourceError: Unreadable/invalid JSON, missing images, bad grid settings,
            malformed tile entries, properties or animation frames
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except (OSError, json.JSONDecodeError) as e:
        raise SourceError(f"Failed to read tileset '{path}': {e}") from e
    if not isinstance(data, dict):
        raise SourceError(f"Tileset '{path}' is not a JSON object")

    name = data.get("name") or path.stem
    entries = _tile_entries(data, name)

    sprites = []
    if "image" in data:
        if not isinstance(data["image"], str):
            raise SourceError(f"Tileset '{path}' has an 'image' that is not a path")
        sheet = open_rgba(path.parent / data["image"])
        tile_w = _require_int(data, "tilewidth", path)
        tile_h = _require_int(data, "tileheight", path)
        margin = _require_int(data, "margin", path, 0)
        spacing = _require_int(data, "spacing", path, 0)
        if tile_w <= 0 or tile_h <= 0:
            raise SourceError(f"Tileset '{path}' has non-positive tile size {tile_w}x{tile_h}")

        columns = (
            _require_int(data, "columns", path, 0)
            or (sheet.width - 2 * margin + spacing) // (tile_w + spacing)
        )
        rows = (sheet.height - 2 * margin + spacing) // (tile_h + spacing)
        count = _require_int(data, "tilecount", path, 0) or columns * rows
        if columns <= 0:
            raise SourceError(f"Tileset '{path}' has no tile columns")

        for tile_id in range(count):
            col, row = tile_id % columns, tile_id // columns
            x = margin + col * (tile_w + spacing)
            y = margin + row * (tile_h + spacing)
            if x + tile_w > sheet.width or y + tile_h > sheet.height:
                raise SourceError(f"Tile {tile_id} of tileset '{name}' lies outside '{data['image']}'")
            sprites.append(SourceSprite(
                id=f"{name}/{tile_id}",
                image=sheet.crop((x, y, x + tile_w, y + tile_h)),
                metadata=_tile_metadata(name, tile_id, entries.get(tile_id)),
                source=path,
            ))
    else:
        # Image collection: one file per tile
        for tile_id in sorted(entries):
            entry = entries[tile_id]
            if not isinstance(entry.get("image"), str):
                raise SourceError(f"Tile {tile_id} of collection tileset '{name}' has no image")
            sprites.append(SourceSprite(
                id=f"{name}/{tile_id}",
                image=open_rgba(path.parent / entry["image"]),
                metadata=_tile_metadata(name, tile_id, entry),
                source=path,
            ))

    logger.info(f"Loaded tileset '{name}': {len(sprites)} tiles")
    return sprites
