"""
Atlas build configuration.

A config file is JSON:

    {
      "name": "ui",
      "page": {"initial_width": 256, "initial_height": 256,
               "max_width": 1024, "max_height": 1024,
               "growth_step": "pow2", "allow_new_pages": true},
      "padding": 1,
      "allow_rotation": false,
      "extrude": true,
      "format": "json",
      "sources": ["sprites/", "fonts/m5x7.fnt", "tiles/terrain.tsj"]
    }

Relative source paths are resolved against the directory of the config file.
"""

import json
from pathlib import Path
from typing import List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from atlasmith.packing.grower import PageSpec


class AtlasConfig(BaseModel):
    model_config = ConfigDict(extra='forbid')

    name: str = Field("atlas", min_length=1, description="Base name of written files.")
    page: PageSpec = Field(default_factory=PageSpec)
    padding: int = Field(1, ge=0, description="Border reserved around every sprite.")
    allow_rotation: bool = Field(False, description="Let the packer turn sprites by 90 degrees.")
    extrude: bool = Field(False, description="Fill padding with the sprite's edge pixels.")
    format: Literal['json', 'bin'] = Field('json', description="Layout index encoding.")
    sources: List[str] = Field(default_factory=list, description="Images, image directories, .fnt or .tsj files.")


def load_config(path: Union[str, Path]) -> AtlasConfig:
    """
    Read an AtlasConfig from a JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not valid JSON or fails validation
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = json.loads(path.read_text(encoding='utf-8'))
        config = AtlasConfig.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        raise ValueError(f"Invalid config file {path}: {e}") from e

    base = path.parent
    config.sources = [str(base / s) if not Path(s).is_absolute() else s for s in config.sources]
    return config
