"""Layout index encodings (JSON and binary)."""
from .layout_io import (
    dump_binary,
    dump_json,
    layout_from_dict,
    layout_to_dict,
    load_binary,
    load_json,
    load_layout,
    save_layout,
)

__all__ = [
    "dump_binary",
    "dump_json",
    "layout_from_dict",
    "layout_to_dict",
    "load_binary",
    "load_json",
    "load_layout",
    "save_layout",
]
