from __future__ import annotations
from pathlib import Path
from typing import Dict, Tuple
from psimgproc.models.enums import ImageFormat
from psimgproc.models.errors import UnsupportedFormat

_BY_EXTENSION: Dict[str, ImageFormat] = {
    f.value: f for f in ImageFormat if f is not ImageFormat.UNKNOWN
}

SUPPORTED_EXTENSIONS: Tuple[str, ...] = tuple(_BY_EXTENSION)

def resolve(ext: str) -> ImageFormat:
    """Map an extension ("PNG", ".jpg", "tif") to its ImageFormat."""
    key = ext[1:] if ext.startswith(".") else ext
    try:
        return _BY_EXTENSION[key.lower()]
    except KeyError:
        raise UnsupportedFormat(f"Unsupported image extension: {ext!r}") from None

def resolve_path(path: str | Path) -> ImageFormat:
    return resolve(Path(path).suffix)

def extension_of(fmt: ImageFormat) -> str:
    if fmt is ImageFormat.UNKNOWN:
        raise UnsupportedFormat("ImageFormat.UNKNOWN has no extension")
    return fmt.value
