from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping, Union
import tomlkit
from psimgproc.imaging.formats import resolve
from psimgproc.models.enums import (
    ImageFormat, OpenMode, CropPage, WebFormat, ByteOrder, LayerCompression, PreviewType, SaveEncoding,
)
from psimgproc.models.errors import ActionNotImplemented, UnsupportedFormat
from psimgproc.models.options import (
    OpenPreset, WebExportOptions, TiffSaveOptions, EpsSaveOptions,
)

SaveOptions = Union[WebExportOptions, TiffSaveOptions, EpsSaveOptions]

OPEN_PRESETS: Dict[ImageFormat, OpenPreset] = {
    ImageFormat.EPS: OpenPreset(resolution=300, mode=OpenMode.RGB, anti_alias=True,
                                constrain_proportions=True),
    ImageFormat.AI: OpenPreset(resolution=300, mode=OpenMode.RGB, anti_alias=True,
                               constrain_proportions=True, bits_per_channel=8,
                               suppress_warnings=True, crop_page=CropPage.MEDIA_BOX,
                               page=1, use_page_number=True),
}

SAVE_PRESETS: Dict[ImageFormat, SaveOptions] = {
    ImageFormat.PNG: WebExportOptions(WebFormat.PNG, interlaced=False, png8=False, transparency=True),
    ImageFormat.JPG: WebExportOptions(WebFormat.JPEG, interlaced=False),
    ImageFormat.JPEG: WebExportOptions(WebFormat.JPEG, interlaced=False),
    ImageFormat.GIF: WebExportOptions(WebFormat.GIF, interlaced=False),
    ImageFormat.TIFF: TiffSaveOptions(),
    ImageFormat.EPS: EpsSaveOptions(),
}

# Fields whose TOML representation is the enum's value string
_ENUM_FIELDS: Dict[str, type] = {
    "mode": OpenMode,
    "crop_page": CropPage,
    "format": WebFormat,
    "byte_order": ByteOrder,
    "layer_compression": LayerCompression,
    "preview": PreviewType,
    "encoding": SaveEncoding,
}

@dataclass(frozen=True)
class PresetTable:
    open_presets: Dict[ImageFormat, OpenPreset] = field(default_factory=lambda: dict(OPEN_PRESETS))
    save_presets: Dict[ImageFormat, SaveOptions] = field(default_factory=lambda: dict(SAVE_PRESETS))

    def open_preset(self, fmt: ImageFormat) -> OpenPreset:
        try:
            return self.open_presets[fmt]
        except KeyError:
            raise UnsupportedFormat(f"No open preset for {fmt.name}") from None

    def save_preset(self, fmt: ImageFormat) -> SaveOptions:
        if fmt is ImageFormat.AI:
            raise ActionNotImplemented("Saving as AI is not implemented")
        try:
            return self.save_presets[fmt]
        except KeyError:
            raise UnsupportedFormat(f"No save preset for {fmt.name}") from None

def _coerce(name: str, value: Any) -> Any:
    if name in _ENUM_FIELDS:
        return _ENUM_FIELDS[name](value)
    if name == "matte_color":
        return tuple(int(c) for c in value)
    return value

def _overlay(base, overrides: Mapping[str, Any]):
    known = {f.name for f in fields(base)}
    unknown = set(overrides) - known
    if unknown:
        raise ValueError(f"Unknown {type(base).__name__} option(s): {', '.join(sorted(unknown))}")
    return replace(base, **{k: _coerce(k, v) for k, v in overrides.items()})

def presets_from_mapping(data: Mapping[str, Any]) -> PresetTable:
    """Build a table from ``{"open": {ext: {...}}, "save": {ext: {...}}}`` over the defaults."""
    open_presets = dict(OPEN_PRESETS)
    save_presets = dict(SAVE_PRESETS)
    for ext, overrides in data.get("open", {}).items():
        fmt = resolve(ext)
        open_presets[fmt] = _overlay(open_presets.get(fmt, OpenPreset()), overrides)
    for ext, overrides in data.get("save", {}).items():
        fmt = resolve(ext)
        if fmt not in save_presets:
            raise UnsupportedFormat(f"Format {ext!r} has no save preset to override")
        save_presets[fmt] = _overlay(save_presets[fmt], overrides)
    return PresetTable(open_presets, save_presets)

def load_presets(text: str) -> PresetTable:
    return presets_from_mapping(tomlkit.parse(text).unwrap())

def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, tuple):
        return list(value)
    return value

def presets_to_toml(table: PresetTable) -> tomlkit.TOMLDocument:
    doc = tomlkit.document()
    for section, presets in (("open", table.open_presets), ("save", table.save_presets)):
        outer = tomlkit.table(is_super_table=True)
        for fmt, preset in presets.items():
            inner = tomlkit.table()
            for f in fields(preset):
                value = getattr(preset, f.name)
                if value is not None:   # TOML has no null
                    inner.add(f.name, _plain(value))
            outer.add(fmt.value, inner)
        doc.add(section, outer)
    return doc
