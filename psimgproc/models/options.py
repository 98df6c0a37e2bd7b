from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Optional, Tuple
from .enums import (
    OpenMode, CropPage, WebFormat, ByteOrder, LayerCompression, PreviewType, SaveEncoding,
)

RGB = Tuple[int, int, int]
WHITE: RGB = (255, 255, 255)

# ---------------------------- open ----------------------------
@dataclass(frozen=True)
class OpenPreset:
    """Open-time options for vector sources (EPS, and PDF-style AI opens).

    Exactly one of ``width``/``height`` is set on the option objects handed to
    the host; both are in points (see ``imaging.tools.pixel_unit``).
    """
    resolution: int = 300
    mode: OpenMode = OpenMode.RGB
    anti_alias: bool = True
    constrain_proportions: bool = True
    # PDF-style open only
    bits_per_channel: Optional[int] = None
    suppress_warnings: Optional[bool] = None
    crop_page: Optional[CropPage] = None
    page: Optional[int] = None
    use_page_number: Optional[bool] = None
    width: Optional[float] = None
    height: Optional[float] = None

    @property
    def pdf_style(self) -> bool:
        return self.crop_page is not None

    def targeting_width(self, points: float) -> "OpenPreset":
        return replace(self, width=points, height=None)

    def targeting_height(self, points: float) -> "OpenPreset":
        return replace(self, width=None, height=points)

# ---------------------------- save ----------------------------
@dataclass(frozen=True)
class WebExportOptions:
    format: WebFormat
    interlaced: bool = False
    png8: bool = False
    transparency: bool = True
    quality: int = 70
    matte_color: RGB = WHITE

@dataclass(frozen=True)
class TiffSaveOptions:
    alpha_channels: bool = True
    annotations: bool = True
    byte_order: ByteOrder = ByteOrder.IBM
    jpeg_quality: int = 7
    layer_compression: LayerCompression = LayerCompression.RLE
    layers: bool = True
    spot_colors: bool = True
    transparency: bool = True

@dataclass(frozen=True)
class EpsSaveOptions:
    preview: PreviewType = PreviewType.EIGHT_BIT_TIFF
    vector_data: bool = True
    interpolation: bool = True
    encoding: SaveEncoding = SaveEncoding.JPEG_MEDIUM
