# psimgproc/host/pillow_host.py
# Headless host binding backed by Pillow.
# - Mirrors the editor's document/selection model closely enough to run the
#   whole open -> process -> save -> close sequence without the editor
# - Recorded actions are Python callables registered by (name, folder)
# - Used by the test-suite and by --backend pillow

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from PIL import Image, ImageChops, ImageDraw, UnidentifiedImageError

from psimgproc.host.base import HostApplication, HostDocument, HostSelection
from psimgproc.models.enums import (
    AnchorPosition, LayerCompression, OpenMode, ResampleMethod, Units, WebFormat,
)
from psimgproc.models.errors import HostError
from psimgproc.models.options import (
    EpsSaveOptions, OpenPreset, TiffSaveOptions, WebExportOptions, RGB,
)
from psimgproc.utils.config import BACKGROUND_ACTION_FOLDER, BACKGROUND_ACTION_NAME

log = logging.getLogger("psimgproc.host.pillow")

DEFAULT_RESOLUTION = 72.0

_RESAMPLE = {
    ResampleMethod.NEAREST: Image.Resampling.NEAREST,
    ResampleMethod.BILINEAR: Image.Resampling.BILINEAR,
    ResampleMethod.BICUBIC: Image.Resampling.BICUBIC,
}

_TIFF_COMPRESSION = {
    LayerCompression.RLE: "packbits",
    LayerCompression.ZIP: "tiff_adobe_deflate",
}

Action = Callable[["PillowDocument"], None]


# ---------------------------- helpers ----------------------------
def _pixels(value: float) -> int:
    """Whole pixels, rounded down so a fitted side never exceeds its box."""
    return max(1, int(math.floor(value + 1e-6)))


def _normalize(im: Image.Image) -> Image.Image:
    if im.mode in ("RGB", "RGBA"):
        return im
    if "A" in im.getbands() or "transparency" in im.info:
        return im.convert("RGBA")
    return im.convert("RGB")


def _flatten(im: Image.Image, matte: RGB) -> Image.Image:
    if "A" not in im.getbands():
        return im.convert("RGB")
    bg = Image.new("RGB", im.size, matte)
    bg.paste(im.convert("RGB"), mask=im.getchannel("A"))
    return bg


def _color_distance_mask(im: Image.Image, color: Tuple[int, int, int], tolerance: int) -> Image.Image:
    """L mask, 255 where every channel is within ``tolerance`` of ``color``."""
    rgb = im.convert("RGB")
    diff = ImageChops.difference(rgb, Image.new("RGB", rgb.size, color))
    r, g, b = diff.split()
    worst = ImageChops.lighter(ImageChops.lighter(r, g), b)
    return worst.point(lambda v: 255 if v <= tolerance else 0)


def remove_white_background(doc: "PillowDocument", tolerance: int = 16) -> None:
    """Stand-in for the recorded white background removal action."""
    rgba = doc.image.convert("RGBA")
    white = _color_distance_mask(rgba, (255, 255, 255), tolerance)
    rgba.putalpha(ImageChops.subtract(rgba.getchannel("A"), white))
    doc.image = rgba


# ---------------------------- selection ----------------------------
class PillowSelection(HostSelection):
    def __init__(self, doc: "PillowDocument"):
        self._doc = doc
        self.mask: Optional[Image.Image] = None

    def select_transparency(self) -> None:
        im = self._doc.image
        if "A" in im.getbands():
            self.mask = im.getchannel("A").copy()
        else:
            self.mask = Image.new("L", im.size, 255)

    @property
    def solid(self) -> bool:
        return self.mask is not None and self.mask.getextrema() == (255, 255)

    @property
    def is_empty(self) -> bool:
        return self.mask is None or self.mask.getbbox() is None

    def magic_wand(self, x: int, y: int, tolerance: int = 32, anti_alias: bool = True,
                   contiguous: bool = False, merged: bool = False) -> None:
        # Single-layer documents: ``merged`` has nothing to merge, edges stay hard.
        im = self._doc.image
        if not (0 <= x < im.width and 0 <= y < im.height):
            raise HostError(f"Magic wand seed ({x}, {y}) is outside the canvas")
        seed = im.convert("RGB").getpixel((x, y))
        mask = _color_distance_mask(im, seed, tolerance)
        if contiguous:
            ImageDraw.floodfill(mask, (x, y), 128, thresh=0)
            mask = mask.point(lambda v: 255 if v == 128 else 0)
        self.mask = mask

    def deselect(self) -> None:
        self.mask = None

    def clear(self) -> None:
        if self.mask is None:
            raise HostError("Nothing is selected")
        rgba = self._doc.image.convert("RGBA")
        rgba.putalpha(ImageChops.subtract(rgba.getchannel("A"), self.mask))
        self._doc.image = rgba


# ---------------------------- document ----------------------------
class PillowDocument(HostDocument):
    def __init__(self, image: Image.Image, path: Path, resolution: float = DEFAULT_RESOLUTION):
        self._image = image
        self.path = path
        self._resolution = float(resolution)
        self._selection = PillowSelection(self)
        self._closed = False
        self.layer_names: List[str] = ["Layer 0"]
        self.layer_comp_names: List[str] = []
        self.color_samplers: List[Tuple[int, int]] = []

    def _live(self) -> "PillowDocument":
        if self._closed:
            raise HostError(f"Document {self.path.name} is closed")
        return self

    @property
    def image(self) -> Image.Image:
        return self._live()._image

    @image.setter
    def image(self, value: Image.Image) -> None:
        self._live()._image = value

    @property
    def width(self) -> float:
        return float(self.image.width)

    @property
    def height(self) -> float:
        return float(self.image.height)

    @property
    def resolution(self) -> float:
        return self._resolution

    @property
    def selection(self) -> PillowSelection:
        return self._live()._selection

    @property
    def closed(self) -> bool:
        return self._closed

    def resize_image(self, width: Optional[float] = None, height: Optional[float] = None,
                     resample: ResampleMethod = ResampleMethod.BICUBIC) -> None:
        im = self.image
        if width is None and height is None:
            raise HostError("resize_image needs a width or a height")
        if width is None:
            width = im.width * height / im.height
        elif height is None:
            height = im.height * width / im.width
        size = (_pixels(width), _pixels(height))
        log.debug("resize %s: %sx%s -> %sx%s", self.path.name, im.width, im.height, *size)
        self.image = im.resize(size, resample=_RESAMPLE[resample])
        self._selection.deselect()

    def resize_canvas(self, width: float, height: float,
                      anchor: AnchorPosition = AnchorPosition.MIDDLE_CENTER) -> None:
        im = _normalize(self.image)
        w, h = _pixels(width), _pixels(height)
        fill = (0, 0, 0, 0) if im.mode == "RGBA" else (255, 255, 255)
        canvas = Image.new(im.mode, (w, h), fill)
        if anchor is AnchorPosition.TOP_LEFT:
            offset = (0, 0)
        elif anchor is AnchorPosition.BOTTOM_RIGHT:
            offset = (w - im.width, h - im.height)
        else:
            offset = ((w - im.width) // 2, (h - im.height) // 2)
        canvas.paste(im, offset)
        self.image = canvas

    def rename_base_layer(self, name: str) -> None:
        self._live().layer_names[0] = name
        if self.layer_comp_names:
            self.layer_comp_names[0] = name

    def add_color_sampler(self, x: int, y: int) -> Tuple[int, int, int]:
        rgb = self.image.convert("RGB").getpixel((x, y))
        self.color_samplers.append((x, y))
        return tuple(rgb)

    def export_for_web(self, path: Path, options: WebExportOptions) -> None:
        im = self.image
        try:
            if options.format is WebFormat.JPEG:
                _flatten(im, options.matte_color).save(
                    path, "JPEG", quality=options.quality, progressive=options.interlaced
                )
            elif options.format is WebFormat.PNG:
                out = im if options.transparency else _flatten(im, options.matte_color)
                if options.png8:
                    out = out.quantize(256)
                out.save(path, "PNG")
            else:
                out = im if options.transparency else _flatten(im, options.matte_color)
                out.save(path, "GIF", interlace=options.interlaced)
        except (OSError, ValueError) as e:
            raise HostError(f"Web export to {path} failed: {e}") from e

    def save_as(self, path: Path, options) -> None:
        im = self.image
        try:
            if isinstance(options, TiffSaveOptions):
                keep_alpha = options.transparency or options.alpha_channels
                out = im if keep_alpha else _flatten(im, (255, 255, 255))
                # Pillow always writes little-endian (IBM) TIFF
                out.save(
                    path, "TIFF",
                    compression=_TIFF_COMPRESSION[options.layer_compression],
                    dpi=(self._resolution, self._resolution),
                )
            elif isinstance(options, EpsSaveOptions):
                _flatten(im, (255, 255, 255)).save(path, "EPS")
            else:
                raise HostError(f"No native save for options {type(options).__name__}")
        except (OSError, ValueError) as e:
            raise HostError(f"Save to {path} failed: {e}") from e

    def close(self, save_changes: bool = False) -> None:
        if self._closed:
            return
        if save_changes:
            self._image.save(self.path)
        self._selection.deselect()
        self._closed = True


# ---------------------------- application ----------------------------
class PillowApplication(HostApplication):
    def __init__(self, default_resolution: float = DEFAULT_RESOLUTION):
        self.default_resolution = default_resolution
        self.ruler_units = Units.INCHES
        self.type_units = Units.POINTS
        self.documents: List[PillowDocument] = []
        self._actions: Dict[Tuple[str, str], Action] = {}
        self.register_action(BACKGROUND_ACTION_NAME, BACKGROUND_ACTION_FOLDER, remove_white_background)

    @property
    def active_document(self) -> Optional[PillowDocument]:
        live = [d for d in self.documents if not d.closed]
        return live[-1] if live else None

    def register_action(self, name: str, folder: str, action: Action) -> None:
        self._actions[(name, folder)] = action

    def set_units(self, ruler: Units, type_units: Units) -> None:
        self.ruler_units = ruler
        self.type_units = type_units

    def open(self, path: Path, options: Optional[OpenPreset] = None) -> PillowDocument:
        p = Path(path)
        if not p.is_file():
            raise HostError(f"File not found: {p}")
        try:
            with Image.open(p) as src:
                im = _normalize(src.copy())
                dpi = src.info.get("dpi")
        except (UnidentifiedImageError, OSError) as e:
            raise HostError(f"Cannot open {p}: {e}") from e

        resolution = float(dpi[0]) if dpi else self.default_resolution
        if options is not None:
            im = self._rasterize(im, options)
            resolution = float(options.resolution)

        doc = PillowDocument(im, p, resolution)
        self.documents.append(doc)
        log.debug("opened %s (%dx%d)", p.name, im.width, im.height)
        return doc

    @staticmethod
    def _rasterize(im: Image.Image, options: OpenPreset) -> Image.Image:
        # Width/height targets arrive in points at ``options.resolution``
        scale = options.resolution / 72.0
        w, h = im.width, im.height
        if options.width is not None:
            w = options.width * scale
            if options.constrain_proportions:
                h = im.height * w / im.width
        elif options.height is not None:
            h = options.height * scale
            if options.constrain_proportions:
                w = im.width * h / im.height
        size = (_pixels(w), _pixels(h))
        im = im.resize(size, resample=Image.Resampling.BICUBIC if options.anti_alias
                       else Image.Resampling.NEAREST)
        if options.mode is OpenMode.GRAYSCALE:
            im = im.convert("LA" if im.mode == "RGBA" else "L")
        elif options.mode is OpenMode.CMYK:
            im = im.convert("CMYK")
        return im

    def do_action(self, name: str, folder: str) -> None:
        action = self._actions.get((name, folder))
        if action is None:
            raise HostError(f"Action {name!r} not found in set {folder!r}")
        doc = self.active_document
        if doc is None:
            raise HostError("No document is open")
        log.info("Playing action %r from %r on %s", name, folder, doc.path.name)
        action(doc)
