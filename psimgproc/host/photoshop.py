# psimgproc/host/photoshop.py
# Host binding for Adobe Photoshop through its COM automation server (pywin32).
# - Windows only; the COM object is dispatched per thread inside thread_scope()
# - Selection/sampler helpers are recorded action descriptors (ScriptListener)
# - COM failures surface as HostError, a missing Photoshop as
#   ExternalApplicationUnavailable

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, Optional, Tuple

from psimgproc.host.base import HostApplication, HostDocument, HostSelection
from psimgproc.models.enums import (
    AnchorPosition, ByteOrder, CropPage, LayerCompression, OpenMode, PreviewType,
    ResampleMethod, SaveEncoding, Units, WebFormat,
)
from psimgproc.models.errors import ExternalApplicationUnavailable, HostError
from psimgproc.models.options import (
    EpsSaveOptions, OpenPreset, TiffSaveOptions, WebExportOptions, RGB,
)

log = logging.getLogger("psimgproc.host.photoshop")

PROG_ID = "Photoshop.Application"


class _NoComError(Exception):
    """Placeholder when a fake dispatcher is injected without an error type."""


# Photoshop type library constants
_RULER_UNITS = {Units.PIXELS: 1, Units.INCHES: 2, Units.POINTS: 5}
_TYPE_UNITS = {Units.PIXELS: 1, Units.POINTS: 5}
_OPEN_MODE = {OpenMode.GRAYSCALE: 1, OpenMode.RGB: 2, OpenMode.CMYK: 3}
_ANCHOR = {AnchorPosition.TOP_LEFT: 1, AnchorPosition.MIDDLE_CENTER: 5, AnchorPosition.BOTTOM_RIGHT: 9}
_RESAMPLE = {ResampleMethod.NEAREST: 2, ResampleMethod.BILINEAR: 3, ResampleMethod.BICUBIC: 4}
_WEB_FORMAT = {WebFormat.GIF: 3, WebFormat.JPEG: 6, WebFormat.PNG: 13}
_BYTE_ORDER = {ByteOrder.IBM: 1, ByteOrder.MACOS: 2}
_LAYER_COMPRESSION = {LayerCompression.RLE: 1, LayerCompression.ZIP: 2}
_PREVIEW = {PreviewType.NONE: 1, PreviewType.MONOCHROME_TIFF: 2, PreviewType.EIGHT_BIT_TIFF: 3}
_ENCODING = {
    SaveEncoding.BINARY: 1, SaveEncoding.JPEG_LOW: 2, SaveEncoding.ASCII: 3,
    SaveEncoding.JPEG_MEDIUM: 4, SaveEncoding.JPEG_HIGH: 5, SaveEncoding.JPEG_MAXIMUM: 6,
}
_CROP_PAGE = {CropPage.BOUNDING_BOX: 0, CropPage.MEDIA_BOX: 1, CropPage.CROP_BOX: 2, CropPage.TRIM_BOX: 4}

DISPLAY_NO_DIALOGS = 3
EXPORT_SAVE_FOR_WEB = 2
EXTENSION_LOWERCASE = 2
SAVE_CHANGES = 1
DO_NOT_SAVE_CHANGES = 2


class PhotoshopSelection(HostSelection):
    def __init__(self, host: "PhotoshopApplication", doc: "PhotoshopDocument"):
        self._host = host
        self._doc = doc

    def _execute_set(self, source_key: str, build: Callable[[Any], None]) -> None:
        host = self._host
        cid = host.com.CharIDToTypeID
        desc = host.new_object("Photoshop.ActionDescriptor")
        ref = host.new_object("Photoshop.ActionReference")
        ref.PutProperty(cid("Chnl"), cid("fsel"))
        desc.PutReference(cid("null"), ref)
        build(desc)
        with host.guard(f"select ({source_key})"):
            host.activate(self._doc)
            host.com.ExecuteAction(cid("setd"), desc, DISPLAY_NO_DIALOGS)

    def select_transparency(self) -> None:
        cid = self._host.com.CharIDToTypeID

        def build(desc):
            src = self._host.new_object("Photoshop.ActionReference")
            src.PutEnumerated(cid("Chnl"), cid("Chnl"), cid("Trsp"))
            desc.PutReference(cid("T   "), src)

        self._execute_set("transparency", build)

    @property
    def solid(self) -> bool:
        with self._host.guard("selection.Solid"):
            return bool(self._doc.com.Selection.Solid)

    @property
    def is_empty(self) -> bool:
        # Bounds raises when nothing is selected
        try:
            self._doc.com.Selection.Bounds
        except self._host.com_error:
            return True
        return False

    def magic_wand(self, x: int, y: int, tolerance: int = 32, anti_alias: bool = True,
                   contiguous: bool = False, merged: bool = False) -> None:
        host = self._host
        cid = host.com.CharIDToTypeID

        def build(desc):
            point = host.new_object("Photoshop.ActionDescriptor")
            point.PutUnitDouble(cid("Hrzn"), cid("#Pxl"), float(x))
            point.PutUnitDouble(cid("Vrtc"), cid("#Pxl"), float(y))
            desc.PutObject(cid("T   "), cid("Pnt "), point)
            desc.PutInteger(cid("Tlrn"), int(tolerance))
            desc.PutBoolean(cid("Mrgd"), bool(merged))
            desc.PutBoolean(cid("Cntg"), bool(contiguous))
            desc.PutBoolean(cid("AntA"), bool(anti_alias))

        self._execute_set("magic wand", build)

    def deselect(self) -> None:
        with self._host.guard("selection.Deselect"):
            self._doc.com.Selection.Deselect()

    def clear(self) -> None:
        with self._host.guard("selection.Clear"):
            self._doc.com.Selection.Clear()


class PhotoshopDocument(HostDocument):
    def __init__(self, host: "PhotoshopApplication", com_doc: Any):
        self._host = host
        self._com = com_doc
        self._closed = False

    @property
    def com(self) -> Any:
        if self._closed:
            raise HostError("Document is closed")
        return self._com

    @property
    def width(self) -> float:
        with self._host.guard("Document.Width"):
            return float(self.com.Width)

    @property
    def height(self) -> float:
        with self._host.guard("Document.Height"):
            return float(self.com.Height)

    @property
    def resolution(self) -> float:
        with self._host.guard("Document.Resolution"):
            return float(self.com.Resolution)

    @property
    def selection(self) -> PhotoshopSelection:
        return PhotoshopSelection(self._host, self)

    @property
    def closed(self) -> bool:
        return self._closed

    def resize_image(self, width: Optional[float] = None, height: Optional[float] = None,
                     resample: ResampleMethod = ResampleMethod.BICUBIC) -> None:
        kwargs = {"ResampleMethod": _RESAMPLE[resample]}
        if width is not None:
            kwargs["Width"] = width
        if height is not None:
            kwargs["Height"] = height
        with self._host.guard("ResizeImage"):
            self.com.ResizeImage(**kwargs)

    def resize_canvas(self, width: float, height: float,
                      anchor: AnchorPosition = AnchorPosition.MIDDLE_CENTER) -> None:
        with self._host.guard("ResizeCanvas"):
            self.com.ResizeCanvas(width, height, _ANCHOR[anchor])

    def rename_base_layer(self, name: str) -> None:
        with self._host.guard("rename base layer"):
            layers = self.com.ArtLayers
            layers.Item(layers.Count).Name = name
            comps = self.com.LayerComps
            if comps.Count:
                comps.Item(1).Name = name

    def add_color_sampler(self, x: int, y: int) -> Tuple[int, int, int]:
        host = self._host
        cid = host.com.CharIDToTypeID
        desc = host.new_object("Photoshop.ActionDescriptor")
        ref = host.new_object("Photoshop.ActionReference")
        ref.PutClass(cid("ClSm"))
        desc.PutReference(cid("null"), ref)
        point = host.new_object("Photoshop.ActionDescriptor")
        point.PutUnitDouble(cid("Hrzn"), cid("#Pxl"), float(x))
        point.PutUnitDouble(cid("Vrtc"), cid("#Pxl"), float(y))
        desc.PutObject(cid("Pstn"), cid("Pnt "), point)
        with host.guard("color sampler"):
            host.activate(self)
            host.com.ExecuteAction(cid("Mk  "), desc, DISPLAY_NO_DIALOGS)
            samplers = self.com.ColorSamplers
            rgb = samplers.Item(samplers.Count).Color.RGB
            return (int(rgb.Red), int(rgb.Green), int(rgb.Blue))

    def export_for_web(self, path: Path, options: WebExportOptions) -> None:
        opts = self._host.new_object("Photoshop.ExportOptionsSaveForWeb")
        opts.Format = _WEB_FORMAT[options.format]
        opts.Interlaced = options.interlaced
        opts.Quality = options.quality
        opts.Transparency = options.transparency
        if options.format is WebFormat.PNG:
            opts.PNG8 = options.png8
        opts.MatteColor = self._host.rgb_color(options.matte_color)
        with self._host.guard(f"Export {path}"):
            self.com.Export(str(path), EXPORT_SAVE_FOR_WEB, opts)

    def save_as(self, path: Path, options) -> None:
        if isinstance(options, TiffSaveOptions):
            opts = self._host.new_object("Photoshop.TiffSaveOptions")
            opts.AlphaChannels = options.alpha_channels
            opts.Annotations = options.annotations
            opts.ByteOrder = _BYTE_ORDER[options.byte_order]
            opts.JPEGQuality = options.jpeg_quality
            opts.LayerCompression = _LAYER_COMPRESSION[options.layer_compression]
            opts.Layers = options.layers
            opts.SpotColors = options.spot_colors
            opts.Transparency = options.transparency
        elif isinstance(options, EpsSaveOptions):
            opts = self._host.new_object("Photoshop.EPSSaveOptions")
            opts.Preview = _PREVIEW[options.preview]
            opts.VectorData = options.vector_data
            opts.Interpolation = options.interpolation
            opts.Encoding = _ENCODING[options.encoding]
        else:
            raise HostError(f"No native save for options {type(options).__name__}")
        with self._host.guard(f"SaveAs {path}"):
            self.com.SaveAs(str(path), opts, True, EXTENSION_LOWERCASE)

    def close(self, save_changes: bool = False) -> None:
        if self._closed:
            return
        with self._host.guard("Document.Close"):
            self._com.Close(SAVE_CHANGES if save_changes else DO_NOT_SAVE_CHANGES)
        self._closed = True


class PhotoshopApplication(HostApplication):
    """
    ``dispatch`` and ``com_error`` default to ``win32com.client.Dispatch`` and
    ``pywintypes.com_error``; pass replacements to drive a fake COM server.
    """

    def __init__(self, dispatch: Optional[Callable[[str], Any]] = None,
                 com_error: Optional[type] = None, pythoncom: Any = None):
        if dispatch is None:
            try:
                import pythoncom as _pythoncom
                import pywintypes
                import win32com.client
            except ImportError as e:
                raise ExternalApplicationUnavailable(
                    "Photoshop automation needs pywin32 on Windows "
                    "(pip install pywin32), or use --backend pillow"
                ) from e
            dispatch = win32com.client.Dispatch
            com_error = pywintypes.com_error
            pythoncom = _pythoncom
        self._dispatch = dispatch
        self.com_error = com_error or _NoComError
        self._pythoncom = pythoncom
        self._local = threading.local()

    # ---------------------------- COM plumbing ----------------------------
    @property
    def com(self) -> Any:
        app = getattr(self._local, "app", None)
        if app is None:
            try:
                app = self._dispatch(PROG_ID)
            except self.com_error as e:
                raise ExternalApplicationUnavailable(f"Cannot reach {PROG_ID}: {e}") from e
            self._local.app = app
            log.info("Connected to %s", PROG_ID)
        return app

    def new_object(self, prog_id: str) -> Any:
        try:
            return self._dispatch(prog_id)
        except self.com_error as e:
            raise HostError(f"Cannot create {prog_id}: {e}") from e

    def rgb_color(self, rgb: RGB) -> Any:
        color = self.new_object("Photoshop.RGBColor")
        color.Red, color.Green, color.Blue = rgb
        return color

    @contextmanager
    def guard(self, what: str) -> Iterator[None]:
        try:
            yield
        except self.com_error as e:
            raise HostError(f"Photoshop: {what} failed: {e}") from e

    def activate(self, doc: PhotoshopDocument) -> None:
        self.com.ActiveDocument = doc.com

    @contextmanager
    def thread_scope(self) -> Iterator["PhotoshopApplication"]:
        if self._pythoncom is not None:
            self._pythoncom.CoInitialize()
        try:
            yield self
        finally:
            self._local.app = None
            if self._pythoncom is not None:
                self._pythoncom.CoUninitialize()

    # ---------------------------- HostApplication ----------------------------
    def set_units(self, ruler: Units, type_units: Units) -> None:
        if type_units not in _TYPE_UNITS:
            raise HostError(f"Photoshop has no type unit {type_units.value!r}")
        with self.guard("Preferences"):
            prefs = self.com.Preferences
            prefs.RulerUnits = _RULER_UNITS[ruler]
            prefs.TypeUnits = _TYPE_UNITS[type_units]

    def _open_options(self, preset: OpenPreset) -> Any:
        if preset.pdf_style:
            opts = self.new_object("Photoshop.PDFOpenOptions")
            opts.BitsPerChannel = preset.bits_per_channel
            opts.SuppressWarnings = preset.suppress_warnings
            opts.CropPage = _CROP_PAGE[preset.crop_page]
            opts.Page = preset.page
            opts.UsePageNumber = preset.use_page_number
        else:
            opts = self.new_object("Photoshop.EPSOpenOptions")
        opts.AntiAlias = preset.anti_alias
        opts.ConstrainProportions = preset.constrain_proportions
        opts.Mode = _OPEN_MODE[preset.mode]
        opts.Resolution = preset.resolution
        if preset.width is not None:
            opts.Width = preset.width
        if preset.height is not None:
            opts.Height = preset.height
        return opts

    def open(self, path: Path, options: Optional[OpenPreset] = None) -> PhotoshopDocument:
        args = [str(Path(path))]
        if options is not None:
            args.append(self._open_options(options))
        with self.guard(f"Open {path}"):
            com_doc = self.com.Open(*args)
        return PhotoshopDocument(self, com_doc)

    def do_action(self, name: str, folder: str) -> None:
        with self.guard(f"DoAction {name!r} from {folder!r}"):
            self.com.DoAction(name, folder)
