from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from psimgproc.host.base import HostDocument
from psimgproc.imaging.presets import PresetTable, SaveOptions
from psimgproc.models.enums import ImageFormat
from psimgproc.models.errors import ActionNotImplemented, HostError, SaveFailed, UnsupportedFormat
from psimgproc.models.options import WebExportOptions

log = logging.getLogger("psimgproc.savers")


class FileSaver:
    """Writes a document in one format with a fixed options bundle."""

    def __init__(self, fmt: ImageFormat, options: SaveOptions):
        self.format = fmt
        self.options = options

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.format.name})"

    def save(self, doc: HostDocument, path: Path) -> None:
        path = Path(path)
        log.info("Saving %s as %s", path, self.format.name)
        try:
            self._write(doc, path)
        except HostError as e:
            raise SaveFailed(f"Could not save {path}: {e}") from e

    def _write(self, doc: HostDocument, path: Path) -> None:
        raise NotImplementedError


class WebSaver(FileSaver):
    """PNG, JPEG and GIF go through the save-for-web export."""

    def _write(self, doc: HostDocument, path: Path) -> None:
        doc.export_for_web(path, self.options)


class NativeSaver(FileSaver):
    """TIFF and EPS use the editor's own save-as."""

    def _write(self, doc: HostDocument, path: Path) -> None:
        doc.save_as(path, self.options)


class AiSaver(FileSaver):
    def __init__(self, fmt: ImageFormat = ImageFormat.AI, options: Optional[SaveOptions] = None):
        raise ActionNotImplemented("Saving as AI is not implemented")

    def save(self, doc: HostDocument, path: Path) -> None:
        raise ActionNotImplemented("Saving as AI is not implemented")


def saver_for(fmt: ImageFormat, presets: Optional[PresetTable] = None) -> FileSaver:
    if fmt is ImageFormat.AI:
        return AiSaver(fmt)
    if fmt is ImageFormat.UNKNOWN:
        raise UnsupportedFormat("Cannot save ImageFormat.UNKNOWN")
    options = (presets or PresetTable()).save_preset(fmt)
    if isinstance(options, WebExportOptions):
        return WebSaver(fmt, options)
    return NativeSaver(fmt, options)
