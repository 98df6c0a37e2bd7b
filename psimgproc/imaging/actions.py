# psimgproc/imaging/actions.py
# Open/process strategies, one per source format.
# - ImageActions is the shared behavior (raster sources)
# - VectorImageActions overrides the open path: rasterize against one target
#   dimension, then redo against the other if the first pass overflows
# - AiImageActions is not supported and refuses construction
# Use actions_for() to get the strategy for a format.

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Type

from psimgproc.host.base import HostApplication, HostDocument
from psimgproc.imaging import tools
from psimgproc.imaging.sizes import pixel_unit
from psimgproc.models.enums import AnchorPosition, ImageFormat, ResampleMethod
from psimgproc.models.errors import (
    ActionNotImplemented, ConstraintViolation, HostError, OpenFailed, UnsupportedFormat,
)
from psimgproc.models.options import OpenPreset
from psimgproc.models.settings import OpenConstraint
from psimgproc.utils.config import AppConfig

log = logging.getLogger("psimgproc.actions")


class ImageActions:
    """Default behavior shared by every source format."""

    resample = ResampleMethod.BICUBIC
    anchor = AnchorPosition.MIDDLE_CENTER

    def __init__(self, fmt: ImageFormat, config: Optional[AppConfig] = None):
        self.format = fmt
        self.config = config or AppConfig()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.format.name})"

    def set_units(self, app: HostApplication) -> None:
        app.set_units(self.config.ruler_units, self.config.type_units)

    def open_with_constraints(self, app: HostApplication, path: Path,
                              width: float, height: float) -> HostDocument:
        constraint = OpenConstraint(width, height)
        doc = self._open(app, path)
        try:
            self.resize_with_constraints(doc, constraint)
        except Exception:
            self.close(doc)
            raise
        return doc

    def resize_with_constraints(self, doc: HostDocument, constraint: OpenConstraint) -> None:
        if constraint.binding(doc.width, doc.height) == "height":
            doc.resize_image(height=constraint.height, resample=self.resample)
        else:
            doc.resize_image(width=constraint.width, resample=self.resample)
        log.info("Fitted into %gx%g -> %gx%g", constraint.width, constraint.height,
                 doc.width, doc.height)

    def extend_canvas(self, doc: HostDocument, width: float, height: float) -> None:
        if width < doc.width or height < doc.height:
            raise ConstraintViolation(
                f"Canvas {width}x{height} is smaller than the document ({doc.width}x{doc.height})"
            )
        doc.resize_canvas(width, height, self.anchor)

    def set_background_transparent(self, app: HostApplication, doc: HostDocument) -> None:
        if tools.is_transparent(doc):
            log.info("Background already transparent, skipping removal action")
            return
        doc.rename_base_layer(self.config.background_layer_name)
        tools.run_background_action(app, self.config)

    def save(self, doc: HostDocument, saver, path: Path) -> None:
        saver.save(doc, path)

    def close(self, doc: HostDocument) -> None:
        doc.close(save_changes=False)

    def _open(self, app: HostApplication, path: Path,
              options: Optional[OpenPreset] = None) -> HostDocument:
        try:
            return app.open(Path(path), options)
        except HostError as e:
            raise OpenFailed(f"Could not open {path}: {e}") from e


class VectorImageActions(ImageActions):
    """EPS sources: the editor rasterizes at open time against one dimension."""

    def __init__(self, fmt: ImageFormat, config: Optional[AppConfig] = None):
        super().__init__(fmt, config)
        self.preset = self.config.presets.open_preset(fmt)

    def open_with_constraints(self, app: HostApplication, path: Path,
                              width: float, height: float) -> HostDocument:
        constraint = OpenConstraint(width, height)
        res = self.preset.resolution
        by_width = self.preset.targeting_width(pixel_unit(constraint.width, res))
        by_height = self.preset.targeting_height(pixel_unit(constraint.height, res))

        doc = self._open(app, path, by_width)
        try:
            first_height = doc.height
        except Exception:
            self.close(doc)
            raise
        if first_height > constraint.height:
            log.info("Width-targeted open is %g px tall (max %g), reopening by height",
                     first_height, constraint.height)
            self.close(doc)
            doc = self._open(app, path, by_height)

        try:
            self._check_box(doc, path, constraint)
        except Exception:
            self.close(doc)
            raise
        return doc

    def _check_box(self, doc: HostDocument, path: Path, constraint: OpenConstraint) -> None:
        # Only height overflow triggers the second pass
        if doc.width > constraint.width or doc.height > constraint.height:
            log.warning("%s opened at %gx%g, outside the %gx%g box",
                        Path(path).name, doc.width, doc.height, constraint.width, constraint.height)


class AiImageActions(VectorImageActions):
    """Illustrator sources (PDF-style open). Not supported."""

    def __init__(self, fmt: ImageFormat = ImageFormat.AI, config: Optional[AppConfig] = None):
        raise ActionNotImplemented("Processing AI files is not implemented")


_STRATEGIES: Dict[ImageFormat, Type[ImageActions]] = {
    ImageFormat.PNG: ImageActions,
    ImageFormat.JPG: ImageActions,
    ImageFormat.JPEG: ImageActions,
    ImageFormat.TIFF: ImageActions,
    ImageFormat.GIF: ImageActions,
    ImageFormat.EPS: VectorImageActions,
    ImageFormat.AI: AiImageActions,
}


def actions_for(fmt: ImageFormat, config: Optional[AppConfig] = None) -> ImageActions:
    try:
        strategy = _STRATEGIES[fmt]
    except KeyError:
        raise UnsupportedFormat(f"No actions for format {fmt.name}") from None
    return strategy(fmt, config)
