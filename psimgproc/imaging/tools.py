"""
Small editor operations shared by every format strategy.

All of these act on the host's ambient selection, so anything that creates a
selection just to inspect it drops it again before returning.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

from psimgproc.host.base import HostApplication, HostDocument, HostSelection
from psimgproc.imaging.sizes import pixel_unit
from psimgproc.utils.config import AppConfig

log = logging.getLogger("psimgproc.tools")

__all__ = [
    "selection_scope", "is_transparent", "magic_wand", "delete_selection",
    "set_color_sampler", "run_background_action", "pixel_unit",
]


@contextmanager
def selection_scope(doc: HostDocument) -> Iterator[HostSelection]:
    """Yield the document selection and deselect on exit, whatever happens."""
    selection = doc.selection
    try:
        yield selection
    finally:
        selection.deselect()


def is_transparent(doc: HostDocument) -> bool:
    """
    Probe whether the document already has transparent pixels.

    The transparency channel is loaded as a selection: a solid selection
    covers every pixel, so nothing is transparent.
    """
    with selection_scope(doc) as selection:
        selection.select_transparency()
        transparent = not selection.solid
    log.debug("transparency probe: %s", "transparent" if transparent else "opaque")
    return transparent


def magic_wand(doc: HostDocument, x: int, y: int, tolerance: int = 32, anti_alias: bool = True,
               contiguous: bool = False, merged: bool = False) -> HostSelection:
    doc.selection.magic_wand(x, y, tolerance=tolerance, anti_alias=anti_alias,
                             contiguous=contiguous, merged=merged)
    return doc.selection


def delete_selection(doc: HostDocument) -> None:
    doc.selection.clear()


def set_color_sampler(doc: HostDocument, x: int, y: int) -> Tuple[int, int, int]:
    return doc.add_color_sampler(x, y)


def run_background_action(app: HostApplication, config: Optional[AppConfig] = None) -> None:
    cfg = config or AppConfig()
    log.info("Running action %r (%s)", cfg.background_action_name, cfg.background_action_folder)
    app.do_action(cfg.background_action_name, cfg.background_action_folder)
