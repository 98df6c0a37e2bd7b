# psimgproc/imaging/pipeline.py
# Purpose: drive the editor through one open -> process -> save -> close run.
# - Strategies are built before the editor is touched, so unsupported formats
#   fail with no side effects
# - One run at a time per HostSession (units and selection are app-wide)
# - The document is closed on every exit path

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from psimgproc.host.base import HostApplication, HostDocument
from psimgproc.imaging.actions import ImageActions, actions_for
from psimgproc.imaging.formats import resolve_path
from psimgproc.imaging.savers import saver_for
from psimgproc.models.errors import HostError
from psimgproc.utils.config import AppConfig

log = logging.getLogger("psimgproc.pipeline")


class HostSession:
    """Owns one editor instance and serializes sequences against it."""

    def __init__(self, app: HostApplication, config: Optional[AppConfig] = None):
        self.app = app
        self.config = config or AppConfig()
        self._lock = threading.Lock()

    @contextmanager
    def sequence(self) -> Iterator[HostApplication]:
        with self._lock:
            with self.app.thread_scope() as app:
                yield app


@contextmanager
def open_document(actions: ImageActions, app: HostApplication, source: Path,
                  width: float, height: float) -> Iterator[HostDocument]:
    doc = actions.open_with_constraints(app, source, width, height)
    try:
        yield doc
    except BaseException:
        try:
            actions.close(doc)
        except HostError as e:
            log.warning("Could not close %s after failure: %s", source, e)
        raise
    else:
        actions.close(doc)


def process_image(
    session: HostSession,
    source: str | Path,
    destination: str | Path,
    width: float,
    height: float,
    *,
    extend_canvas: bool = False,
    transparent: bool = False,
) -> Path:
    """
    Open ``source`` fitted into ``width`` x ``height``, optionally extend the
    canvas to the full box and knock out the background, then save to
    ``destination`` in the format its extension names.
    """
    src = Path(source)
    dst = Path(destination)
    cfg = session.config

    actions = actions_for(resolve_path(src), cfg)
    saver = saver_for(resolve_path(dst), cfg.presets)
    log.info("%s -> %s [%s, %s] box %gx%g", src.name, dst.name, actions, saver, width, height)

    with session.sequence() as app:
        actions.set_units(app)
        with open_document(actions, app, src, width, height) as doc:
            if extend_canvas:
                actions.extend_canvas(doc, width, height)
            if transparent:
                actions.set_background_transparent(app, doc)
            actions.save(doc, saver, dst)

    log.info("Output: %s", dst)
    return dst
