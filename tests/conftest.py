from pathlib import Path
from typing import Optional, Tuple

import pytest
from PIL import Image
from PySide6.QtCore import QCoreApplication

from psimgproc.host.pillow_host import PillowApplication
from psimgproc.imaging.pipeline import HostSession


@pytest.fixture(scope="session")
def qapp():
    return QCoreApplication.instance() or QCoreApplication([])


@pytest.fixture
def pillow_app() -> PillowApplication:
    return PillowApplication()


@pytest.fixture
def session(pillow_app) -> HostSession:
    return HostSession(pillow_app)


@pytest.fixture
def make_image():
    """Write a solid image, optionally with a colored square in the middle."""

    def _make(path: Path, size: Tuple[int, int], color=(255, 255, 255), mode: str = "RGB",
              fmt: Optional[str] = None, square=None) -> Path:
        im = Image.new(mode, size, color)
        if square is not None:
            box, fill = square
            im.paste(fill, box)
        im.save(path, format=fmt or "PNG")
        return path

    return _make
