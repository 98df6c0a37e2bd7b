from pathlib import Path

import pytest

from psimgproc.host.pillow_host import PillowApplication
from psimgproc.imaging import tools
from psimgproc.models.errors import HostError
from psimgproc.utils.config import AppConfig


def test_opaque_canvas_is_not_transparent(tmp_path: Path, pillow_app, make_image):
    doc = pillow_app.open(make_image(tmp_path / "o.png", (16, 16)))
    assert tools.is_transparent(doc) is False
    assert doc.selection.is_empty


def test_existing_alpha_is_transparent(tmp_path: Path, pillow_app, make_image):
    src = make_image(tmp_path / "t.png", (16, 16), color=(9, 9, 9, 255), mode="RGBA",
                     square=((0, 0, 4, 4), (0, 0, 0, 0)))
    doc = pillow_app.open(src)
    assert tools.is_transparent(doc) is True
    assert doc.selection.is_empty


class _ExplodingSelection:
    def __init__(self):
        self.deselected = 0

    def select_transparency(self):
        pass

    @property
    def solid(self):
        raise HostError("solid is unavailable")

    def deselect(self):
        self.deselected += 1


class _Doc:
    def __init__(self):
        self.selection = _ExplodingSelection()


def test_probe_deselects_when_host_fails():
    doc = _Doc()
    with pytest.raises(HostError):
        tools.is_transparent(doc)
    assert doc.selection.deselected == 1


def test_wand_then_delete_knocks_out_color(tmp_path: Path, pillow_app, make_image):
    src = make_image(tmp_path / "w.png", (10, 10), square=((3, 3, 7, 7), (200, 0, 0)))
    doc = pillow_app.open(src)
    tools.magic_wand(doc, 0, 0, tolerance=5)
    tools.delete_selection(doc)
    assert doc.image.getpixel((0, 0))[3] == 0
    assert doc.image.getpixel((5, 5)) == (200, 0, 0, 255)


def test_color_sampler_reads_pixel(tmp_path: Path, pillow_app, make_image):
    doc = pillow_app.open(make_image(tmp_path / "s.png", (5, 5), color=(1, 2, 3)))
    assert tools.set_color_sampler(doc, 2, 2) == (1, 2, 3)
    assert doc.color_samplers == [(2, 2)]


def test_background_action_uses_configured_names(tmp_path: Path, make_image):
    app = PillowApplication()
    played = []
    app.register_action("Knockout", "Studio", lambda doc: played.append(doc))
    app.open(make_image(tmp_path / "k.png", (4, 4)))
    tools.run_background_action(app, AppConfig(background_action_name="Knockout",
                                               background_action_folder="Studio"))
    assert len(played) == 1
