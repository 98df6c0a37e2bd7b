from pathlib import Path

import pytest
from PIL import Image

from psimgproc.imaging.savers import NativeSaver, WebSaver, saver_for
from psimgproc.models.enums import ImageFormat
from psimgproc.models.errors import ActionNotImplemented, SaveFailed, UnsupportedFormat


def _rgba_doc(tmp_path: Path, app, make_image):
    # Red square on a fully transparent 12x12 canvas
    src = make_image(tmp_path / "src.png", (12, 12), color=(0, 0, 0, 0), mode="RGBA",
                     square=((4, 4, 8, 8), (255, 0, 0, 255)))
    return app.open(src)


def test_saver_kinds():
    for fmt in (ImageFormat.PNG, ImageFormat.JPG, ImageFormat.JPEG, ImageFormat.GIF):
        assert isinstance(saver_for(fmt), WebSaver)
    for fmt in (ImageFormat.TIFF, ImageFormat.EPS):
        assert isinstance(saver_for(fmt), NativeSaver)
    assert saver_for(ImageFormat.JPG).options == saver_for(ImageFormat.JPEG).options


def test_ai_and_unknown_savers_fail_fast():
    with pytest.raises(ActionNotImplemented):
        saver_for(ImageFormat.AI)
    with pytest.raises(UnsupportedFormat):
        saver_for(ImageFormat.UNKNOWN)


def test_png_keeps_alpha(tmp_path: Path, pillow_app, make_image):
    doc = _rgba_doc(tmp_path, pillow_app, make_image)
    out = tmp_path / "out.png"
    saver_for(ImageFormat.PNG).save(doc, out)
    with Image.open(out) as im:
        assert im.mode == "RGBA"
        assert im.getpixel((0, 0))[3] == 0


def test_jpeg_flattens_onto_white_matte(tmp_path: Path, pillow_app, make_image):
    doc = _rgba_doc(tmp_path, pillow_app, make_image)
    out = tmp_path / "out.jpg"
    saver_for(ImageFormat.JPG).save(doc, out)
    with Image.open(out) as im:
        assert im.format == "JPEG"
        assert im.mode == "RGB"
        assert min(im.getpixel((0, 0))) >= 245


def test_gif_and_tiff(tmp_path: Path, pillow_app, make_image):
    doc = _rgba_doc(tmp_path, pillow_app, make_image)
    saver_for(ImageFormat.GIF).save(doc, tmp_path / "out.gif")
    saver_for(ImageFormat.TIFF).save(doc, tmp_path / "out.tif")
    with Image.open(tmp_path / "out.gif") as im:
        assert im.format == "GIF"
        assert im.size == (12, 12)
    with Image.open(tmp_path / "out.tif") as im:
        assert im.format == "TIFF"
        assert im.mode == "RGBA"


def test_eps_writes_postscript(tmp_path: Path, pillow_app, make_image):
    doc = _rgba_doc(tmp_path, pillow_app, make_image)
    out = tmp_path / "out.eps"
    saver_for(ImageFormat.EPS).save(doc, out)
    assert out.read_bytes().startswith(b"%!PS-Adobe")


def test_host_failure_becomes_save_failed(tmp_path: Path, pillow_app, make_image):
    doc = _rgba_doc(tmp_path, pillow_app, make_image)
    with pytest.raises(SaveFailed):
        saver_for(ImageFormat.PNG).save(doc, tmp_path / "no" / "such" / "dir" / "out.png")
