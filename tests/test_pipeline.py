from pathlib import Path

import pytest
from PIL import Image

from psimgproc.imaging.pipeline import HostSession, process_image
from psimgproc.models.enums import Units
from psimgproc.models.errors import ActionNotImplemented, SaveFailed, UnsupportedFormat


def test_photo_fitted_and_saved_as_jpeg(tmp_path: Path, session, pillow_app, make_image):
    # Upper-case extension on purpose
    src = make_image(tmp_path / "photo.JPG", (2048, 1024), color=(30, 90, 160), fmt="JPEG")
    dst = tmp_path / "out" / "photo.jpg"
    dst.parent.mkdir()

    out = process_image(session, src, dst, 1024, 768)

    assert out == dst and dst.exists()
    with Image.open(dst) as im:
        assert im.format == "JPEG"
        assert im.size == (1024, 512)
    assert pillow_app.ruler_units is Units.PIXELS
    assert all(d.closed for d in pillow_app.documents)


def test_padded_transparent_png(tmp_path: Path, session, make_image):
    src = make_image(tmp_path / "logo.png", (400, 200), square=((150, 50, 250, 150), (0, 0, 255)))
    dst = tmp_path / "logo_out.png"
    process_image(session, src, dst, 300, 300, extend_canvas=True, transparent=True)
    with Image.open(dst) as im:
        assert im.size == (300, 300)
        assert im.mode == "RGBA"
        assert im.getpixel((0, 0))[3] == 0
        assert im.getpixel((150, 150))[3] == 255


def test_converts_between_formats(tmp_path: Path, session, make_image):
    src = make_image(tmp_path / "scan.png", (100, 100))
    dst = tmp_path / "scan.tif"
    process_image(session, src, dst, 50, 50)
    with Image.open(dst) as im:
        assert im.format == "TIFF"
        assert im.size == (50, 50)


def test_document_closed_when_save_fails(tmp_path: Path, session, pillow_app, make_image):
    src = make_image(tmp_path / "a.png", (10, 10))
    with pytest.raises(SaveFailed):
        process_image(session, src, tmp_path / "missing" / "a.png", 5, 5)
    assert len(pillow_app.documents) == 1
    assert pillow_app.documents[0].closed


@pytest.mark.parametrize("src_name, dst_name", [("art.ai", "art.png"), ("a.png", "a.ai")])
def test_ai_fails_before_touching_the_host(tmp_path: Path, session, pillow_app, make_image,
                                           src_name, dst_name):
    src = make_image(tmp_path / src_name, (10, 10))
    with pytest.raises(ActionNotImplemented):
        process_image(session, src, tmp_path / dst_name, 5, 5)
    assert pillow_app.documents == []
    assert pillow_app.ruler_units is Units.INCHES


def test_unknown_extension(tmp_path: Path, session, make_image):
    src = make_image(tmp_path / "a.png", (10, 10))
    with pytest.raises(UnsupportedFormat):
        process_image(session, src, tmp_path / "a.bmp", 5, 5)


def test_session_holds_lock_for_a_sequence(pillow_app):
    session = HostSession(pillow_app)
    with session.sequence() as app:
        assert app is pillow_app
        assert session._lock.locked()
    assert not session._lock.locked()


def test_fractional_box_pads_without_overflow(tmp_path: Path, session, make_image):
    src = make_image(tmp_path / "portrait.png", (301, 400), color=(0, 128, 0))
    dst = tmp_path / "portrait_out.png"
    process_image(session, src, dst, 225.8, 300, extend_canvas=True)
    with Image.open(dst) as im:
        assert im.size == (225, 300)
