import pytest
import tomlkit

from psimgproc.imaging.presets import (
    OPEN_PRESETS, SAVE_PRESETS, PresetTable, load_presets, presets_to_toml,
)
from psimgproc.models.enums import (
    ByteOrder, CropPage, ImageFormat, LayerCompression, OpenMode, PreviewType, SaveEncoding, WebFormat,
)
from psimgproc.models.errors import ActionNotImplemented, UnsupportedFormat


def test_default_web_presets():
    png = SAVE_PRESETS[ImageFormat.PNG]
    assert png.format is WebFormat.PNG
    assert (png.png8, png.transparency, png.interlaced) == (False, True, False)
    assert png.matte_color == (255, 255, 255)
    assert SAVE_PRESETS[ImageFormat.GIF].format is WebFormat.GIF
    assert SAVE_PRESETS[ImageFormat.JPG] == SAVE_PRESETS[ImageFormat.JPEG]


def test_default_native_presets():
    tif = SAVE_PRESETS[ImageFormat.TIFF]
    assert tif.byte_order is ByteOrder.IBM
    assert tif.layer_compression is LayerCompression.RLE
    assert tif.alpha_channels and tif.layers and tif.annotations and tif.spot_colors
    eps = SAVE_PRESETS[ImageFormat.EPS]
    assert eps.preview is PreviewType.EIGHT_BIT_TIFF
    assert eps.encoding is SaveEncoding.JPEG_MEDIUM
    assert eps.vector_data


def test_vector_open_presets():
    eps = OPEN_PRESETS[ImageFormat.EPS]
    assert (eps.resolution, eps.mode, eps.anti_alias) == (300, OpenMode.RGB, True)
    assert not eps.pdf_style
    ai = OPEN_PRESETS[ImageFormat.AI]
    assert ai.pdf_style and ai.crop_page is CropPage.MEDIA_BOX and ai.page == 1


def test_width_and_height_targets_are_separate_objects():
    eps = OPEN_PRESETS[ImageFormat.EPS]
    by_w, by_h = eps.targeting_width(72.0), eps.targeting_height(48.0)
    assert (by_w.width, by_w.height) == (72.0, None)
    assert (by_h.width, by_h.height) == (None, 48.0)
    assert eps.width is None


def test_toml_overrides_merge_over_defaults():
    table = load_presets(
        """
        [open.eps]
        resolution = 150
        mode = "Grayscale"

        [save.png]
        png8 = true
        quality = 80
        matte_color = [0, 0, 0]
        """
    )
    assert table.open_preset(ImageFormat.EPS).resolution == 150
    assert table.open_preset(ImageFormat.EPS).mode is OpenMode.GRAYSCALE
    png = table.save_preset(ImageFormat.PNG)
    assert (png.png8, png.quality, png.matte_color) == (True, 80, (0, 0, 0))
    assert png.transparency is True
    assert table.save_preset(ImageFormat.JPG) == SAVE_PRESETS[ImageFormat.JPG]


def test_unknown_option_is_rejected():
    with pytest.raises(ValueError, match="sharpness"):
        load_presets("[save.jpg]\nsharpness = 3\n")


def test_unknown_format_section_is_rejected():
    with pytest.raises(UnsupportedFormat):
        load_presets("[save.webp]\nquality = 3\n")


def test_ai_has_no_save_preset():
    with pytest.raises(ActionNotImplemented):
        PresetTable().save_preset(ImageFormat.AI)
    with pytest.raises(UnsupportedFormat):
        PresetTable().open_preset(ImageFormat.PNG)


def test_dumped_presets_load_back_unchanged():
    table = PresetTable()
    assert load_presets(tomlkit.dumps(presets_to_toml(table))) == table
