from pathlib import Path

import pytest

from psimgproc.models.enums import ImageFormat, Units
from psimgproc.utils.config import (
    BACKGROUND_ACTION_FOLDER, BACKGROUND_ACTION_NAME, AppConfig, load_config, save_config,
)


def test_missing_file_gives_defaults(tmp_path: Path):
    cfg = load_config(tmp_path / "nope.toml")
    assert cfg == AppConfig()
    assert cfg.background_action_name == BACKGROUND_ACTION_NAME
    assert cfg.background_action_folder == BACKGROUND_ACTION_FOLDER
    assert cfg.background_layer_name == "Background"
    assert cfg.ruler_units is Units.PIXELS


def test_general_and_preset_sections(tmp_path: Path):
    path = tmp_path / "cfg.toml"
    path.write_text(
        '[general]\nbackend = "pillow"\nbackground_action_name = "Knockout"\n\n'
        "[save.jpg]\nquality = 90\n",
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg.backend == "pillow"
    assert cfg.background_action_name == "Knockout"
    assert cfg.background_action_folder == BACKGROUND_ACTION_FOLDER
    assert cfg.presets.save_preset(ImageFormat.JPG).quality == 90
    assert cfg.presets.save_preset(ImageFormat.JPEG).quality == 70


def test_bad_backend_and_bad_toml(tmp_path: Path):
    path = tmp_path / "cfg.toml"
    path.write_text('[general]\nbackend = "gimp"\n', encoding="utf-8")
    with pytest.raises(ValueError, match="gimp"):
        load_config(path)

    path.write_text("[general\nbackend = ", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid config"):
        load_config(path)


def test_saved_config_reloads(tmp_path: Path):
    cfg = AppConfig(backend="pillow", background_action_folder="My Actions")
    path = save_config(cfg, tmp_path / "cfg.toml")
    assert load_config(path) == cfg


def test_log_settings(tmp_path: Path):
    assert AppConfig().log_dir == Path("logs")
    path = tmp_path / "cfg.toml"
    path.write_text('[general]\nlog_dir = "run/logs"\nlog_level = "debug"\n', encoding="utf-8")
    cfg = load_config(path)
    assert (cfg.log_dir, cfg.log_level) == (Path("run/logs"), "debug")

    path.write_text('[general]\nlog_level = "chatty"\n', encoding="utf-8")
    with pytest.raises(ValueError, match="chatty"):
        load_config(path)
