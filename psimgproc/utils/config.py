from __future__ import annotations
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import tomlkit
from tomlkit.exceptions import TOMLKitError
from psimgproc.imaging.presets import PresetTable, presets_from_mapping, presets_to_toml
from psimgproc.models.enums import Units

CONFIG_PATH = Path.home() / ".ps_imgproc.toml"
LOG_DIR = Path("logs")

# Recorded action that removes a white background. These strings must match
# the action and action-set names inside the editor.
BACKGROUND_ACTION_NAME = "White BG Removal - with Color"
BACKGROUND_ACTION_FOLDER = "Media Militia - Removal Techniques"
BACKGROUND_LAYER_NAME = "Background"

BACKENDS = ("photoshop", "pillow")

@dataclass(frozen=True)
class AppConfig:
    background_action_name: str = BACKGROUND_ACTION_NAME
    background_action_folder: str = BACKGROUND_ACTION_FOLDER
    background_layer_name: str = BACKGROUND_LAYER_NAME
    ruler_units: Units = Units.PIXELS
    type_units: Units = Units.PIXELS
    backend: str = "photoshop"
    log_dir: Path = LOG_DIR
    log_level: str = "INFO"
    presets: PresetTable = field(default_factory=PresetTable)


def load_config(path: Optional[Path] = None) -> AppConfig:
    """Read a TOML config; a missing file yields the defaults.

    Layout::

        [general]
        backend = "pillow"
        background_action_name = "..."
        log_dir = "logs"

        [save.png]
        png8 = true
    """
    path = Path(path) if path is not None else CONFIG_PATH
    if not path.exists():
        return AppConfig()
    try:
        data = tomlkit.parse(path.read_text(encoding="utf-8")).unwrap()
    except TOMLKitError as e:
        raise ValueError(f"Invalid config file {path}: {e}") from e

    general = data.get("general", {})
    backend = general.get("backend", "photoshop")
    if backend not in BACKENDS:
        raise ValueError(f"Unknown backend {backend!r} in {path}; expected one of {BACKENDS}")
    log_level = general.get("log_level", "INFO")
    if not isinstance(logging.getLevelName(str(log_level).upper()), int):
        raise ValueError(f"Unknown log level {log_level!r} in {path}")
    return AppConfig(
        background_action_name=general.get("background_action_name", BACKGROUND_ACTION_NAME),
        background_action_folder=general.get("background_action_folder", BACKGROUND_ACTION_FOLDER),
        background_layer_name=general.get("background_layer_name", BACKGROUND_LAYER_NAME),
        ruler_units=Units(general.get("ruler_units", Units.PIXELS.value)),
        type_units=Units(general.get("type_units", Units.PIXELS.value)),
        backend=backend,
        log_dir=Path(general.get("log_dir", str(LOG_DIR))),
        log_level=log_level,
        presets=presets_from_mapping(data),
    )


def save_config(cfg: AppConfig, path: Optional[Path] = None) -> Path:
    path = Path(path) if path is not None else CONFIG_PATH
    doc = presets_to_toml(cfg.presets)
    general = tomlkit.table()
    general.add("backend", cfg.backend)
    general.add("background_action_name", cfg.background_action_name)
    general.add("background_action_folder", cfg.background_action_folder)
    general.add("background_layer_name", cfg.background_layer_name)
    general.add("ruler_units", cfg.ruler_units.value)
    general.add("type_units", cfg.type_units.value)
    general.add("log_dir", str(cfg.log_dir))
    general.add("log_level", cfg.log_level)
    out = tomlkit.document()
    out.add("general", general)
    for key, value in doc.items():
        out.add(key, value)
    path.write_text(tomlkit.dumps(out), encoding="utf-8")
    return path
