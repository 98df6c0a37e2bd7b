import logging
from pathlib import Path

import pytest
from PIL import Image

from psimgproc.cli import main


@pytest.fixture(autouse=True)
def _reset_logger():
    yield
    logger = logging.getLogger("psimgproc")
    for h in list(logger.handlers):
        h.close()
    logger.handlers.clear()


def _base_args(tmp_path: Path):
    return ["-o", str(tmp_path / "out"), "--width", "64", "--height", "64",
            "--backend", "pillow", "--config", str(tmp_path / "none.toml"),
            "--log-dir", str(tmp_path / "logs")]


def test_cli_converts_and_logs(qapp, tmp_path: Path, make_image):
    src = make_image(tmp_path / "card.png", (128, 32))
    rc = main(["-i", str(src), "--format", "jpg", "--extend-canvas"] + _base_args(tmp_path))
    assert rc == 0
    out = tmp_path / "out" / "card__64x64px.jpg"
    with Image.open(out) as im:
        assert im.size == (64, 64)
    assert "card.png" in (tmp_path / "logs" / "ps_imgproc.log").read_text(encoding="utf-8")


def test_cli_reports_failed_files(qapp, tmp_path: Path):
    rc = main(["-i", str(tmp_path / "missing.png")] + _base_args(tmp_path))
    assert rc == 1


def test_cli_rejects_bad_box(qapp, tmp_path: Path, make_image):
    src = make_image(tmp_path / "a.png", (8, 8))
    args = _base_args(tmp_path)
    args[args.index("--width") + 1] = "0"
    assert main(["-i", str(src)] + args) == 1


def test_cli_does_not_offer_ai_output(tmp_path: Path, make_image, capsys):
    src = make_image(tmp_path / "a.png", (8, 8))
    with pytest.raises(SystemExit) as exc:
        main(["-i", str(src), "--format", "ai"] + _base_args(tmp_path))
    assert exc.value.code == 2
    assert "invalid choice" in capsys.readouterr().err


def test_cli_logs_to_configured_directory(qapp, tmp_path: Path, make_image):
    logs = tmp_path / "configured"
    config = tmp_path / "cfg.toml"
    config.write_text(f'[general]\nbackend = "pillow"\nlog_dir = "{logs.as_posix()}"\n',
                      encoding="utf-8")
    src = make_image(tmp_path / "b.png", (8, 8))
    rc = main(["-i", str(src), "-o", str(tmp_path / "out"), "--width", "4", "--height", "4",
               "--config", str(config)])
    assert rc == 0
    assert "b.png" in (logs / "ps_imgproc.log").read_text(encoding="utf-8")
