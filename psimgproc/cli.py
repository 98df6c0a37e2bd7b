# psimgproc/cli.py
# Command line entry point: fit, optionally pad and knock out, then save.

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from psimgproc.controllers.job_controller import JobController
from psimgproc.host.base import HostApplication
from psimgproc.imaging.formats import SUPPORTED_EXTENSIONS, resolve
from psimgproc.imaging.pipeline import HostSession
from psimgproc.models.enums import ImageFormat
from psimgproc.models.errors import ImageProcError
from psimgproc.models.settings import RunSettings
from psimgproc.utils.config import BACKENDS, CONFIG_PATH, load_config
from psimgproc.utils.logging_utils import build_logger

# AI cannot be written, so it is not offered as a target
OUTPUT_EXTENSIONS = tuple(e for e in SUPPORTED_EXTENSIONS if e != ImageFormat.AI.value)


def make_host(backend: str) -> HostApplication:
    if backend == "pillow":
        from psimgproc.host.pillow_host import PillowApplication
        return PillowApplication()
    from psimgproc.host.photoshop import PhotoshopApplication
    return PhotoshopApplication()


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="ps-imgproc",
        description="Fit images into a box and re-save them through Photoshop.",
    )
    ap.add_argument("-i", "--input", dest="inputs", action="append", required=True,
                    help="Source image (repeatable)")
    ap.add_argument("-o", "--outdir", required=True, help="Output directory")
    ap.add_argument("--width", type=float, required=True, help="Target width in pixels")
    ap.add_argument("--height", type=float, required=True, help="Target height in pixels")
    ap.add_argument("--format", choices=OUTPUT_EXTENSIONS,
                    help="Output format (default: same as the source)")
    ap.add_argument("--extend-canvas", action="store_true",
                    help="Pad the canvas to exactly width x height")
    ap.add_argument("--transparent", action="store_true",
                    help="Make the background transparent")
    ap.add_argument("--backend", choices=BACKENDS, help="Host application (default from config)")
    ap.add_argument("--config", type=Path, default=CONFIG_PATH, help="TOML config file")
    ap.add_argument("--stop-on-error", action="store_true", help="Stop at the first failing file")
    ap.add_argument("--log-dir", type=Path, help="Log directory (default from config)")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        cfg = load_config(args.config)
    except ValueError as e:
        build_logger(log_dir=args.log_dir).error(str(e))
        return 1
    log = build_logger(cfg, log_dir=args.log_dir)

    try:
        settings = RunSettings(
            width=args.width,
            height=args.height,
            output_dir=Path(args.outdir),
            output_format=resolve(args.format) if args.format else None,
            extend_canvas=args.extend_canvas,
            transparent_background=args.transparent,
            stop_on_first_error=args.stop_on_error,
        )
        session = HostSession(make_host(args.backend or cfg.backend), cfg)
    except (ImageProcError, ValueError) as e:
        log.error(str(e))
        return 1

    worker = JobController(session).run_blocking([Path(p) for p in args.inputs], settings)
    for out in worker.outputs:
        log.info("Saved: %s", out)
    if worker.failures:
        log.error("%d of %d file(s) failed", len(worker.failures), len(args.inputs))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
