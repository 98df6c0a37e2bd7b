from __future__ import annotations
import logging, sys, time
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Callable, Iterator, Optional
from psimgproc.utils.config import AppConfig

LOG_FILE_NAME = "ps_imgproc.log"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"

BANNER = "=" * 75

def build_logger(cfg: Optional[AppConfig] = None, log_dir: Optional[Path] = None,
                 name: str = "psimgproc") -> logging.Logger:
    """Package logger writing to stdout and to ``<log_dir>/ps_imgproc.log``.

    ``log_dir`` overrides the configured directory (``[general] log_dir``).
    """
    cfg = cfg or AppConfig()
    level = logging.getLevelName(cfg.log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level {cfg.log_level!r}")

    logger = logging.getLogger(name)
    logger.setLevel(level)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    directory = Path(log_dir) if log_dir is not None else cfg.log_dir
    directory.mkdir(exist_ok=True, parents=True)
    handlers = [
        RotatingFileHandler(directory / LOG_FILE_NAME, maxBytes=5_000_000, backupCount=3,
                            encoding="utf-8"),
        logging.StreamHandler(sys.stdout),
    ]
    fmt = logging.Formatter(LOG_FORMAT)
    for h in handlers:
        h.setFormatter(fmt)
        h.setLevel(level)
        logger.addHandler(h)
    return logger

class SignalTailHandler(logging.Handler):
    """Forwards formatted records to a callable, e.g. a Qt signal's ``emit``."""

    def __init__(self, signal_emit: Callable[[str], None]):
        super().__init__()
        self.emit_to_signal = signal_emit
        self.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.emit_to_signal(self.format(record))
        except Exception:
            self.handleError(record)

@contextmanager
def log_section(title: str, logger: logging.Logger) -> Iterator[None]:
    """Banner around one file's run, closed with how long it took."""
    logger.info("\n%s\n%s\n%s", BANNER, title, BANNER)
    started = time.perf_counter()
    try:
        yield
    finally:
        logger.info("%s finished in %.2fs", title, time.perf_counter() - started)
