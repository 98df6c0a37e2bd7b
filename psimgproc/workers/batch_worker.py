from __future__ import annotations
import logging
from pathlib import Path
from typing import Callable, List, Tuple
from PySide6.QtCore import QThread, Signal
from psimgproc.imaging.pipeline import HostSession, process_image
from psimgproc.models.settings import RunSettings
from psimgproc.utils.logging_utils import SignalTailHandler, log_section

log = logging.getLogger("psimgproc.worker")

OutputNamer = Callable[[Path, RunSettings], Path]

class BatchWorker(QThread):
    file_started = Signal(str)
    file_progress = Signal(str, int)
    file_done = Signal(str)
    error = Signal(str)
    all_done = Signal()
    log_line = Signal(str)

    def __init__(self, session: HostSession, files: List[Path], settings: RunSettings,
                 output_namer: OutputNamer):
        super().__init__()
        self._session = session
        self._files = [Path(f) for f in files]
        self._settings = settings
        self._cancel = False
        self._output_namer = output_namer
        self.outputs: List[Path] = []
        self.failures: List[Tuple[Path, Exception]] = []

    def cancel(self):
        self._cancel = True

    def run(self):
        tail = SignalTailHandler(self.log_line.emit)
        pkg_logger = logging.getLogger("psimgproc")
        pkg_logger.addHandler(tail)
        try:
            self._run_files()
        finally:
            pkg_logger.removeHandler(tail)
        self.all_done.emit()

    def _run_files(self):
        s = self._settings
        total = len(self._files)
        for idx, f in enumerate(self._files, 1):
            if self._cancel:
                log.info("Batch cancelled before %s", f.name)
                break
            self.file_started.emit(str(f))
            try:
                with log_section(f"[{idx}/{total}] {f.name}", log):
                    out_path = self._output_namer(f, s)
                    process_image(
                        self._session, f, out_path, s.width, s.height,
                        extend_canvas=s.extend_canvas,
                        transparent=s.transparent_background,
                    )
            except Exception as e:
                log.error("%s failed: %s", f.name, e)
                self.failures.append((f, e))
                self.error.emit(f"{f.name}: {e}")
                if s.stop_on_first_error:
                    break
                continue
            self.outputs.append(out_path)
            self.file_progress.emit(str(f), int(idx * 100 / total))
            self.file_done.emit(str(out_path))
