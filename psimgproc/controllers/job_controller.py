from __future__ import annotations
from pathlib import Path
from typing import List, Optional
from psimgproc.imaging.formats import extension_of, resolve_path
from psimgproc.imaging.pipeline import HostSession
from psimgproc.models.settings import RunSettings
from psimgproc.workers.batch_worker import BatchWorker

def default_output_namer(p: Path, settings: RunSettings) -> Path:
    fmt = settings.output_format or resolve_path(p)
    ext = extension_of(fmt)
    base = f"{p.stem}__{settings.width:.0f}x{settings.height:.0f}px"
    settings.output_dir.mkdir(parents=True, exist_ok=True)
    out = settings.output_dir / f"{base}.{ext}"
    i = 1
    while out.exists():
        out = settings.output_dir / f"{base}_{i}.{ext}"
        i += 1
    return out

class JobController:
    """Runs batches on a worker and forwards its signals to ``listener``.

    ``listener`` may implement any of ``on_file_started``, ``on_file_progress``,
    ``on_file_done``, ``on_error``, ``on_all_done`` and ``append_log``.
    """

    def __init__(self, session: HostSession, listener=None, output_namer=default_output_namer):
        self.session = session
        self.listener = listener
        self.output_namer = output_namer
        self.worker: Optional[BatchWorker] = None

    def start(self, files: List[Path], settings: RunSettings) -> Optional[BatchWorker]:
        if self.worker and self.worker.isRunning():
            return None
        self.worker = BatchWorker(self.session, files, settings, self.output_namer)
        self._wire_worker(self.worker)
        self.worker.start()
        return self.worker

    def run_blocking(self, files: List[Path], settings: RunSettings) -> BatchWorker:
        """Run the batch on the calling thread."""
        self.worker = BatchWorker(self.session, files, settings, self.output_namer)
        self._wire_worker(self.worker)
        self.worker.run()
        return self.worker

    def cancel(self):
        if self.worker and self.worker.isRunning():
            self.worker.cancel()

    def _wire_worker(self, w: BatchWorker):
        ui = self.listener
        if ui is None:
            return
        if hasattr(ui, "on_file_started"):
            w.file_started.connect(lambda f: ui.on_file_started(f))
        if hasattr(ui, "on_file_progress"):
            w.file_progress.connect(lambda f, p: ui.on_file_progress(f, p))
        if hasattr(ui, "on_file_done"):
            w.file_done.connect(lambda f: ui.on_file_done(f))
        if hasattr(ui, "on_error"):
            w.error.connect(lambda msg: ui.on_error(msg))
        if hasattr(ui, "on_all_done"):
            w.all_done.connect(lambda: ui.on_all_done())
        if hasattr(ui, "append_log"):
            w.log_line.connect(lambda line: ui.append_log(line))
