"""
Qt worker runnable — follows modern Qt pattern: QRunnable + QThreadPool.
Accepts ScanParams for unified configuration.
"""
from PySide6.QtCore import QRunnable, QObject, Signal, QMutex, QMutexLocker
from dupekeeper.core.errors import CancellationRequested
from dupekeeper.core.models import ScanParams
from dupekeeper.commands import ScanCommand


class WorkerSignals(QObject):
    """Separate QObject to hold signals (QRunnable cannot emit signals directly)."""
    progress = Signal(int, int, str)  # processed, total, message
    finished = Signal(object)         # ScanResult
    error = Signal(str, str)          # error kind, details
    cancelled = Signal()


class ScanWorker(QRunnable):
    """
    Worker runnable that performs a scan in the thread pool.
    Automatically deleted after execution (setAutoDelete=True).
    Signals are delivered to receivers through Qt's queued connections, so slots
    run on the GUI thread.
    """
    def __init__(self, params: ScanParams):
        super().__init__()
        self.params = params
        self.command = ScanCommand()
        self.signals = WorkerSignals()
        self._stopped = False
        self._mutex = QMutex()
        self.setAutoDelete(True)

    def stop(self):
        """Sets the stopped flag to signal the worker to terminate gracefully."""
        with QMutexLocker(self._mutex):
            self._stopped = True

    def is_stopped(self) -> bool:
        """Returns True if the worker has been requested to stop."""
        with QMutexLocker(self._mutex):
            return self._stopped

    def safe_progress_emit(self, processed: int, total: int, message: str):
        """Emits progress signal safely with mutex protection."""
        with QMutexLocker(self._mutex):
            if not self._stopped:
                try:
                    self.signals.progress.emit(processed, total, message)
                except RuntimeError:
                    pass  # receiver already destroyed

    def run(self):
        """Main execution method. Runs in thread pool thread."""
        if self.is_stopped():
            self.signals.cancelled.emit()
            return

        try:
            result = self.command.execute(
                self.params,
                stopped_flag=self.is_stopped,
                progress_callback=self.safe_progress_emit
            )
        except CancellationRequested:
            self.signals.cancelled.emit()
            return
        except Exception as e:
            if self.is_stopped():
                self.signals.cancelled.emit()
            else:
                self.signals.error.emit(type(e).__name__, str(e))
            return

        if self.is_stopped():
            self.signals.cancelled.emit()
        else:
            self.signals.finished.emit(result)
