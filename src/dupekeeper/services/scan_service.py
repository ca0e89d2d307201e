"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/scan_service.py
Asynchronous front door to ScanCommand for callers that must not block.

    handle = scan("/photos", recursive=True, parallelism=4)
    handle.on_progress(lambda done, total, msg: ...)
    handle.on_completed(lambda result: ...)
    handle.on_failed(lambda kind, details: ...)
    handle.on_cancelled(lambda: ...)
    handle.cancel()

Callbacks run on the scan thread; marshaling to a UI thread is the caller's job.
Exactly one of completed/failed/cancelled fires per handle. A terminal callback
registered after the scan has already finished is invoked immediately.
"""
import logging
import threading
from enum import Enum
from typing import Callable, List, Optional

from dupekeeper.commands import ScanCommand
from dupekeeper.core.errors import CancellationRequested
from dupekeeper.core.models import ScanParams, ScanResult

logger = logging.getLogger(__name__)


class ScanState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (ScanState.COMPLETED, ScanState.FAILED, ScanState.CANCELLED)


class ScanHandle:
    """
    One background scan. Create through scan() or call start() yourself.
    """

    def __init__(self, params: ScanParams, command: Optional[ScanCommand] = None):
        self.params = params
        self.command = command or ScanCommand()
        self._lock = threading.Lock()
        self._cancel_event = threading.Event()
        self._done_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._state = ScanState.PENDING
        self._result: Optional[ScanResult] = None
        self._error: Optional[tuple] = None  # (error_kind, details)

        self._progress_listeners: List[Callable[[int, int, str], None]] = []
        self._completed_listeners: List[Callable[[ScanResult], None]] = []
        self._failed_listeners: List[Callable[[str, str], None]] = []
        self._cancelled_listeners: List[Callable[[], None]] = []

    # ----- registration -----

    def on_progress(self, listener: Callable[[int, int, str], None]) -> "ScanHandle":
        with self._lock:
            self._progress_listeners.append(listener)
        return self

    def on_completed(self, listener: Callable[[ScanResult], None]) -> "ScanHandle":
        return self._register(self._completed_listeners, listener, ScanState.COMPLETED)

    def on_failed(self, listener: Callable[[str, str], None]) -> "ScanHandle":
        return self._register(self._failed_listeners, listener, ScanState.FAILED)

    def on_cancelled(self, listener: Callable[[], None]) -> "ScanHandle":
        return self._register(self._cancelled_listeners, listener, ScanState.CANCELLED)

    def _register(self, listeners: list, listener: Callable, state: ScanState) -> "ScanHandle":
        with self._lock:
            finished_state = self._state if self._state.is_terminal else None
            if finished_state is None:
                listeners.append(listener)
                return self
        if finished_state == state:
            self._invoke(listener, *self._terminal_args(state))
        return self

    # ----- control -----

    def start(self) -> "ScanHandle":
        with self._lock:
            if self._state != ScanState.PENDING:
                raise RuntimeError("Scan already started")
            self._state = ScanState.RUNNING
        self._thread = threading.Thread(target=self._run, name="dupekeeper-scan", daemon=True)
        self._thread.start()
        return self

    def cancel(self) -> None:
        """Requests cooperative cancellation; takes effect between files."""
        logger.info("Scan cancellation requested")
        self._cancel_event.set()

    def is_cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Blocks until a terminal callback has fired. Returns False on timeout."""
        return self._done_event.wait(timeout)

    @property
    def state(self) -> ScanState:
        with self._lock:
            return self._state

    @property
    def result(self) -> Optional[ScanResult]:
        return self._result

    # ----- worker thread -----

    def _run(self) -> None:
        try:
            result = self.command.execute(
                self.params,
                progress_callback=self._emit_progress,
                stopped_flag=self.is_cancelled
            )
        except CancellationRequested:
            self._finish(ScanState.CANCELLED)
        except Exception as e:
            logger.exception("Scan failed")
            self._finish(ScanState.FAILED, error=(type(e).__name__, str(e)))
        else:
            # A cancel that raced with the last file still wins: no partial delivery
            if self.is_cancelled():
                self._finish(ScanState.CANCELLED)
            else:
                self._finish(ScanState.COMPLETED, result=result)

    def _emit_progress(self, processed: int, total: int, message: str) -> None:
        if self.is_cancelled():
            return
        with self._lock:
            listeners = list(self._progress_listeners)
        for listener in listeners:
            self._invoke(listener, processed, total, message)

    def _finish(self, state: ScanState, result: Optional[ScanResult] = None, error: Optional[tuple] = None) -> None:
        with self._lock:
            self._state = state
            self._result = result
            self._error = error
            listeners = {
                ScanState.COMPLETED: self._completed_listeners,
                ScanState.FAILED: self._failed_listeners,
                ScanState.CANCELLED: self._cancelled_listeners,
            }[state]
            listeners = list(listeners)
        args = self._terminal_args(state)
        for listener in listeners:
            self._invoke(listener, *args)
        self._done_event.set()

    def _terminal_args(self, state: ScanState) -> tuple:
        if state == ScanState.COMPLETED:
            return (self._result,)
        if state == ScanState.FAILED:
            return self._error
        return ()

    @staticmethod
    def _invoke(listener: Callable, *args) -> None:
        try:
            listener(*args)
        except Exception:
            logger.exception("Error in scan listener")


def scan(root_dir: str, recursive: bool = True, parallelism: Optional[int] = None, **options) -> ScanHandle:
    """
    Starts a background scan and returns its handle immediately.

    Extra keyword arguments are passed to ScanParams (pixel_hashing, extensions,
    excluded_dirs). Invalid parameters raise InvalidInputError here, before any thread starts.
    """
    params = ScanParams(root_dir=root_dir, recursive=recursive, parallelism=parallelism, **options)
    return ScanHandle(params).start()
