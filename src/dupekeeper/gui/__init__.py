"""
Qt integration built on PySide6 (optional dependency, install with the [gui] extra).
"""

from .worker import ScanWorker, WorkerSignals

__all__ = ["ScanWorker", "WorkerSignals"]
