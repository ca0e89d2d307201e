"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

commands.py
Unified scan orchestrator.
This is the SINGLE source of truth for business logic — used by the CLI, the async
scan handle and the Qt worker. No Qt/PySide6 dependencies — pure Python.
"""
import logging
import time
from typing import Callable, List, Optional

from dupekeeper.core.concurrent_hasher import ConcurrentHasherImpl
from dupekeeper.core.errors import CancellationRequested
from dupekeeper.core.grouper import GroupIndex
from dupekeeper.core.hasher import FingerprintService
from dupekeeper.core.interfaces import ConcurrentHasher, FileCollector, ProgressCallback, StoppedFlag
from dupekeeper.core.models import FileRecord, ResolvedGroup, ScanParams, ScanResult
from dupekeeper.core.scanner import FileCollectorImpl
from dupekeeper.core.selector import select_original

logger = logging.getLogger(__name__)


class ScanCommand:
    """
    Orchestrates one scan:
    1. Collect files under the root directory
    2. Fingerprint them concurrently
    3. Insert outcomes into a GroupIndex (on this thread only)
    4. Keep multi-member groups and pick an original for each

    Usage:
        params = ScanParams(root_dir="~/Pictures", parallelism=4)
        result = ScanCommand().execute(
            params,
            progress_callback=lambda done, total, msg: print(msg),
            stopped_flag=cancel_event.is_set
        )

    A command may be executed any number of times; no state is shared between runs.
    """

    def __init__(
        self,
        collector_factory: Optional[Callable[[ScanParams], FileCollector]] = None,
        hasher_factory: Optional[Callable[[ScanParams], ConcurrentHasher]] = None
    ):
        self._collector_factory = collector_factory or self._default_collector
        self._hasher_factory = hasher_factory or self._default_hasher
        self._files: List[FileRecord] = []

    @staticmethod
    def _default_collector(params: ScanParams) -> FileCollector:
        return FileCollectorImpl(
            root_dir=params.root_dir,
            recursive=params.recursive,
            extensions=params.extensions,
            excluded_dirs=params.excluded_dirs
        )

    @staticmethod
    def _default_hasher(params: ScanParams) -> ConcurrentHasher:
        pixel_hashing = params.pixel_hashing
        return ConcurrentHasherImpl(lambda: FingerprintService(pixel_hashing=pixel_hashing))

    def execute(
            self,
            params: ScanParams,
            progress_callback: Optional[ProgressCallback] = None,
            stopped_flag: Optional[StoppedFlag] = None
    ) -> ScanResult:
        """
        Execute a scan with the given parameters.

        Args:
            params: Validated scan parameters
            progress_callback: (processed: int, total: int, message: str) -> None
            stopped_flag: () -> bool (returns True if the scan should stop)

        Returns:
            ScanResult with duplicate groups only, largest first. A missing or
            unreadable root directory gives an empty result.

        Raises:
            CancellationRequested: stopped_flag returned True
            AlgorithmUnavailableError: SHA-256 is unavailable
        """
        start_time = time.time()
        self._emit(progress_callback, 0, 0, "Scanning directory...")

        collector = self._collector_factory(params)
        self._files = collector.collect(stopped_flag=stopped_flag, progress_callback=progress_callback)
        total = len(self._files)
        logger.info(f"Found {total} files to analyze")

        if stopped_flag and stopped_flag():
            raise CancellationRequested(0, total)

        if not self._files:
            self._emit(progress_callback, 0, 0, "No files found")
            return ScanResult(duration=time.time() - start_time)

        index = GroupIndex()
        hasher = self._hasher_factory(params)
        failures = index.insert_outcomes(hasher.hash(
            self._files,
            parallelism=params.parallelism,
            stopped_flag=stopped_flag,
            progress_callback=progress_callback
        ))

        groups = [ResolvedGroup(group=g, original=select_original(g)) for g in index.duplicates()]

        self._emit(progress_callback, total, total, f"Found {len(groups)} duplicate groups")
        logger.info(f"Scan complete: {len(groups)} duplicate groups found")

        return ScanResult(
            groups=groups,
            files_scanned=total,
            failures=failures,
            duration=time.time() - start_time
        )

    def get_files(self) -> List[FileRecord]:
        """Get collected files after execution."""
        return self._files.copy()  # Return copy to prevent external mutation

    @staticmethod
    def _emit(progress_callback: Optional[ProgressCallback], processed: int, total: int, message: str) -> None:
        if progress_callback:
            progress_callback(processed, total, message)
