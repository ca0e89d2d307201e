"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/concurrent_hasher.py
Batch fingerprinting with bounded parallelism.

EXECUTION
---------
• Small batches (fewer than SEQUENTIAL_THRESHOLD files) or parallelism <= 1 run on the
  calling thread, with no pool setup.
• Larger batches run on a ThreadPoolExecutor sized to `parallelism`. At most
  2 × parallelism tasks are in flight, so a cancelled scan stops submitting quickly.
• Every task builds its own Fingerprinter; digest objects are never shared.

HANDOFF
-------
Workers only return HashOutcome values through futures. The generator yields them to
the single consuming caller, which is the only code that mutates grouping state.

CANCELLATION
------------
stopped_flag is checked before each submission and after each consumed outcome. On stop
no further work is submitted, completed-but-unconsumed outcomes are dropped, queued
tasks are cancelled and running tasks get SHUTDOWN_GRACE_PERIOD seconds to finish.
Threads cannot be killed, so tasks still running after that are abandoned.
"""

import logging
import os
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Iterator, List, Optional, Set

from dupekeeper.core.errors import CancellationRequested, InvalidInputError
from dupekeeper.core.hasher import FingerprintService
from dupekeeper.core.interfaces import ConcurrentHasher, Fingerprinter, ProgressCallback, StoppedFlag
from dupekeeper.core.models import ErrorKind, FileRecord, HashOutcome

logger = logging.getLogger(__name__)


def hash_one(fingerprinter: Fingerprinter, record: FileRecord) -> HashOutcome:
    """
    Fingerprint one file, turning per-file errors into a failed outcome.
    AlgorithmUnavailableError is not caught: it must abort the whole batch.
    """
    try:
        return HashOutcome.success(record, fingerprinter.fingerprint(record))
    except InvalidInputError as e:
        logger.warning(f"Skipping {record.path}: {e}")
        return HashOutcome.failure(record, ErrorKind.INVALID_INPUT, str(e))
    except OSError as e:
        logger.warning(f"Error calculating hash for file {record.path}: {e}")
        return HashOutcome.failure(record, ErrorKind.IO, str(e))


class ConcurrentHasherImpl(ConcurrentHasher):
    """
    Applies a Fingerprinter to a list of files and yields outcomes as they complete.
    Completion order is arbitrary; only membership of the yielded set is guaranteed.
    """

    SEQUENTIAL_THRESHOLD = 10
    RESULT_WAIT_TIMEOUT = 5.0  # seconds to wait for the next outcome before re-checking stop
    SHUTDOWN_GRACE_PERIOD = 5.0
    IN_FLIGHT_PER_WORKER = 2

    def __init__(self, fingerprinter_factory: Optional[Callable[[], Fingerprinter]] = None):
        self.fingerprinter_factory = fingerprinter_factory or FingerprintService

    def hash(
        self,
        files: List[FileRecord],
        parallelism: Optional[int] = None,
        stopped_flag: Optional[StoppedFlag] = None,
        progress_callback: Optional[ProgressCallback] = None
    ) -> Iterator[HashOutcome]:
        total = len(files)
        if parallelism is None or parallelism == 0:
            parallelism = os.cpu_count() or 1

        if parallelism <= 1 or total < self.SEQUENTIAL_THRESHOLD:
            logger.debug(f"Hashing {total} files sequentially")
            return self._hash_sequential(files, stopped_flag, progress_callback)

        logger.debug(f"Hashing {total} files with {parallelism} workers")
        return self._hash_parallel(files, parallelism, stopped_flag, progress_callback)

    def _hash_sequential(
        self,
        files: List[FileRecord],
        stopped_flag: Optional[StoppedFlag],
        progress_callback: Optional[ProgressCallback]
    ) -> Iterator[HashOutcome]:
        total = len(files)
        fingerprinter = self.fingerprinter_factory()

        for processed, record in enumerate(files, 1):
            self._check_stopped(stopped_flag, processed - 1, total)
            yield hash_one(fingerprinter, record)
            self._report(progress_callback, processed, total)
            self._check_stopped(stopped_flag, processed, total)

    def _hash_parallel(
        self,
        files: List[FileRecord],
        parallelism: int,
        stopped_flag: Optional[StoppedFlag],
        progress_callback: Optional[ProgressCallback]
    ) -> Iterator[HashOutcome]:
        total = len(files)
        processed = 0
        max_in_flight = parallelism * self.IN_FLIGHT_PER_WORKER
        remaining = iter(files)
        pending: Set[Future] = set()

        executor = ThreadPoolExecutor(max_workers=parallelism, thread_name_prefix="dupekeeper-hash")
        try:
            self._check_stopped(stopped_flag, processed, total)
            self._submit(executor, remaining, pending, max_in_flight)

            while pending:
                done, _ = wait(pending, timeout=self.RESULT_WAIT_TIMEOUT, return_when=FIRST_COMPLETED)
                if not done:
                    logger.debug(f"No outcome within {self.RESULT_WAIT_TIMEOUT}s, re-checking cancellation")
                    self._check_stopped(stopped_flag, processed, total)
                    continue

                for future in done:
                    pending.discard(future)
                    outcome = future.result()
                    processed += 1
                    yield outcome
                    self._report(progress_callback, processed, total)
                    self._check_stopped(stopped_flag, processed, total)

                self._submit(executor, remaining, pending, max_in_flight)
        finally:
            self._shutdown(executor, pending)

    def _submit(self, executor: ThreadPoolExecutor, remaining: Iterator[FileRecord],
                pending: Set[Future], max_in_flight: int) -> None:
        factory = self.fingerprinter_factory
        while len(pending) < max_in_flight:
            record = next(remaining, None)
            if record is None:
                return
            pending.add(executor.submit(lambda r=record: hash_one(factory(), r)))

    def _shutdown(self, executor: ThreadPoolExecutor, pending: Set[Future]) -> None:
        """Cancel queued tasks, give running ones a grace period, then abandon them."""
        executor.shutdown(wait=False, cancel_futures=True)
        running = {f for f in pending if not f.done()}
        if not running:
            return

        _, still_running = wait(running, timeout=self.SHUTDOWN_GRACE_PERIOD)
        if still_running:
            logger.warning(
                f"{len(still_running)} hashing task(s) still running after "
                f"{self.SHUTDOWN_GRACE_PERIOD}s, abandoning them"
            )

    @staticmethod
    def _check_stopped(stopped_flag: Optional[StoppedFlag], processed: int, total: int) -> None:
        if stopped_flag and stopped_flag():
            logger.info(f"Hashing cancelled at {processed}/{total} files")
            raise CancellationRequested(processed, total)

    @staticmethod
    def _report(progress_callback: Optional[ProgressCallback], processed: int, total: int) -> None:
        if progress_callback:
            percent = processed / total * 100 if total else 100.0
            progress_callback(processed, total, f"Processing: {processed}/{total} files ({percent:.0f}%)")
