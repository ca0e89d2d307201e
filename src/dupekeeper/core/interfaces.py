"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the fingerprinting engine.
These protocols enforce structural typing using Python's `typing.Protocol` so new
strategies or collectors can be plugged in without touching their callers.

Key Components:
---------------
- FingerprintStrategy: one way of turning file bytes into a Fingerprint (content, pixel).
- Fingerprinter: per-file dispatcher over strategies, with fallback to the content hash.
- FileCollector: enumerates regular files under a root directory.
- ConcurrentHasher: applies a Fingerprinter to a batch of files with bounded parallelism.
"""

from typing import Protocol, List, Optional, Callable, Iterator

from dupekeeper.core.models import FileRecord, Fingerprint, HashAlgorithm, HashOutcome


ProgressCallback = Callable[[int, int, str], None]  # processed, total, message
StoppedFlag = Callable[[], bool]


# ===== Interfaces =====

class FingerprintStrategy(Protocol):
    """
    Interface for a single fingerprinting technique.

    Strategies other than the content hash are consulted first for the files they
    support; a strategy signals "cannot handle these bytes" by raising ImageDecodeError.
    """
    algorithm: HashAlgorithm

    def supports(self, record: FileRecord) -> bool:
        """Whether this strategy should be attempted for the file."""
        ...

    def hash_bytes(self, data: bytes) -> Fingerprint:
        """Fingerprint an in-memory copy of the file."""
        ...


class Fingerprinter(Protocol):
    """Computes the fingerprint of one file. Raises OSError if the bytes cannot be read."""

    def fingerprint(self, record: FileRecord) -> Fingerprint:
        ...


class FileCollector(Protocol):
    """
    Interface for walking a directory and collecting file snapshots.

    Methods:
        collect: Returns every regular file under the configured root.
    """
    def collect(
        self,
        stopped_flag: Optional[StoppedFlag] = None,
        progress_callback: Optional[ProgressCallback] = None
    ) -> List[FileRecord]:
        ...


class ConcurrentHasher(Protocol):
    """
    Interface for batch fingerprinting.

    Outcomes are yielded to the single consuming caller; workers never touch
    grouping state.
    """
    def hash(
        self,
        files: List[FileRecord],
        parallelism: Optional[int] = None,
        stopped_flag: Optional[StoppedFlag] = None,
        progress_callback: Optional[ProgressCallback] = None
    ) -> Iterator[HashOutcome]:
        """
        Args:
            files: Files to fingerprint.
            parallelism: Maximum number of concurrent workers (None → CPU count).
            stopped_flag: Returns True when the caller wants the batch to stop.
            progress_callback: Called as (processed, total, message) after each outcome.

        Raises:
            CancellationRequested: stopped_flag returned True before the batch finished.
            AlgorithmUnavailableError: the digest algorithm is missing.
        """
        ...
