"""
Core fingerprinting engine — collector, fingerprint strategies, concurrent hasher,
group index and original selector.

This package contains the performance-critical foundation of dupekeeper:
- FileCollectorImpl: directory traversal, optionally recursive
- FingerprintService: content (SHA-256) or pixel hash per file, with decode fallback
- ConcurrentHasherImpl: bounded-parallel hashing with cooperative cancellation
- GroupIndex: per-fingerprint groups, filtered to duplicates
- select_original: deterministic choice of the file to keep

All components are pure Python with no GUI dependencies — suitable for CLI and server usage.
"""

from .scanner import FileCollectorImpl
from .hasher import (
    FingerprintService, ContentHashStrategy, PixelHashStrategy,
    PIXEL_HASH_EXTENSIONS, IMAGE_EXTENSIONS, is_image_file)
from .concurrent_hasher import ConcurrentHasherImpl
from .grouper import GroupIndex
from .selector import select_original, ordered_files
from .errors import (
    DupeKeeperError, InvalidInputError, AlgorithmUnavailableError,
    ImageDecodeError, CancellationRequested)
from .models import (
    FileRecord, Fingerprint, HashAlgorithm, ErrorKind, HashOutcome,
    DuplicateGroup, ResolvedGroup, ScanResult, ScanParams)

__all__ = [
    "FileCollectorImpl",
    "FingerprintService",
    "ContentHashStrategy",
    "PixelHashStrategy",
    "PIXEL_HASH_EXTENSIONS",
    "IMAGE_EXTENSIONS",
    "is_image_file",
    "ConcurrentHasherImpl",
    "GroupIndex",
    "select_original",
    "ordered_files",
    "DupeKeeperError",
    "InvalidInputError",
    "AlgorithmUnavailableError",
    "ImageDecodeError",
    "CancellationRequested",
    "FileRecord",
    "Fingerprint",
    "HashAlgorithm",
    "ErrorKind",
    "HashOutcome",
    "DuplicateGroup",
    "ResolvedGroup",
    "ScanResult",
    "ScanParams",
]
