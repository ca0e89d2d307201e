"""
DupeKeeper — find files with identical content and keep the original.

Core features:
- Content fingerprints (SHA-256) for every file, pixel fingerprints for PNG/JPEG/BMP/GIF
  so re-saved images with identical pixels still match
- Bounded-parallel hashing with cooperative cancellation
- Deterministic original per group: oldest modification time, then smallest path
- Permanent deletion or safe deletion to system trash (via send2trash)
- Optional Qt worker with PySide6 (install with [gui] extra)
- CLI interface for headless/server usage
"""

# Get version
try:
    from importlib.metadata import version as _version, PackageNotFoundError
    __version__ = _version("dupekeeper")
except PackageNotFoundError:
    __version__ = "0.0.0"

# Public API — only what users should import directly
from dupekeeper.commands import ScanCommand
from dupekeeper.core import (
    ScanParams, ScanResult, ResolvedGroup, DuplicateGroup, FileRecord, Fingerprint,
    HashAlgorithm, FingerprintService, select_original,
    InvalidInputError, AlgorithmUnavailableError, CancellationRequested)
from dupekeeper.utils.convert_utils import format_file_size
from dupekeeper.services import DuplicateService, FileService, DeletionSummary, ScanHandle, scan


def delete_files(paths, use_trash: bool = False) -> DeletionSummary:
    """Deletes each path independently; see FileService.delete_files."""
    return FileService.delete_files(list(paths), use_trash=use_trash)


__all__ = [
    "ScanCommand",
    "ScanParams",
    "ScanResult",
    "ResolvedGroup",
    "DuplicateGroup",
    "FileRecord",
    "Fingerprint",
    "HashAlgorithm",
    "FingerprintService",
    "select_original",
    "InvalidInputError",
    "AlgorithmUnavailableError",
    "CancellationRequested",
    "format_file_size",
    "DuplicateService",
    "FileService",
    "DeletionSummary",
    "ScanHandle",
    "scan",
    "delete_files",
    "__version__",
]
