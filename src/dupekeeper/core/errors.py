"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/errors.py
Exception hierarchy for the fingerprinting and grouping engine.

Per-file problems (unreadable bytes, undecodable images) are absorbed inside the
engine. Only the classes below ever cross a public boundary.
"""


class DupeKeeperError(Exception):
    """Base class for all errors raised by dupekeeper."""


class InvalidInputError(DupeKeeperError, ValueError):
    """Caller passed a missing path, a non-regular file or invalid parameters."""


class AlgorithmUnavailableError(DupeKeeperError, RuntimeError):
    """The digest algorithm cannot be constructed in this interpreter. Fatal for a scan."""


class ImageDecodeError(DupeKeeperError):
    """
    Raised by the pixel strategy when an image cannot be decoded.
    Consumed by the fingerprint dispatcher, which falls back to the content hash.
    """


class CancellationRequested(DupeKeeperError):
    """A stop was requested; the scan terminates without delivering results."""

    def __init__(self, processed: int = 0, total: int = 0):
        super().__init__(f"Scan cancelled after {processed}/{total} files")
        self.processed = processed
        self.total = total
