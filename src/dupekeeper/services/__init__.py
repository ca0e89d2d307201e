"""File operations, duplicate group helpers and the asynchronous scan handle."""

from .duplicate_service import DuplicateService
from .file_service import FileService, DeletionSummary, DeletionFailure
from .scan_service import ScanHandle, ScanState, scan

__all__ = ["DuplicateService", "FileService", "DeletionSummary", "DeletionFailure", "ScanHandle", "ScanState", "scan"]
