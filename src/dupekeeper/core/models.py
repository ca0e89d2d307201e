"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models for file collection, fingerprinting and duplicate grouping.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Iterator
import os
from enum import Enum

from dupekeeper.core.errors import InvalidInputError


DIGEST_SIZE = 32  # SHA-256


# =============================
# Enums
# =============================

class HashAlgorithm(str, Enum):
    """Which strategy produced a fingerprint."""
    CONTENT = "content"
    PIXEL = "pixel"

    @property
    def display_name(self) -> str:
        """Human-readable name for UI display."""
        mapping = {
            HashAlgorithm.CONTENT: "Content hash",
            HashAlgorithm.PIXEL: "Pixel hash",
        }
        return mapping.get(self, self.value)

    def __repr__(self) -> str:
        return self.value


class ErrorKind(str, Enum):
    """Why a single file could not be fingerprinted."""
    IO = "io"
    INVALID_INPUT = "invalid-input"


# ======================
#  Core Data Models
# ======================

@dataclass(frozen=True)
class FileRecord:
    """
    Snapshot of one regular file taken at collection time.
    Not refreshed if the file changes while the scan is running.
    """
    path: str
    size: int  # in bytes
    mtime: float  # last modification, seconds since epoch

    @property
    def name(self) -> str:
        return os.path.basename(self.path)

    @property
    def extension(self) -> str:
        _, ext = os.path.splitext(self.name)
        return ext.lower()  # ".JPG" → ".jpg"

    @classmethod
    def from_path(cls, path: str) -> "FileRecord":
        """Stat a path and build a record with its absolute path. Raises OSError."""
        abs_path = os.path.abspath(path)
        stat_result = os.stat(abs_path)
        return cls(path=abs_path, size=stat_result.st_size, mtime=stat_result.st_mtime)

    def __repr__(self):
        return f"<FileRecord path={self.path}, size={self.size}>"


@dataclass(frozen=True)
class Fingerprint:
    """Algorithm tag plus a 32-byte digest."""
    algorithm: HashAlgorithm
    digest: bytes

    def __post_init__(self):
        if not isinstance(self.digest, bytes) or len(self.digest) != DIGEST_SIZE:
            raise ValueError(f"Digest must be {DIGEST_SIZE} bytes")

    @property
    def hex(self) -> str:
        """64 lowercase hex characters."""
        return self.digest.hex()

    def __str__(self):
        return f"{self.algorithm.value}:{self.hex}"


@dataclass(frozen=True)
class HashOutcome:
    """
    Result of fingerprinting one file: either a fingerprint or an error kind.
    Use the success()/failure() constructors.
    """
    record: FileRecord
    fingerprint: Optional[Fingerprint] = None
    error_kind: Optional[ErrorKind] = None
    details: str = ""

    @classmethod
    def success(cls, record: FileRecord, fingerprint: Fingerprint) -> "HashOutcome":
        return cls(record=record, fingerprint=fingerprint)

    @classmethod
    def failure(cls, record: FileRecord, error_kind: ErrorKind, details: str = "") -> "HashOutcome":
        return cls(record=record, error_kind=error_kind, details=details)

    @property
    def is_success(self) -> bool:
        return self.fingerprint is not None


@dataclass
class DuplicateGroup:
    """
    Files sharing one fingerprint digest, in insertion order.
    Only mutated while the scan accumulates outcomes.
    """
    key: str  # hex digest
    algorithm: HashAlgorithm
    files: List[FileRecord] = field(default_factory=list)

    @property
    def duplicate_count(self) -> int:
        """How many files are in this group."""
        return len(self.files)

    @property
    def total_size(self) -> int:
        return sum(f.size for f in self.files)

    def add_file(self, file: FileRecord, fingerprint: Fingerprint) -> None:
        if fingerprint.hex != self.key:
            raise ValueError("Cannot add file with a different fingerprint to a group.")
        self.files.append(file)

    def is_duplicate(self) -> bool:
        """True if this group contains at least two files."""
        return self.duplicate_count > 1

    def __repr__(self):
        return f"<DuplicateGroup key={self.key[:12]}, count={len(self.files)}>"


@dataclass(frozen=True)
class ResolvedGroup:
    """A duplicate group paired with the member chosen as its original."""
    group: DuplicateGroup
    original: FileRecord

    @property
    def files(self) -> List[FileRecord]:
        return self.group.files

    @property
    def duplicates(self) -> List[FileRecord]:
        """Every member except the original."""
        return [f for f in self.group.files if f is not self.original]

    @property
    def wasted_size(self) -> int:
        """Bytes that deleting every non-original member would free."""
        return self.group.total_size - self.original.size


@dataclass
class ScanResult:
    """Duplicate groups of one finished scan, largest groups first."""
    groups: List[ResolvedGroup] = field(default_factory=list)
    files_scanned: int = 0
    failures: List[HashOutcome] = field(default_factory=list)
    duration: float = 0.0

    @property
    def duplicate_file_count(self) -> int:
        return sum(len(g.files) for g in self.groups)

    @property
    def wasted_size(self) -> int:
        return sum(g.wasted_size for g in self.groups)

    def __iter__(self) -> Iterator[ResolvedGroup]:
        return iter(self.groups)

    def __len__(self) -> int:
        return len(self.groups)


"""
DTO for scan parameters with built-in validation.
Interface-agnostic — used by the CLI, the async scan handle and the Qt worker.
"""

@dataclass
class ScanParams:
    """Parameters for one scan with validation."""
    root_dir: str
    recursive: bool = True
    parallelism: Optional[int] = None
    pixel_hashing: bool = True
    extensions: List[str] = field(default_factory=list)
    excluded_dirs: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if not self.root_dir:
            raise InvalidInputError("Root directory cannot be empty")

        # None/0 → one worker per CPU, negative → sequential
        if not self.parallelism:
            self.parallelism = os.cpu_count() or 1
        elif self.parallelism < 0:
            self.parallelism = 1

        # Normalize extensions: ensure they start with dot and are lowercase
        normalized = []
        for ext in self.extensions:
            ext = ext.strip().lower()
            if ext and not ext.startswith('.'):
                ext = f".{ext}"
            if ext:
                normalized.append(ext)
        self.extensions = normalized
