"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/hasher.py
Fingerprint strategies and the per-file dispatcher.

- ContentHashStrategy: SHA-256 over the raw bytes, streamed in 8 KiB chunks
- PixelHashStrategy: SHA-256 over width, height and the decoded ARGB raster (Pillow)
- FingerprintService: tries the specialised strategies for the files they support and
  falls back to the content hash when an image cannot be decoded

Instances hold no digest state between calls, but each worker still gets its own
FingerprintService so nothing is shared across threads.
"""

import hashlib
import io
import logging
import os
from typing import List, Optional, Sequence, Union

from PIL import Image

from dupekeeper.core.errors import AlgorithmUnavailableError, ImageDecodeError, InvalidInputError
from dupekeeper.core.interfaces import Fingerprinter, FingerprintStrategy
from dupekeeper.core.models import FileRecord, Fingerprint, HashAlgorithm

logger = logging.getLogger(__name__)

ALGORITHM = "sha256"

# Extensions eligible for pixel hashing, a subset of IMAGE_EXTENSIONS.
PIXEL_HASH_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".bmp", ".gif"})

# Extensions worth rendering a thumbnail for.
IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp", ".tiff"})


def new_digest():
    """
    Returns a fresh SHA-256 digest object.

    Raises:
        AlgorithmUnavailableError: hashlib cannot provide the algorithm
    """
    try:
        return hashlib.new(ALGORITHM)
    except ValueError as e:
        raise AlgorithmUnavailableError(f"{ALGORITHM} algorithm not available") from e


def is_image_file(path: str) -> bool:
    """True for anything a preview could be rendered for (includes .webp/.tiff)."""
    return os.path.splitext(path)[1].lower() in IMAGE_EXTENSIONS


class ContentHashStrategy(FingerprintStrategy):
    """SHA-256 of the complete byte stream."""

    algorithm = HashAlgorithm.CONTENT
    CHUNK_SIZE = 8192

    def supports(self, record: FileRecord) -> bool:
        return True

    def hash_bytes(self, data: bytes) -> Fingerprint:
        digest = new_digest()
        digest.update(data)
        return Fingerprint(self.algorithm, digest.digest())

    def hash_file(self, path: str) -> Fingerprint:
        """Stream the file through the digest. Raises OSError if it cannot be read."""
        digest = new_digest()
        with open(path, 'rb') as f:
            for chunk in iter(lambda: f.read(self.CHUNK_SIZE), b""):
                digest.update(chunk)
        return Fingerprint(self.algorithm, digest.digest())


class PixelHashStrategy(FingerprintStrategy):
    """
    Hashes what an image looks like rather than how it is stored.

    Digest input: width (4 bytes, big-endian), height (4 bytes, big-endian), then
    each pixel row by row, left to right, as A, R, G, B bytes. Format, file name and
    metadata (EXIF etc.) therefore do not affect the result, but any changed pixel does.
    """

    algorithm = HashAlgorithm.PIXEL

    def __init__(self, extensions: Optional[Sequence[str]] = None):
        self.extensions = frozenset(extensions) if extensions else PIXEL_HASH_EXTENSIONS

    def supports(self, record: FileRecord) -> bool:
        return record.extension in self.extensions

    def hash_bytes(self, data: bytes) -> Fingerprint:
        width, height, argb = self._decode(data)

        digest = new_digest()
        digest.update(width.to_bytes(4, "big"))
        digest.update(height.to_bytes(4, "big"))
        digest.update(argb)
        return Fingerprint(self.algorithm, digest.digest())

    @staticmethod
    def _decode(data: bytes):
        """
        Decode to (width, height, ARGB bytes).

        Raises:
            ImageDecodeError: Pillow could not read the image for any reason
        """
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                rgba = img.convert("RGBA")
                width, height = rgba.size
                raw = rgba.tobytes()
        except Exception as e:
            raise ImageDecodeError(f"{type(e).__name__}: {e}") from e

        # RGBA → ARGB, raw is already row-major top-to-bottom
        argb = bytearray(len(raw))
        argb[0::4] = raw[3::4]
        argb[1::4] = raw[0::4]
        argb[2::4] = raw[1::4]
        argb[3::4] = raw[2::4]
        return width, height, bytes(argb)


class FingerprintService(Fingerprinter):
    """
    Chooses a strategy per file.

    Specialised strategies are tried in order for the files they support. If one of
    them raises ImageDecodeError the content hash is computed over the same bytes, so
    a decode failure is never reported as a fingerprinting failure.
    """

    def __init__(
        self,
        pixel_hashing: bool = True,
        strategies: Optional[List[FingerprintStrategy]] = None
    ):
        self.fallback = ContentHashStrategy()
        if strategies is not None:
            self.strategies = list(strategies)
        else:
            self.strategies = [PixelHashStrategy()] if pixel_hashing else []
        # Fail at construction rather than on the first file
        new_digest()

    def fingerprint(self, record: Union[FileRecord, str, None]) -> Fingerprint:
        """
        Computes the fingerprint of a file.

        Args:
            record: FileRecord or path of a regular file

        Raises:
            InvalidInputError: record is missing or not a regular file
            OSError: the file's bytes cannot be read
            AlgorithmUnavailableError: SHA-256 is unavailable
        """
        record = self._validate(record)

        for strategy in self.strategies:
            if not strategy.supports(record):
                continue
            with open(record.path, 'rb') as f:
                data = f.read()
            try:
                fingerprint = strategy.hash_bytes(data)
            except ImageDecodeError as e:
                logger.warning(
                    f"{strategy.algorithm.display_name} failed for {record.name}, "
                    f"falling back to content hash: {e}"
                )
                fingerprint = self.fallback.hash_bytes(data)
            logger.debug(f"{record.path}: {fingerprint}")
            return fingerprint

        fingerprint = self.fallback.hash_file(record.path)
        logger.debug(f"{record.path}: {fingerprint}")
        return fingerprint

    def are_files_identical(self, first: Union[FileRecord, str], second: Union[FileRecord, str]) -> bool:
        """
        Compares two files by fingerprint.
        Different sizes short-circuit unless both files are pixel-hash candidates.
        """
        first = self._validate(first)
        second = self._validate(second)

        pixel_candidates = any(s.supports(first) and s.supports(second) for s in self.strategies)
        if first.size != second.size and not pixel_candidates:
            logger.debug("Files have different sizes, skipping hash calculation")
            return False

        return self.fingerprint(first).digest == self.fingerprint(second).digest

    @staticmethod
    def _validate(record: Union[FileRecord, str, None]) -> FileRecord:
        if record is None:
            raise InvalidInputError("Invalid file: None")
        path = record.path if isinstance(record, FileRecord) else str(record)
        if not os.path.isfile(path):
            raise InvalidInputError(f"Invalid file: {path}")
        if isinstance(record, FileRecord):
            return record
        return FileRecord.from_path(path)
