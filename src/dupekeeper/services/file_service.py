"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
File operations used after a scan: deleting duplicates (permanently or to the
system trash) and checking whether a file can be previewed as an image.
"""
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from PIL import Image
from send2trash import send2trash

from dupekeeper.core.hasher import is_image_file

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeletionFailure:
    """One file that could not be removed."""
    path: str
    reason: str

    @property
    def name(self) -> str:
        return os.path.basename(self.path)


@dataclass
class DeletionSummary:
    """Outcome of a batch deletion. A failure never stops the rest of the batch."""
    deleted_count: int = 0
    failures: List[DeletionFailure] = field(default_factory=list)

    @property
    def failed_names(self) -> List[str]:
        return [f.name for f in self.failures]

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)


class FileService:
    """
    Cross-platform file operations.
    Whether a path may be deleted (e.g. it is not a group's original) is the caller's
    responsibility; nothing here re-checks it.
    """

    @staticmethod
    def remove_file(file_path: str):
        """Deletes a file permanently."""
        path = Path(file_path)

        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")

        try:
            os.remove(path)
        except OSError as e:
            raise RuntimeError(f"Failed to delete file: {e}") from e

    @staticmethod
    def move_to_trash(file_path: str):
        """Moves a file to the system trash."""
        path = Path(file_path).resolve()

        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        try:
            send2trash(str(path))
        except Exception as e:
            raise RuntimeError(f"Failed to move to trash: {e}") from e

    @classmethod
    def delete_files(cls, file_paths: List[str], use_trash: bool = False) -> DeletionSummary:
        """
        Attempts to delete every path independently.

        Args:
            file_paths: Paths to delete
            use_trash: Move to the system trash instead of deleting permanently

        Returns:
            DeletionSummary with the number deleted and the names that failed
        """
        summary = DeletionSummary()
        remove = cls.move_to_trash if use_trash else cls.remove_file

        for path in file_paths:
            try:
                remove(path)
            except (FileNotFoundError, RuntimeError) as e:
                summary.failures.append(DeletionFailure(path=path, reason=str(e)))
                logger.warning(f"Failed to delete file: {path} ({e})")
                continue
            summary.deleted_count += 1
            logger.info(f"Deleted file: {path}")

        return summary

    @staticmethod
    def is_valid_image(file_path: str) -> bool:
        """Checks if the file is an image a thumbnail can be rendered for."""
        if not is_image_file(file_path):
            return False

        try:
            with Image.open(file_path) as img:
                img.verify()
            return True
        except (OSError, IOError):
            # File system errors
            return False
        except (AttributeError, TypeError, ValueError, SyntaxError):
            # PIL validation errors (corrupt/invalid image)
            return False
