"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Implements file collection using os.walk / os.scandir.
Features:
- Optional recursion without depth limit
- Unreadable directories are treated as empty
- Symbolic links are never followed: linked directories are not descended (no cycles)
  and linked files are skipped, so a link can never stand in for the file it points to
- A missing root, or a root that is not a directory, yields no files
- Optional extension and excluded-directory filters
"""

import os
from typing import List, Optional
from pathlib import Path
import time
import logging

from dupekeeper.core.errors import CancellationRequested
from dupekeeper.core.interfaces import FileCollector, ProgressCallback, StoppedFlag
from dupekeeper.core.models import FileRecord

logger = logging.getLogger(__name__)


class FileCollectorImpl(FileCollector):
    """
    Walks a directory and snapshots every regular file under it.

    Attributes:
        root_dir: Root directory to scan
        recursive: Descend into subdirectories
        extensions: Allowed file extensions (e.g., [".txt", ".jpg"]); empty means all
        excluded_dirs: Directories that are never entered
    """

    PROGRESS_INTERVAL = 1000  # report every N files

    def __init__(
        self,
        root_dir: str,
        recursive: bool = True,
        extensions: Optional[List[str]] = None,
        excluded_dirs: Optional[List[str]] = None
    ):
        self.root_dir = root_dir
        self.recursive = recursive
        self.extensions = [ext.lower() for ext in extensions] if extensions else []
        self.excluded_dirs = [str(Path(d).resolve()) for d in excluded_dirs] if excluded_dirs else []

    def collect(self,
                stopped_flag: Optional[StoppedFlag] = None,
                progress_callback: Optional[ProgressCallback] = None) -> List[FileRecord]:
        """
        Returns the regular files found under the root directory.
        Order follows the file system and must not be relied on.

        A root that is missing or not a directory is treated like an unreadable one:
        the result is empty.

        Raises:
            CancellationRequested: stopped_flag returned True during the walk
        """
        root_path = Path(self.root_dir)
        if not root_path.is_dir():
            logger.warning(f"Cannot list directory {self.root_dir}: missing or not a directory")
            if progress_callback:
                progress_callback(0, 0, "Scanning directory...")
            return []

        root = str(root_path.resolve())
        logger.debug(f"Collecting files under {root} (recursive={self.recursive})")
        start_time = time.time()

        if self.recursive:
            found_files = self._collect_recursive(root, stopped_flag, progress_callback)
        else:
            found_files = self._collect_flat(root, stopped_flag)

        if progress_callback:
            progress_callback(len(found_files), 0, "Scanning directory...")

        logger.debug(f"Collected {len(found_files)} files in {time.time() - start_time:.2f} seconds")
        return found_files

    def _collect_flat(self, root: str, stopped_flag: Optional[StoppedFlag]) -> List[FileRecord]:
        """Direct children only; subdirectories are skipped silently."""
        found_files = []
        try:
            with os.scandir(root) as entries:
                for entry in entries:
                    self._check_stopped(stopped_flag, len(found_files))
                    try:
                        if not entry.is_file(follow_symlinks=False):
                            continue
                    except OSError:
                        continue
                    record = self._process_file(entry.path)
                    if record:
                        found_files.append(record)
        except OSError as e:
            logger.warning(f"Cannot list directory {root}: {e}")
        return found_files

    def _collect_recursive(self,
                           root: str,
                           stopped_flag: Optional[StoppedFlag],
                           progress_callback: Optional[ProgressCallback]) -> List[FileRecord]:
        found_files = []
        progress_counter = 0

        for dirpath, dirs, files in os.walk(root, onerror=self._on_walk_error, followlinks=False):
            self._check_stopped(stopped_flag, len(found_files))

            # Pre-filter subdirectories BEFORE os.walk enters them
            if self.excluded_dirs:
                dirs[:] = [d for d in dirs if not self._is_excluded(os.path.join(dirpath, d))]

            for filename in files:
                record = self._process_file(os.path.join(dirpath, filename))
                if record:
                    found_files.append(record)
                    progress_counter += 1

                if progress_callback and progress_counter >= self.PROGRESS_INTERVAL:
                    progress_callback(len(found_files), 0, "Scanning directory...")
                    progress_counter = 0

        return found_files

    @staticmethod
    def _on_walk_error(error: OSError) -> None:
        logger.warning(f"Skipping unreadable directory: {error}")

    @staticmethod
    def _check_stopped(stopped_flag: Optional[StoppedFlag], found: int) -> None:
        if stopped_flag and stopped_flag():
            logger.debug("Collection interrupted by user")
            raise CancellationRequested(found, 0)

    def _is_excluded(self, path: str) -> bool:
        """Check if path is within an excluded directory."""
        try:
            path_str = str(Path(path).resolve(strict=False))
        except (OSError, ValueError):
            return False
        for excluded_dir in self.excluded_dirs:
            if path_str == excluded_dir or path_str.startswith(excluded_dir + os.sep):
                logger.debug(f"Skipping excluded directory: {path}")
                return True
        return False

    def _process_file(self, path: str) -> Optional[FileRecord]:
        """
        Snapshot a single path if it is a regular file that passes the filters.
        Returns None for anything else (symlinks, sockets, vanished files).
        """
        if not self._extension_passes(path):
            return None

        try:
            if os.path.islink(path) or not os.path.isfile(path):
                return None
            record = FileRecord.from_path(path)
        except OSError as e:
            logger.debug(f"Could not stat {path}: {e}")
            return None

        logger.debug(f"Accepted file: {record.name} ({record.size} bytes)")
        return record

    def _extension_passes(self, path: str) -> bool:
        if not self.extensions:
            return True
        return os.path.splitext(path)[1].lower() in self.extensions
