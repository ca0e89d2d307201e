"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/duplicate_service.py
Helpers for acting on a finished scan without touching group originals.
"""
from typing import List

from dupekeeper.core.models import DuplicateGroup, ResolvedGroup, ScanResult


class DuplicateService:
    @staticmethod
    def files_to_delete(result: ScanResult) -> List[str]:
        """
        Paths of every member except each group's original.

        This is how a well-behaved caller builds the list it passes to
        FileService.delete_files: originals are never included.

        Args:
            result (ScanResult): Finished scan.

        Returns:
            List[str]: Paths safe to delete.
        """
        return [f.path for group in result.groups for f in group.duplicates]

    @staticmethod
    def remove_files_from_result(result: ScanResult, file_paths: List[str]) -> ScanResult:
        """
        Removes files with the specified paths from all duplicate groups.

        Groups that contain fewer than 2 files after removal are discarded. A group
        keeps its original unless the original itself was removed, in which case the
        group is dropped (the caller broke the contract, nothing is left to protect).

        Args:
            result (ScanResult): Scan result to update.
            file_paths (List[str]): Paths that were deleted.

        Returns:
            ScanResult: New result; the input is not modified.
        """
        removed = set(file_paths)
        updated_groups = []
        for resolved in result.groups:
            if resolved.original.path in removed:
                continue
            filtered_files = [f for f in resolved.files if f.path not in removed]
            if len(filtered_files) >= 2:
                group = DuplicateGroup(
                    key=resolved.group.key,
                    algorithm=resolved.group.algorithm,
                    files=filtered_files
                )
                updated_groups.append(ResolvedGroup(group=group, original=resolved.original))

        updated_groups.sort(key=lambda g: (-g.group.duplicate_count, g.group.key))
        return ScanResult(
            groups=updated_groups,
            files_scanned=result.files_scanned,
            failures=list(result.failures),
            duration=result.duration
        )
