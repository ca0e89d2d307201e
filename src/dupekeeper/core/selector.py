"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/selector.py
Pure selection of the original file inside a duplicate group.

Rule (applied lexicographically):
1. Oldest modification time wins
2. Equal times: smallest absolute path (plain string ordering) wins
The result depends only on group membership, never on insertion order.
"""
from typing import List, Tuple

from dupekeeper.core.models import DuplicateGroup, FileRecord


def original_sort_key(file: FileRecord) -> Tuple[float, str]:
    return file.mtime, file.path


def select_original(group: DuplicateGroup) -> FileRecord:
    """
    Returns the member that should be kept.

    Raises:
        ValueError: the group has no members
    """
    if not group.files:
        raise ValueError("Cannot select an original from an empty group")
    return min(group.files, key=original_sort_key)


def ordered_files(group: DuplicateGroup) -> List[FileRecord]:
    """Members ordered original-first, as a new list. The group itself is left untouched."""
    return sorted(group.files, key=original_sort_key)
