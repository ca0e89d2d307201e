"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/grouper.py
Accumulates files into groups keyed by fingerprint digest.
Single writer: only the consuming side of the hasher inserts.
"""

from typing import Dict, Iterable, List
import logging

from dupekeeper.core.models import DuplicateGroup, FileRecord, Fingerprint, HashOutcome

logger = logging.getLogger(__name__)


class GroupIndex:
    """Per-fingerprint groups of files in insertion order."""

    def __init__(self):
        self._groups: Dict[str, DuplicateGroup] = {}

    def insert(self, record: FileRecord, fingerprint: Fingerprint) -> DuplicateGroup:
        """Append to the group for this digest, creating the group on first use."""
        key = fingerprint.hex
        group = self._groups.get(key)
        if group is None:
            group = DuplicateGroup(key=key, algorithm=fingerprint.algorithm)
            self._groups[key] = group
        group.add_file(record, fingerprint)
        return group

    def insert_outcomes(self, outcomes: Iterable[HashOutcome]) -> List[HashOutcome]:
        """
        Insert every successful outcome.
        Returns the failed ones so callers can report them.
        """
        failures = []
        for outcome in outcomes:
            if outcome.is_success:
                self.insert(outcome.record, outcome.fingerprint)
            else:
                failures.append(outcome)
        if failures:
            logger.warning(f"Skipped {len(failures)} files due to hash computation errors")
        return failures

    def groups(self) -> List[DuplicateGroup]:
        return list(self._groups.values())

    def duplicates(self) -> List[DuplicateGroup]:
        """
        Groups with more than one member, largest first.
        Equal-sized groups are ordered by digest so the order is stable across runs.
        """
        result = [g for g in self._groups.values() if g.is_duplicate()]
        result.sort(key=lambda g: (-g.duplicate_count, g.key))
        return result

    def __len__(self) -> int:
        return len(self._groups)

    def __contains__(self, key: str) -> bool:
        return key in self._groups
