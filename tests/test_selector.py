"""
Tests for original selection — the one file in every group that is never deleted.
"""
import itertools
import pytest
from dupekeeper.core.models import DuplicateGroup, FileRecord, HashAlgorithm
from dupekeeper.core.selector import ordered_files, original_sort_key, select_original


def group_of(*records: FileRecord) -> DuplicateGroup:
    return DuplicateGroup(key="ab" * 32, algorithm=HashAlgorithm.CONTENT, files=list(records))


class TestSelectOriginal:

    def test_oldest_wins(self):
        old = FileRecord("/z/late_name.txt", 10, 100.0)
        new = FileRecord("/a/early_name.txt", 10, 200.0)

        assert select_original(group_of(new, old)) is old

    def test_equal_times_smallest_path_wins(self):
        a = FileRecord("/data/a.txt", 10, 100.0)
        b = FileRecord("/data/b.txt", 10, 100.0)

        assert select_original(group_of(b, a)) is a

    def test_path_order_is_plain_string_order(self):
        upper = FileRecord("/data/Z.txt", 10, 1.0)
        lower = FileRecord("/data/a.txt", 10, 1.0)

        # 'Z' (0x5A) sorts before 'a' (0x61)
        assert select_original(group_of(lower, upper)) is upper

    def test_independent_of_insertion_order(self):
        records = [
            FileRecord("/p/3.txt", 10, 300.0),
            FileRecord("/p/2.txt", 10, 100.0),
            FileRecord("/p/1.txt", 10, 100.0),
            FileRecord("/p/0.txt", 10, 500.0),
        ]

        chosen = {select_original(group_of(*perm)).path for perm in itertools.permutations(records)}

        assert chosen == {"/p/1.txt"}

    def test_idempotent(self):
        group = group_of(FileRecord("/b", 1, 5.0), FileRecord("/a", 1, 5.0))

        assert select_original(group) is select_original(group)

    def test_empty_group_raises(self):
        with pytest.raises(ValueError):
            select_original(group_of())

    def test_single_member(self):
        only = FileRecord("/only", 1, 1.0)

        assert select_original(group_of(only)) is only


class TestOrderedFiles:

    def test_original_first_then_by_time_and_path(self):
        records = [
            FileRecord("/c", 1, 3.0),
            FileRecord("/b", 1, 1.0),
            FileRecord("/a", 1, 2.0),
            FileRecord("/d", 1, 1.0),
        ]
        group = group_of(*records)

        ordered = ordered_files(group)

        assert [f.path for f in ordered] == ["/b", "/d", "/a", "/c"]
        assert ordered[0] is select_original(group)

    def test_group_is_not_modified(self):
        records = [FileRecord("/b", 1, 2.0), FileRecord("/a", 1, 1.0)]
        group = group_of(*records)

        ordered_files(group)

        assert [f.path for f in group.files] == ["/b", "/a"]

    def test_sort_key(self):
        assert original_sort_key(FileRecord("/x", 1, 42.0)) == (42.0, "/x")
