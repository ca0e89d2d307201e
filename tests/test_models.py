"""
Unit tests for core data models and ScanParams validation.
"""
import os
import pytest
from dupekeeper.core.errors import InvalidInputError
from dupekeeper.core.models import (
    DuplicateGroup, ErrorKind, FileRecord, Fingerprint, HashAlgorithm,
    HashOutcome, ResolvedGroup, ScanParams, ScanResult
)


def make_fp(byte: int, algorithm: HashAlgorithm = HashAlgorithm.CONTENT) -> Fingerprint:
    return Fingerprint(algorithm, bytes([byte]) * 32)


class TestFingerprint:

    def test_hex_is_64_lowercase_characters(self):
        fp = Fingerprint(HashAlgorithm.PIXEL, bytes(range(32)))
        assert len(fp.hex) == 64
        assert fp.hex == fp.hex.lower()
        assert str(fp).startswith("pixel:")

    def test_rejects_wrong_digest_length(self):
        with pytest.raises(ValueError):
            Fingerprint(HashAlgorithm.CONTENT, b"\x00" * 16)

    def test_is_immutable(self):
        fp = make_fp(1)
        with pytest.raises(AttributeError):
            fp.digest = b"\x01" * 32


class TestFileRecord:

    def test_from_path_snapshots_stat(self, temp_dir):
        path = temp_dir / "Photo.JPG"
        path.write_bytes(b"12345")
        record = FileRecord.from_path(str(path))

        assert record.path == str(path)
        assert os.path.isabs(record.path)
        assert record.size == 5
        assert record.mtime == pytest.approx(path.stat().st_mtime)
        assert record.name == "Photo.JPG"
        assert record.extension == ".jpg"

    def test_from_path_raises_for_missing_file(self, temp_dir):
        with pytest.raises(OSError):
            FileRecord.from_path(str(temp_dir / "nope"))


class TestHashOutcome:

    def test_success_and_failure(self):
        record = FileRecord("/a", 1, 0.0)
        ok = HashOutcome.success(record, make_fp(1))
        bad = HashOutcome.failure(record, ErrorKind.IO, "denied")

        assert ok.is_success and ok.error_kind is None
        assert not bad.is_success
        assert bad.fingerprint is None
        assert bad.error_kind == ErrorKind.IO
        assert bad.details == "denied"


class TestDuplicateGroup:

    def test_single_member_is_not_duplicate(self):
        fp = make_fp(7)
        group = DuplicateGroup(key=fp.hex, algorithm=fp.algorithm)
        group.add_file(FileRecord("/a", 10, 0.0), fp)
        assert not group.is_duplicate()

        group.add_file(FileRecord("/b", 10, 0.0), fp)
        assert group.is_duplicate()
        assert group.duplicate_count == 2
        assert group.total_size == 20

    def test_rejects_member_with_other_fingerprint(self):
        fp = make_fp(7)
        group = DuplicateGroup(key=fp.hex, algorithm=fp.algorithm)
        with pytest.raises(ValueError):
            group.add_file(FileRecord("/a", 10, 0.0), make_fp(8))

    def test_resolved_group_duplicates_exclude_original(self):
        fp = make_fp(3)
        a, b, c = FileRecord("/a", 100, 1.0), FileRecord("/b", 100, 2.0), FileRecord("/c", 100, 3.0)
        group = DuplicateGroup(key=fp.hex, algorithm=fp.algorithm, files=[b, a, c])
        resolved = ResolvedGroup(group=group, original=a)

        assert resolved.duplicates == [b, c]
        assert resolved.wasted_size == 200

        result = ScanResult(groups=[resolved], files_scanned=3)
        assert len(result) == 1
        assert result.duplicate_file_count == 3
        assert result.wasted_size == 200


class TestScanParams:

    def test_empty_root_rejected(self):
        with pytest.raises(InvalidInputError):
            ScanParams(root_dir="")

    def test_invalid_input_error_is_value_error(self):
        with pytest.raises(ValueError):
            ScanParams(root_dir="")

    def test_default_parallelism_is_cpu_count(self):
        assert ScanParams(root_dir="/tmp").parallelism == (os.cpu_count() or 1)
        assert ScanParams(root_dir="/tmp", parallelism=0).parallelism == (os.cpu_count() or 1)

    def test_negative_parallelism_means_sequential(self):
        assert ScanParams(root_dir="/tmp", parallelism=-3).parallelism == 1

    def test_extensions_normalized(self):
        params = ScanParams(root_dir="/tmp", extensions=["JPG", " .Png ", ""])
        assert params.extensions == [".jpg", ".png"]
