"""
Unit tests for the fingerprint strategies and FingerprintService.
Verifies SHA-256 content hashing, the ARGB pixel hash layout and decode fallback.
"""
import hashlib
import pytest
from pathlib import Path
from unittest import mock
from PIL import Image
from PIL.PngImagePlugin import PngInfo
from dupekeeper.core.errors import AlgorithmUnavailableError, ImageDecodeError, InvalidInputError
from dupekeeper.core.hasher import (
    ContentHashStrategy, FingerprintService, PixelHashStrategy, is_image_file
)
from dupekeeper.core.models import FileRecord, HashAlgorithm


class TestContentHash:
    """SHA-256 over the raw byte stream."""

    def test_matches_sha256_of_bytes(self, temp_dir):
        path = temp_dir / "hello.txt"
        path.write_bytes(b"hello")

        fp = FingerprintService().fingerprint(str(path))

        assert fp.algorithm == HashAlgorithm.CONTENT
        assert fp.hex == hashlib.sha256(b"hello").hexdigest()

    def test_streams_files_larger_than_chunk(self, temp_dir):
        content = bytes(range(256)) * 100  # 25600 bytes, several chunks
        path = temp_dir / "big.bin"
        path.write_bytes(content)

        fp = ContentHashStrategy().hash_file(str(path))
        assert fp.digest == hashlib.sha256(content).digest()

    def test_identical_content_gives_identical_fingerprint(self, test_files):
        service = FingerprintService()
        assert service.fingerprint(str(test_files["dup1_a"])) == service.fingerprint(str(test_files["dup1_b"]))

    def test_different_content_gives_different_fingerprint(self, test_files):
        service = FingerprintService()
        assert service.fingerprint(str(test_files["unique1"])) != service.fingerprint(str(test_files["unique2"]))

    def test_empty_file(self, temp_dir):
        path = temp_dir / "empty"
        path.write_bytes(b"")
        assert FingerprintService().fingerprint(str(path)).hex == hashlib.sha256(b"").hexdigest()


class TestPixelHash:
    """Hash of width, height and ARGB pixels."""

    def test_digest_layout(self, temp_dir):
        """Digest input is width, height (4 bytes big-endian each) then A,R,G,B per pixel."""
        img = Image.new("RGBA", (2, 1))
        img.putpixel((0, 0), (255, 0, 0, 255))
        img.putpixel((1, 0), (0, 0, 255, 128))
        path = temp_dir / "two.png"
        img.save(path)

        expected = hashlib.sha256(
            (2).to_bytes(4, "big") + (1).to_bytes(4, "big")
            + bytes([255, 255, 0, 0])
            + bytes([128, 0, 0, 255])
        ).hexdigest()

        fp = FingerprintService().fingerprint(str(path))
        assert fp.algorithm == HashAlgorithm.PIXEL
        assert fp.hex == expected

    def test_rows_are_hashed_top_to_bottom(self, temp_dir):
        img = Image.new("RGB", (1, 2))
        img.putpixel((0, 0), (1, 2, 3))
        img.putpixel((0, 1), (4, 5, 6))
        path = temp_dir / "column.png"
        img.save(path)

        expected = hashlib.sha256(
            (1).to_bytes(4, "big") + (2).to_bytes(4, "big")
            + bytes([255, 1, 2, 3]) + bytes([255, 4, 5, 6])
        ).hexdigest()
        assert FingerprintService().fingerprint(str(path)).hex == expected

    def test_same_pixels_different_names_and_dirs_match(self, temp_dir, make_image):
        other = temp_dir / "other"
        other.mkdir()
        a = make_image(temp_dir / "red1.png")
        b = make_image(other / "completely_different_name.png")

        service = FingerprintService()
        assert service.fingerprint(str(a)) == service.fingerprint(str(b))

    def test_metadata_does_not_affect_fingerprint(self, temp_dir, make_image):
        info = PngInfo()
        info.add_text("Comment", "taken on holiday")
        plain = make_image(temp_dir / "plain.png")
        tagged = make_image(temp_dir / "tagged.png", pnginfo=info)

        assert plain.read_bytes() != tagged.read_bytes()
        service = FingerprintService()
        assert service.fingerprint(str(plain)) == service.fingerprint(str(tagged))

    def test_lossless_formats_match_each_other(self, temp_dir, make_image):
        png = make_image(temp_dir / "red.png")
        bmp = make_image(temp_dir / "red.bmp")

        service = FingerprintService()
        assert service.fingerprint(str(png)) == service.fingerprint(str(bmp))

    def test_different_dimensions_never_match(self, temp_dir, make_image):
        """10x20 and 20x10 of one colour have identical pixel bytes; only dimensions differ."""
        tall = make_image(temp_dir / "tall.png", size=(10, 20))
        wide = make_image(temp_dir / "wide.png", size=(20, 10))

        service = FingerprintService()
        assert service.fingerprint(str(tall)) != service.fingerprint(str(wide))

    def test_different_colours_do_not_match(self, temp_dir, make_image):
        red = make_image(temp_dir / "red.png", color=(255, 0, 0))
        blue = make_image(temp_dir / "blue.png", color=(0, 0, 255))

        service = FingerprintService()
        assert service.fingerprint(str(red)) != service.fingerprint(str(blue))

    def test_webp_is_not_pixel_hashed(self, temp_dir):
        """The thumbnail set is broader than the pixel-hash set."""
        path = temp_dir / "image.webp"
        path.write_bytes(b"whatever")

        assert is_image_file(str(path))
        assert not PixelHashStrategy().supports(FileRecord(str(path), 8, 0.0))
        assert FingerprintService().fingerprint(str(path)).algorithm == HashAlgorithm.CONTENT

    def test_decode_error_raised_by_strategy(self):
        with pytest.raises(ImageDecodeError):
            PixelHashStrategy().hash_bytes(b"definitely not an image")


class TestDecodeFallback:
    """A corrupt image falls back to the content hash of the same bytes."""

    def test_corrupt_png_falls_back_to_content_hash(self, temp_dir):
        data = b"\x89PNG\r\n\x1a\n this is truncated garbage"
        broken = temp_dir / "broken.png"
        broken.write_bytes(data)

        fp = FingerprintService().fingerprint(str(broken))

        assert fp.algorithm == HashAlgorithm.CONTENT
        assert fp.digest == hashlib.sha256(data).digest()

    def test_corrupt_image_matches_byte_identical_text_file(self, temp_dir):
        (temp_dir / "broken.jpg").write_bytes(b"same bytes")
        (temp_dir / "notes.txt").write_bytes(b"same bytes")

        service = FingerprintService()
        assert service.fingerprint(str(temp_dir / "broken.jpg")) == service.fingerprint(str(temp_dir / "notes.txt"))

    def test_pixel_hashing_can_be_disabled(self, temp_dir, make_image):
        path = make_image(temp_dir / "red.png")
        fp = FingerprintService(pixel_hashing=False).fingerprint(str(path))

        assert fp.algorithm == HashAlgorithm.CONTENT
        assert fp.digest == hashlib.sha256(path.read_bytes()).digest()


class TestErrors:

    def test_none_is_invalid_input(self):
        with pytest.raises(InvalidInputError):
            FingerprintService().fingerprint(None)

    def test_directory_is_invalid_input(self, temp_dir):
        with pytest.raises(InvalidInputError):
            FingerprintService().fingerprint(str(temp_dir))

    def test_missing_file_is_invalid_input(self, temp_dir):
        record = FileRecord(str(temp_dir / "gone.txt"), 10, 0.0)
        with pytest.raises(InvalidInputError):
            FingerprintService().fingerprint(record)

    def test_read_failure_propagates_as_oserror(self, test_files):
        with mock.patch("dupekeeper.core.hasher.open", create=True,
                        side_effect=PermissionError(13, "Permission denied")):
            with pytest.raises(OSError):
                FingerprintService().fingerprint(str(test_files["unique1"]))

    def test_missing_algorithm_is_fatal(self):
        with mock.patch("dupekeeper.core.hasher.hashlib.new", side_effect=ValueError("unsupported hash type")):
            with pytest.raises(AlgorithmUnavailableError):
                FingerprintService()


class TestAreFilesIdentical:

    def test_identical_files(self, test_files):
        assert FingerprintService().are_files_identical(str(test_files["dup1_a"]), str(test_files["dup1_b"]))

    def test_different_sizes_short_circuit(self, test_files):
        service = FingerprintService()
        with mock.patch.object(service, "fingerprint") as fingerprint:
            assert not service.are_files_identical(str(test_files["unique1"]), str(test_files["unique2"]))
            fingerprint.assert_not_called()

    def test_images_of_different_size_still_compared(self, temp_dir, make_image):
        plain = make_image(temp_dir / "a.png")
        info = PngInfo()
        info.add_text("Author", "someone")
        tagged = make_image(temp_dir / "b.png", pnginfo=info)

        assert FingerprintService().are_files_identical(str(plain), str(tagged))
