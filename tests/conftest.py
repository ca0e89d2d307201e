"""
Shared fixtures for dupekeeper tests.
Creates isolated temporary directories with controlled test files and images.
"""
import os
import pytest
import tempfile
from pathlib import Path
from typing import Callable, Dict, Tuple
import sys

from PIL import Image

# Add src/ to sys.path so 'dupekeeper' is importable without installing
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))


@pytest.fixture
def temp_dir():
    """Creates isolated temporary directory, auto-cleanup after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def test_files(temp_dir) -> Dict[str, Path]:
    """
    Creates controlled test files:
    - 2 identical files (duplicates)
    - 3 identical files, one of them in a subdirectory
    - 2 unique files (different content)
    """
    files = {}

    # Duplicate pair (1KB of 'A')
    content_a = b"A" * 1024
    files["dup1_a"] = temp_dir / "dup1_a.txt"
    files["dup1_b"] = temp_dir / "dup1_b.txt"
    files["dup1_a"].write_bytes(content_a)
    files["dup1_b"].write_bytes(content_a)

    # Duplicate triple (2KB of 'B'), one copy nested
    content_b = b"B" * 2048
    files["dup2_a"] = temp_dir / "dup2_a.txt"
    files["dup2_b"] = temp_dir / "dup2_b.txt"
    files["dup2_a"].write_bytes(content_b)
    files["dup2_b"].write_bytes(content_b)

    subdir = temp_dir / "subdir"
    subdir.mkdir()
    files["sub_dup"] = subdir / "dup_in_subdir.txt"
    files["sub_dup"].write_bytes(content_b)

    # Unique files
    files["unique1"] = temp_dir / "unique1.txt"
    files["unique1"].write_bytes(b"C" * 1500)
    files["unique2"] = temp_dir / "unique2.txt"
    files["unique2"].write_bytes(b"D" * 2500)

    return files


@pytest.fixture
def make_image() -> Callable[..., Path]:
    """
    Factory writing a solid-colour image.
    make_image(path, size=(10, 10), color=(255, 0, 0), mode="RGB", **save_kwargs)
    """
    def _make(path: Path, size: Tuple[int, int] = (10, 10), color=(255, 0, 0),
              mode: str = "RGB", **save_kwargs) -> Path:
        Image.new(mode, size, color).save(path, **save_kwargs)
        return path
    return _make


@pytest.fixture
def set_mtime() -> Callable[[Path, float], None]:
    """Pins a file's modification time."""
    def _set(path: Path, mtime: float) -> None:
        os.utime(path, (mtime, mtime))
    return _set
