"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

utils/convert_utils.py
"""
import time


def format_file_size(size_bytes: int) -> str:
    """
    Convert bytes to a human-readable string (e.g., "512 B", "1.5 KB", "3.2 MB").
    """
    if size_bytes < 1024:
        return f"{max(size_bytes, 0)} B"

    size = float(size_bytes)
    for unit in ["KB", "MB", "GB", "TB", "PB"]:
        size /= 1024
        if size < 1024:
            return f"{size:.1f} {unit}"
    return f"{size / 1024:.1f} EB"


def timestamp_to_human(timestamp: float, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
    """
    Convert a Unix timestamp to a human-readable string.
    Uses local time by default.
    """
    try:
        return time.strftime(fmt, time.localtime(timestamp))
    except (OverflowError, OSError, ValueError):
        return "Invalid timestamp"
