"""Formatting helpers shared by the CLI and GUI."""

from .convert_utils import format_file_size, timestamp_to_human

__all__ = ["format_file_size", "timestamp_to_human"]
