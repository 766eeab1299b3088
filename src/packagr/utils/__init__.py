"""Shared utility helpers."""

from packagr.utils.paths import atomic_temp_path, ensure_directories, reset_directory
from packagr.utils.time_utils import now_utc

__all__ = [
    "atomic_temp_path",
    "ensure_directories",
    "reset_directory",
    "now_utc",
]
