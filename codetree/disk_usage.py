"""Logical and allocated size measurement for individual files.

This is the only platform-conditional module. On Unix-like systems the
allocated size comes from ``st_blocks`` (always 512-byte units, independent of
the filesystem block size). On Windows it comes from
``GetCompressedFileSizeW``, which reports on-disk usage for compressed and
sparse files. Anything else falls back to the logical size.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Optional

from .models import SizeMeasurement

_STAT_BLOCK_SIZE = 512
_INVALID_FILE_SIZE = 0xFFFFFFFF

AllocatedSizeReader = Callable[[Path, os.stat_result], Optional[int]]


def _unix_allocated_size(path: Path, stat_result: os.stat_result) -> Optional[int]:
    blocks = getattr(stat_result, "st_blocks", None)
    if blocks is None:
        return None
    return int(blocks) * _STAT_BLOCK_SIZE


@lru_cache(maxsize=1)
def _compressed_size_api() -> Any:
    import ctypes
    from ctypes import wintypes

    kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)  # type: ignore[attr-defined]
    get_size = kernel32.GetCompressedFileSizeW
    get_size.argtypes = (wintypes.LPCWSTR, ctypes.POINTER(wintypes.DWORD))
    get_size.restype = wintypes.DWORD
    return get_size


def _windows_allocated_size(path: Path, stat_result: os.stat_result) -> Optional[int]:
    import ctypes
    from ctypes import wintypes

    high = wintypes.DWORD(0)
    low = _compressed_size_api()(str(path), ctypes.byref(high))
    # INVALID_FILE_SIZE is also a legal low word, so the error code decides.
    if low == _INVALID_FILE_SIZE and ctypes.get_last_error() != 0:  # type: ignore[attr-defined]
        return None
    return (high.value << 32) | low


def _no_allocated_size(path: Path, stat_result: os.stat_result) -> Optional[int]:
    return None


def default_reader() -> AllocatedSizeReader:
    """Pick the allocated-size implementation for the running platform."""
    if os.name == "nt":
        return _windows_allocated_size
    if hasattr(os.stat_result, "st_blocks"):
        return _unix_allocated_size
    return _no_allocated_size


class DiskUsageProbe:
    """Measures files one at a time; nothing is cached between calls."""

    def __init__(self, reader: AllocatedSizeReader | None = None) -> None:
        self._reader = reader or default_reader()

    def measure(self, path: Path, stat_result: os.stat_result | None = None) -> SizeMeasurement:
        """Return the logical and allocated size of ``path``.

        Raises ``OSError`` when the file cannot be stat'ed. A platform that
        cannot report allocation yields the logical size with ``fallback`` set.
        """
        if stat_result is None:
            stat_result = os.stat(path, follow_symlinks=False)
        logical = int(stat_result.st_size)
        try:
            allocated = self._reader(path, stat_result)
        except OSError:
            allocated = None
        if allocated is None or allocated < 0:
            return SizeMeasurement(logical_bytes=logical, allocated_bytes=logical, fallback=True)
        return SizeMeasurement(logical_bytes=logical, allocated_bytes=allocated)


__all__ = ["AllocatedSizeReader", "DiskUsageProbe", "default_reader"]
