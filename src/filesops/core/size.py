"""File and directory size calculation."""

from __future__ import annotations

import logging
import math
import os
import re
import stat
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path

from filesops.errors import FileAccessError, InvalidFormatError
from filesops.models.size import DirectoryStats, SizedPath, SizeInfo
from filesops.utils import format_bytes

log = logging.getLogger(__name__)

__all__ = [
    "compare_items",
    "find_largest_files",
    "format_bytes",
    "get_directory_size",
    "get_directory_stats",
    "get_file_size",
    "get_size_by_pattern",
    "get_size_info",
    "parse_size",
]

_SIZE_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*([KMGTPE]?B?)$", re.IGNORECASE)

_MULTIPLIERS = {
    "": 1,
    "K": 1024,
    "M": 1024**2,
    "G": 1024**3,
    "T": 1024**4,
    "P": 1024**5,
    "E": 1024**6,
}

_LARGEST_FILES_LIMIT = 10


def get_size_info(size_bytes: float) -> SizeInfo:
    """Wrap a byte count with its unit conversions."""
    return SizeInfo(size_bytes)


def get_file_size(path: Path | str) -> SizeInfo:
    """Size of a single file.

    Raises:
        FileAccessError: If the file cannot be stat-ed.
    """
    try:
        return SizeInfo(os.stat(path).st_size)
    except OSError as e:
        raise FileAccessError(path, "get size for file") from e


def _walk_files(
    path: Path | str,
    include_hidden: bool,
    on_directory: Callable[[str], None] | None = None,
) -> Iterator[tuple[str, int]]:
    """Yield ``(path, size)`` for every regular file below *path*.

    Symlinks are not followed and unreadable entries are skipped.
    """
    stack: list[Path | str] = [path]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError:
            log.debug("Cannot read directory: %s", current)
            continue
        subdirs: list[str] = []
        for entry in entries:
            if not include_hidden and entry.name.startswith("."):
                continue
            try:
                if entry.is_file(follow_symlinks=False):
                    yield entry.path, entry.stat(follow_symlinks=False).st_size
                elif entry.is_dir(follow_symlinks=False):
                    if on_directory:
                        on_directory(entry.path)
                    subdirs.append(entry.path)
            except OSError:
                log.debug("Cannot access: %s", entry.path)
        stack.extend(reversed(subdirs))


def get_directory_size(path: Path | str, include_hidden: bool = False) -> SizeInfo:
    """Total size of all files below *path*."""
    return SizeInfo(sum(size for _, size in _walk_files(path, include_hidden)))


def get_directory_stats(path: Path | str, include_hidden: bool = False) -> DirectoryStats:
    """File count, directory count, total and average size, top 10 files."""
    directory_count = 0

    def _count_dir(_: str) -> None:
        nonlocal directory_count
        directory_count += 1

    files = list(_walk_files(path, include_hidden, on_directory=_count_dir))
    total = sum(size for _, size in files)
    largest = sorted(files, key=lambda f: f[1], reverse=True)[:_LARGEST_FILES_LIMIT]

    return DirectoryStats(
        total_size=SizeInfo(total),
        file_count=len(files),
        directory_count=directory_count,
        largest_files=[SizedPath(Path(p), SizeInfo(s)) for p, s in largest],
        average_file_size=SizeInfo(total / len(files) if files else 0),
    )


def compare_items(paths: Iterable[Path | str]) -> list[SizedPath]:
    """Sizes of files and directories, largest first.

    Paths that cannot be stat-ed, and entries that are neither files nor
    directories, are left out.
    """
    results: list[SizedPath] = []
    for item in paths:
        try:
            st = os.stat(item)
        except OSError:
            log.debug("Cannot stat: %s", item)
            continue
        if stat.S_ISDIR(st.st_mode):
            results.append(SizedPath(Path(item), get_directory_size(item), is_directory=True))
        elif stat.S_ISREG(st.st_mode):
            results.append(SizedPath(Path(item), SizeInfo(st.st_size)))
    return sorted(results, key=lambda r: r.size.bytes, reverse=True)


def find_largest_files(
    path: Path | str,
    limit: int = _LARGEST_FILES_LIMIT,
    include_hidden: bool = False,
) -> list[SizedPath]:
    """The *limit* largest files below *path*, largest first."""
    files = sorted(_walk_files(path, include_hidden), key=lambda f: f[1], reverse=True)
    return [SizedPath(Path(p), SizeInfo(s)) for p, s in files[:limit]]


def get_size_by_pattern(
    path: Path | str,
    pattern: re.Pattern[str] | str,
    include_hidden: bool = False,
) -> SizeInfo:
    """Total size of files below *path* whose name matches the regex *pattern*."""
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    total = sum(size for p, size in _walk_files(path, include_hidden) if regex.search(os.path.basename(p)))
    return SizeInfo(total)


def parse_size(text: str) -> int:
    """Parse a human-readable size like ``"1.5MB"`` or ``"512 k"`` into bytes.

    Units are binary (1 KB = 1024 bytes) and case-insensitive; a bare
    number is taken as bytes.

    Raises:
        InvalidFormatError: If *text* is not a size.
    """
    match = _SIZE_RE.match(text.strip())
    if not match:
        raise InvalidFormatError(f"Invalid size format: {text}")

    value = float(match.group(1))
    unit = match.group(2).upper()
    multiplier = _MULTIPLIERS[unit.rstrip("B")]
    return int(math.floor(value * multiplier + 0.5))
