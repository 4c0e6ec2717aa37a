"""Size aggregation dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from filesops.utils import format_bytes

_KB = 1024


@dataclass(frozen=True, slots=True)
class SizeInfo:
    """A byte count with its unit conversions."""

    bytes: float

    @property
    def kilobytes(self) -> float:
        return self.bytes / _KB

    @property
    def megabytes(self) -> float:
        return self.bytes / _KB**2

    @property
    def gigabytes(self) -> float:
        return self.bytes / _KB**3

    @property
    def terabytes(self) -> float:
        return self.bytes / _KB**4

    @property
    def formatted(self) -> str:
        return format_bytes(self.bytes)


@dataclass(frozen=True, slots=True)
class SizedPath:
    """A path paired with its size."""

    path: Path
    size: SizeInfo
    is_directory: bool = False


@dataclass(frozen=True, slots=True)
class DirectoryStats:
    """Aggregate statistics of a directory tree."""

    total_size: SizeInfo
    file_count: int
    directory_count: int
    largest_files: list[SizedPath] = field(default_factory=list)
    average_file_size: SizeInfo = SizeInfo(0)
