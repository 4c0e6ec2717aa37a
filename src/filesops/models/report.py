"""Report dataclasses returned by the combined inspection helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from filesops.models.file_entry import FileEntry
from filesops.models.file_type import FileCategory, FileTypeInfo
from filesops.models.permissions import PermissionInfo
from filesops.models.size import DirectoryStats, SizedPath, SizeInfo


@dataclass(frozen=True, slots=True)
class FileReport:
    """Type, size and permissions of a single path."""

    path: Path
    name: str
    type: FileTypeInfo
    size: SizeInfo
    permissions: PermissionInfo
    exists: bool = True


@dataclass(frozen=True, slots=True)
class DiskUsage:
    """Directory statistics plus its largest files."""

    stats: DirectoryStats
    largest_files: list[SizedPath] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class DirectoryAccess:
    """Effective access to a directory for this process."""

    readable: bool
    writable: bool
    executable: bool
    can_create_files: bool
    permissions: PermissionInfo


@dataclass(frozen=True, slots=True)
class SizeGroup:
    """Files sharing the same byte size."""

    size: int
    files: list[FileEntry]


@dataclass(frozen=True, slots=True)
class CategoryBreakdown:
    """Files of one category found by an overview."""

    category: FileCategory
    count: int
    total_size: SizeInfo


@dataclass(frozen=True, slots=True)
class Overview:
    """Shallow summary of a directory tree."""

    total_files: int
    total_directories: int
    total_size: SizeInfo
    by_category: list[CategoryBreakdown]
    permissions: PermissionInfo
    largest_files: list[SizedPath]


@dataclass(frozen=True, slots=True)
class BatchFailure:
    """A path whose report could not be produced."""

    path: Path
    error: str


@dataclass(slots=True)
class BatchResult:
    """Outcome of a batch of per-file reports."""

    successful: list[FileReport] = field(default_factory=list)
    failed: list[BatchFailure] = field(default_factory=list)
