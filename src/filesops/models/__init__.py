"""filesops data models."""

from filesops.models.file_entry import FileEntry
from filesops.models.file_type import Detection, DetectionSource, FileCategory, FileTypeInfo
from filesops.models.permissions import (
    DetailedInfo,
    PathStatus,
    PermissionBits,
    PermissionInfo,
    PermissionSummary,
)
from filesops.models.report import (
    BatchFailure,
    BatchResult,
    CategoryBreakdown,
    DirectoryAccess,
    DiskUsage,
    FileReport,
    Overview,
    SizeGroup,
)
from filesops.models.search import EntryOutcome, SearchOptions, SearchResult
from filesops.models.size import DirectoryStats, SizedPath, SizeInfo

__all__ = [
    "BatchFailure",
    "BatchResult",
    "CategoryBreakdown",
    "Detection",
    "DetectionSource",
    "DetailedInfo",
    "DirectoryAccess",
    "DirectoryStats",
    "DiskUsage",
    "EntryOutcome",
    "FileCategory",
    "FileEntry",
    "FileReport",
    "FileTypeInfo",
    "Overview",
    "PathStatus",
    "PermissionBits",
    "PermissionInfo",
    "PermissionSummary",
    "SearchOptions",
    "SearchResult",
    "SizeGroup",
    "SizeInfo",
    "SizedPath",
]
