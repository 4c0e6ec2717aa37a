"""Combined operations built from search, type, size and permission inspection."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path

from filesops.core import file_type, permissions, search, size
from filesops.errors import FileAccessError
from filesops.models.file_entry import FileEntry
from filesops.models.file_type import FileCategory
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
from filesops.models.search import SearchOptions
from filesops.models.size import SizeInfo

log = logging.getLogger(__name__)

BatchCallback = Callable[[Path, bool], None]  # (path, succeeded)

_OVERVIEW_DEPTH = 2
_MAX_WORKERS = 4


def get_file_info(path: Path | str) -> FileReport:
    """Content-based type, size and permissions of a single path.

    Raises:
        FileAccessError: If *path* does not exist or cannot be stat-ed.
    """
    if not permissions.can_access(path):
        raise FileAccessError(path, "find or access file")

    path = Path(path)
    return FileReport(
        path=path,
        name=path.name,
        type=file_type.detect_from_content(path),
        size=size.get_file_size(path),
        permissions=permissions.get_permissions(path),
    )


def find_by_type_and_size(
    root: Path | str,
    category: FileCategory | str,
    min_size: int | None = None,
    max_size: int | None = None,
) -> list[FileEntry]:
    """Files whose extension belongs to *category*, optionally bounded by size.

    An unknown category has no extensions and matches nothing.
    """
    extensions = file_type.get_extensions_by_category(category)
    if not extensions:
        log.debug("No extensions registered for category %r", category)
        return []
    options = SearchOptions(extensions=extensions, min_size=min_size, max_size=max_size)
    return list(search.search(root, options).files)


def get_disk_usage(path: Path | str, include_hidden: bool = False) -> DiskUsage:
    """Directory statistics plus the ten largest files."""
    return DiskUsage(
        stats=size.get_directory_stats(path, include_hidden),
        largest_files=size.find_largest_files(path, include_hidden=include_hidden),
    )


def find_files_to_cleanup(
    root: Path | str,
    older_than: datetime | None = None,
    larger_than: int | None = None,
    extensions: Iterable[str] | None = None,
    include_hidden: bool = False,
) -> list[FileEntry]:
    """Cleanup candidates: files last modified before *older_than* and at
    least *larger_than* bytes, largest first."""
    options = SearchOptions(
        modified_before=older_than,
        min_size=larger_than,
        extensions=extensions or frozenset(),
        include_hidden=include_hidden,
    )
    files = search.search(root, options).files
    return sorted(files, key=lambda f: f.size, reverse=True)


def check_directory_access(path: Path | str) -> DirectoryAccess:
    """Effective access to *path*, including a real file-creation probe.

    Raises:
        FileAccessError: If *path* cannot be stat-ed.
    """
    return DirectoryAccess(
        readable=permissions.can_read(path),
        writable=permissions.can_write(path),
        executable=permissions.can_execute(path),
        can_create_files=permissions.is_directory_writable(path),
        permissions=permissions.get_permissions(path),
    )


def find_duplicates_by_size(root: Path | str) -> list[SizeGroup]:
    """Group files under *root* that share a byte size.

    Only groups of two or more files are returned, largest size first.
    """
    groups: dict[int, list[FileEntry]] = {}
    for entry in search.search(root).files:
        groups.setdefault(entry.size, []).append(entry)

    return [
        SizeGroup(size=s, files=files)
        for s, files in sorted(groups.items(), key=lambda item: item[0], reverse=True)
        if len(files) > 1
    ]


def get_file_system_overview(root: Path | str) -> Overview:
    """Shallow summary of *root*.

    File and directory counts come from a search two levels deep, while the
    total size and largest files cover the whole tree. Files are grouped by
    the category of their extension, in order of first appearance.
    """
    with ThreadPoolExecutor(max_workers=3) as executor:
        found = executor.submit(search.search, root, SearchOptions(max_depth=_OVERVIEW_DEPTH))
        stats = executor.submit(size.get_directory_stats, root)
        perms = executor.submit(permissions.get_permissions, root)
        result, dir_stats, root_perms = found.result(), stats.result(), perms.result()

    by_category: dict[FileCategory, list[FileEntry]] = {}
    for entry in result.files:
        category = file_type.detect_from_path(entry.path).category
        by_category.setdefault(category, []).append(entry)

    return Overview(
        total_files=result.total_files,
        total_directories=result.total_directories,
        total_size=dir_stats.total_size,
        by_category=[
            CategoryBreakdown(category, len(files), SizeInfo(sum(f.size for f in files)))
            for category, files in by_category.items()
        ],
        permissions=root_perms,
        largest_files=dir_stats.largest_files,
    )


def batch_file_info(
    paths: Iterable[Path | str],
    on_result: BatchCallback | None = None,
) -> BatchResult:
    """Run :func:`get_file_info` for many paths on a small thread pool.

    A failing path is recorded as a :class:`BatchFailure` and does not stop
    the batch. Both lists keep the input order. *on_result* is called from
    the calling thread, once per path, in input order.
    """
    paths = [Path(p) for p in paths]
    batch = BatchResult()
    if not paths:
        return batch

    max_workers = min(_MAX_WORKERS, len(paths))
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(get_file_info, path) for path in paths]
        for path, future in zip(paths, futures):
            try:
                report = future.result()
            except Exception as e:
                log.debug("Could not inspect %s: %s", path, e)
                batch.failed.append(BatchFailure(path, str(e) or "Unknown error"))
                succeeded = False
            else:
                batch.successful.append(report)
                succeeded = True

            if on_result:
                try:
                    on_result(path, succeeded)
                except Exception:
                    log.exception("Result callback failed for %s", path)

    return batch
