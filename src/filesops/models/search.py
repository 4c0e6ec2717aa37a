"""Search options and result dataclasses."""

from __future__ import annotations

import enum
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime

from filesops.models.file_entry import FileEntry

NamePattern = str | re.Pattern[str] | Callable[[str], bool]


def normalize_extension(ext: str) -> str:
    """Lower-case *ext* and make sure it starts with a dot."""
    ext = ext.lower()
    return ext if ext.startswith(".") else f".{ext}"


@dataclass(frozen=True, slots=True)
class SearchOptions:
    """Immutable configuration for one directory walk.

    All configured filters are combined with AND. ``max_depth=None`` means
    unbounded; ``max_depth=0`` visits only the immediate children of the
    root. Size bounds and date bounds are inclusive.
    """

    pattern: NamePattern | None = None
    extensions: frozenset[str] = field(default_factory=frozenset)
    max_depth: int | None = None
    include_hidden: bool = False
    case_sensitive: bool = False
    follow_symlinks: bool = False
    min_size: int | None = None
    max_size: int | None = None
    modified_since: datetime | None = None
    modified_before: datetime | None = None

    def __post_init__(self) -> None:
        exts: Iterable[str] = self.extensions or ()
        if isinstance(exts, str):
            exts = (exts,)
        object.__setattr__(self, "extensions", frozenset(normalize_extension(e) for e in exts))

        if self.max_depth is not None and self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        for name in ("min_size", "max_size"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")


@dataclass(frozen=True, slots=True)
class SearchResult:
    """Matched files and directories of one walk, in traversal order."""

    files: tuple[FileEntry, ...] = ()
    directories: tuple[FileEntry, ...] = ()

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_directories(self) -> int:
        return len(self.directories)

    @property
    def total_size(self) -> int:
        """Sum of matched file sizes; directories do not count."""
        return sum(f.size for f in self.files)


class EntryOutcome(enum.Enum):
    """What the walk decided for a single child entry."""

    INCLUDED = "included"
    EXCLUDED = "excluded"
    UNREADABLE = "unreadable"
