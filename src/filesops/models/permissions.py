"""Permission inspection dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True, slots=True)
class PermissionBits:
    """Read/write/execute bits of one permission class."""

    read: bool
    write: bool
    execute: bool

    def symbolic(self) -> str:
        return ("r" if self.read else "-") + ("w" if self.write else "-") + ("x" if self.execute else "-")


@dataclass(frozen=True, slots=True)
class PermissionInfo:
    """Mode bits of a path plus the effective access of this process."""

    readable: bool
    writable: bool
    executable: bool
    owner: PermissionBits
    group: PermissionBits
    others: PermissionBits
    mode: int
    octal: str


@dataclass(frozen=True, slots=True)
class PathStatus:
    """Existence and kind of a path."""

    exists: bool
    is_file: bool = False
    is_directory: bool = False


@dataclass(frozen=True, slots=True)
class DetailedInfo:
    """Permissions together with timestamps and type flags."""

    permissions: PermissionInfo
    created_at: datetime
    modified_at: datetime
    accessed_at: datetime
    size: int
    is_file: bool
    is_directory: bool
    is_symbolic_link: bool


@dataclass(frozen=True, slots=True)
class PermissionSummary:
    """Permission report for one path of a batch."""

    path: Path
    permissions: PermissionInfo | None
    accessible: bool
    error: str | None = None
