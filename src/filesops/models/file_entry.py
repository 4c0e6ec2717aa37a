"""File entry dataclass."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from filesops.utils import to_utc


@dataclass(frozen=True, slots=True)
class FileEntry:
    """Single file or directory observed during a walk.

    ``is_file`` and ``is_directory`` come from one stat result and are
    never both true. Timestamps are aware UTC datetimes.
    """

    path: Path
    name: str
    extension: str
    size: int
    is_directory: bool
    is_file: bool
    created_at: datetime
    modified_at: datetime
    accessed_at: datetime

    @classmethod
    def from_stat(cls, path: Path | str, st: os.stat_result) -> FileEntry:
        """Build an entry from an already collected stat result."""
        path = Path(path)
        birth = getattr(st, "st_birthtime", None)
        return cls(
            path=path,
            name=path.name,
            extension=path.suffix.lower(),
            size=st.st_size,
            is_directory=stat.S_ISDIR(st.st_mode),
            is_file=stat.S_ISREG(st.st_mode),
            created_at=to_utc(birth if birth is not None else st.st_ctime),
            modified_at=to_utc(st.st_mtime),
            accessed_at=to_utc(st.st_atime),
        )
