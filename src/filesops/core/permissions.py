"""File and directory permission inspection."""

from __future__ import annotations

import logging
import os
import re
import stat
import tempfile
from collections.abc import Iterable
from pathlib import Path

from filesops.errors import FileAccessError, InvalidFormatError
from filesops.models.file_entry import FileEntry
from filesops.models.permissions import (
    DetailedInfo,
    PathStatus,
    PermissionBits,
    PermissionInfo,
    PermissionSummary,
)

log = logging.getLogger(__name__)

_OCTAL_RE = re.compile(r"^[0-7]{3}$")
_SYMBOLIC_RE = re.compile(r"^[r-][w-][x-][r-][w-][x-][r-][w-][x-]$")

_ACCESS_MODES = {
    "read": os.R_OK,
    "write": os.W_OK,
    "execute": os.X_OK,
}


def _access(path: Path | str, mode: int) -> bool:
    try:
        return os.access(path, mode)
    except (OSError, ValueError):
        return False


def can_access(path: Path | str) -> bool:
    """Check if *path* exists for the current process."""
    return _access(path, os.F_OK)


def can_read(path: Path | str) -> bool:
    """Check if the current process can read *path*."""
    return _access(path, os.R_OK)


def can_write(path: Path | str) -> bool:
    """Check if the current process can write to *path*."""
    return _access(path, os.W_OK)


def can_execute(path: Path | str) -> bool:
    """Check if the current process can execute (or traverse) *path*."""
    return _access(path, os.X_OK)


def _bits(mode: int, read: int, write: int, execute: int) -> PermissionBits:
    return PermissionBits(read=bool(mode & read), write=bool(mode & write), execute=bool(mode & execute))


def _permission_info(path: Path | str, mode: int) -> PermissionInfo:
    return PermissionInfo(
        readable=can_read(path),
        writable=can_write(path),
        executable=can_execute(path),
        owner=_bits(mode, stat.S_IRUSR, stat.S_IWUSR, stat.S_IXUSR),
        group=_bits(mode, stat.S_IRGRP, stat.S_IWGRP, stat.S_IXGRP),
        others=_bits(mode, stat.S_IROTH, stat.S_IWOTH, stat.S_IXOTH),
        mode=mode,
        octal=f"{stat.S_IMODE(mode) & 0o777:03o}",
    )


def get_permissions(path: Path | str) -> PermissionInfo:
    """Mode bits of *path* plus the effective access of this process.

    Raises:
        FileAccessError: If *path* cannot be stat-ed.
    """
    try:
        mode = os.stat(path).st_mode
    except OSError as e:
        raise FileAccessError(path, "get permissions for") from e
    return _permission_info(path, mode)


def check_permissions(path: Path | str, kinds: Iterable[str]) -> dict[str, bool]:
    """Check several access kinds (``"read"``, ``"write"``, ``"execute"``) at once."""
    results: dict[str, bool] = {}
    for kind in kinds:
        if kind not in _ACCESS_MODES:
            raise ValueError(f"Unknown permission kind: {kind!r}")
        results[kind] = _access(path, _ACCESS_MODES[kind])
    return results


def format_permissions(info: PermissionInfo) -> str:
    """Format permissions as a Unix-style string, e.g. ``"rwxr-xr--"``."""
    return info.owner.symbolic() + info.group.symbolic() + info.others.symbolic()


def exists(path: Path | str) -> PathStatus:
    """Report whether *path* exists and what kind of entry it is. Never raises."""
    try:
        st = os.stat(path)
    except (OSError, ValueError):
        return PathStatus(exists=False)
    return PathStatus(
        exists=True,
        is_file=stat.S_ISREG(st.st_mode),
        is_directory=stat.S_ISDIR(st.st_mode),
    )


def is_owner(path: Path | str) -> bool:
    """Check if the current user owns *path*.

    Where the platform has no user ids, write access is used instead.
    """
    try:
        st = os.stat(path)
    except OSError:
        return False
    if hasattr(os, "getuid"):
        return st.st_uid == os.getuid()
    return can_write(path)


def get_detailed_info(path: Path | str) -> DetailedInfo:
    """Permissions, timestamps and type flags of *path*.

    Raises:
        FileAccessError: If *path* cannot be stat-ed.
    """
    try:
        st = os.stat(path)
    except OSError as e:
        raise FileAccessError(path, "get detailed info for") from e
    entry = FileEntry.from_stat(path, st)
    return DetailedInfo(
        permissions=_permission_info(path, st.st_mode),
        created_at=entry.created_at,
        modified_at=entry.modified_at,
        accessed_at=entry.accessed_at,
        size=entry.size,
        is_file=entry.is_file,
        is_directory=entry.is_directory,
        is_symbolic_link=os.path.islink(path),
    )


def is_hidden(path: Path | str) -> bool:
    """Check if the base name of *path* starts with a dot."""
    return Path(path).name.startswith(".")


def validate_permission_string(value: str) -> bool:
    """Check for an octal (``"755"``) or symbolic (``"rwxr-xr-x"``) permission string."""
    return bool(_OCTAL_RE.match(value) or _SYMBOLIC_RE.match(value))


def octal_to_symbolic(octal: str) -> str:
    """Convert ``"755"`` to ``"rwxr-xr-x"``.

    Raises:
        InvalidFormatError: If *octal* is not three octal digits.
    """
    if not _OCTAL_RE.match(octal):
        raise InvalidFormatError(f"Invalid octal permission format: {octal!r}")
    return "".join(
        ("r" if d & 4 else "-") + ("w" if d & 2 else "-") + ("x" if d & 1 else "-")
        for d in (int(c) for c in octal)
    )


def symbolic_to_octal(symbolic: str) -> str:
    """Convert ``"rwxr-xr-x"`` to ``"755"``.

    Raises:
        InvalidFormatError: If *symbolic* is not a nine-character rwx string.
    """
    if not _SYMBOLIC_RE.match(symbolic):
        raise InvalidFormatError(f"Invalid symbolic permission format: {symbolic!r}")
    digits = []
    for i in range(0, 9, 3):
        r, w, x = symbolic[i : i + 3]
        digits.append(str((4 if r == "r" else 0) + (2 if w == "w" else 0) + (1 if x == "x" else 0)))
    return "".join(digits)


def is_directory_writable(path: Path | str) -> bool:
    """Probe whether files can be created in *path* by creating and removing one."""
    try:
        fd, tmp = tempfile.mkstemp(prefix=".tmp_", dir=path)
    except (OSError, ValueError):
        return False
    os.close(fd)
    try:
        os.unlink(tmp)
    except OSError:
        log.warning("Could not remove writability probe: %s", tmp)
    return True


def get_permission_summary(paths: Iterable[Path | str]) -> list[PermissionSummary]:
    """Permission report for each of *paths*, in input order."""
    results: list[PermissionSummary] = []
    for item in paths:
        accessible = can_access(item)
        if not accessible:
            results.append(PermissionSummary(Path(item), None, False))
            continue
        try:
            results.append(PermissionSummary(Path(item), get_permissions(item), True))
        except FileAccessError as e:
            results.append(PermissionSummary(Path(item), None, False, error=str(e)))
    return results
