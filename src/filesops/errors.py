"""Exceptions raised by filesops operations."""

from __future__ import annotations

from pathlib import Path


class FilesOpsError(Exception):
    """Base class for all filesops errors."""


class RootUnreadableError(FilesOpsError):
    """Raised when the root directory of a search cannot be listed."""

    def __init__(self, path: Path | str, reason: str = "") -> None:
        self.path = Path(path)
        message = f"Cannot read search root: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class FileAccessError(FilesOpsError):
    """Raised when a single-path operation cannot stat its target."""

    def __init__(self, path: Path | str, action: str = "access") -> None:
        self.path = Path(path)
        super().__init__(f"Unable to {action}: {path}")


class InvalidFormatError(FilesOpsError, ValueError):
    """Raised when a size or permission string cannot be parsed."""
