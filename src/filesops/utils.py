"""Shared utility functions."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path

_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")


def xdg_config_home() -> Path:
    """Return XDG_CONFIG_HOME, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def format_bytes(size_bytes: float, decimals: int = 2) -> str:
    """Convert a byte count to a human-readable string.

    The value is rounded to *decimals* places and trailing zeros are
    dropped, so ``1536`` becomes ``"1.5 KB"`` and ``1024`` becomes ``"1 KB"``.
    """
    if size_bytes < 0:
        return f"-{format_bytes(-size_bytes, decimals)}"
    if size_bytes == 0:
        return "0 B"

    places = max(decimals, 0)
    value = float(size_bytes)
    index = 0
    while value >= 1024 and index < len(_UNITS) - 1:
        value /= 1024
        index += 1

    text = f"{value:.{places}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text} {_UNITS[index]}"


def to_utc(timestamp: float) -> datetime:
    """Convert a POSIX timestamp to an aware UTC datetime."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def as_aware(dt: datetime) -> datetime:
    """Return *dt* as an aware datetime; naive values are taken as local time."""
    if dt.tzinfo is None:
        return dt.astimezone()
    return dt


def format_relative_time(dt: datetime) -> str:
    """Format a datetime as relative time ('2 hours ago')."""
    seconds = int((datetime.now(timezone.utc) - as_aware(dt)).total_seconds())

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        m = seconds // 60
        return f"{m} minute{'s' if m != 1 else ''} ago"
    if seconds < 86400:
        h = seconds // 3600
        return f"{h} hour{'s' if h != 1 else ''} ago"
    d = seconds // 86400
    if d < 30:
        return f"{d} day{'s' if d != 1 else ''} ago"
    mo = d // 30
    if mo < 12:
        return f"{mo} month{'s' if mo != 1 else ''} ago"
    y = d // 365
    return f"{y} year{'s' if y != 1 else ''} ago"
