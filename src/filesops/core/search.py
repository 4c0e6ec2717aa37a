"""Recursive directory search with structural and content filters."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from filesops.errors import RootUnreadableError
from filesops.models.file_entry import FileEntry
from filesops.models.search import EntryOutcome, NamePattern, SearchOptions, SearchResult
from filesops.utils import as_aware

log = logging.getLogger(__name__)

EntryCallback = Callable[[Path, EntryOutcome], None]  # (entry_path, outcome)
NameMatcher = Callable[[str], bool]


def glob_to_regex(pattern: str, case_sensitive: bool = False) -> re.Pattern[str]:
    """Translate a glob into an anchored regex.

    Only ``*`` (any run of characters) and ``?`` (one character) are
    special; everything else matches literally.
    """
    parts: list[str] = []
    for ch in pattern:
        if ch == "*":
            parts.append(".*")
        elif ch == "?":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    flags = re.DOTALL if case_sensitive else re.DOTALL | re.IGNORECASE
    return re.compile("".join(parts), flags)


def compile_pattern(pattern: NamePattern | None, case_sensitive: bool = False) -> NameMatcher:
    """Turn a configured pattern into a name predicate.

    No pattern, or an empty glob, matches every name. Glob strings must match
    the whole name. Compiled regexes are searched anywhere in the name and
    keep their own flags. Callables are used as-is.
    """
    if pattern is None or pattern == "":
        return lambda name: True
    if isinstance(pattern, re.Pattern):
        return lambda name: pattern.search(name) is not None
    if isinstance(pattern, str):
        regex = glob_to_regex(pattern, case_sensitive)
        return lambda name: regex.fullmatch(name) is not None
    if callable(pattern):
        return pattern
    raise TypeError(f"Unsupported pattern type: {type(pattern).__name__}")


def _list_dir(path: Path | str) -> list[os.DirEntry[str]]:
    """Read a directory once, sorted by name."""
    with os.scandir(path) as it:
        return sorted(it, key=lambda e: e.name)


@dataclass(slots=True)
class _Frame:
    entries: Iterator[os.DirEntry[str]]
    depth: int
    key: tuple[int, int] | None


class _Walker:
    """Accumulates the matches of a single search call."""

    def __init__(self, options: SearchOptions, on_entry: EntryCallback | None) -> None:
        self.options = options
        self.on_entry = on_entry
        self.files: list[FileEntry] = []
        self.directories: list[FileEntry] = []
        self._matches = compile_pattern(options.pattern, options.case_sensitive)
        self._since = as_aware(options.modified_since) if options.modified_since else None
        self._before = as_aware(options.modified_before) if options.modified_before else None
        self._stack: list[_Frame] = []
        self._ancestors: set[tuple[int, int]] = set()

    def run(self, root: Path) -> None:
        try:
            children = _list_dir(root)
        except OSError as exc:
            raise RootUnreadableError(root, exc.strerror or str(exc)) from exc

        self._push(iter(children), 0, _dir_key(root))
        while self._stack:
            frame = self._stack[-1]
            entry = next(frame.entries, None)
            if entry is None:
                self._pop()
                continue
            outcome = self._visit(entry, frame.depth)
            if self.on_entry:
                self.on_entry(Path(entry.path), outcome)

    def _push(self, entries: Iterator[os.DirEntry[str]], depth: int, key: tuple[int, int] | None) -> None:
        self._stack.append(_Frame(entries, depth, key))
        if key is not None:
            self._ancestors.add(key)

    def _pop(self) -> None:
        frame = self._stack.pop()
        if frame.key is not None:
            self._ancestors.discard(frame.key)

    def _visit(self, entry: os.DirEntry[str], depth: int) -> EntryOutcome:
        opts = self.options
        if not opts.include_hidden and entry.name.startswith("."):
            return EntryOutcome.EXCLUDED

        try:
            if not opts.follow_symlinks and entry.is_symlink():
                return EntryOutcome.EXCLUDED
            st = entry.stat(follow_symlinks=opts.follow_symlinks)
        except OSError:
            log.debug("Cannot stat: %s", entry.path)
            return EntryOutcome.UNREADABLE

        info = FileEntry.from_stat(entry.path, st)

        if info.is_directory:
            outcome = EntryOutcome.INCLUDED if self._matches(info.name) else EntryOutcome.EXCLUDED
            if outcome is EntryOutcome.INCLUDED:
                self.directories.append(info)
            if opts.max_depth is None or depth < opts.max_depth:
                self._descend(entry.path, (st.st_dev, st.st_ino), depth + 1)
            return outcome

        if info.is_file and self._accepts_file(info):
            self.files.append(info)
            return EntryOutcome.INCLUDED
        return EntryOutcome.EXCLUDED

    def _descend(self, path: str, key: tuple[int, int], depth: int) -> None:
        if key in self._ancestors:
            log.debug("Skipping directory cycle: %s", path)
            return
        try:
            children = _list_dir(path)
        except OSError:
            log.debug("Cannot read directory: %s", path)
            return
        self._push(iter(children), depth, key)

    def _accepts_file(self, info: FileEntry) -> bool:
        opts = self.options
        if not self._matches(info.name):
            return False
        if opts.extensions and info.extension not in opts.extensions:
            return False
        if opts.max_size is not None and info.size > opts.max_size:
            return False
        if opts.min_size is not None and info.size < opts.min_size:
            return False
        if self._since is not None and info.modified_at < self._since:
            return False
        if self._before is not None and info.modified_at > self._before:
            return False
        return True


def _dir_key(path: Path) -> tuple[int, int] | None:
    try:
        st = os.stat(path)
    except OSError:
        return None
    return st.st_dev, st.st_ino


def search(
    root: Path | str,
    options: SearchOptions | None = None,
    on_entry: EntryCallback | None = None,
) -> SearchResult:
    """Walk *root* depth-first and collect the entries matching *options*.

    Only a failure to list *root* itself is reported, as
    :class:`~filesops.errors.RootUnreadableError`. Entries that vanish or
    cannot be stat-ed during the walk, and subdirectories that cannot be
    listed, are left out of the result without an error, so a tree with
    permission problems simply yields fewer matches.

    Args:
        root: Directory to search.
        options: Filters and traversal policy. Defaults to match-all.
        on_entry: Optional callback fired with the outcome of every child
            entry the walk looks at.

    Returns:
        The matched files and directories in traversal order.
    """
    options = options or SearchOptions()
    root = Path(root)
    walker = _Walker(options, on_entry)
    walker.run(root)
    log.debug(
        "Searched %s: %d files, %d directories",
        root,
        len(walker.files),
        len(walker.directories),
    )
    return SearchResult(files=tuple(walker.files), directories=tuple(walker.directories))


def find_by_name(root: Path | str, pattern: NamePattern, case_sensitive: bool = False) -> list[FileEntry]:
    """Find files whose name matches *pattern*."""
    return list(search(root, SearchOptions(pattern=pattern, case_sensitive=case_sensitive)).files)


def find_by_extension(root: Path | str, extensions: Iterable[str] | str) -> list[FileEntry]:
    """Find files with one of *extensions* (with or without the leading dot)."""
    return list(search(root, SearchOptions(extensions=extensions)).files)


def find_large_files(root: Path | str, min_size: int) -> list[FileEntry]:
    """Find files of at least *min_size* bytes, largest first."""
    files = search(root, SearchOptions(min_size=min_size)).files
    return sorted(files, key=lambda f: f.size, reverse=True)


def find_recent_files(root: Path | str, since: datetime) -> list[FileEntry]:
    """Find files modified at or after *since*, newest first."""
    files = search(root, SearchOptions(modified_since=since)).files
    return sorted(files, key=lambda f: f.modified_at, reverse=True)


def exists(path: Path | str) -> bool:
    """Check whether *path* exists. Never raises."""
    return os.path.exists(path)
