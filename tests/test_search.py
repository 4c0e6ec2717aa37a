"""Tests for the recursive search engine."""

from __future__ import annotations

import os
import re
from datetime import datetime, timezone
from pathlib import Path

import pytest

import filesops.core.search as search_mod
from filesops.core.search import (
    compile_pattern,
    exists,
    find_by_extension,
    find_by_name,
    find_large_files,
    find_recent_files,
    glob_to_regex,
    search,
)
from filesops.errors import FilesOpsError, RootUnreadableError
from filesops.models.search import EntryOutcome, SearchOptions

needs_symlinks = pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")


def _names(entries) -> list[str]:
    return [e.name for e in entries]


def _set_mtime(path: Path, dt: datetime) -> None:
    ts = dt.timestamp()
    os.utime(path, (ts, ts))


class _VanishingEntry:
    """Directory entry that disappears between listing and stat."""

    def __init__(self, entry: os.DirEntry) -> None:
        self.name = entry.name
        self.path = entry.path

    def is_symlink(self) -> bool:
        return False

    def stat(self, follow_symlinks: bool = True):
        raise FileNotFoundError(2, "No such file or directory", self.path)


class TestScenario:
    def test_default_search(self, tree):
        result = search(tree)
        assert result.total_files == 2
        assert result.total_size == 15
        assert result.total_directories == 1
        assert _names(result.directories) == ["sub"]

    def test_with_hidden(self, tree):
        result = search(tree, SearchOptions(include_hidden=True))
        assert result.total_files == 3
        assert result.total_size == 16

    def test_totals_match_files(self, deep_tree):
        result = search(deep_tree)
        assert result.total_files == len(result.files)
        assert result.total_size == sum(f.size for f in result.files)

    def test_traversal_order(self, tree):
        result = search(tree, SearchOptions(include_hidden=True))
        assert _names(result.files) == [".hidden", "a.txt", "b.txt"]

    def test_entries_carry_metadata(self, tree):
        entry = next(f for f in search(tree).files if f.name == "a.txt")
        assert entry.path == tree / "a.txt"
        assert entry.extension == ".txt"
        assert entry.size == 5
        assert entry.is_file and not entry.is_directory
        assert entry.modified_at.tzinfo is not None

    def test_directories_do_not_count_toward_size(self, tree):
        result = search(tree, SearchOptions(pattern="*"))
        assert result.total_directories == 1
        assert result.total_size == 15

    def test_accepts_string_root(self, tree):
        assert search(str(tree)).total_files == 2


class TestDepth:
    def test_max_depth_zero_yields_only_root_files(self, tmp_path):
        (tmp_path / "root.txt").write_text("x")
        (tmp_path / "child").mkdir()
        (tmp_path / "child" / "nested.txt").write_text("y")

        result = search(tmp_path, SearchOptions(max_depth=0))
        assert _names(result.files) == ["root.txt"]

    def test_max_depth_zero_still_records_child_directories(self, tree):
        result = search(tree, SearchOptions(max_depth=0))
        assert _names(result.directories) == ["sub"]

    def test_max_depth_one(self, deep_tree):
        result = search(deep_tree, SearchOptions(max_depth=1))
        assert sorted(_names(result.files)) == ["mid.JS", "photo.png", "top.py"]

    def test_unbounded(self, deep_tree):
        result = search(deep_tree)
        assert "bottom.md" in _names(result.files)
        assert _names(result.directories) == ["one", "two"]

    def test_negative_depth_rejected(self):
        with pytest.raises(ValueError):
            SearchOptions(max_depth=-1)


class TestPatterns:
    def test_glob_prefix_is_case_insensitive(self, tmp_path):
        for name in ("Test.txt", "test.js", "other.txt"):
            (tmp_path / name).write_text(name)

        result = search(tmp_path, SearchOptions(pattern="test.*"))
        assert sorted(_names(result.files)) == ["Test.txt", "test.js"]

    def test_case_sensitive_glob(self, tree):
        assert search(tree, SearchOptions(pattern="A.TXT", case_sensitive=True)).total_files == 0
        assert _names(search(tree, SearchOptions(pattern="A.TXT")).files) == ["a.txt"]

    def test_pattern_must_match_whole_name(self, tree):
        assert search(tree, SearchOptions(pattern="a")).total_files == 0

    def test_unmatched_directory_is_still_descended(self, tree):
        result = search(tree, SearchOptions(pattern="b.*"))
        assert _names(result.files) == ["b.txt"]
        assert result.total_directories == 0

    def test_pattern_matches_directories(self, tree):
        result = search(tree, SearchOptions(pattern="su?"))
        assert _names(result.directories) == ["sub"]
        assert result.total_files == 0

    def test_compiled_regex_searches(self, tree):
        result = search(tree, SearchOptions(pattern=re.compile(r"\.txt$")))
        assert sorted(_names(result.files)) == ["a.txt", "b.txt"]

    def test_callable_pattern(self, tree):
        result = search(tree, SearchOptions(pattern=lambda name: name.startswith("b")))
        assert _names(result.files) == ["b.txt"]

    def test_glob_to_regex(self):
        regex = glob_to_regex("file?.txt")
        assert regex.fullmatch("file1.txt")
        assert regex.fullmatch("FILE2.TXT")
        assert not regex.fullmatch("file10.txt")
        assert not regex.fullmatch("file1xtxt")

    def test_glob_special_characters_are_literal(self):
        regex = glob_to_regex("[a]+(b).txt", case_sensitive=True)
        assert regex.fullmatch("[a]+(b).txt")
        assert not regex.fullmatch("a.txt")

    def test_compile_pattern_none_matches_everything(self):
        assert compile_pattern(None)("anything")

    def test_empty_pattern_matches_everything(self, tree):
        result = search(tree, SearchOptions(pattern=""))
        assert result.total_files == search(tree).total_files == 2
        assert _names(result.directories) == ["sub"]
        assert compile_pattern("")("anything")

    def test_compile_pattern_rejects_other_types(self):
        with pytest.raises(TypeError):
            compile_pattern(42)


class TestExtensions:
    def test_extension_match_is_case_insensitive(self, deep_tree):
        for ext in ("js", ".js", "JS", ".JS"):
            assert _names(find_by_extension(deep_tree, [ext])) == ["mid.JS"]

    def test_single_string_extension(self, deep_tree):
        assert _names(find_by_extension(deep_tree, "md")) == ["bottom.md"]

    def test_options_normalize_extensions(self):
        options = SearchOptions(extensions=["TXT", ".Md"])
        assert options.extensions == frozenset({".txt", ".md"})

    def test_multiple_extensions(self, deep_tree):
        found = find_by_extension(deep_tree, [".py", ".png"])
        assert sorted(_names(found)) == ["photo.png", "top.py"]


class TestSizeAndDateFilters:
    def test_size_bounds_are_inclusive(self, tree):
        assert sorted(_names(search(tree, SearchOptions(min_size=5)).files)) == ["a.txt", "b.txt"]
        assert _names(search(tree, SearchOptions(max_size=5)).files) == ["a.txt"]
        assert _names(search(tree, SearchOptions(min_size=6, max_size=10)).files) == ["b.txt"]

    def test_zero_max_size_is_honoured(self, tree):
        (tree / "empty.txt").write_bytes(b"")
        assert _names(search(tree, SearchOptions(max_size=0)).files) == ["empty.txt"]

    def test_negative_size_rejected(self):
        with pytest.raises(ValueError):
            SearchOptions(min_size=-1)

    def test_modified_window(self, tree):
        _set_mtime(tree / "a.txt", datetime(2020, 1, 1, tzinfo=timezone.utc))
        _set_mtime(tree / "sub" / "b.txt", datetime(2023, 6, 1, tzinfo=timezone.utc))
        cutoff = datetime(2022, 1, 1, tzinfo=timezone.utc)

        assert _names(search(tree, SearchOptions(modified_since=cutoff)).files) == ["b.txt"]
        assert _names(search(tree, SearchOptions(modified_before=cutoff)).files) == ["a.txt"]

    def test_date_bounds_are_inclusive(self, tree):
        stamp = datetime(2021, 3, 4, 5, 6, 7, tzinfo=timezone.utc)
        _set_mtime(tree / "a.txt", stamp)
        options = SearchOptions(pattern="a.txt", modified_since=stamp, modified_before=stamp)
        assert _names(search(tree, options).files) == ["a.txt"]

    def test_naive_datetime_is_accepted(self, tree):
        _set_mtime(tree / "a.txt", datetime(2000, 1, 1, tzinfo=timezone.utc))
        result = search(tree, SearchOptions(modified_since=datetime(2010, 1, 1)))
        assert _names(result.files) == ["b.txt"]

    def test_filters_are_combined(self, deep_tree):
        options = SearchOptions(extensions=["md", "js"], min_size=100)
        assert _names(search(deep_tree, options).files) == ["bottom.md"]


class TestHidden:
    def test_hidden_directories_are_not_descended(self, tree):
        (tree / ".git").mkdir()
        (tree / ".git" / "config").write_text("x")
        names = _names(search(tree).files)
        assert "config" not in names

    def test_hidden_directories_included_on_request(self, tree):
        (tree / ".git").mkdir()
        (tree / ".git" / "config").write_text("x")
        result = search(tree, SearchOptions(include_hidden=True))
        assert "config" in _names(result.files)
        assert ".git" in _names(result.directories)


@needs_symlinks
class TestSymlinks:
    def test_symlinks_skipped_by_default(self, tree):
        (tree / "link.txt").symlink_to(tree / "a.txt")
        assert "link.txt" not in _names(search(tree).files)

    def test_symlinks_followed_on_request(self, tree):
        (tree / "link.txt").symlink_to(tree / "a.txt")
        result = search(tree, SearchOptions(follow_symlinks=True))
        link = next(f for f in result.files if f.name == "link.txt")
        assert link.size == 5

    def test_directory_cycle_terminates(self, tree):
        (tree / "sub" / "loop").symlink_to(tree, target_is_directory=True)
        result = search(tree, SearchOptions(follow_symlinks=True))
        assert sorted(_names(result.files)) == ["a.txt", "b.txt"]
        assert "loop" in _names(result.directories)

    def test_dangling_symlink_is_unreadable(self, tree):
        (tree / "broken").symlink_to(tree / "missing")
        seen = {}
        search(tree, SearchOptions(follow_symlinks=True), on_entry=lambda p, o: seen.__setitem__(p.name, o))
        assert seen["broken"] is EntryOutcome.UNREADABLE


class TestErrors:
    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(RootUnreadableError) as exc_info:
            search(tmp_path / "nope")
        assert exc_info.value.path == tmp_path / "nope"
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_file_root_raises(self, tree):
        with pytest.raises(FilesOpsError):
            search(tree / "a.txt")

    def test_vanishing_entry_is_skipped(self, tree, monkeypatch):
        real_list_dir = search_mod._list_dir

        def flaky_list_dir(path):
            return [_VanishingEntry(e) if e.name == "a.txt" else e for e in real_list_dir(path)]

        monkeypatch.setattr(search_mod, "_list_dir", flaky_list_dir)
        outcomes = {}
        result = search(tree, on_entry=lambda p, o: outcomes.__setitem__(p.name, o))

        assert _names(result.files) == ["b.txt"]
        assert outcomes["a.txt"] is EntryOutcome.UNREADABLE
        assert outcomes["b.txt"] is EntryOutcome.INCLUDED
        assert outcomes["sub"] is EntryOutcome.INCLUDED

    def test_unreadable_subdirectory_is_skipped(self, tree, monkeypatch):
        real_list_dir = search_mod._list_dir

        def guarded_list_dir(path):
            if Path(path).name == "sub":
                raise PermissionError(13, "Permission denied", str(path))
            return real_list_dir(path)

        monkeypatch.setattr(search_mod, "_list_dir", guarded_list_dir)
        result = search(tree)

        assert _names(result.files) == ["a.txt"]
        assert _names(result.directories) == ["sub"]

    def test_on_entry_reports_exclusions(self, tree):
        outcomes = {}
        search(tree, SearchOptions(pattern="b.txt"), on_entry=lambda p, o: outcomes.__setitem__(p.name, o))
        assert outcomes == {
            ".hidden": EntryOutcome.EXCLUDED,
            "a.txt": EntryOutcome.EXCLUDED,
            "sub": EntryOutcome.EXCLUDED,
            "b.txt": EntryOutcome.INCLUDED,
        }


class TestHelpers:
    def test_find_by_name(self, tree):
        assert _names(find_by_name(tree, "B.TXT")) == ["b.txt"]
        assert find_by_name(tree, "B.TXT", case_sensitive=True) == []

    def test_find_large_files_sorted_descending(self, tree):
        assert _names(find_large_files(tree, 5)) == ["b.txt", "a.txt"]
        assert _names(find_large_files(tree, 6)) == ["b.txt"]

    def test_find_recent_files_sorted_newest_first(self, tree):
        _set_mtime(tree / "a.txt", datetime(2024, 5, 1, tzinfo=timezone.utc))
        _set_mtime(tree / "sub" / "b.txt", datetime(2024, 6, 1, tzinfo=timezone.utc))
        found = find_recent_files(tree, datetime(2024, 1, 1, tzinfo=timezone.utc))
        assert _names(found) == ["b.txt", "a.txt"]

    def test_exists(self, tree):
        assert exists(tree / "a.txt")
        assert exists(tree)
        assert not exists(tree / "missing")
