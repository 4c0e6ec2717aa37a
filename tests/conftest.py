"""Shared test fixtures."""

from __future__ import annotations

import os

import pytest

from filesops.settings import Settings


@pytest.fixture(autouse=True)
def isolate_settings(tmp_path, monkeypatch):
    """Point the settings file at a temp directory and drop the singleton."""
    config = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config))
    monkeypatch.setattr(Settings, "_instance", None)
    return config / "filesops" / "settings.json"


@pytest.fixture
def tree(tmp_path):
    """Small tree: a.txt (5 B), sub/b.txt (10 B), .hidden (1 B)."""
    root = tmp_path / "root"
    root.mkdir()
    (root / "a.txt").write_bytes(b"a" * 5)
    (root / "sub").mkdir()
    (root / "sub" / "b.txt").write_bytes(b"b" * 10)
    (root / ".hidden").write_bytes(b"h")
    return root


@pytest.fixture
def deep_tree(tmp_path):
    """Three nested levels with one file each plus a mix of extensions."""
    root = tmp_path / "deep"
    level2 = root / "one" / "two"
    level2.mkdir(parents=True)
    (root / "top.py").write_bytes(b"print('top')\n")
    (root / "one" / "mid.JS").write_bytes(b"let x = 1;\n" * 3)
    (level2 / "bottom.md").write_bytes(b"# heading\n" * 20)
    (root / "one" / "photo.png").write_bytes(b"\x89PNG\r\n\x1a\n" + b"\x00" * 92)
    return root


@pytest.fixture
def require_posix_perms():
    """Skip tests that rely on mode bits being enforced for this user."""
    if os.name != "posix" or (hasattr(os, "geteuid") and os.geteuid() == 0):
        pytest.skip("permission bits are not enforced for this user")
