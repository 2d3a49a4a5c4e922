"""
Shared fixtures for aokege tests.
"""

import zipfile
from pathlib import Path

import pytest


def build_zip(path: Path, members) -> Path:
    """Write a ZIP archive at `path`.

    `members` is a list of `(name, content)` pairs; `content` is None for
    directory entries.
    """
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, content in members:
            if content is None:
                zf.writestr(zipfile.ZipInfo(name), b"")
            else:
                zf.writestr(name, content)
    return path


@pytest.fixture
def make_zip(tmp_path):
    """Factory building ZIP archives under a scratch directory."""
    def _make(members, name: str = "archive.zip") -> Path:
        return build_zip(tmp_path / name, members)

    return _make


@pytest.fixture
def base_dir(tmp_path):
    """Base directory for a PackageStore, not created yet."""
    return tmp_path / "packages"


@pytest.fixture
def demo_members():
    return [("a.txt", b"hello"), ("sub/", None)]


def snapshot(root: Path) -> dict:
    """Map every path under `root` to its bytes (None for directories)."""
    return {
        path.relative_to(root).as_posix(): (None if path.is_dir() else path.read_bytes())
        for path in sorted(root.rglob("*"))
    }
