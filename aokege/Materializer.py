"""Filesystem materializer.

Recreates the directory tree described by a sequence of archive entries
under a target root. Entry names come from downloaded archives and are
treated as untrusted: every entry is resolved against the root and checked
before anything is written, and a single escaping entry aborts the whole
extraction with `PathTraversalError`.
"""

import logging
import os
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Callable, Iterable, List, Tuple

from .Errors import FilesystemWriteError, PathTraversalError
from .Protocols import ArchiveEntryProtocol

logger = logging.getLogger(__name__)

CHUNK_SIZE = 128 * 1024  # 128 KB


def resolve_entry_path(root: Path, entry_name: str, is_directory: bool = False) -> Path:
    """Join an archive entry name onto `root` and verify it stays inside.

    Backslashes are treated as separators. Absolute and drive-qualified
    names are rejected outright; everything else is normalized and must be
    a descendant of `root` (or `root` itself, for directory entries).

    Args:
        root (Path): Extraction root.
        entry_name (str): Raw entry name from the archive.
        is_directory (bool): Whether the entry describes a directory.

    Returns:
        Path: The absolute output path for the entry.

    Raises:
        PathTraversalError: If the entry would land outside `root`.
    """
    name = entry_name.replace("\\", "/")
    if PurePosixPath(name).is_absolute() or PureWindowsPath(name).drive:
        raise PathTraversalError(entry_name, root)

    base = Path(os.path.abspath(root))
    outpath = Path(os.path.normpath(base / name))
    if outpath == base:
        if is_directory:
            return outpath
        raise PathTraversalError(entry_name, root)
    if base not in outpath.parents:
        raise PathTraversalError(entry_name, root)

    # Symlinks already on disk under the root must not redirect writes elsewhere
    if not outpath.resolve().is_relative_to(base.resolve()):
        raise PathTraversalError(entry_name, root)
    return outpath


def plan(entries: Iterable[ArchiveEntryProtocol], root: Path) -> List[Tuple[ArchiveEntryProtocol, Path]]:
    """Resolve every entry against `root`, failing before any write."""
    return [(entry, resolve_entry_path(root, entry.relative_path, entry.is_directory)) for entry in entries]


def _make_dirs(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemWriteError(f"Cannot create directory {path}: {e}") from e


def _write_file(entry: ArchiveEntryProtocol, outpath: Path, progress_callback=None) -> None:
    # Archives are not required to list a directory before its files
    _make_dirs(outpath.parent)
    try:
        with entry.open() as source, open(outpath, "wb") as target_file:
            while chunk := source.read(CHUNK_SIZE):
                target_file.write(chunk)
                if progress_callback:
                    progress_callback(len(chunk))
    except OSError as e:
        raise FilesystemWriteError(f"Cannot write {outpath}: {e}") from e


def materialize(
    entries: Iterable[ArchiveEntryProtocol],
    root: Path,
    progress_callback: Callable[[int], None] | None = None,
) -> List[Path]:
    """Recreate the entries' tree under `root`.

    Entries are processed in the order given. Directory entries are created
    with their ancestors; file entries have their parent chain created and
    are then truncated and written in full before moving on. Files written
    before a failing entry are left on disk.

    Args:
        entries: Archive entries, typically a `ZipArchiveReader`.
        root (Path): Target directory. Created if missing.
        progress_callback (callable|None): Called with the number of bytes
            written for every chunk.

    Returns:
        List[Path]: Output paths in the order they were materialized.

    Raises:
        PathTraversalError: If any entry resolves outside `root`. Nothing is written.
        FilesystemWriteError: On directory creation or file write failure.
        ArchiveReadError: If an entry's data cannot be decompressed.
    """
    root = Path(root)
    planned = plan(entries, root)
    logger.debug("Materializing %d entries under %s", len(planned), root)

    _make_dirs(root)
    written = []
    for entry, outpath in planned:
        if entry.is_directory:
            _make_dirs(outpath)
        else:
            _write_file(entry, outpath, progress_callback)
        written.append(outpath)
    return written
