"""aokege package initializer.

aokege is a minimal package fetcher: it downloads a package's ZIP archive
from a fixed registry host into a local base directory and unpacks it
there. The package-level surface exports:

- __version__: Package version string.
- PackageStore / PackageLocation: on-disk layout, extraction and removal.
- ZipArchiveReader: reads entries of a downloaded archive.
- materialize: writes archive entries to a directory tree, rejecting unsafe paths.
- build_url / download_archive: the download client.
- cli: The CLI entrypoint (click group).

Example:
    from aokege import PackageStore
    store = PackageStore("./packages")
    store.extract("demo")

"""

# Public version string
__version__ = "0.1.0"

from .Errors import (
    AokegeError,
    ArchiveReadError,
    FilesystemWriteError,
    InvalidPackageName,
    NetworkError,
    PackageNotFoundError,
    PathTraversalError,
)
from .FileIO import build_url, download_archive
from .Materializer import materialize
from .PackageStore import PackageLocation, PackageStore, locations_for
from .ZipArchive import ArchiveEntry, ZipArchiveReader

# Expose the CLI group so callers can reuse or register it in other tools.
from .CLI import cli

__all__ = [
    "__version__",
    "AokegeError",
    "ArchiveReadError",
    "FilesystemWriteError",
    "InvalidPackageName",
    "NetworkError",
    "PackageNotFoundError",
    "PathTraversalError",
    "build_url",
    "download_archive",
    "materialize",
    "PackageLocation",
    "PackageStore",
    "locations_for",
    "ArchiveEntry",
    "ZipArchiveReader",
    "cli",
]
