"""Local package store.

Maps package names onto the on-disk layout under a base directory::

    <base>/<package>.zip   downloaded archive
    <base>/<package>/      extracted tree

There is no manifest: a package counts as installed when its install
directory exists.
"""

import logging
import os
import shutil
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List

from .Errors import FilesystemWriteError, InvalidPackageName, PackageNotFoundError
from .Materializer import materialize
from .ZipArchive import ZipArchiveReader

logger = logging.getLogger(__name__)

DEFAULT_BASE_DIR = "./packages"
ARCHIVE_SUFFIX = ".zip"


@dataclass(frozen=True)
class PackageLocation:
    """Where a package lives on disk. Derived, never stored."""
    package: str
    install_dir: Path
    archive_path: Path


def validate_package_name(package: str) -> str:
    """Return `package` unchanged if it is a single, non-empty path segment.

    Raises:
        InvalidPackageName: For empty names, `.`/`..` or names containing separators.
    """
    if not package or package in (".", "..") or "/" in package or "\\" in package or "\x00" in package:
        raise InvalidPackageName(f"Invalid package name: {package!r}")
    return package


def locations_for(base: Path | str, package: str) -> PackageLocation:
    base = Path(base)
    return PackageLocation(
        package=package,
        install_dir=base / package,
        archive_path=base / f"{package}{ARCHIVE_SUFFIX}",
    )


class PackageStore:
    """
    Filesystem operations on packages under a single base directory.

    Attributes:
        base_dir (Path): Root under which archives and install directories live.
    """

    def __init__(self, base_dir: Path | str = DEFAULT_BASE_DIR) -> None:
        self.base_dir = Path(base_dir)

    def locations_for(self, package: str) -> PackageLocation:
        return locations_for(self.base_dir, validate_package_name(package))

    def ensure_base_exists(self) -> Path:
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemWriteError(f"Cannot create base directory {self.base_dir}: {e}") from e
        return self.base_dir

    def is_installed(self, package: str) -> bool:
        return self.locations_for(package).install_dir.is_dir()

    def has_archive(self, package: str) -> bool:
        return self.locations_for(package).archive_path.is_file()

    def remove(self, package: str) -> bool:
        """Delete the install directory of `package`.

        Returns:
            bool: True if the directory existed and was removed, False if
            there was nothing to remove. The downloaded archive is kept.

        Raises:
            FilesystemWriteError: If the tree cannot be deleted.
        """
        install_dir = self.locations_for(package).install_dir
        if not install_dir.is_dir():
            logger.debug("Nothing to remove at %s", install_dir)
            return False
        try:
            # A linked install is removed as a link, never through it
            if install_dir.is_symlink():
                install_dir.unlink()
            else:
                shutil.rmtree(install_dir)
        except OSError as e:
            raise FilesystemWriteError(f"Failed to remove {install_dir}: {e}") from e
        logger.info("Removed %s", install_dir)
        return True

    def extract(
        self,
        package: str,
        progress_callback: Callable[[int, int], None] | None = None,
    ) -> List[Path]:
        """Extract the downloaded archive of `package` into its install directory.

        The archive is unpacked into a staging directory next to the install
        directory and renamed into place once every entry has been written.
        A previous install is replaced only at that point, so a failed
        extraction leaves either the old tree or nothing under the final name.

        Args:
            package (str): Package name.
            progress_callback (callable|None): Called as `callback(chunk_size, total)`
                for every written chunk; `total` is the uncompressed size of the
                whole archive.

        Returns:
            List[Path]: Materialized paths, relative to the install directory.

        Raises:
            PackageNotFoundError: If the archive has not been downloaded.
            ArchiveReadError, PathTraversalError, FilesystemWriteError: On extraction failure.
        """
        location = self.locations_for(package)
        if not location.archive_path.is_file():
            raise PackageNotFoundError(f"No downloaded archive found: {location.archive_path}")

        self.ensure_base_exists()
        try:
            staging = Path(os.path.abspath(self.base_dir / f".{package}.{uuid.uuid4().hex}.tmp"))
            staging.mkdir()
        except OSError as e:
            raise FilesystemWriteError(f"Cannot create staging directory in {self.base_dir}: {e}") from e

        try:
            with ZipArchiveReader(location.archive_path) as reader:
                on_chunk = None
                if progress_callback:
                    total = reader.total_uncompressed_size

                    def on_chunk(chunk_size):
                        progress_callback(chunk_size, total)

                written = materialize(reader, staging, progress_callback=on_chunk)
            self._swap_into_place(staging, location.install_dir)
        except BaseException:
            shutil.rmtree(staging, ignore_errors=True)
            raise

        logger.info("Extracted %s to %s", location.archive_path, location.install_dir)
        return [path.relative_to(staging) for path in written]

    def _swap_into_place(self, staging: Path, install_dir: Path) -> None:
        previous = None
        try:
            if install_dir.exists() or install_dir.is_symlink():
                previous = install_dir.with_name(f".{install_dir.name}.{uuid.uuid4().hex}.old")
                os.replace(install_dir, previous)
            os.replace(staging, install_dir)
        except OSError as e:
            if previous is not None and (previous.exists() or previous.is_symlink()) and not install_dir.exists():
                os.replace(previous, install_dir)
            raise FilesystemWriteError(f"Cannot move extracted files into {install_dir}: {e}") from e
        if previous is None:
            return
        if previous.is_symlink() or not previous.is_dir():
            previous.unlink(missing_ok=True)
        else:
            shutil.rmtree(previous, ignore_errors=True)
