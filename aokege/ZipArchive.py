"""ZIP archive reader.

Provides a thin adapter around the standard library `zipfile.ZipFile`
class that exposes a downloaded archive as an ordered sequence of
`ArchiveEntry` records. Errors raised by `zipfile` and `zlib` are
translated to `ArchiveReadError` so callers only deal with one type.
"""

import logging
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Iterator

from .Errors import ArchiveReadError
from .Protocols import ArchiveReaderProtocol

logger = logging.getLogger(__name__)

# Exceptions zipfile can raise while decoding a member
_MEMBER_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, RuntimeError)


class ZipEntryStream:
    """Read-only stream over one decompressed ZIP member.

    Wraps `zipfile.ZipExtFile` so decompression and CRC failures surface as
    `ArchiveReadError` instead of the assorted exceptions zipfile raises.
    """

    def __init__(self, name: str, raw: BinaryIO) -> None:
        self.name = name
        self._raw = raw

    def read(self, size: int = -1) -> bytes:
        try:
            return self._raw.read(size)
        except _MEMBER_ERRORS as e:
            raise ArchiveReadError(f"Cannot decompress entry '{self.name}': {e}") from e

    def close(self) -> None:
        self._raw.close()

    def __enter__(self) -> "ZipEntryStream":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


@dataclass
class ArchiveEntry:
    """A single entry of a ZIP archive.

    Attributes:
        relative_path (str): Entry name as stored in the central directory.
        is_directory (bool): Whether the entry describes a directory.
        size (int): Uncompressed size in bytes (0 for directories).
    """
    relative_path: str
    is_directory: bool
    size: int = 0
    _archive: zipfile.ZipFile | None = field(default=None, repr=False, compare=False)
    _info: zipfile.ZipInfo | None = field(default=None, repr=False, compare=False)

    def open(self) -> ZipEntryStream:
        """Open the decompressed byte stream of a file entry.

        Raises:
            ArchiveReadError: If the entry is a directory or its data cannot be decoded.
        """
        if self.is_directory or self._archive is None:
            raise ArchiveReadError(f"Entry '{self.relative_path}' has no content")
        try:
            raw = self._archive.open(self._info)
        except _MEMBER_ERRORS as e:
            raise ArchiveReadError(f"Cannot open entry '{self.relative_path}': {e}") from e
        return ZipEntryStream(self.relative_path, raw)


class ZipArchiveReader(ArchiveReaderProtocol):
    """
    ZIP archive reader using the stdlib zipfile module.

    Attributes:
        path (Path): Location of the archive on disk.
        archive (zipfile.ZipFile): The ZipFile instance used to inspect members.
    """

    def __init__(self, path: Path | str) -> None:
        """
        Open a local ZIP archive.

        Args:
            path (Path | str): Path of the archive file.

        Raises:
            ArchiveReadError: If the file cannot be opened or is not a valid ZIP container.
        """
        self.path = Path(path)
        try:
            # zipfile reads the central directory eagerly, so corrupt or
            # truncated archives fail here rather than mid-extraction.
            self.archive = zipfile.ZipFile(self.path)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError, OSError) as e:
            raise ArchiveReadError(f"Not a valid ZIP archive: {self.path} ({e})") from e
        self._infos = self.archive.infolist()
        logger.debug("Opened %s with %d entries", self.path, len(self._infos))

    def __len__(self) -> int:
        return len(self._infos)

    def entry(self, index: int) -> ArchiveEntry:
        """Return the entry at `index` in central-directory order."""
        info = self._infos[index]
        is_directory = info.filename.endswith(("/", "\\"))
        return ArchiveEntry(
            relative_path=info.filename,
            is_directory=is_directory,
            size=0 if is_directory else info.file_size,
            _archive=self.archive,
            _info=info,
        )

    def __iter__(self) -> Iterator[ArchiveEntry]:
        for index in range(len(self)):
            yield self.entry(index)

    @property
    def total_uncompressed_size(self) -> int:
        """Sum of the uncompressed sizes of all file entries."""
        return sum(entry.size for entry in self)

    def close(self) -> None:
        self.archive.close()

    def __enter__(self) -> "ZipArchiveReader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
