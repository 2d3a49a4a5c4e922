"""Archive reader protocol definitions.

This module declares the interfaces the materializer consumes:
`ArchiveEntryProtocol` for a single record of an archive and
`ArchiveReaderProtocol` for the reader that yields them. Keeping them as
protocols lets the materializer work on any source of entries, not just ZIP.
"""

from typing import BinaryIO, Iterator, Protocol


class ArchiveEntryProtocol(Protocol):
    """A single record read from an archive.

    Attributes:
        relative_path (str): Slash-separated path as stored in the archive.
            Untrusted: may contain `..` segments or be absolute.
        is_directory (bool): True when the entry only describes a directory.
    """
    relative_path: str
    is_directory: bool

    def open(self) -> BinaryIO:
        """Return a readable stream of the decompressed bytes of a file entry.

        Raises:
            aokege.Errors.ArchiveReadError: If the entry cannot be decompressed.
        """
        ...


class ArchiveReaderProtocol(Protocol):
    """Minimal archive reader interface.

    Entries are exposed in the archive's own order, which is not
    necessarily alphabetical or depth-first.
    """

    def __len__(self) -> int:
        """Return the number of entries in the archive."""
        ...

    def entry(self, index: int) -> ArchiveEntryProtocol:
        """Return the entry stored at `index` (0-based)."""
        ...

    def __iter__(self) -> Iterator[ArchiveEntryProtocol]:
        ...
