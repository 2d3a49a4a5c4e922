"""Exception types raised by aokege.

Every failure that aborts a command derives from `AokegeError`, so the CLI
can report it with a single handler. Lower-level exceptions (`OSError`,
`zipfile.BadZipFile`, `httpx.HTTPError`) are chained as `__cause__`.
"""


class AokegeError(Exception):
    """Base class for all aokege failures."""


class NetworkError(AokegeError):
    """Transport failure or a non-success HTTP status."""


class ArchiveReadError(AokegeError):
    """The archive container or one of its entries cannot be read."""


class FilesystemWriteError(AokegeError):
    """A directory, file or delete operation failed on the local filesystem."""


class PathTraversalError(AokegeError):
    """An archive entry would be written outside the extraction root.

    Attributes:
        entry_name (str): The raw entry path as stored in the archive.
    """

    def __init__(self, entry_name: str, root) -> None:
        self.entry_name = entry_name
        self.root = root
        super().__init__(f"Archive entry '{entry_name}' escapes extraction root '{root}'")


class PackageNotFoundError(AokegeError):
    """Nothing to operate on: no downloaded archive or no install directory."""


class InvalidPackageName(AokegeError, ValueError):
    """Package names must be a single, non-empty path segment."""
