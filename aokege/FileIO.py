"""Archive download client.

Provides `download_archive`, a single streamed HTTP GET that persists the
response body as a local archive file, and `build_url`, which derives the
download URL of a package from the registry host. The body is written to a
`.part` file first and renamed into place only once it has been received
in full, so an interrupted download never leaves a truncated archive under
its final name.
"""

import logging
import os
from pathlib import Path
from typing import Callable
from urllib.parse import quote

import httpx

from .Errors import FilesystemWriteError, NetworkError

logger = logging.getLogger(__name__)

DEFAULT_HOST = "https://aokege.github.io/zhucechu"
PACKAGE_PATH = "zujian"
PART_SUFFIX = ".part"

HEADERS = {
    "User-Agent": "aokege/0.1.0",
    "Accept": "*/*",
}
TIMEOUT = httpx.Timeout(10.0, read=300.0)


def build_url(host: str, package: str, filename: str | None = None) -> str:
    """Return `<host>/zujian/<package>/<filename>`.

    Args:
        host (str): Registry base URL, with or without a trailing slash.
        package (str): Package name.
        filename (str | None): Remote archive name. Defaults to `<package>.zip`.
    """
    filename = filename or f"{package}.zip"
    return f"{host.rstrip('/')}/{PACKAGE_PATH}/{quote(package)}/{quote(filename)}"


async def download_archive(
    url: str,
    destination: Path,
    progress_callback: Callable[[int, int | None], None] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """Download `url` into `destination`.

    Args:
        url (str): Archive URL.
        destination (Path): Final location of the archive. Its parent must exist.
        progress_callback (callable|None): Called as `callback(chunk_size, total)`
            for every received chunk; `total` is None if the server sends no
            Content-Length.
        transport (httpx.AsyncBaseTransport|None): Optional transport override.

    Returns:
        int: Number of bytes written.

    Raises:
        NetworkError: On transport failure or a non-success status. Not retried.
        FilesystemWriteError: If the archive cannot be written.
    """
    destination = Path(destination)
    part_path = destination.with_name(destination.name + PART_SUFFIX)
    received = 0

    logger.debug("GET %s -> %s", url, destination)
    try:
        async with httpx.AsyncClient(
            headers=HEADERS, follow_redirects=True, timeout=TIMEOUT, transport=transport
        ) as client:
            async with client.stream("GET", url) as response:
                if not response.is_success:
                    raise NetworkError(f"Request failed with status {response.status_code}: {url}")
                content_length = response.headers.get("Content-Length")
                total = int(content_length) if content_length and content_length.isdigit() else None

                with open(part_path, "wb") as target_file:
                    async for chunk in response.aiter_bytes():
                        target_file.write(chunk)
                        received += len(chunk)
                        if progress_callback:
                            progress_callback(len(chunk), total)
        os.replace(part_path, destination)
    except httpx.HTTPError as e:
        part_path.unlink(missing_ok=True)
        raise NetworkError(f"Network request failed: {url} ({e})") from e
    except OSError as e:
        part_path.unlink(missing_ok=True)
        raise FilesystemWriteError(f"Cannot write archive {destination}: {e}") from e
    except BaseException:
        part_path.unlink(missing_ok=True)
        raise

    logger.info("Downloaded %d bytes from %s", received, url)
    return received
