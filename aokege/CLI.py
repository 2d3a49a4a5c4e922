"""aokege CLI entrypoint.

This module provides the `cli` click group with three commands:

- `get PACKAGE [--file NAME]`: download `<host>/zujian/PACKAGE/NAME` and extract it.
- `remove PACKAGE`: delete the extracted package directory.
- `extract PACKAGE`: re-extract a previously downloaded archive.

Usage example (from shell):
    aokege get demo
    aokege --base-dir ./vendor get demo -f demo-1.0.zip

Archive handling lives in `aokege.PackageStore`; this module only deals
with user interaction and progress reporting.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

import click
import httpx
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, BarColumn, TextColumn, DownloadColumn, TransferSpeedColumn
from rich.table import Table

from . import __version__
from .Errors import AokegeError
from .FileIO import DEFAULT_HOST, build_url, download_archive
from .PackageStore import DEFAULT_BASE_DIR, PackageStore

logger = logging.getLogger(__name__)

# Create a single console instance for the CLI UI (rich console handles colors/formatting)
console = Console()


@dataclass
class Settings:
    """Resolved configuration for one invocation, stored on `ctx.obj`."""
    base_dir: Path = Path(DEFAULT_BASE_DIR)
    host: str = DEFAULT_HOST
    verbose: bool = False
    transport: httpx.AsyncBaseTransport | None = None

    @property
    def store(self) -> PackageStore:
        return PackageStore(self.base_dir)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _progress() -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        DownloadColumn(),
        TransferSpeedColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        console=console,
        transient=True,
    )


def _run(func, *args):
    """Call `func`, turning aokege failures into a red message and exit status 1."""
    try:
        return func(*args)
    except AokegeError as e:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error:[/red] {e}")
        raise click.exceptions.Exit(1)


def _extract(settings: Settings, package: str) -> None:
    store = settings.store
    location = store.locations_for(package)

    console.print(f"📦 Extracting: {location.archive_path}")
    with _progress() as progress:
        task = progress.add_task("Extracting files...", total=None)

        # Advanced by the materializer with the number of bytes written per chunk
        def progress_callback(chunk_size, total):
            progress.update(task, advance=chunk_size, total=total)

        written = store.extract(package, progress_callback=progress_callback)

    if settings.verbose:
        table = Table(title="Package Contents")
        table.add_column("Path", justify="left")
        for path in written:
            table.add_row(str(path))
        console.print(table)

    console.print(f"✅ Extracted to: {location.install_dir}")


def _get(settings: Settings, package: str, filename: str | None) -> None:
    store = settings.store
    location = store.locations_for(package)
    url = build_url(settings.host, package, filename)

    console.print(f"⬇️ Downloading: {url}")
    store.ensure_base_exists()

    with _progress() as progress:
        task = progress.add_task("Downloading...", total=None)

        def progress_callback(chunk_size, total):
            progress.update(task, advance=chunk_size, total=total)

        asyncio.run(download_archive(url, location.archive_path, progress_callback, settings.transport))

    console.print("✅ Download complete")
    _extract(settings, package)
    console.print(f"✅ Installed: {package}")


def _remove(settings: Settings, package: str) -> None:
    if settings.store.remove(package):
        console.print(f"🗑️ Removed package: {package}")
    else:
        console.print(f"❌ Package not found: {package}")


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option("--base-dir", "-d",
              type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
              default=None,
              help=f"Directory holding archives and installed packages [default: {DEFAULT_BASE_DIR}]")
@click.option("--host", type=str, default=None, help=f"Registry base URL [default: {DEFAULT_HOST}]")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging and the extracted file list")
@click.version_option(__version__, prog_name="aokege")
@click.pass_context
def cli(ctx: click.Context, base_dir: Path | None, host: str | None, verbose: bool):
    """A minimal package fetcher: download ZIP packages and unpack them locally."""
    settings = ctx.ensure_object(Settings)
    if base_dir is not None:
        settings.base_dir = base_dir
    if host is not None:
        settings.host = host
    settings.verbose = verbose
    _configure_logging(verbose)


@cli.command()
@click.argument("package", type=str)
@click.option("--file", "-f", "filename", type=str, default=None,
              help="Remote archive file name, e.g. mypkg.zip [default: PACKAGE.zip]")
@click.pass_obj
def get(settings: Settings, package: str, filename: str | None):
    """Download and install PACKAGE (download + extract)."""
    _run(_get, settings, package, filename)


@cli.command()
@click.argument("package", type=str)
@click.pass_obj
def remove(settings: Settings, package: str):
    """Remove the installed PACKAGE directory."""
    _run(_remove, settings, package)


@cli.command()
@click.argument("package", type=str)
@click.pass_obj
def extract(settings: Settings, package: str):
    """Extract the previously downloaded archive of PACKAGE."""
    _run(_extract, settings, package)
