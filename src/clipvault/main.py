# region Docstring
"""
clipvault.main
Command line interface for exporting, importing and merging clipboard history.
Overview:
- Wraps the clipservices archive builder, loader, merge engine and import service in a
    typer application that operates on the data root configured by StorageSettings.
Contents:
- Commands:
    - init: Create the data root layout and the master store.
    - export: Export a filtered slice of the master store as a sealed archive.
    - pack: Package an existing record store file and its images folder.
    - inspect: Show the manifest of an archive and verify it.
    - upload: Unpack, verify and register an archive as an import.
    - imports: List registered imports.
    - entries: Preview the records of an import.
    - merge: Merge an import into the master store.
    - delete: Delete an import.
Design Notes:
- Fatal ClipVaultError conditions print their reason and exit with code 1.
- Logging is configured once per invocation by the app callback.
"""
# endregion
# region Imports
import tempfile
from contextlib import contextmanager
from datetime import datetime
from logging import Logger
from pathlib import Path
from typing import Iterator, Optional

import typer  # pyright: ignore[reportMissingImports]
from rich.console import Console  # pyright: ignore[reportMissingImports]
from rich.table import Table  # pyright: ignore[reportMissingImports]

from clipcore.config import AppSettings, ArchiveSettings, StorageSettings, get_settings
from clipcore.models import ClipboardFilter
from clipcore.store import ClipboardStore
from clipcore.utils import get_file_sha256
from clipservices import (
    ArchiveBuilder,
    ArchiveLoader,
    ClipVaultError,
    ImportService,
)

from .logger import setup_logging

# endregion
# region App

console = Console(
    record=True,
    width=120,
    color_system="auto",
)

app = typer.Typer(
    name="clipvault", help="Export, verify and merge clipboard history archives."
)

_state: dict[str, Logger] = {}


@app.callback()
def main():
    _state["logger"] = setup_logging(get_settings(AppSettings))


def _logger() -> Logger:
    if "logger" not in _state:
        _state["logger"] = setup_logging(get_settings(AppSettings))
    return _state["logger"]


def _storage() -> StorageSettings:
    return get_settings(StorageSettings)


def _archive() -> ArchiveSettings:
    return get_settings(ArchiveSettings)


@contextmanager
def _master_store() -> Iterator[ClipboardStore]:
    store = ClipboardStore.from_settings(_storage())
    try:
        store.init_db()
        yield store
    finally:
        store.dispose()


@contextmanager
def _import_service() -> Iterator[ImportService]:
    with _master_store() as store:
        yield ImportService(store, _storage(), _archive(), _logger())


@contextmanager
def _reported_errors() -> Iterator[None]:
    try:
        yield
    except ClipVaultError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1) from e


# endregion
# region Commands


@app.command(name="init", help="Create the data root and the master store.")
def init():
    storage = _storage()
    with _master_store() as store:
        count = store.count()
    console.print(
        f"[bold green]Master store ready:[/bold green] {storage.main_db_path.as_posix()}"
        f" ({count} entries)"
    )


@app.command(name="export", help="Export a filtered slice of the master store.")
def export(
    q: Optional[str] = typer.Option(None, help="Substring of text or image path."),
    username: Optional[str] = typer.Option(None, help="Username substring."),
    workstation: Optional[str] = typer.Option(None, help="Workstation substring."),
    week: Optional[str] = typer.Option(None, help="Week label substring."),
    start: Optional[datetime] = typer.Option(None, help="Inclusive start time."),
    end: Optional[datetime] = typer.Option(None, help="Inclusive end time."),
    output: Optional[Path] = typer.Option(None, help="Output folder."),
):
    storage = _storage()
    entry_filter = ClipboardFilter(
        q=q,
        username=username,
        workstation=workstation,
        week=week,
        start_date=start,
        end_date=end,
    )
    builder = ArchiveBuilder(_archive(), _logger())
    with _reported_errors(), _master_store() as store:
        result = builder.build(
            store,
            storage.main_images_dir,
            output or storage.exports_dir,
            entry_filter,
        )
    console.print(
        f"[bold green]Exported {result.manifest.record_count} entries:[/bold green] "
        f"{result.archive_path.as_posix()}"
    )
    if result.missing_images:
        console.print(
            f"[bold yellow]{result.missing_images} referenced images were missing.[/bold yellow]"
        )


@app.command(name="pack", help="Package a record store file and its images folder.")
def pack(
    db_path: Path = typer.Argument(..., help="Record store file."),
    images_dir: Path = typer.Argument(..., help="Images folder."),
    output: Optional[Path] = typer.Option(None, help="Output folder."),
):
    builder = ArchiveBuilder(_archive(), _logger())
    with _reported_errors():
        result = builder.build_from_file(
            db_path, images_dir, output or _storage().exports_dir
        )
    console.print(
        f"[bold green]Packed {result.manifest.record_count} entries:[/bold green] "
        f"{result.archive_path.as_posix()}"
    )


@app.command(name="inspect", help="Show an archive's manifest and verify it.")
def inspect(
    archive: Path = typer.Argument(..., help="Archive file."),
    verify: bool = typer.Option(True, "--verify/--no-verify", help="Verify contents."),
):
    loader = ArchiveLoader(_archive(), _logger())
    with _reported_errors():
        if not archive.is_file():
            raise ClipVaultError(f"Archive not found: {archive.as_posix()}")
        with tempfile.TemporaryDirectory() as tmp:
            loaded = loader.load(archive, Path(tmp), verify=verify)
            record_total = len(loaded.records())

    manifest = loaded.manifest
    table = Table(title=archive.name)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Archive SHA256", get_file_sha256(archive))
    table.add_row("Format version", manifest.format_version)
    table.add_row("Exported by", manifest.exported_by)
    table.add_row("Exported from", manifest.exported_from_host)
    table.add_row("Exported at (UTC)", manifest.exported_at_utc.isoformat())
    table.add_row("Declared records", str(manifest.record_count))
    table.add_row("Stored records", str(record_total))
    table.add_row("Digest scope", manifest.integrity_scope.value)
    table.add_row("Notes", manifest.notes or "")
    table.add_row("Verified", "yes" if loaded.mergeable else "no")
    console.print(table)


@app.command(name="upload", help="Unpack, verify and register an archive.")
def upload(archive: Path = typer.Argument(..., help="Archive file.")):
    with _reported_errors(), _import_service() as service:
        result = service.upload(archive)
    console.print(
        f"[bold green]Imported as {result.name}[/bold green] "
        f"({result.manifest.record_count} entries from "
        f"{result.manifest.exported_by}@{result.manifest.exported_from_host})"
    )


@app.command(name="imports", help="List registered imports.")
def imports():
    with _import_service() as service:
        entries = service.list_imports()
    table = Table(title="Imports")
    for column in ("Name", "Imported at", "By", "Workstation", "Entries"):
        table.add_column(column)
    for entry in entries:
        table.add_row(
            entry.name,
            entry.imported_at.strftime("%Y-%m-%d %H:%M"),
            entry.imported_by or "",
            entry.workstation or "",
            str(entry.entry_count),
        )
    console.print(table)


@app.command(name="entries", help="Preview the records of an import.")
def entries(
    name: str = typer.Argument(..., help="Import name."),
    limit: Optional[int] = typer.Option(None, help="Maximum number of entries."),
):
    with _reported_errors(), _import_service() as service:
        records = service.entries(name, limit=limit)
    table = Table(title=name)
    for column in ("Timestamp", "User", "Workstation", "Text", "Image"):
        table.add_column(column)
    for record in records:
        table.add_row(
            record.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            record.username or "",
            record.workstation or "",
            (record.text or "")[:60],
            record.image_path or "",
        )
    console.print(table)


@app.command(name="merge", help="Merge an import into the master store.")
def merge(
    name: str = typer.Argument(..., help="Import name."),
):
    with _reported_errors(), _import_service() as service:
        summary = service.merge(name)
    console.print(f"[bold green]{summary.describe(name)}[/bold green]", soft_wrap=True)
    for failure in summary.failures:
        console.print(
            f"[yellow]{failure.reason.value}:[/yellow] {failure.content_hash} {failure.message}"
        )


@app.command(name="delete", help="Delete an import folder and its registry row.")
def delete(name: str = typer.Argument(..., help="Import name.")):
    with _reported_errors(), _import_service() as service:
        service.delete(name)
    console.print(f"[bold green]Deleted import {name}[/bold green]")


# endregion


def entry():
    app()


if __name__ == "__main__":
    entry()
