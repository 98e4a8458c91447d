# region Docstring
"""
clipservices.archive_builder
Service producing sealed, self-describing clipboard archives.
Overview:
- Selects a filtered slice of a record store, materializes it as a standalone record
    store file next to the images it references, seals both with a digest, writes the
    manifest and zips everything into one archive file.
- Also packages an entire existing record store file with its images folder, which is
    what the standalone exporter of the capture tool does.
Contents:
- Service Classes:
    - ArchiveBuilder:
        - build(store, images_dir, output_dir, entry_filter=None) -> ExportResult
        - build_from_file(db_path, images_dir, output_dir) -> ExportResult
Design Notes:
- Work happens in a scratch folder named after the export id inside output_dir. The
    scratch record store is disposed before it is hashed or zipped, and the scratch
    folder is removed on every exit path; a failed removal is only logged.
- Referenced images keep their week subfolder inside the archive. Images missing from
    the source tree are skipped, counted and mentioned in the manifest notes.
- Archive members are written in sorted order with POSIX names.
"""
# endregion
# region Imports
import getpass
import shutil
import socket
import uuid
from logging import Logger
from pathlib import Path
from typing import Optional
from zipfile import ZIP_DEFLATED, ZIP_STORED, ZipFile

from clipcore.config import ArchiveSettings
from clipcore.constants import (
    EXPORT_ARCHIVE_PREFIX,
    EXPORT_DB_NAME,
    IMAGES_FOLDER_NAME,
    MANIFEST_FILE_NAME,
    UNKNOWN_ORIGIN,
)
from clipcore.hashing import compute_seal_digest
from clipcore.models import ClipboardEntry, ClipboardFilter, Manifest
from clipcore.partition import image_file_path
from clipcore.store import ClipboardStore, open_store
from clipcore.utils import remove_tree

from .errors import SourceNotFoundError
from .models import ExportResult

# endregion
# region Helpers


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return UNKNOWN_ORIGIN


def _write_archive(source_dir: Path, destination: Path, compress: bool) -> None:
    compression = ZIP_DEFLATED if compress else ZIP_STORED
    with ZipFile(destination, "w", compression=compression) as archive:
        for entry in sorted(source_dir.rglob("*")):
            if entry.is_dir():
                continue
            archive.write(entry, entry.relative_to(source_dir).as_posix())


# endregion
# region Archive Builder


class ArchiveBuilder:
    """
    Builds sealed archives from record stores.
    """

    def __init__(self, settings: ArchiveSettings, logger: Logger):
        self.settings = settings
        self.logger = logger.getChild(self.__class__.__name__)

    def build(
        self,
        store: ClipboardStore,
        images_dir: Path,
        output_dir: Path,
        entry_filter: Optional[ClipboardFilter] = None,
    ) -> ExportResult:
        """
        Export a filtered slice of a store as a sealed archive.

        Arguments:
            store (ClipboardStore): Source record store.
            images_dir (Path): Root of the source images tree.
            output_dir (Path): Folder receiving the archive.
            entry_filter (Optional[ClipboardFilter]): Slice to export. DEFAULT: everything

        Returns:
            ExportResult: Archive path, the manifest written into it and the number of
                referenced images that could not be found.

        Raises:
            SourceNotFoundError: If the images folder or the store file is missing.
        """
        if not images_dir.is_dir():
            raise SourceNotFoundError(f"Images folder not found: {images_dir.as_posix()}")
        if store.database_path is not None and not store.database_path.is_file():
            raise SourceNotFoundError(
                f"Record store not found: {store.database_path.as_posix()}"
            )

        entries = store.query(entry_filter)
        export_id = uuid.uuid4().hex
        output_dir.mkdir(parents=True, exist_ok=True)
        scratch_dir = output_dir / export_id
        self.logger.info(
            "Exporting %d entries to %s", len(entries), output_dir.as_posix()
        )
        try:
            record_store_path = scratch_dir / EXPORT_DB_NAME
            with open_store(record_store_path, create=True) as export_store:
                export_store.add_entries(entries)

            scratch_images = scratch_dir / IMAGES_FOLDER_NAME
            scratch_images.mkdir(parents=True, exist_ok=True)
            missing = self._copy_images(entries, images_dir, scratch_images)

            scope = self.settings.digest_scope
            digest = compute_seal_digest(record_store_path, scratch_images, scope)
            notes = self.settings.notes
            if missing:
                notes = f"{notes} ({missing} referenced images were missing)"
            manifest = Manifest(
                format_version=self.settings.format_version,
                exported_by=_current_user(),
                exported_from_host=socket.gethostname(),
                images_folder_name=IMAGES_FOLDER_NAME,
                record_store_file_name=EXPORT_DB_NAME,
                record_count=len(entries),
                notes=notes,
                integrity_digest=digest,
                integrity_scope=scope,
            )
            manifest.write(scratch_dir / MANIFEST_FILE_NAME)

            archive_path = output_dir / f"{EXPORT_ARCHIVE_PREFIX}{export_id}.zip"
            archive_path.unlink(missing_ok=True)
            _write_archive(scratch_dir, archive_path, self.settings.compress)
        finally:
            remove_tree(scratch_dir, self.logger)

        self.logger.info(
            "Export %s written: %d entries, %d missing images",
            archive_path.name,
            len(entries),
            missing,
        )
        return ExportResult(
            archive_path=archive_path, manifest=manifest, missing_images=missing
        )

    def build_from_file(
        self, db_path: Path, images_dir: Path, output_dir: Path
    ) -> ExportResult:
        """Package a whole record store file and its images folder."""
        if not db_path.is_file():
            raise SourceNotFoundError(f"Record store not found: {db_path.as_posix()}")
        with open_store(db_path) as store:
            return self.build(store, images_dir, output_dir)

    def _copy_images(
        self, entries: list[ClipboardEntry], images_dir: Path, target_dir: Path
    ) -> int:
        missing = 0
        seen: set[str] = set()
        for entry in entries:
            if not entry.image_path or entry.image_path in seen:
                continue
            seen.add(entry.image_path)
            source = image_file_path(images_dir, entry.image_path)
            if not source.is_file():
                missing += 1
                self.logger.debug("Referenced image missing: %s", entry.image_path)
                continue
            target = image_file_path(target_dir, entry.image_path)
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
        return missing


# endregion

__all__ = ["ArchiveBuilder"]
