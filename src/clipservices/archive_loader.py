# region Docstring
"""
clipservices.archive_loader
Service extracting and verifying clipboard archives.
Overview:
- Extracts an archive into a working folder, reads its manifest and locates the record
    store and images folder it declares.
- Verifies an archive with two independent gates before it may be merged: the seal
    digest over the extracted contents must match the manifest, and the record store
    must pass SQLite's own structural integrity check.
Contents:
- Functions:
    - check_record_store(path) -> None:
        Structural check of a record store file via sqlite-utils.
- Models:
    - LoadedArchive:
        Extracted archive: folder, manifest, record store path, images folder and the
        outcome of verification. `records()` reads the archive's entries in stored
        order and `store()` opens its record store as a scoped resource.
- Service Classes:
    - ArchiveLoader:
        - load(archive_path, destination, verify=True) -> LoadedArchive
        - open(folder, verify=True) -> LoadedArchive
        - verify(loaded) -> LoadedArchive
Design Notes:
- Loading never touches the master store.
- A failed extraction removes the destination folder before raising, but only when
    the extraction created it.
- The digest is recomputed with the scope recorded in the manifest, so archives sealed
    flat and recursively both verify.
"""
# endregion
# region Imports
import sqlite3
from contextlib import AbstractContextManager
from logging import Logger
from pathlib import Path
from typing import Optional
from zipfile import BadZipFile, ZipFile

from pydantic import BaseModel
from sqlite_utils import Database

from clipcore.config import ArchiveSettings
from clipcore.constants import MANIFEST_FILE_NAME, RECORD_TABLE_NAME
from clipcore.hashing import compute_seal_digest
from clipcore.models import ClipboardEntry, Manifest
from clipcore.store import ClipboardStore, open_store
from clipcore.utils import remove_tree

from .errors import ArchiveCorruptError, CorruptDatabaseError, IntegrityMismatchError

# endregion
# region Constants
TAMPERED_MESSAGE = "Export contents have been modified or corrupted."
CORRUPT_DATABASE_MESSAGE = "Corrupt database."
MISSING_DATABASE_MESSAGE = "Imported database missing."

# endregion
# region Record Store Check


def check_record_store(path: Path) -> None:
    """
    Run SQLite's structural integrity check against a record store file.

    Arguments:
        path (Path): The record store file.

    Raises:
        CorruptDatabaseError: If the file is not a database, fails PRAGMA integrity_check
            or has no clipboard table.
    """
    try:
        db = Database(path)
    except sqlite3.DatabaseError as e:
        raise CorruptDatabaseError(CORRUPT_DATABASE_MESSAGE) from e
    try:
        rows = db.execute("PRAGMA integrity_check").fetchall()
        result = rows[0][0] if rows else None
        if result != "ok" or RECORD_TABLE_NAME not in db.table_names():
            raise CorruptDatabaseError(CORRUPT_DATABASE_MESSAGE)
    except sqlite3.DatabaseError as e:
        raise CorruptDatabaseError(CORRUPT_DATABASE_MESSAGE) from e
    finally:
        db.conn.close()


# endregion
# region Loaded Archive


class LoadedArchive(BaseModel):
    """
    An extracted archive.
    Attributes:
        root (Path): Folder the archive was extracted into.
        manifest (Manifest): The archive manifest, or a default one when absent.
        record_store_path (Path): The archive's record store file.
        images_dir (Path): The archive's images folder (may not exist).
        verified (bool): Whether verification ran.
        integrity_ok (Optional[bool]): Seal digest outcome, None when not checked.
        database_ok (Optional[bool]): Structural check outcome, None when not checked.
    """

    root: Path
    manifest: Manifest
    record_store_path: Path
    images_dir: Path
    verified: bool = False
    integrity_ok: Optional[bool] = None
    database_ok: Optional[bool] = None

    @property
    def mergeable(self) -> bool:
        """True once both verification gates have passed."""
        return bool(self.integrity_ok and self.database_ok)

    def store(self) -> AbstractContextManager[ClipboardStore]:
        """Open the archive's record store; released when the with-block exits."""
        return open_store(self.record_store_path)

    def records(self, limit: Optional[int] = None) -> list[ClipboardEntry]:
        """Entries of the archive in stored order."""
        with self.store() as store:
            return store.query(limit=limit)


# endregion
# region Archive Loader


class ArchiveLoader:
    """
    Extracts and verifies archives produced by ArchiveBuilder.
    """

    def __init__(self, settings: ArchiveSettings, logger: Logger):
        self.settings = settings
        self.logger = logger.getChild(self.__class__.__name__)

    def load(
        self, archive_path: Path, destination: Path, verify: bool = True
    ) -> LoadedArchive:
        """
        Extract an archive and optionally verify it.

        Arguments:
            archive_path (Path): The archive file.
            destination (Path): Folder to extract into; created if needed.
            verify (bool): Run both verification gates. DEFAULT: True

        Returns:
            LoadedArchive: The extracted archive.

        Raises:
            ArchiveCorruptError: If extraction fails or the record store is missing.
            IntegrityMismatchError: If the digest does not match.
            CorruptDatabaseError: If the record store fails the structural check.
        """
        self.logger.info(
            "Extracting %s into %s", archive_path.name, destination.as_posix()
        )
        created = not destination.exists()
        try:
            destination.mkdir(parents=True, exist_ok=True)
            with ZipFile(archive_path) as archive:
                archive.extractall(destination)
        except (BadZipFile, OSError) as e:
            if created:
                remove_tree(destination, self.logger)
            raise ArchiveCorruptError(f"Failed to extract archive: {e}") from e
        return self.open(destination, verify=verify)

    def open(self, folder: Path, verify: bool = True) -> LoadedArchive:
        """Describe an already extracted archive folder and optionally verify it."""
        manifest_path = folder / MANIFEST_FILE_NAME
        if manifest_path.is_file():
            try:
                manifest = Manifest.read(manifest_path)
            except ValueError as e:
                raise ArchiveCorruptError(f"Invalid manifest: {e}") from e
        else:
            self.logger.warning("Archive in %s has no manifest", folder.as_posix())
            manifest = Manifest.unknown()

        record_store_path = folder / Path(manifest.record_store_file_name).name
        if not record_store_path.is_file():
            raise ArchiveCorruptError(MISSING_DATABASE_MESSAGE)

        loaded = LoadedArchive(
            root=folder,
            manifest=manifest,
            record_store_path=record_store_path,
            images_dir=folder / Path(manifest.images_folder_name).name,
        )
        if verify:
            self.verify(loaded)
        return loaded

    def verify(self, loaded: LoadedArchive) -> LoadedArchive:
        """
        Run the seal digest gate, then the structural gate, recording both outcomes.

        Raises:
            IntegrityMismatchError: If the digest is absent or does not match.
            CorruptDatabaseError: If the record store fails the structural check.
        """
        loaded.verified = True
        expected = loaded.manifest.integrity_digest
        actual = compute_seal_digest(
            loaded.record_store_path, loaded.images_dir, loaded.manifest.integrity_scope
        )
        loaded.integrity_ok = bool(expected) and actual == expected
        if not loaded.integrity_ok:
            self.logger.warning(
                "Seal digest mismatch for %s (expected %s, got %s)",
                loaded.root.as_posix(),
                expected,
                actual,
            )
            raise IntegrityMismatchError(TAMPERED_MESSAGE)

        try:
            check_record_store(loaded.record_store_path)
        except CorruptDatabaseError:
            loaded.database_ok = False
            self.logger.warning(
                "Record store failed integrity check: %s",
                loaded.record_store_path.as_posix(),
            )
            raise
        loaded.database_ok = True
        self.logger.info("Archive in %s verified", loaded.root.as_posix())
        return loaded


# endregion

__all__ = [
    "ArchiveLoader",
    "LoadedArchive",
    "check_record_store",
]
