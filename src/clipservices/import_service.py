# region Docstring
"""
clipservices.import_service
Service managing the lifecycle of uploaded archives.
Overview:
- An uploaded archive is unpacked into its own folder under imports/, verified and
    registered. It can then be previewed, merged into the master store (any number of
    times) and finally deleted by the operator.
Contents:
- Functions:
    - import_name(file_name, now) -> str
- Service Classes:
    - ImportService:
        - upload(archive_path, original_name=None, now=None) -> ImportResult
        - list_imports() -> list[ImportEntry]
        - entries(name, limit=None) -> list[ClipboardEntry]
        - merge(name) -> MergeSummary
        - delete(name) -> None
Design Notes:
- Import names are "<UTC yyyy-mm-ddTHHMMZ>_<sanitized file stem>" with a numeric suffix
    when the folder or name is already taken.
- A failed upload leaves nothing behind: the import folder is removed and no row is
    registered.
- Merging always re-verifies the extracted folder and never deletes the import.
- A folder that cannot be removed keeps its registry row so the delete can be retried.
"""
# endregion
# region Imports
import shutil
from datetime import datetime
from logging import Logger
from pathlib import Path, PureWindowsPath
from typing import Optional

from clipcore.config import ArchiveSettings, StorageSettings
from clipcore.constants import IMPORT_NAME_TIMESTAMP_FORMAT
from clipcore.models import ClipboardEntry, ImportEntry
from clipcore.store import ClipboardStore
from clipcore.utils import remove_tree, sanitize_name, utc_now

from .archive_loader import ArchiveLoader
from .errors import ClipVaultError, ImportNotFoundError, SourceNotFoundError
from .import_registry import ImportRegistry
from .merge_engine import MergeEngine
from .models import ImportResult, MergeSummary

# endregion
# region Helpers


def import_name(file_name: str, now: Optional[datetime] = None) -> str:
    """
    Derive the import name of an uploaded archive.

    Example:
        >>> import_name("my export.zip", datetime(2025, 5, 28, 9, 4))
        '2025-05-28T0904Z_my_export'
    """
    now = now or utc_now()
    stem = sanitize_name(PureWindowsPath(file_name).stem)
    return f"{now.strftime(IMPORT_NAME_TIMESTAMP_FORMAT)}_{stem}"


# endregion
# region Import Service


class ImportService:
    """
    Upload, preview, merge and delete imports against one master store.
    """

    def __init__(
        self,
        store: ClipboardStore,
        storage: StorageSettings,
        archive: ArchiveSettings,
        logger: Logger,
    ):
        self.store = store
        self.storage = storage
        self.archive = archive
        self.logger = logger.getChild(self.__class__.__name__)
        self.registry = ImportRegistry(store)
        self.loader = ArchiveLoader(archive, logger)
        self.storage.ensure_dirs()

    def upload(
        self,
        archive_path: Path,
        original_name: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ImportResult:
        """
        Unpack, verify and register an archive.

        Arguments:
            archive_path (Path): The uploaded archive file.
            original_name (Optional[str]): File name the archive was uploaded under.
                DEFAULT: archive_path.name
            now (Optional[datetime]): Upload time (UTC). DEFAULT: now

        Returns:
            ImportResult: The registered import and its manifest.

        Raises:
            SourceNotFoundError: If the archive file does not exist.
            ArchiveCorruptError: If the archive cannot be unpacked.
            IntegrityMismatchError: If verification fails.
        """
        if not archive_path.is_file():
            raise SourceNotFoundError(f"Archive not found: {archive_path.as_posix()}")
        now = now or utc_now()
        name = self._unique_name(import_name(original_name or archive_path.name, now))
        folder = self.storage.imports_dir / name
        try:
            loaded = self.loader.load(
                archive_path, folder, verify=self.archive.verify_on_import
            )
            manifest = loaded.manifest
            entry = self.registry.register(
                ImportEntry(
                    name=name,
                    imported_at=now,
                    imported_by=manifest.exported_by,
                    path=folder.relative_to(self.storage.data_root).as_posix(),
                    entry_count=manifest.record_count,
                    workstation=manifest.exported_from_host,
                )
            )
        except Exception:
            self.logger.warning("Upload of %s failed, removing %s", archive_path.name, name)
            remove_tree(folder, self.logger)
            raise
        self.logger.info("Imported %s as %s", archive_path.name, name)
        return ImportResult(name=name, folder=folder, manifest=manifest, entry=entry)

    def list_imports(self) -> list[ImportEntry]:
        return self.registry.list()

    def entries(self, name: str, limit: Optional[int] = None) -> list[ClipboardEntry]:
        """Preview the records of an import in stored order."""
        folder = self._folder(self._require(name))
        loaded = self.loader.open(folder, verify=False)
        return loaded.records(limit=limit or self.archive.preview_limit)

    def merge(self, name: str) -> MergeSummary:
        """
        Merge an import into the master store.

        Raises:
            ImportNotFoundError: If no import has this name.
            IntegrityMismatchError: If re-verification of the import folder fails.
        """
        folder = self._folder(self._require(name))
        loaded = self.loader.open(folder, verify=True)
        engine = MergeEngine(self.store, self.storage.main_images_dir, self.logger)
        summary = engine.merge(loaded)
        self.logger.info(summary.describe(name))
        return summary

    def delete(self, name: str) -> None:
        """
        Remove an import folder and its registry row.

        Raises:
            ImportNotFoundError: If no import has this name.
            ClipVaultError: If the folder cannot be removed; the row is kept.
        """
        folder = self._folder(self._require(name))
        if folder.exists():
            try:
                shutil.rmtree(folder)
            except OSError as e:
                raise ClipVaultError(f"Could not delete import '{name}': {e}") from e
        self.registry.delete(name)
        self.logger.info("Deleted import %s", name)

    def _require(self, name: str) -> ImportEntry:
        entry = self.registry.get(name)
        if entry is None:
            raise ImportNotFoundError(name)
        return entry

    def _folder(self, entry: ImportEntry) -> Path:
        return self.storage.data_root / entry.path

    def _unique_name(self, base: str) -> str:
        name, counter = base, 1
        while (self.storage.imports_dir / name).exists() or self.registry.exists(name):
            counter += 1
            name = f"{base}_{counter}"
        return name


# endregion

__all__ = ["ImportService", "import_name"]
