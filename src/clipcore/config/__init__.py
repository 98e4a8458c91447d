"""
clipcore.config
Configuration and settings management for clipboard archive export, import and merge.
Overview:
- Provides Pydantic-based settings classes for storage layout, archive behavior and
    application-wide options.
- Each settings class inherits from FactoryBaseSettings and supports environment variable
    overrides via Field aliases.
Contents:
- Settings Classes:
    - StorageSettings:
        Data root layout: master record store, master images tree, export output folder
        and import working folder. Exposes derived paths and the SQLAlchemy URL of the
        master store.
    - ArchiveSettings:
        Manifest format version, seal digest scope, import verification toggle, default
        manifest notes, preview limit and zip compression.
    - AppSettings:
        Log level, log directory and log archive retention.
Design Notes:
- All settings classes use Pydantic Field with aliases to support environment variable
    configuration (e.g., CLIPVAULT_DATA_ROOT, ARCHIVE_SEAL_NESTED_IMAGES).
- Default values are provided for all fields enabling zero-configuration startup in
    development environments.
"""

from pathlib import Path

from pydantic import Field

from clipcore.config.base import APP_ROOT, DATA_ROOT
from clipcore.config.factory import FactoryBaseSettings
from clipcore.config.factory import get_settings  # noqa: F401  This is used externally
from clipcore.constants import (
    DEFAULT_EXPORT_NOTES,
    DEFAULT_PREVIEW_LIMIT,
    EXPORT_DB_NAME,
    FORMAT_VERSION,
    IMAGES_FOLDER_NAME,
    DigestScope,
)


class StorageSettings(FactoryBaseSettings):
    """
    Data root layout settings.
    """

    data_root: Path = Field(
        default=DATA_ROOT,
        alias="CLIPVAULT_DATA_ROOT",
        description="Directory holding main/, exports/ and imports/.",
    )
    main_db_name: str = Field(
        default=EXPORT_DB_NAME,
        alias="CLIPVAULT_MAIN_DB",
        description="File name of the master record store inside main/.",
    )
    images_folder: str = Field(
        default=IMAGES_FOLDER_NAME,
        alias="CLIPVAULT_IMAGES_FOLDER",
        description="Name of the master images folder inside main/.",
    )

    @property
    def main_dir(self) -> Path:
        """Directory of the master store and its images tree."""
        return self.data_root / "main"

    @property
    def main_db_path(self) -> Path:
        """Path of the master record store file."""
        return self.main_dir / self.main_db_name

    @property
    def main_images_dir(self) -> Path:
        """Root of the master images tree."""
        return self.main_dir / self.images_folder

    @property
    def exports_dir(self) -> Path:
        """Directory receiving export archives."""
        return self.data_root / "exports"

    @property
    def imports_dir(self) -> Path:
        """Directory holding unpacked imports, one folder per import."""
        return self.data_root / "imports"

    @property
    def database_url(self) -> str:
        """SQLAlchemy URL of the master record store."""
        return f"sqlite:///{self.main_db_path.as_posix()}"

    def ensure_dirs(self) -> None:
        """Create the data root folders if they do not exist."""
        for path in (self.main_images_dir, self.exports_dir, self.imports_dir):
            path.mkdir(parents=True, exist_ok=True)


class ArchiveSettings(FactoryBaseSettings):
    """
    Archive export/import behavior settings.
    """

    format_version: str = Field(
        default=FORMAT_VERSION,
        alias="ARCHIVE_FORMAT_VERSION",
        description="Manifest format version written on export.",
    )
    seal_nested_images: bool = Field(
        default=False,
        alias="ARCHIVE_SEAL_NESTED_IMAGES",
        description="Seal week subfolders too (recursive digest scope). [Default: False]",
    )
    verify_on_import: bool = Field(
        default=True,
        alias="ARCHIVE_VERIFY_ON_IMPORT",
        description="Verify seal digest and record store integrity on upload.",
    )
    notes: str = Field(
        default=DEFAULT_EXPORT_NOTES,
        alias="ARCHIVE_NOTES",
        description="Notes written into the manifest of new exports.",
    )
    preview_limit: int = Field(
        default=DEFAULT_PREVIEW_LIMIT,
        alias="ARCHIVE_PREVIEW_LIMIT",
        description="Maximum number of entries returned by an import preview.",
    )
    compress: bool = Field(
        default=True,
        alias="ARCHIVE_COMPRESS",
        description="Deflate archive members instead of storing them.",
    )

    @property
    def digest_scope(self) -> DigestScope:
        """Seal digest scope used for new exports."""
        return DigestScope.RECURSIVE if self.seal_nested_images else DigestScope.FLAT


class AppSettings(FactoryBaseSettings):
    """Application configuration settings."""

    log_level: str = Field(
        default="info",
        alias="CLIPVAULT_LOG_LEVEL",
        description="Log level for the clipvault CLI.",
    )
    logs_dir: Path = Field(
        default=APP_ROOT / "logs",
        alias="CLIPVAULT_LOGS_DIR",
        description="Directory for JSON-lines log files.",
    )
    log_days_to_keep: int = Field(
        default=10,
        alias="CLIPVAULT_LOG_DAYS_TO_KEEP",
        description="Number of archived log files to keep.",
    )

    @property
    def log_file(self) -> Path:
        """Active log file."""
        return self.logs_dir / "clipvault.jsonl"


__all__ = [
    "AppSettings",
    "ArchiveSettings",
    "StorageSettings",
    "get_settings",
]
