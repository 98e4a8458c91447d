# region Docstring
"""
clipcore.constants
Shared constants and enumerations for clipboard archive export, import and merge.
Overview:
- Fixes the on-disk names that make an archive self-describing (record store file,
    manifest file, images folder) so that builders and loaders agree on layout.
- Defines the canonical timestamp format used when fingerprinting records.
- Provides enumerations for the seal digest scope and merge statuses.
Contents:
- Archive Layout:
    - EXPORT_DB_NAME: Canonical file name of the record store inside an archive.
    - MANIFEST_FILE_NAME: Name of the manifest JSON file at the archive root.
    - IMAGES_FOLDER_NAME: Default name of the images folder.
    - EXPORT_ARCHIVE_PREFIX: File name prefix for archives produced by an export.
- Formatting:
    - FORMAT_VERSION: Manifest format version written by this package.
    - HASH_TIMESTAMP_FORMAT: Second-precision timestamp format used in fingerprints.
    - IMPORT_NAME_TIMESTAMP_FORMAT: Timestamp prefix format for import folder names.
    - WEEK_LABEL_FORMAT: Format of week partition labels (e.g. 2025-W22).
- Enumerations:
    - DigestScope: Which image files the seal digest covers (flat or recursive).
    - MergeStatus: Per-record merge outcome reported by the merge engine.
    - FailureReason: Why a record counted as failed during a merge.
Design Notes:
- Enums inherit from both str and enum.Enum so they compare equal to their raw values
    and serialize cleanly into manifest JSON.
"""
# endregion
# region Imports
import enum

# endregion
# region Archive Layout
EXPORT_DB_NAME: str = "clipboard-history.db"
"""[str] Canonical record store file name inside an archive."""
MANIFEST_FILE_NAME: str = "manifest.json"
"""[str] Manifest file name at the archive root."""
IMAGES_FOLDER_NAME: str = "images"
"""[str] Default images folder name, also the first segment of image references."""
EXPORT_ARCHIVE_PREFIX: str = "clipboard_export_"
"""[str] Prefix for archive file names produced by an export."""
RECORD_TABLE_NAME: str = "clip"
"""[str] Table holding clipboard entries in every record store."""
IMPORT_TABLE_NAME: str = "imports"
"""[str] Table holding import bookkeeping rows in the master store."""

# endregion
# region Formatting
FORMAT_VERSION: str = "1.0"
HASH_TIMESTAMP_FORMAT: str = "%Y-%m-%d %H:%M:%S"
IMPORT_NAME_TIMESTAMP_FORMAT: str = "%Y-%m-%dT%H%MZ"
WEEK_LABEL_FORMAT: str = "{year:04d}-W{week:02d}"
DEFAULT_EXPORT_NOTES: str = "Clipboard export created automatically"
DEFAULT_PREVIEW_LIMIT: int = 100
UNKNOWN_ORIGIN: str = "Unknown"

# endregion
# region Enumerations


class DigestScope(str, enum.Enum):
    """Which files in the images folder participate in the seal digest."""

    FLAT = "flat"
    RECURSIVE = "recursive"


class MergeStatus(str, enum.Enum):
    CREATED = "Created"
    CONFLICT = "Conflict"
    FAILED = "Failed"


class FailureReason(str, enum.Enum):
    MISSING_IMAGE = "missing_image"
    COPY_ERROR = "copy_error"
    INSERT_CONFLICT = "insert_conflict"


# endregion

__all__ = [
    "DEFAULT_EXPORT_NOTES",
    "DEFAULT_PREVIEW_LIMIT",
    "EXPORT_ARCHIVE_PREFIX",
    "EXPORT_DB_NAME",
    "FORMAT_VERSION",
    "HASH_TIMESTAMP_FORMAT",
    "IMAGES_FOLDER_NAME",
    "IMPORT_NAME_TIMESTAMP_FORMAT",
    "IMPORT_TABLE_NAME",
    "MANIFEST_FILE_NAME",
    "RECORD_TABLE_NAME",
    "UNKNOWN_ORIGIN",
    "WEEK_LABEL_FORMAT",
    "DigestScope",
    "FailureReason",
    "MergeStatus",
]
