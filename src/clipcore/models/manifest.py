# region Docstring
"""
clipcore.models.manifest
Manifest model describing one clipboard archive.
Overview:
- The manifest is stored as manifest.json at the archive root and makes the archive
    self-describing: who exported it, from where, when, which record store file and
    images folder it contains, how many records it declares and its seal digest.
Contents:
- Pydantic models:
    - Manifest:
        Serialized with camelCase keys. Also reads the key names written by the capture tool's
        exporter (Version, ExportedByUser, Workstation, ..., SourceHash).
        `read(path)` / `write(path)` handle the JSON file.
Design notes:
- recordCount is informational only; nothing relies on it for correctness.
- integrityDigest is absent on an unsealed manifest and mandatory for import.
- integrityScope names the seal digest scope; archives without it were sealed flat.
"""
# endregion
# region Imports
import json
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from clipcore.constants import (
    EXPORT_DB_NAME,
    FORMAT_VERSION,
    IMAGES_FOLDER_NAME,
    UNKNOWN_ORIGIN,
    DigestScope,
)
from clipcore.utils import utc_now

# endregion
_EXCESS_FRACTION = re.compile(r"(\.\d{6})\d+")


def _alias(name: str, *legacy: str) -> dict[str, Any]:
    return {
        "validation_alias": AliasChoices(name, *legacy),
        "serialization_alias": name,
    }


# region Pydantic Model
class Manifest(BaseModel):
    """
    Describes one archive.

    Attributes:
        format_version (str): Manifest format version.
        exported_by (str): OS user that produced the archive.
        exported_from_host (str): Host that produced the archive.
        exported_at_utc (datetime): Export time in UTC.
        images_folder_name (str): Name of the images folder in the archive.
        record_store_file_name (str): Name of the record store file in the archive.
        record_count (int): Declared number of records.
        notes (Optional[str]): Free-form notes.
        integrity_digest (Optional[str]): Seal digest, lowercase hex.
        integrity_scope (DigestScope): Which image files the digest covers.
    """

    format_version: str = Field(
        FORMAT_VERSION, **_alias("formatVersion", "Version", "format_version")
    )
    exported_by: str = Field(
        "", **_alias("exportedBy", "ExportedByUser", "exported_by")
    )
    exported_from_host: str = Field(
        "", **_alias("exportedFromHost", "Workstation", "exported_from_host")
    )
    exported_at_utc: datetime = Field(
        default_factory=utc_now,
        **_alias("exportedAtUtc", "ExportedAtUtc", "exported_at_utc"),
    )
    images_folder_name: str = Field(
        IMAGES_FOLDER_NAME,
        **_alias("imagesFolderName", "ImagesFolder", "images_folder_name"),
    )
    record_store_file_name: str = Field(
        EXPORT_DB_NAME,
        **_alias("recordStoreFileName", "DatabaseFile", "record_store_file_name"),
    )
    record_count: int = Field(
        0, **_alias("recordCount", "EntryCount", "record_count")
    )
    notes: Optional[str] = Field(None, **_alias("notes", "Notes"))
    integrity_digest: Optional[str] = Field(
        None, **_alias("integrityDigest", "SourceHash", "integrity_digest")
    )
    integrity_scope: DigestScope = Field(
        DigestScope.FLAT, **_alias("integrityScope", "integrity_scope")
    )

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("images_folder_name", "record_store_file_name", mode="before")
    def default_when_null(cls, v: Any, info) -> Any:
        if v is None or v == "":
            return cls.model_fields[info.field_name].default
        return v

    @field_validator("exported_at_utc", mode="before")
    def trim_fraction(cls, v: Any) -> Any:
        # capture tool timestamps carry seven fractional digits
        if isinstance(v, str):
            return _EXCESS_FRACTION.sub(r"\1", v)
        return v

    @field_validator("integrity_digest", mode="before")
    def normalize_digest(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower() or None
        return v

    @classmethod
    def unknown(cls) -> "Manifest":
        """Manifest used when an archive carries none."""
        return cls(exported_by=UNKNOWN_ORIGIN, exported_from_host=UNKNOWN_ORIGIN)

    @classmethod
    def read(cls, path: Path) -> "Manifest":
        """
        Read a manifest.json file.

        Raises:
            ValueError: If the file is not valid JSON or not a manifest object.
        """
        try:
            payload = json.loads(path.read_text(encoding="utf-8-sig"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid manifest JSON: {e}") from e
        if not isinstance(payload, dict):
            raise ValueError("Manifest must be a JSON object")
        return cls.model_validate(payload)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)

    def write(self, path: Path) -> Path:
        path.write_text(self.to_json(), encoding="utf-8")
        return path


# endregion

__all__ = ["Manifest"]
