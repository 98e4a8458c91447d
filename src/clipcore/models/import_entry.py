# region Docstring
"""
clipcore.models.import_entry
Persistence and domain models for import bookkeeping rows.
Overview:
- An import entry tracks one archive that was unpacked into the imports folder and is
    waiting to be merged (or was already merged) into the master store.
- Rows are created on a successful unpack and removed only when the operator deletes
    the import; merging leaves them in place.
Contents:
- SQLAlchemy entities:
    - ImportEntryEntity: Row in the `imports` table of the master store.
- Pydantic models:
    - ImportEntry: Domain model mirroring the row.
"""
# endregion
# region Imports
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from clipcore.constants import IMPORT_TABLE_NAME
from clipcore.database import Base


# endregion
# region SQLAlchemy Model
class ImportEntryEntity(Base):
    """
    Model representing an unpacked import.
    Attributes:
        id (int): Primary key.
        name (str): Unique import name, also the folder name under imports/.
        imported_at (datetime): When the archive was unpacked (UTC).
        imported_by (Optional[str]): Exporting user named in the manifest.
        path (str): Folder of the import relative to the data root.
        entry_count (int): Record count declared by the manifest.
        workstation (Optional[str]): Exporting host named in the manifest.
    """

    __tablename__ = IMPORT_TABLE_NAME

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    imported_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    imported_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    path: Mapped[str] = mapped_column(String, nullable=False)
    entry_count: Mapped[int] = mapped_column(Integer, default=0)
    workstation: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    def __repr__(self) -> str:
        return f"<ImportEntry(id={self.id}, name='{self.name}', entry_count={self.entry_count})>"

    @classmethod
    def from_model(cls, entry: "ImportEntry") -> "ImportEntryEntity":
        return cls(
            name=entry.name,
            imported_at=entry.imported_at,
            imported_by=entry.imported_by,
            path=entry.path,
            entry_count=entry.entry_count,
            workstation=entry.workstation,
        )

    @property
    def model(self) -> "ImportEntry":
        return ImportEntry.model_validate(self)


# endregion
# region Pydantic Model
class ImportEntry(BaseModel):
    id: Optional[int] = Field(None, description="Row id in the master store")
    name: str = Field(..., description="Unique import name")
    imported_at: datetime = Field(..., description="When the archive was unpacked")
    imported_by: Optional[str] = Field(None, description="Exporting user")
    path: str = Field(..., description="Import folder relative to the data root")
    entry_count: int = Field(0, description="Declared record count")
    workstation: Optional[str] = Field(None, description="Exporting host")

    model_config = ConfigDict(from_attributes=True)


# endregion

__all__ = ["ImportEntryEntity", "ImportEntry"]
