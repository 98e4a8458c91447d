# region Docstring
"""
clipcore.models.clipboard_entry
Persistence and domain models for clipboard history records.
Overview:
- Provides a SQLAlchemy entity persisting one clipboard event in the `clip` table of a
    record store, with the content fingerprint as a unique column.
- Provides an immutable Pydantic model mirroring the entity for safe I/O, whose
    fingerprint is always derived from its current field values.
- Provides the filter model used to select a slice of a store for export.
Contents:
- SQLAlchemy entities:
    - ClipboardEntryEntity:
        Stores text payload, image reference, origin (username, workstation, week),
        timestamp and content_hash. `from_model()` builds a new row from a
        ClipboardEntry; `update()` assigns fields and recomputes content_hash in the
        same call; `.model` converts back to the Pydantic model.
- Pydantic models:
    - ClipboardEntry:
        Frozen domain model. `content_hash` is a computed property, never cached.
        `with_changes()` returns a new model; `capture()` builds an entry the way the
        capture tool does (timestamp now, week label from timestamp).
    - ClipboardFilter:
        Export filter: free text, username, workstation, week, date range.
Design notes:
- Column names match the capture tool's schema (`data`, `image_path`, ...) so stores
    written by either side can be exchanged.
- content_hash is the store's sole deduplication key; the unique constraint makes the
    store reject a duplicate even when a caller skips the existence check.
"""
# endregion
# region Imports
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql.elements import ColumnElement

from clipcore.constants import RECORD_TABLE_NAME
from clipcore.database import Base
from clipcore.hashing import compute_content_hash
from clipcore.partition import week_label
from clipcore.utils import get_time

# endregion
# region SQLAlchemy Model
HASHED_FIELDS = frozenset({"text", "image_path", "timestamp"})


class ClipboardEntryEntity(Base):
    """
    Model representing clipboard history entries.
    Attributes:
        id (int): Primary key.
        text (Optional[str]): The clipboard text, stored in column `data`.
        image_path (Optional[str]): Relative image reference.
        username (Optional[str]): User that copied the content.
        workstation (Optional[str]): Host the content was copied on.
        week (Optional[str]): Week label of the capture.
        timestamp (datetime): When the content was copied.
        content_hash (str): Fingerprint of (text, image_path, timestamp).
    """

    __tablename__ = RECORD_TABLE_NAME

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    text: Mapped[Optional[str]] = mapped_column("data", Text, nullable=True)
    image_path: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    username: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    workstation: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    week: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.current_timestamp()
    )
    content_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<ClipboardEntry(id={self.id}, content_hash='{self.content_hash}', timestamp={self.timestamp})>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ClipboardEntryEntity):
            return NotImplemented
        return self.id == other.id and self.content_hash == other.content_hash

    def __hash__(self) -> int:
        return hash((self.id, self.content_hash))

    @classmethod
    def from_model(cls, entry: "ClipboardEntry") -> "ClipboardEntryEntity":
        """Build a new, unsaved row from a domain model. The id is never carried over."""
        return cls(
            text=entry.text,
            image_path=entry.image_path,
            username=entry.username,
            workstation=entry.workstation,
            week=entry.week,
            timestamp=entry.timestamp,
            content_hash=entry.content_hash,
        )

    def refresh_content_hash(self) -> str:
        """Recompute content_hash from the current field values."""
        self.content_hash = compute_content_hash(
            self.text, self.image_path, self.timestamp
        )
        return self.content_hash

    def update(self, **changes: Any) -> None:
        """
        Assign fields and keep the fingerprint in step with them.

        Arguments:
            **changes: Any of text, image_path, username, workstation, week, timestamp.

        Raises:
            AttributeError: If a field name is unknown or is content_hash/id.
        """
        for name, value in changes.items():
            if name in ("id", "content_hash") or not hasattr(self, name):
                raise AttributeError(f"Cannot update field '{name}'")
            setattr(self, name, value)
        if HASHED_FIELDS.intersection(changes):
            self.refresh_content_hash()

    @property
    def model(self) -> "ClipboardEntry":
        return ClipboardEntry(
            id=self.id,
            text=self.text,
            image_path=self.image_path,
            username=self.username,
            workstation=self.workstation,
            week=self.week,
            timestamp=self.timestamp,
        )


# endregion
# region Pydantic Model
class ClipboardEntry(BaseModel):
    id: Optional[int] = Field(
        None, description="The row id in the store the entry was read from"
    )
    text: Optional[str] = Field(None, description="The clipboard text payload")
    image_path: Optional[str] = Field(
        None, description="Relative image reference, optionally week-partitioned"
    )
    username: Optional[str] = Field(None, description="User that copied the content")
    workstation: Optional[str] = Field(
        None, description="Host the content was copied on"
    )
    week: Optional[str] = Field(None, description="Week label of the capture")
    timestamp: datetime = Field(
        default_factory=get_time, description="When the content was copied"
    )

    model_config = ConfigDict(
        frozen=True,
        from_attributes=True,
        json_schema_extra={
            "examples": [
                {
                    "id": 1,
                    "text": "Hello World",
                    "image_path": None,
                    "username": "Tester",
                    "workstation": "WS",
                    "week": "2025-W22",
                    "timestamp": "2025-05-28T09:04:07",
                }
            ]
        },
    )

    @computed_field
    @property
    def content_hash(self) -> str:
        """Fingerprint derived from text, image_path and timestamp."""
        return compute_content_hash(self.text, self.image_path, self.timestamp)

    def with_changes(self, **changes: Any) -> "ClipboardEntry":
        """Return a new entry with the given fields replaced."""
        values = self.model_dump(exclude={"content_hash"})
        values.update(changes)
        return type(self)(**values)

    @classmethod
    def capture(
        cls,
        text: Optional[str] = None,
        image_path: Optional[str] = None,
        username: Optional[str] = None,
        workstation: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> "ClipboardEntry":
        """Build a new entry stamped now (to the second) with its capture week."""
        timestamp = timestamp or get_time()
        return cls(
            text=text,
            image_path=image_path,
            username=username,
            workstation=workstation,
            week=week_label(timestamp),
            timestamp=timestamp,
        )


class ClipboardFilter(BaseModel):
    """
    Selects a slice of a record store. Blank values are ignored; text matches are
    case-insensitive substring matches.
    """

    q: Optional[str] = Field(None, description="Substring of text or image_path")
    username: Optional[str] = None
    workstation: Optional[str] = None
    week: Optional[str] = None
    start_date: Optional[datetime] = Field(None, description="Inclusive lower bound")
    end_date: Optional[datetime] = Field(None, description="Inclusive upper bound")

    def clauses(self) -> list[ColumnElement[bool]]:
        """SQLAlchemy WHERE clauses for this filter."""
        entity = ClipboardEntryEntity

        def _contains(column, value: str):
            return func.lower(column, type_=String).contains(
                value.lower(), autoescape=True
            )

        clauses: list[ColumnElement[bool]] = []
        if self.q and self.q.strip():
            clauses.append(
                _contains(entity.text, self.q) | _contains(entity.image_path, self.q)
            )
        if self.username and self.username.strip():
            clauses.append(_contains(entity.username, self.username))
        if self.workstation and self.workstation.strip():
            clauses.append(_contains(entity.workstation, self.workstation))
        if self.week and self.week.strip():
            clauses.append(_contains(entity.week, self.week))
        if self.start_date is not None:
            clauses.append(entity.timestamp >= self.start_date)
        if self.end_date is not None:
            clauses.append(entity.timestamp <= self.end_date)
        return clauses


# endregion

__all__ = ["ClipboardEntryEntity", "ClipboardEntry", "ClipboardFilter"]
