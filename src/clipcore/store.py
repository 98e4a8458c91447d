# region Docstring
"""
clipcore.store
Record store access for master stores and archive record stores.
Overview:
- Wraps a DatabaseSessionGenerator with the operations the archive builder, loader and
    merge engine need: filtered queries in stored order, existence checks by
    fingerprint, inserts and a merge session scope.
- Provides a scoped-resource helper that opens a SQLite record store file and always
    releases it, so the file can be zipped, moved or deleted right after use.
Contents:
- Classes:
    - ClipboardStore:
        - from_path(path) / from_settings(settings)
        - init_db(record_table_only=False)
        - query(entry_filter=None, limit=None) -> list[ClipboardEntry]
        - count() -> int
        - exists(content_hash, session=None) -> bool
        - insert(entry, session) -> ClipboardEntryEntity
        - add_entries(entries) -> int
        - merge_scope() -> ContextManager[Session]
        - dispose()
- Functions:
    - open_store(path, create=False) -> ContextManager[ClipboardStore]
Design Notes:
- merge_scope() is the one logical transaction of a merge. Callers commit each record
    inside it; the scope commits whatever is left on exit, rolls back on error and
    always closes the session.
- No internal locking: only one merge should run against a master store at a time.
"""
# endregion
# region Imports
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from clipcore.config import StorageSettings
from clipcore.database import DatabaseSessionGenerator
from clipcore.models.clipboard_entry import (
    ClipboardEntry,
    ClipboardEntryEntity,
    ClipboardFilter,
)

# endregion
# region ClipboardStore


class ClipboardStore:
    """
    Clipboard record store bound to one database.

    Attributes:
        db (DatabaseSessionGenerator): Session generator of the store.
        database_path (Optional[Path]): SQLite file backing the store, if any.
    """

    def __init__(
        self, db: DatabaseSessionGenerator, database_path: Optional[Path] = None
    ):
        self.db = db
        self.database_path = database_path

    @classmethod
    def from_path(cls, path: Path) -> "ClipboardStore":
        """Store backed by a SQLite file, without connection pooling."""
        return cls(DatabaseSessionGenerator.from_path(path), database_path=Path(path))

    @classmethod
    def from_settings(cls, settings: StorageSettings) -> "ClipboardStore":
        """The master store described by the storage settings."""
        settings.ensure_dirs()
        return cls.from_path(settings.main_db_path)

    def init_db(self, record_table_only: bool = False) -> None:
        """Create the store tables; archive stores only get the record table."""
        tables = [ClipboardEntryEntity.__table__] if record_table_only else None
        self.db.init_db(tables=tables)

    def query(
        self, entry_filter: Optional[ClipboardFilter] = None, limit: Optional[int] = None
    ) -> list[ClipboardEntry]:
        """
        Select entries in stored order.

        Arguments:
            entry_filter (Optional[ClipboardFilter]): Slice to select. DEFAULT: everything
            limit (Optional[int]): Maximum number of entries.

        Returns:
            list[ClipboardEntry]: Detached domain models.
        """
        stmt = select(ClipboardEntryEntity).order_by(ClipboardEntryEntity.id)
        if entry_filter is not None:
            stmt = stmt.where(*entry_filter.clauses())
        if limit is not None:
            stmt = stmt.limit(limit)
        with self.db.get_session() as session:
            return [entity.model for entity in session.scalars(stmt)]

    def count(self) -> int:
        with self.db.get_session() as session:
            return session.scalar(select(func.count(ClipboardEntryEntity.id))) or 0

    def exists(self, content_hash: str, session: Optional[Session] = None) -> bool:
        """True when an entry with this fingerprint is already stored."""
        stmt = (
            select(ClipboardEntryEntity.id)
            .where(ClipboardEntryEntity.content_hash == content_hash)
            .limit(1)
        )
        if session is not None:
            return session.scalar(stmt) is not None
        with self.db.get_session() as own_session:
            return own_session.scalar(stmt) is not None

    def insert(self, entry: ClipboardEntry, session: Session) -> ClipboardEntryEntity:
        """Add a new row for the entry to the session; the caller commits."""
        entity = ClipboardEntryEntity.from_model(entry)
        session.add(entity)
        return entity

    def add_entries(self, entries: Iterable[ClipboardEntry]) -> int:
        """Insert entries in one transaction and return how many were written."""
        count = 0
        with self.db.get_session() as session:
            for entry in entries:
                self.insert(entry, session)
                count += 1
            session.commit()
        return count

    @contextmanager
    def merge_scope(self) -> Iterator[Session]:
        """Session scope of one merge operation."""
        session = self.db.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        """Release every connection to the underlying database."""
        self.db.dispose()


# endregion
# region Scoped Store


@contextmanager
def open_store(path: Path, create: bool = False) -> Iterator[ClipboardStore]:
    """
    Open a SQLite record store file for the duration of a with-block.

    Arguments:
        path (Path): Record store file.
        create (bool): Create the record table (archive layout) before use.

    Yields:
        ClipboardStore: The open store. Its engine is disposed on every exit path.
    """
    store = ClipboardStore.from_path(path)
    try:
        if create:
            path.parent.mkdir(parents=True, exist_ok=True)
            store.init_db(record_table_only=True)
        yield store
    finally:
        store.dispose()


# endregion

__all__ = ["ClipboardStore", "open_store"]
