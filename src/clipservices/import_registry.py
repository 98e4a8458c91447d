# region Imports
from typing import Optional

from sqlalchemy import delete, select

from clipcore.models import ImportEntry, ImportEntryEntity
from clipcore.store import ClipboardStore

# endregion
# region Import Registry


class ImportRegistry:
    """
    Bookkeeping of unpacked imports, kept in the `imports` table of the master store.
    """

    def __init__(self, store: ClipboardStore):
        self.store = store
        self.store.init_db()

    def register(self, entry: ImportEntry) -> ImportEntry:
        """Persist a new import and return it with its row id."""
        with self.store.db.get_session() as session:
            entity = ImportEntryEntity.from_model(entry)
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity.model

    def get(self, name: str) -> Optional[ImportEntry]:
        with self.store.db.get_session() as session:
            entity = session.scalar(
                select(ImportEntryEntity).where(ImportEntryEntity.name == name)
            )
            return entity.model if entity is not None else None

    def exists(self, name: str) -> bool:
        return self.get(name) is not None

    def list(self) -> list[ImportEntry]:
        """All imports, newest first."""
        stmt = select(ImportEntryEntity).order_by(
            ImportEntryEntity.imported_at.desc(), ImportEntryEntity.id.desc()
        )
        with self.store.db.get_session() as session:
            return [entity.model for entity in session.scalars(stmt)]

    def delete(self, name: str) -> bool:
        """Remove an import row; returns False when no such import exists."""
        with self.store.db.get_session() as session:
            result = session.execute(
                delete(ImportEntryEntity).where(ImportEntryEntity.name == name)
            )
            session.commit()
            return result.rowcount > 0


# endregion

__all__ = ["ImportRegistry"]
