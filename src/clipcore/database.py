"""
clipcore.database

Shared SQLAlchemy declarative base and session management for record stores.

Overview:
- Provides a single `declarative_base()` instance (`Base`) inherited by the clipboard
    entry and import entities so every record store shares one metadata registry.
- Includes a utility class generating SQLAlchemy sessions bound to one engine, with an
    explicit dispose step for SQLite files that must be zipped, moved or deleted.

Contents:
- Base:
    Singleton `declarative_base` instance.

- DatabaseSessionGenerator:
    Utility class to generate SQLAlchemy sessions bound to a specific engine.
    - __init__(database_url: str, pooled: bool = True):
        Creates the engine. Non-pooled engines close their DBAPI connection as soon as
        the session using it closes.
    - from_path(path: Path) -> DatabaseSessionGenerator:
        Non-pooled generator for a SQLite file.
    - get_session() -> Session:
        Creates a new synchronous SQLAlchemy session.
    - init_db(tables=None):
        Creates all (or the given) tables.
    - dispose():
        Releases every pooled connection held by the engine.

Design Notes:
- SQLite keeps the database file open for as long as a connection lives; archive
    packaging and import deletion rely on dispose() having run first.
"""

from pathlib import Path
from typing import Optional, Sequence

from sqlalchemy import Table, engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import NullPool


Base = declarative_base()
"""Singleton `declarative_base` instance for ORM models."""


def sqlite_url(path: Path) -> str:
    """SQLAlchemy URL for a SQLite database file."""
    return f"sqlite:///{Path(path).resolve().as_posix()}"


class DatabaseSessionGenerator:
    """
    Utility class to generate SQLAlchemy sessions bound to a specific engine.

    Attributes:
        engine (sqlalchemy.engine.Engine): The SQLAlchemy engine to bind sessions to.
    """

    def __init__(self, database_url: str, pooled: bool = True):
        if pooled:
            self.engine = engine.create_engine(database_url)
        else:
            self.engine = engine.create_engine(database_url, poolclass=NullPool)
        self._session_factory = sessionmaker(bind=self.engine)

    @classmethod
    def from_path(cls, path: Path) -> "DatabaseSessionGenerator":
        """Create a non-pooled generator for a SQLite file."""
        return cls(sqlite_url(path), pooled=False)

    def get_session(self) -> Session:
        """
        Creates a new SQLAlchemy session bound to the configured engine.

        Returns:
            sqlalchemy.orm.Session: A new session instance.
        """
        return self._session_factory()

    def init_db(self, tables: Optional[Sequence[Table]] = None):
        """
        Initializes the database by creating the tables defined in the ORM models.
        """
        Base.metadata.create_all(self.engine, tables=tables)

    def dispose(self) -> None:
        """Close every connection held by the engine's pool."""
        self.engine.dispose()
