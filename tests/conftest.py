import logging
import os
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from clipcore.config import ArchiveSettings, StorageSettings, get_settings
from clipcore.database import Base
from clipcore.models import ClipboardEntry
from clipcore.store import ClipboardStore

PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01"
    b"\x00\x00\x00\x01\x08\x02\x00\x00\x00\x90wS\xde\x00"
    b"\x00\x00\nIDATx\x9cc`\x00\x00\x00\x02\x00\x01"
    b"\x0d\n\x2d\xb4\x00\x00\x00\x00IEND\xaeB`\x82"
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep developer environment variables out of the settings under test."""
    for key in list(os.environ):
        if key.startswith(("CLIPVAULT_", "ARCHIVE_")):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def engine():
    """In-memory engine shared by entity tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine) -> Session:  # pyright: ignore[reportInvalidTypeForm]
    """Create a new database session for each test."""
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("clipvault.tests")


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def storage(tmp_path) -> StorageSettings:
    """Data root layout inside a temporary folder."""
    settings = StorageSettings(data_root=tmp_path / "data")
    settings.ensure_dirs()
    return settings


@pytest.fixture
def other_storage(tmp_path) -> StorageSettings:
    """A second, independent data root (the receiving side of a transfer)."""
    settings = StorageSettings(data_root=tmp_path / "other")
    settings.ensure_dirs()
    return settings


@pytest.fixture
def archive_settings() -> ArchiveSettings:
    return ArchiveSettings()


@pytest.fixture
def master_store(storage):
    store = ClipboardStore.from_settings(storage)
    store.init_db()
    yield store
    store.dispose()


@pytest.fixture
def other_store(other_storage):
    store = ClipboardStore.from_settings(other_storage)
    store.init_db()
    yield store
    store.dispose()


@pytest.fixture
def sample_entries() -> list[ClipboardEntry]:
    """Three captures: plain text, a week-partitioned image and a flat image."""
    return [
        ClipboardEntry(
            text="Hello World",
            username="Tester",
            workstation="WS",
            week="2025-W22",
            timestamp=datetime(2025, 5, 28, 9, 4, 7),
        ),
        ClipboardEntry(
            image_path="images/2025-W22/shot.png",
            username="Tester",
            workstation="WS",
            week="2025-W22",
            timestamp=datetime(2025, 5, 28, 9, 5, 0),
        ),
        ClipboardEntry(
            text="legacy",
            image_path="images/flat.png",
            username="Other",
            workstation="LAPTOP",
            week="2025-W01",
            timestamp=datetime(2025, 1, 2, 12, 0, 0),
        ),
    ]


@pytest.fixture
def seeded_store(master_store, storage, sample_entries, png_bytes) -> ClipboardStore:
    """Master store holding the sample entries with their image files on disk."""
    master_store.add_entries(sample_entries)
    week_dir = storage.main_images_dir / "2025-W22"
    week_dir.mkdir(parents=True, exist_ok=True)
    (week_dir / "shot.png").write_bytes(png_bytes)
    (storage.main_images_dir / "flat.png").write_bytes(png_bytes + b"flat")
    return master_store
