"""
clipcore.models
Centralized imports for Pydantic models and SQLAlchemy entities.

Contents:
- ClipboardEntry / ClipboardEntryEntity / ClipboardFilter: clipboard records.
- ImportEntry / ImportEntryEntity: import bookkeeping rows.
- Manifest: archive manifest.
"""
from .clipboard_entry import (  # noqa: F401
    ClipboardEntry,
    ClipboardEntryEntity,
    ClipboardFilter,
)
from .import_entry import ImportEntry, ImportEntryEntity  # noqa: F401
from .manifest import Manifest  # noqa: F401

entities = [
    "ClipboardEntryEntity",
    "ImportEntryEntity",
]
"""
Entity classes for database persistence.
"""

models = [
    "ClipboardEntry",
    "ClipboardFilter",
    "ImportEntry",
    "Manifest",
]
"""
Pydantic model classes for application logic and I/O.
"""

__all__ = entities + models
