"""
clipservices
Archive export, import and merge services built on clipcore.

Contents:
- ArchiveBuilder: sealed archive export.
- ArchiveLoader / LoadedArchive / check_record_store: extraction and verification.
- MergeEngine: per-record reconciliation into a master store.
- ImportRegistry / ImportService: lifecycle of uploaded archives.
- errors: fatal error taxonomy.
"""
from .archive_builder import ArchiveBuilder  # noqa: F401
from .archive_loader import ArchiveLoader, LoadedArchive, check_record_store  # noqa: F401
from .errors import (  # noqa: F401
    ArchiveCorruptError,
    ClipVaultError,
    CorruptDatabaseError,
    ImportNotFoundError,
    IntegrityMismatchError,
    SourceNotFoundError,
)
from .import_registry import ImportRegistry  # noqa: F401
from .import_service import ImportService, import_name  # noqa: F401
from .merge_engine import MergeEngine  # noqa: F401
from .models import (  # noqa: F401
    ExportResult,
    ImportResult,
    MergeEvent,
    MergeFailure,
    MergeSummary,
)

__all__ = [
    "ArchiveBuilder",
    "ArchiveCorruptError",
    "ArchiveLoader",
    "ClipVaultError",
    "CorruptDatabaseError",
    "ExportResult",
    "ImportNotFoundError",
    "ImportRegistry",
    "ImportResult",
    "ImportService",
    "IntegrityMismatchError",
    "LoadedArchive",
    "MergeEngine",
    "MergeEvent",
    "MergeFailure",
    "MergeSummary",
    "SourceNotFoundError",
    "check_record_store",
    "import_name",
]
