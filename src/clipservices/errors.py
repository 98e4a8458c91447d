# region Docstring
"""
clipservices.errors
Exceptions raised by the archive and merge services.
Overview:
- Fatal conditions abort the whole operation and carry the operator-facing reason.
- Per-record merge problems are never raised; they are counted in MergeSummary.
Contents:
- ClipVaultError: Base class, caught by the CLI.
- SourceNotFoundError: Export source store or images folder is missing.
- ArchiveCorruptError: Archive cannot be extracted or lacks its record store.
- IntegrityMismatchError: Seal digest is absent or does not match.
- CorruptDatabaseError: Record store fails the SQLite integrity check.
- ImportNotFoundError: No import is registered under the given name.
"""
# endregion


class ClipVaultError(Exception):
    """Base exception for archive, import and merge failures."""

    pass


class SourceNotFoundError(ClipVaultError):
    """Raised when the export source does not exist."""

    pass


class ArchiveCorruptError(ClipVaultError):
    """Raised when an archive cannot be extracted or is missing its record store."""

    pass


class IntegrityMismatchError(ClipVaultError):
    """Raised when archive contents do not match their seal digest."""

    pass


class CorruptDatabaseError(IntegrityMismatchError):
    """Raised when an archive's record store fails the structural check."""

    pass


class ImportNotFoundError(ClipVaultError):
    """Raised when an import name is not registered."""

    def __init__(self, name: str):
        super().__init__(f"Import '{name}' not found.")
        self.name = name


__all__ = [
    "ArchiveCorruptError",
    "ClipVaultError",
    "CorruptDatabaseError",
    "ImportNotFoundError",
    "IntegrityMismatchError",
    "SourceNotFoundError",
]
