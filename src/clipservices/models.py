# region Imports
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from clipcore.constants import FailureReason, MergeStatus
from clipcore.models import ImportEntry, Manifest

# endregion
# region Pydantic Models


class MergeEvent(BaseModel):
    """
    Outcome of merging one record, yielded by MergeEngine.stream().
    Attributes:
        status (MergeStatus): Created, Conflict (skipped duplicate) or Failed.
        message (Optional[str]): Human readable description of the outcome.
        content_hash (str): Fingerprint of the record as stored (or attempted).
        image_path (Optional[str]): Image reference of the record, if any.
        reason (Optional[FailureReason]): Why the record failed.
    """

    status: MergeStatus = Field(..., description="Per-record merge outcome")
    message: Optional[str] = Field(
        None, description="An optional message providing additional information"
    )
    content_hash: str = Field(..., description="Fingerprint of the record")
    image_path: Optional[str] = Field(None, description="Image reference, if any")
    reason: Optional[FailureReason] = Field(None, description="Failure reason")


class MergeFailure(BaseModel):
    content_hash: str
    image_path: Optional[str] = None
    reason: FailureReason
    message: str = ""


class MergeSummary(BaseModel):
    """
    Counters of one merge run. inserted + skipped + failed equals the number of records
    that were processed.
    """

    success: bool = True
    inserted: int = 0
    skipped: int = 0
    failed: int = 0
    failures: list[MergeFailure] = Field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.inserted + self.skipped + self.failed

    def record(self, event: MergeEvent) -> None:
        """Count one per-record outcome."""
        if event.status is MergeStatus.CREATED:
            self.inserted += 1
        elif event.status is MergeStatus.CONFLICT:
            self.skipped += 1
        else:
            self.failed += 1
            self.failures.append(
                MergeFailure(
                    content_hash=event.content_hash,
                    image_path=event.image_path,
                    reason=event.reason or FailureReason.INSERT_CONFLICT,
                    message=event.message or "",
                )
            )

    def describe(self, name: str) -> str:
        """Operator message for a merged import."""
        return (
            f"'{name}' merged into main database: {self.inserted} inserted, "
            f"{self.skipped} skipped, {self.failed} failed."
        )


class ExportResult(BaseModel):
    """Sealed archive produced by ArchiveBuilder."""

    archive_path: Path
    manifest: Manifest
    missing_images: int = 0


class ImportResult(BaseModel):
    """Archive unpacked, verified and registered by ImportService.upload()."""

    name: str
    folder: Path
    manifest: Manifest
    entry: ImportEntry


# endregion

__all__ = [
    "ExportResult",
    "ImportResult",
    "MergeEvent",
    "MergeFailure",
    "MergeSummary",
]
