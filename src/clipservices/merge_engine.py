# region Docstring
"""
clipservices.merge_engine
Service reconciling archive records into the master store.
Overview:
- Walks the records of a loaded archive in stored order and, for each one, either skips
    it (fingerprint already present), fails it (image missing, copy error, insert
    error) or inserts it after copying its image into the master images tree.
- Yields one MergeEvent per record so callers can stream progress, and folds the events
    into a MergeSummary.
Contents:
- Service Classes:
    - MergeEngine:
        - stream(records, uploaded_images_dir) -> Generator[MergeEvent]
        - merge_records(records, uploaded_images_dir) -> MergeSummary
        - merge(loaded) -> MergeSummary
Design Notes:
- Duplicate detection uses the fingerprint computed from the record as stored in the
    archive. After an image is copied the reference is rewritten to the destination
    path and the fingerprint follows it. A rewritten fingerprint that collides with a
    stored one is rejected by the store's unique constraint and counts as failed.
- Images are copied into the same week partition and never overwrite an existing file.
- One session scope covers the whole merge; each record is committed on its own and a
    failed insert is rolled back alone. Record ids are never carried over.
- Only one merge should run against a master store at a time; nothing here locks.
"""
# endregion
# region Imports
import shutil
from logging import Logger
from pathlib import Path
from typing import Generator, Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clipcore.constants import IMAGES_FOLDER_NAME, FailureReason, MergeStatus
from clipcore.models import ClipboardEntry
from clipcore.partition import extract_week, image_file_path, image_reference
from clipcore.store import ClipboardStore

from .archive_loader import TAMPERED_MESSAGE, LoadedArchive
from .errors import IntegrityMismatchError
from .models import MergeEvent, MergeSummary

# endregion
# region Merge Engine


class MergeEngine:
    """
    Merges archive records into a master store and its images tree.

    Attributes:
        store (ClipboardStore): The master store.
        images_dir (Path): Root of the master images tree.
    """

    def __init__(self, store: ClipboardStore, images_dir: Path, logger: Logger):
        self.store = store
        self.images_dir = images_dir
        self.logger = logger.getChild(self.__class__.__name__)

    def stream(
        self, records: Iterable[ClipboardEntry], uploaded_images_dir: Path
    ) -> Generator[MergeEvent, None, None]:
        """
        Merge records one at a time; yields the outcome of each.

        Arguments:
            records (Iterable[ClipboardEntry]): Archive records in stored order.
            uploaded_images_dir (Path): The archive's images folder.

        Yields:
            MergeEvent: Created, Conflict or Failed per record.
        """
        with self.store.merge_scope() as session:
            for record in records:
                event = self._merge_record(record, uploaded_images_dir, session)
                if event.status is MergeStatus.FAILED:
                    self.logger.warning(event.message)
                else:
                    self.logger.info(event.message)
                yield event

    def merge_records(
        self, records: Iterable[ClipboardEntry], uploaded_images_dir: Path
    ) -> MergeSummary:
        """Merge records and return the final counters."""
        summary = MergeSummary()
        for event in self.stream(records, uploaded_images_dir):
            summary.record(event)
        self.logger.info(
            "Merge finished: %d inserted, %d skipped, %d failed",
            summary.inserted,
            summary.skipped,
            summary.failed,
        )
        return summary

    def merge(self, loaded: LoadedArchive) -> MergeSummary:
        """
        Merge a loaded archive.

        Raises:
            IntegrityMismatchError: Unless both verification gates passed, including
                for archives loaded without verification.
        """
        if not loaded.mergeable:
            raise IntegrityMismatchError(TAMPERED_MESSAGE)
        records = loaded.records()
        self.logger.info(
            "Merging %d records from %s", len(records), loaded.root.as_posix()
        )
        return self.merge_records(records, loaded.images_dir)

    def _merge_record(
        self, record: ClipboardEntry, uploaded_images_dir: Path, session: Session
    ) -> MergeEvent:
        fingerprint = record.content_hash
        if self.store.exists(fingerprint, session):
            return MergeEvent(
                status=MergeStatus.CONFLICT,
                message=f"Entry {fingerprint} already exists.",
                content_hash=fingerprint,
                image_path=record.image_path,
            )

        entry = record.with_changes(id=None)
        if record.image_path:
            source = image_file_path(uploaded_images_dir, record.image_path)
            if not source.is_file():
                return self._failed(
                    record,
                    FailureReason.MISSING_IMAGE,
                    f"Image {record.image_path} missing for entry {fingerprint}.",
                )
            _, week = extract_week(record.image_path)
            target = image_file_path(self.images_dir, record.image_path)
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                if not target.exists():
                    shutil.copy2(source, target)
            except OSError as e:
                return self._failed(
                    record,
                    FailureReason.COPY_ERROR,
                    f"Could not copy image {record.image_path}: {e}",
                )
            entry = entry.with_changes(
                image_path=image_reference(target.name, week, IMAGES_FOLDER_NAME)
            )

        try:
            self.store.insert(entry, session)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            return self._failed(
                entry,
                FailureReason.INSERT_CONFLICT,
                f"Could not insert entry {entry.content_hash}: {e}",
            )
        return MergeEvent(
            status=MergeStatus.CREATED,
            message=f"Inserted entry {entry.content_hash}.",
            content_hash=entry.content_hash,
            image_path=entry.image_path,
        )

    @staticmethod
    def _failed(
        record: ClipboardEntry, reason: FailureReason, message: str
    ) -> MergeEvent:
        return MergeEvent(
            status=MergeStatus.FAILED,
            message=message,
            content_hash=record.content_hash,
            image_path=record.image_path,
            reason=reason,
        )


# endregion

__all__ = ["MergeEngine"]
