# region Docstring
"""
clipcore.hashing
Deterministic content fingerprints and archive seal digests.
Overview:
- Computes the per-record fingerprint that is the sole deduplication key of a record
    store: SHA-256 over "{text}|{image_path}|{timestamp}" with the timestamp rendered to
    the second.
- Computes the seal digest of an archive: a single streaming SHA-256 over the record
    store file and the image files, each prefixed by its name, in a sorted order that
    does not depend on filesystem enumeration.
Contents:
- Functions:
    - format_hash_timestamp(timestamp) -> str:
        Locale-independent "YYYY-MM-DD HH:MM:SS" rendering, sub-second part dropped.
    - compute_content_hash(text, image_path, timestamp) -> str:
        64-char lowercase hex fingerprint of one clipboard record.
    - compute_seal_digest(record_store_path, images_dir, scope) -> str:
        64-char lowercase hex digest over a record store plus its images folder.
    - sealed_image_files(images_dir, scope) -> list[tuple[str, Path]]:
        The (name, path) pairs covered by a digest, in hashing order.
Design Notes:
- Each file contributes its name bytes immediately followed by its content bytes, so a
    name is bound to its content and swapping two file names changes the digest.
- DigestScope.FLAT only covers top-level files of the images folder, which is what the
    capture tool's exporter sealed; images in week subfolders are not covered in that scope.
    DigestScope.RECURSIVE covers the whole tree using POSIX relative paths as names.
"""
# endregion
# region Imports
import hashlib
from datetime import datetime
from pathlib import Path
from typing import Optional

from clipcore.constants import EXPORT_DB_NAME, HASH_TIMESTAMP_FORMAT, DigestScope
from clipcore.utils import iter_file_chunks

# endregion
# region Content Fingerprint


def format_hash_timestamp(timestamp: Optional[datetime]) -> str:
    """
    Render a timestamp the way fingerprints expect it.

    strftime with purely numeric directives does not consult the locale.

    Example:
        >>> format_hash_timestamp(datetime(2025, 5, 28, 9, 4, 7, 912000))
        '2025-05-28 09:04:07'
    """
    if timestamp is None:
        return ""
    return timestamp.strftime(HASH_TIMESTAMP_FORMAT)


def compute_content_hash(
    text: Optional[str], image_path: Optional[str], timestamp: Optional[datetime]
) -> str:
    """
    Compute the fingerprint of a clipboard record.

    Arguments:
        text (Optional[str]): Text payload, None treated as empty.
        image_path (Optional[str]): Relative image reference, None treated as empty.
        timestamp (Optional[datetime]): Capture time, hashed to the second.

    Returns:
        str: 64-char lowercase hex SHA-256.

    Example:
        >>> compute_content_hash("Hello World", None, datetime(2025, 5, 28, 9, 4, 7))
        '...'
    """
    payload = f"{text or ''}|{image_path or ''}|{format_hash_timestamp(timestamp)}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


# endregion
# region Seal Digest


def sealed_image_files(
    images_dir: Path, scope: DigestScope = DigestScope.FLAT
) -> list[tuple[str, Path]]:
    """
    List the image files covered by a seal digest, in hashing order.

    Arguments:
        images_dir (Path): The images folder of an archive.
        scope (DigestScope): FLAT for top-level files only, RECURSIVE for the whole tree.

    Returns:
        list[tuple[str, Path]]: (hashed name, file path) pairs sorted by hashed name.
            Empty when the folder does not exist.
    """
    if not images_dir.is_dir():
        return []
    if DigestScope(scope) is DigestScope.RECURSIVE:
        files = [
            (path.relative_to(images_dir).as_posix(), path)
            for path in images_dir.rglob("*")
            if path.is_file()
        ]
    else:
        files = [(path.name, path) for path in images_dir.iterdir() if path.is_file()]
    return sorted(files, key=lambda item: item[0])


def _append_segment(digest, name: str, file_path: Path) -> None:
    digest.update(name.encode("utf-8"))
    for chunk in iter_file_chunks(file_path):
        digest.update(chunk)


def compute_seal_digest(
    record_store_path: Path,
    images_dir: Path,
    scope: DigestScope = DigestScope.FLAT,
    record_store_name: str = EXPORT_DB_NAME,
) -> str:
    """
    Compute the integrity digest of an archive's contents.

    Arguments:
        record_store_path (Path): The record store file.
        images_dir (Path): The archive's images folder (may be absent).
        scope (DigestScope): Which image files are covered. DEFAULT: FLAT
        record_store_name (str): Name hashed for the record store, always the canonical
            archive name so the digest does not depend on where the file sits on disk.

    Returns:
        str: 64-char lowercase hex SHA-256.

    Raises:
        OSError: If a covered file cannot be read.
    """
    digest = hashlib.sha256()
    _append_segment(digest, record_store_name, record_store_path)
    for name, file_path in sealed_image_files(images_dir, scope):
        _append_segment(digest, name, file_path)
    return digest.hexdigest()


# endregion

__all__ = [
    "compute_content_hash",
    "compute_seal_digest",
    "format_hash_timestamp",
    "sealed_image_files",
]
