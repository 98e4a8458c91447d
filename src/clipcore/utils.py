from datetime import datetime, timezone
from logging import Logger
from pathlib import Path
import shutil
from typing import Iterator


def get_time() -> datetime:
    """
    Current local time truncated to whole seconds.

    Returns:
        datetime: A naive local datetime with microsecond set to 0.

    Example:
        >>> get_time().microsecond
        0
    """
    return datetime.now().replace(microsecond=0)


def utc_now() -> datetime:
    """Current UTC time as an aware datetime."""
    return datetime.now(timezone.utc)


def iter_file_chunks(file_path: Path, chunk_size: int = 8192) -> Iterator[bytes]:
    """
    Stream the content of a file in fixed-size chunks.

    Arguments:
        file_path (Path): The file to read.
        chunk_size (int): Bytes per chunk. DEFAULT: 8192

    Yields:
        bytes: Consecutive blocks of the file content.

    Example:
        >>> b"".join(iter_file_chunks(Path("notes.txt")))
        b'...'
    """
    with file_path.open("rb") as f:
        for byte_block in iter(lambda: f.read(chunk_size), b""):
            yield byte_block


def get_file_sha256(file_path: Path) -> str:
    """
    Calculate the SHA256 hash of a file.

    Arguments:
        file_path (Path): The file path to calculate the hash for.

    Returns:
        str: The SHA256 hash as a hexadecimal string.

    Raises:
        RuntimeError: If there is an error reading the file.
    """
    import hashlib

    sha256_hash = hashlib.sha256()
    try:
        for byte_block in iter_file_chunks(file_path):
            sha256_hash.update(byte_block)
        return sha256_hash.hexdigest()
    except OSError as e:
        raise RuntimeError(f"Error calculating SHA256 for file {file_path}: {e}") from e


def sanitize_name(name: str) -> str:
    """
    Make an uploaded file name safe to use as a single folder name.

    Spaces, dots and both directory separators become underscores.

    Example:
        >>> sanitize_name("my export.v2")
        'my_export_v2'
    """
    for char in (" ", ".", "/", "\\"):
        name = name.replace(char, "_")
    return name


def remove_tree(path: Path, logger: Logger) -> bool:
    """
    Best-effort recursive delete of a scratch directory.

    Arguments:
        path (Path): Directory to remove.
        logger (Logger): Logger used to report a failed cleanup.

    Returns:
        bool: True when the directory is gone afterwards.
    """
    if not path.exists():
        return True
    try:
        shutil.rmtree(path)
        return True
    except OSError as e:
        logger.warning("Could not remove directory %s: %s", path.as_posix(), e)
        return False


__all__ = [
    "get_file_sha256",
    "get_time",
    "iter_file_chunks",
    "remove_tree",
    "sanitize_name",
    "utc_now",
]
