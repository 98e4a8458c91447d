import hashlib
from datetime import datetime

import pytest

from clipcore.constants import EXPORT_DB_NAME, DigestScope
from clipcore.hashing import (
    compute_content_hash,
    compute_seal_digest,
    format_hash_timestamp,
    sealed_image_files,
)

TIMESTAMP = datetime(2025, 5, 28, 9, 4, 7)


def _sha256(payload: bytes) -> str:
    return hashlib.sha256(payload).hexdigest()


def test_content_hash_matches_documented_layout():
    expected = _sha256(b"Hello World||2025-05-28 09:04:07")
    assert compute_content_hash("Hello World", None, TIMESTAMP) == expected


def test_content_hash_is_lowercase_hex():
    digest = compute_content_hash("x", "images/a.png", TIMESTAMP)
    assert len(digest) == 64
    assert digest == digest.lower()
    int(digest, 16)


def test_content_hash_ignores_sub_second_precision():
    later = TIMESTAMP.replace(microsecond=912000)
    assert compute_content_hash("a", None, later) == compute_content_hash(
        "a", None, TIMESTAMP
    )


def test_content_hash_treats_none_as_empty():
    assert compute_content_hash(None, None, TIMESTAMP) == compute_content_hash(
        "", "", TIMESTAMP
    )


@pytest.mark.parametrize(
    "changed",
    [
        ("Hello World!", None, TIMESTAMP),
        ("Hello World", "images/a.png", TIMESTAMP),
        ("Hello World", None, datetime(2025, 5, 28, 9, 4, 8)),
    ],
)
def test_content_hash_changes_with_each_input(changed):
    assert compute_content_hash(*changed) != compute_content_hash(
        "Hello World", None, TIMESTAMP
    )


def test_content_hash_is_unicode_safe():
    expected = _sha256("héllo ✓||2025-05-28 09:04:07".encode("utf-8"))
    assert compute_content_hash("héllo ✓", None, TIMESTAMP) == expected


def test_format_hash_timestamp():
    assert format_hash_timestamp(TIMESTAMP) == "2025-05-28 09:04:07"
    assert format_hash_timestamp(None) == ""


@pytest.fixture
def sealed_folder(tmp_path):
    db = tmp_path / "store.db"
    db.write_bytes(b"record-store-bytes")
    images = tmp_path / "images"
    images.mkdir()
    (images / "b.png").write_bytes(b"BBB")
    (images / "a.png").write_bytes(b"AAA")
    (images / "2025-W22").mkdir()
    (images / "2025-W22" / "c.png").write_bytes(b"CCC")
    return db, images


def test_seal_digest_flat_layout(sealed_folder):
    db, images = sealed_folder
    expected = _sha256(
        EXPORT_DB_NAME.encode()
        + b"record-store-bytes"
        + b"a.png"
        + b"AAA"
        + b"b.png"
        + b"BBB"
    )
    assert compute_seal_digest(db, images) == expected


def test_seal_digest_recursive_layout(sealed_folder):
    db, images = sealed_folder
    expected = _sha256(
        EXPORT_DB_NAME.encode()
        + b"record-store-bytes"
        + b"2025-W22/c.png"
        + b"CCC"
        + b"a.png"
        + b"AAA"
        + b"b.png"
        + b"BBB"
    )
    assert compute_seal_digest(db, images, DigestScope.RECURSIVE) == expected


def test_seal_digest_does_not_depend_on_record_store_location(sealed_folder, tmp_path):
    db, images = sealed_folder
    moved = tmp_path / "elsewhere.sqlite"
    moved.write_bytes(db.read_bytes())
    assert compute_seal_digest(moved, images) == compute_seal_digest(db, images)


def test_seal_digest_detects_content_change(sealed_folder):
    db, images = sealed_folder
    before = compute_seal_digest(db, images)
    (images / "a.png").write_bytes(b"AAa")
    assert compute_seal_digest(db, images) != before


def test_seal_digest_detects_renamed_file(sealed_folder):
    db, images = sealed_folder
    before = compute_seal_digest(db, images)
    (images / "b.png").rename(images / "z.png")
    assert compute_seal_digest(db, images) != before


def test_flat_seal_ignores_week_subfolders(sealed_folder):
    db, images = sealed_folder
    before = compute_seal_digest(db, images, DigestScope.FLAT)
    recursive = compute_seal_digest(db, images, DigestScope.RECURSIVE)
    (images / "2025-W22" / "c.png").write_bytes(b"tampered")
    assert compute_seal_digest(db, images, DigestScope.FLAT) == before
    assert compute_seal_digest(db, images, DigestScope.RECURSIVE) != recursive


def test_seal_digest_without_images_folder(tmp_path):
    db = tmp_path / "store.db"
    db.write_bytes(b"data")
    expected = _sha256(EXPORT_DB_NAME.encode() + b"data")
    assert compute_seal_digest(db, tmp_path / "missing") == expected


def test_sealed_image_files_sorted_ordinally(tmp_path):
    for name in ("b.png", "B.png", "a.png"):
        (tmp_path / name).write_bytes(b"x")
    names = [name for name, _ in sealed_image_files(tmp_path)]
    assert names == ["B.png", "a.png", "b.png"]
