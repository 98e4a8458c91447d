import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError
from sqlalchemy import select

from clipcore.constants import DigestScope
from clipcore.hashing import compute_content_hash
from clipcore.models import (
    ClipboardEntry,
    ClipboardEntryEntity,
    ClipboardFilter,
    Manifest,
)

TIMESTAMP = datetime(2025, 5, 28, 9, 4, 7)


def test_entry_content_hash_follows_fields():
    entry = ClipboardEntry(text="Hello World", timestamp=TIMESTAMP)
    assert entry.content_hash == compute_content_hash("Hello World", None, TIMESTAMP)
    moved = entry.with_changes(image_path="images/a.png")
    assert moved.content_hash == compute_content_hash(
        "Hello World", "images/a.png", TIMESTAMP
    )
    assert entry.image_path is None


def test_entry_is_frozen():
    entry = ClipboardEntry(text="x", timestamp=TIMESTAMP)
    with pytest.raises(ValidationError):
        entry.text = "y"


def test_capture_sets_week_and_second_precision():
    entry = ClipboardEntry.capture(text="x", timestamp=TIMESTAMP)
    assert entry.week == "2025-W22"
    assert ClipboardEntry.capture(text="x").timestamp.microsecond == 0


def test_entity_round_trip(db_session):
    entry = ClipboardEntry(
        id=42, text="Hello", username="Tester", week="2025-W22", timestamp=TIMESTAMP
    )
    entity = ClipboardEntryEntity.from_model(entry)
    db_session.add(entity)
    db_session.commit()

    stored = db_session.scalar(select(ClipboardEntryEntity))
    assert stored.id == 1
    assert stored.content_hash == entry.content_hash
    model = stored.model
    assert model.text == "Hello"
    assert model.content_hash == stored.content_hash


def test_entity_update_recomputes_hash(db_session):
    entity = ClipboardEntryEntity.from_model(
        ClipboardEntry(text="a", timestamp=TIMESTAMP)
    )
    db_session.add(entity)
    db_session.commit()

    entity.update(image_path="images/2025-W22/a.png")
    assert entity.content_hash == compute_content_hash(
        "a", "images/2025-W22/a.png", TIMESTAMP
    )
    before = entity.content_hash
    entity.update(username="someone")
    assert entity.content_hash == before


def test_entity_update_rejects_hash_and_unknown_fields():
    entity = ClipboardEntryEntity.from_model(ClipboardEntry(text="a", timestamp=TIMESTAMP))
    with pytest.raises(AttributeError):
        entity.update(content_hash="0" * 64)
    with pytest.raises(AttributeError):
        entity.update(colour="red")


def test_entity_unique_content_hash(db_session):
    from sqlalchemy.exc import IntegrityError

    entry = ClipboardEntry(text="dup", timestamp=TIMESTAMP)
    db_session.add(ClipboardEntryEntity.from_model(entry))
    db_session.commit()
    db_session.add(ClipboardEntryEntity.from_model(entry))
    with pytest.raises(IntegrityError):
        db_session.commit()


def test_filter_blank_values_are_ignored():
    assert ClipboardFilter(q="  ", username="").clauses() == []


def test_manifest_serializes_camel_case():
    manifest = Manifest(
        exported_by="tester",
        exported_from_host="ws",
        record_count=3,
        integrity_digest="ABC",
    )
    payload = json.loads(manifest.to_json())
    assert payload["exportedBy"] == "tester"
    assert payload["exportedFromHost"] == "ws"
    assert payload["recordStoreFileName"] == "clipboard-history.db"
    assert payload["imagesFolderName"] == "images"
    assert payload["recordCount"] == 3
    assert payload["integrityDigest"] == "abc"
    assert payload["integrityScope"] == "flat"
    assert payload["formatVersion"] == "1.0"


def test_manifest_round_trip(tmp_path):
    manifest = Manifest(
        exported_by="tester",
        exported_from_host="ws",
        integrity_scope=DigestScope.RECURSIVE,
    )
    path = manifest.write(tmp_path / "manifest.json")
    assert Manifest.read(path) == manifest


def test_manifest_reads_legacy_keys(tmp_path):
    path = tmp_path / "manifest.json"
    path.write_text(
        json.dumps(
            {
                "Version": "1.0",
                "ExportedByUser": "DOMAIN\\tester",
                "Workstation": "WS01",
                "ExportedAtUtc": "2025-05-28T09:04:07.1234567Z",
                "ImagesFolder": "images",
                "DatabaseFile": "clipboard-history.db",
                "EntryCount": 12,
                "Notes": "Clipboard export created automatically",
                "SourceHash": "ABCDEF",
            }
        ),
        encoding="utf-8",
    )
    manifest = Manifest.read(path)
    assert manifest.exported_by == "DOMAIN\\tester"
    assert manifest.exported_from_host == "WS01"
    assert manifest.record_count == 12
    assert manifest.integrity_digest == "abcdef"
    assert manifest.integrity_scope is DigestScope.FLAT
    assert manifest.exported_at_utc == datetime(
        2025, 5, 28, 9, 4, 7, 123456, tzinfo=timezone.utc
    )


def test_manifest_null_names_fall_back_to_defaults():
    manifest = Manifest.model_validate(
        {"imagesFolderName": None, "recordStoreFileName": ""}
    )
    assert manifest.images_folder_name == "images"
    assert manifest.record_store_file_name == "clipboard-history.db"


@pytest.mark.parametrize("content", ["not json", "[1, 2]"])
def test_manifest_read_rejects_invalid_files(tmp_path, content):
    path = tmp_path / "manifest.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ValueError):
        Manifest.read(path)


def test_unknown_manifest():
    manifest = Manifest.unknown()
    assert manifest.exported_by == "Unknown"
    assert manifest.exported_from_host == "Unknown"
    assert manifest.integrity_digest is None
