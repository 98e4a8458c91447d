from datetime import datetime, timezone
from zipfile import ZipFile

import pytest

from clipcore.config import ArchiveSettings
from clipservices import (
    ArchiveBuilder,
    ArchiveCorruptError,
    ClipVaultError,
    ImportNotFoundError,
    ImportService,
    IntegrityMismatchError,
    import_name,
)

NOW = datetime(2025, 5, 28, 9, 4, tzinfo=timezone.utc)


@pytest.fixture
def archive_path(seeded_store, storage, archive_settings, logger):
    result = ArchiveBuilder(archive_settings, logger).build(
        seeded_store, storage.main_images_dir, storage.exports_dir
    )
    return result.archive_path


@pytest.fixture
def service(other_store, other_storage, archive_settings, logger) -> ImportService:
    return ImportService(other_store, other_storage, archive_settings, logger)


@pytest.mark.parametrize(
    "file_name, expected",
    [
        ("my export.zip", "2025-05-28T0904Z_my_export"),
        ("clipboard_export_abc.zip", "2025-05-28T0904Z_clipboard_export_abc"),
        ("C:\\Users\\me\\week.22.zip", "2025-05-28T0904Z_week_22"),
    ],
)
def test_import_name(file_name, expected):
    assert import_name(file_name, NOW) == expected


def test_upload_registers_import(service, archive_path, other_storage):
    result = service.upload(archive_path, original_name="my export.zip", now=NOW)
    assert result.name == "2025-05-28T0904Z_my_export"
    assert result.folder == other_storage.imports_dir / result.name
    assert (result.folder / "clipboard-history.db").is_file()
    assert result.entry.entry_count == 3
    assert result.entry.path == f"imports/{result.name}"
    assert [i.name for i in service.list_imports()] == [result.name]


def test_upload_same_name_twice_gets_suffix(service, archive_path):
    first = service.upload(archive_path, original_name="a.zip", now=NOW)
    second = service.upload(archive_path, original_name="a.zip", now=NOW)
    assert second.name == f"{first.name}_2"


def test_upload_tampered_archive_leaves_nothing(service, tmp_path, other_storage):
    bad = tmp_path / "bad.zip"
    bad.write_bytes(b"garbage")
    with pytest.raises(ArchiveCorruptError):
        service.upload(bad, now=NOW)
    assert list(other_storage.imports_dir.iterdir()) == []
    assert service.list_imports() == []


def _tamper(archive_path):
    with ZipFile(archive_path) as archive:
        members = {n: archive.read(n) for n in archive.namelist()}
    members["images/flat.png"] = b"changed"
    with ZipFile(archive_path, "w") as archive:
        for name, data in members.items():
            archive.writestr(name, data)


def test_upload_integrity_failure_removes_folder(
    other_store, other_storage, logger, archive_path
):
    _tamper(archive_path)
    service = ImportService(other_store, other_storage, ArchiveSettings(), logger)
    with pytest.raises(IntegrityMismatchError):
        service.upload(archive_path, now=NOW)
    assert list(other_storage.imports_dir.iterdir()) == []
    assert service.list_imports() == []


def test_entries_preview(service, archive_path):
    name = service.upload(archive_path, now=NOW).name
    assert [e.text for e in service.entries(name)] == ["Hello World", None, "legacy"]
    assert len(service.entries(name, limit=1)) == 1


def test_merge_and_remerge(service, archive_path, other_store):
    name = service.upload(archive_path, now=NOW).name
    first = service.merge(name)
    assert (first.inserted, first.skipped, first.failed) == (3, 0, 0)
    second = service.merge(name)
    assert (second.inserted, second.skipped, second.failed) == (0, 3, 0)
    assert other_store.count() == 3
    assert [i.name for i in service.list_imports()] == [name]


def test_merge_reverifies_folder(service, archive_path):
    result = service.upload(archive_path, now=NOW)
    (result.folder / "images" / "flat.png").write_bytes(b"changed on disk")
    with pytest.raises(IntegrityMismatchError):
        service.merge(result.name)


def test_unverified_upload_cannot_be_merged(
    other_store, other_storage, logger, archive_path
):
    _tamper(archive_path)
    service = ImportService(
        other_store, other_storage, ArchiveSettings(verify_on_import=False), logger
    )
    name = service.upload(archive_path, now=NOW).name
    with pytest.raises(IntegrityMismatchError):
        service.merge(name)
    assert other_store.count() == 0


def test_delete_removes_folder_and_row(service, archive_path):
    result = service.upload(archive_path, now=NOW)
    service.delete(result.name)
    assert not result.folder.exists()
    assert service.list_imports() == []


def test_delete_keeps_row_when_folder_cannot_be_removed(
    service, archive_path, monkeypatch
):
    result = service.upload(archive_path, now=NOW)

    def locked(path, *args, **kwargs):
        raise PermissionError(13, "in use", str(path))

    monkeypatch.setattr("clipservices.import_service.shutil.rmtree", locked)
    with pytest.raises(ClipVaultError, match="Could not delete import"):
        service.delete(result.name)
    assert [i.name for i in service.list_imports()] == [result.name]
    assert result.folder.is_dir()


def test_unknown_import(service):
    with pytest.raises(ImportNotFoundError):
        service.merge("nope")
    with pytest.raises(ImportNotFoundError):
        service.delete("nope")
    with pytest.raises(ImportNotFoundError):
        service.entries("nope")


def test_list_imports_newest_first(service, archive_path):
    older = service.upload(archive_path, original_name="a.zip", now=NOW)
    newer = service.upload(
        archive_path,
        original_name="b.zip",
        now=datetime(2025, 6, 1, 8, 0, tzinfo=timezone.utc),
    )
    assert [i.name for i in service.list_imports()] == [newer.name, older.name]
