from pathlib import Path

from clipcore.config import AppSettings, ArchiveSettings, StorageSettings, get_settings
from clipcore.constants import DigestScope


def test_storage_layout(tmp_path):
    settings = StorageSettings(data_root=tmp_path)
    assert settings.main_db_path == tmp_path / "main" / "clipboard-history.db"
    assert settings.main_images_dir == tmp_path / "main" / "images"
    assert settings.exports_dir == tmp_path / "exports"
    assert settings.imports_dir == tmp_path / "imports"
    assert settings.database_url.startswith("sqlite:///")

    settings.ensure_dirs()
    for path in (settings.main_images_dir, settings.exports_dir, settings.imports_dir):
        assert path.is_dir()


def test_storage_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("CLIPVAULT_DATA_ROOT", str(tmp_path))
    monkeypatch.setenv("CLIPVAULT_MAIN_DB", "history.db")
    settings = get_settings(StorageSettings)
    assert settings.data_root == Path(tmp_path)
    assert settings.main_db_path.name == "history.db"


def test_get_settings_is_cached():
    assert get_settings(ArchiveSettings) is get_settings(ArchiveSettings)


def test_archive_defaults():
    settings = ArchiveSettings()
    assert settings.verify_on_import
    assert settings.preview_limit == 100
    assert settings.digest_scope is DigestScope.FLAT


def test_nested_image_sealing_from_env(monkeypatch):
    monkeypatch.setenv("ARCHIVE_SEAL_NESTED_IMAGES", "true")
    assert ArchiveSettings().digest_scope is DigestScope.RECURSIVE


def test_app_settings_log_file(tmp_path):
    settings = AppSettings(logs_dir=tmp_path)
    assert settings.log_file == tmp_path / "clipvault.jsonl"
    assert settings.log_level == "info"


def test_yaml_files_are_read(monkeypatch, tmp_path):
    base = tmp_path / "clipvault.yaml"
    base.write_text("ARCHIVE_PREVIEW_LIMIT: 5\nARCHIVE_NOTES: from base\n")
    local = tmp_path / "clipvault.test.yaml"
    local.write_text("ARCHIVE_NOTES: from env file\n")
    monkeypatch.setattr("clipcore.config.factory.CONFIG_FILES", [base, local])

    settings = ArchiveSettings()
    assert settings.preview_limit == 5
    assert settings.notes == "from env file"

    monkeypatch.setenv("ARCHIVE_PREVIEW_LIMIT", "7")
    assert ArchiveSettings().preview_limit == 7
