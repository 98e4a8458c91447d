import json
import logging

import pytest
from typer.testing import CliRunner

from clipvault.main import app

runner = CliRunner()


@pytest.fixture
def cli_env(monkeypatch, storage, tmp_path):
    monkeypatch.setenv("CLIPVAULT_DATA_ROOT", str(storage.data_root))
    monkeypatch.setenv("CLIPVAULT_LOGS_DIR", str(tmp_path / "logs"))
    yield storage
    cli_logger = logging.getLogger("clipvault")
    for handler in list(cli_logger.handlers):
        cli_logger.removeHandler(handler)
        handler.close()


def test_init(cli_env):
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0, result.output
    assert cli_env.main_db_path.is_file()


def test_export_upload_merge_cycle(cli_env, seeded_store):
    result = runner.invoke(app, ["export", "--username", "tester"])
    assert result.exit_code == 0, result.output
    archives = list(cli_env.exports_dir.glob("clipboard_export_*.zip"))
    assert len(archives) == 1

    result = runner.invoke(app, ["inspect", str(archives[0])])
    assert result.exit_code == 0, result.output
    assert "Verified" in result.output

    result = runner.invoke(app, ["upload", str(archives[0])])
    assert result.exit_code == 0, result.output
    (import_dir,) = list(cli_env.imports_dir.iterdir())

    result = runner.invoke(app, ["imports"])
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["entries", import_dir.name, "--limit", "5"])
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["merge", import_dir.name])
    assert result.exit_code == 0, result.output
    assert "0 inserted, 2 skipped, 0 failed" in result.output

    result = runner.invoke(app, ["delete", import_dir.name])
    assert result.exit_code == 0, result.output
    assert not import_dir.exists()


def test_merge_unknown_import_fails(cli_env):
    result = runner.invoke(app, ["merge", "missing"])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_upload_corrupt_archive_fails(cli_env, tmp_path):
    bad = tmp_path / "bad.zip"
    bad.write_bytes(b"nope")
    result = runner.invoke(app, ["upload", str(bad)])
    assert result.exit_code == 1
    assert "Failed to extract archive" in result.output


def test_log_file_is_json_lines(cli_env, tmp_path):
    bad = tmp_path / "bad.zip"
    bad.write_bytes(b"nope")
    runner.invoke(app, ["upload", str(bad)])
    log_file = tmp_path / "logs" / "clipvault.jsonl"
    lines = log_file.read_text(encoding="utf-8").splitlines()
    assert lines
    records = [json.loads(line) for line in lines]
    assert any(r["levelname"] == "WARNING" for r in records)
    assert all(r["name"].startswith("clipvault") for r in records)
