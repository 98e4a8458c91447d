from datetime import datetime
import logging
from logging import Logger as T_Logger
from logging.config import dictConfig
from pathlib import Path

from clipcore.config import AppSettings
from clipcore.utils import get_time
from pythonjsonlogger.json import JsonFormatter  # type: ignore # noqa F401

LOGGER_NAME = "clipvault"
ARCHIVE_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


def _logging_config(log_file_path: Path, log_level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
            },
            "standard": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
        },
        "handlers": {
            "file": {
                "class": "logging.FileHandler",
                "filename": str(log_file_path),
                "formatter": "json",
                "level": log_level,
            },
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "level": "WARNING",
            },
        },
        "loggers": {
            LOGGER_NAME: {
                "handlers": ["file", "console"],
                "level": log_level,
                "propagate": False,
            },
        },
    }


def _archives(log_file_path: Path) -> list[Path]:
    return sorted(
        log_file_path.parent.glob(f"{log_file_path.stem}_*{log_file_path.suffix}"),
        key=lambda f: f.stat().st_mtime,
        reverse=True,
    )


def _archive_daily_log_file(log_file_path: Path, system_logger: T_Logger) -> None:
    """Archive the log file daily by renaming it with a timestamp."""
    current_time = get_time()
    archive_files = _archives(log_file_path)
    if archive_files:
        latest_archive = archive_files[0]
        timestamp_str = latest_archive.stem.replace(f"{log_file_path.stem}_", "")
        try:
            timestamp = datetime.strptime(timestamp_str, ARCHIVE_TIMESTAMP_FORMAT)
        except ValueError:
            system_logger.warning(
                "Could not parse timestamp from archive file %s, skipping archiving.",
                latest_archive,
            )
            return
        if (current_time - timestamp).total_seconds() < 24 * 3600:
            return

    if log_file_path.exists() and log_file_path.stat().st_size > 0:
        timestamp = current_time.strftime(ARCHIVE_TIMESTAMP_FORMAT)
        archive_path = log_file_path.with_name(
            f"{log_file_path.stem}_{timestamp}{log_file_path.suffix}"
        )
        log_file_path.rename(archive_path)


def _manage_logfile_archives(
    log_file_path: Path, system_logger: T_Logger, days_to_keep: int = 10
) -> None:
    """Keep only the most recent log archives."""
    archive_files = _archives(log_file_path)
    for archive_file in archive_files[days_to_keep:]:
        system_logger.debug("Deleting old archive file: %s", archive_file)
        archive_file.unlink()


def setup_logging(settings: AppSettings) -> T_Logger:
    """
    Configure the clipvault logger: JSON lines to the log file, warnings to the console.

    The previous day's log file is archived before the file handler opens it.
    """
    log_file_path = settings.log_file
    log_file_path.parent.mkdir(parents=True, exist_ok=True)
    bootstrap_logger = logging.getLogger(LOGGER_NAME).getChild("SYSTEM")
    _archive_daily_log_file(log_file_path, bootstrap_logger)

    dictConfig(_logging_config(log_file_path, settings.log_level.upper()))
    logger: T_Logger = logging.getLogger(LOGGER_NAME)
    system_logger = logger.getChild("SYSTEM")
    _manage_logfile_archives(log_file_path, system_logger, settings.log_days_to_keep)
    system_logger.debug("Logger for %s initialized.", LOGGER_NAME)
    return logger


__all__ = ["LOGGER_NAME", "setup_logging"]
