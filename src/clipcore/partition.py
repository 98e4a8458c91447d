# region Docstring
"""
clipcore.partition
Week partition handling for image references.
Overview:
- Image references stored on records are relative paths of the form
    "images/<file>" or "images/<week>/<file>" where <week> looks like "2025-W22".
- The same extraction logic decides where an image lives on disk for exports, merges
    and previews, so every caller goes through this module.
Contents:
- Functions:
    - extract_week(relative_image_path) -> tuple[bool, str]
    - week_label(timestamp) -> str
    - image_file_path(images_root, relative_image_path) -> Path
    - image_reference(file_name, week, images_folder) -> str
"""
# endregion
# region Imports
import re
from datetime import datetime
from pathlib import PurePosixPath, PureWindowsPath, Path
from typing import Optional

from clipcore.constants import IMAGES_FOLDER_NAME, WEEK_LABEL_FORMAT

# endregion

WEEK_PATH_PATTERN = re.compile(r"^images[\\/](?P<week>\d+-W\d+)[\\/]", re.IGNORECASE)
"""Matches a leading "images/<week>/" segment, either separator, any case."""


def extract_week(relative_image_path: Optional[str]) -> tuple[bool, str]:
    """
    Extract the week partition from a relative image path.

    Arguments:
        relative_image_path (Optional[str]): Image reference as stored on a record.

    Returns:
        tuple[bool, str]: (True, week) on match, else (False, "").

    Example:
        >>> extract_week("images/2025-W22/a.png")
        (True, '2025-W22')
        >>> extract_week("images/a.png")
        (False, '')
    """
    match = WEEK_PATH_PATTERN.match(relative_image_path or "")
    if match is None:
        return False, ""
    return True, match.group("week")


def week_label(timestamp: datetime) -> str:
    """
    Week label used by the capture tool: year plus 7-day block of the year.

    Example:
        >>> week_label(datetime(2025, 1, 7))
        '2025-W01'
        >>> week_label(datetime(2025, 1, 8))
        '2025-W02'
    """
    week = (timestamp.timetuple().tm_yday - 1) // 7 + 1
    return WEEK_LABEL_FORMAT.format(year=timestamp.year, week=week)


def _file_name(relative_image_path: str) -> str:
    # References may come from Windows hosts
    return PureWindowsPath(relative_image_path).name


def image_file_path(images_root: Path, relative_image_path: str) -> Path:
    """
    Locate an image reference inside an images tree.

    Only the week partition and the bare file name are used, so the result always
    stays inside images_root.

    Example:
        >>> image_file_path(Path("/data/images"), "images/2025-W22/a.png")
        PosixPath('/data/images/2025-W22/a.png')
    """
    found, week = extract_week(relative_image_path)
    name = _file_name(relative_image_path)
    return images_root / week / name if found else images_root / name


def image_reference(
    file_name: str, week: str = "", images_folder: str = IMAGES_FOLDER_NAME
) -> str:
    """
    Build the relative reference stored on a record for an image file.

    Example:
        >>> image_reference("a.png", "2025-W22")
        'images/2025-W22/a.png'
    """
    if week:
        return str(PurePosixPath(images_folder, week, file_name))
    return str(PurePosixPath(images_folder, file_name))


__all__ = [
    "WEEK_PATH_PATTERN",
    "extract_week",
    "image_file_path",
    "image_reference",
    "week_label",
]
