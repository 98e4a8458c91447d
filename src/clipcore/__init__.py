"""
Core clipboard archive package.

This package contains the deterministic hashing primitives, week partition
helpers, record models and the SQLAlchemy-backed record store used by the
archive builder, loader and merge engine in clipservices.

Settings are managed with pydantic-settings, supporting environment variables,
.env files and YAML files.
"""

from . import constants  # noqa: F401
from .config import (  # noqa: F401
    AppSettings,
    ArchiveSettings,
    StorageSettings,
    get_settings,
)
