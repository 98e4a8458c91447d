# region Docstring
"""
clipcore.config.factory
Settings base class and cached settings factory for clipvault.
Overview:
- Every clipvault settings class reads, in order of precedence, environment variables,
    the .env file in the application root and the clipvault YAML files.
Contents:
- Constants:
    - CONFIG_FILES: clipvault.yaml, then clipvault.{env}.yaml, both under APP_ROOT.
- Classes:
    - FactoryBaseSettings:
        Priority (highest to lowest):
            1. Environment variables (CLIPVAULT_*, ARCHIVE_*)
            2. .env file values
            3. clipvault.{env}.yaml over clipvault.yaml
            4. Init kwargs / field defaults
- Functions:
    - get_settings(settings_cls) -> settings instance, LRU cached.
Design notes:
- Init kwargs rank below the environment so an operator's variables always win; tests
    clear CLIPVAULT_* and ARCHIVE_* before building settings.
- Call get_settings.cache_clear() after changing the environment.
"""
# endregion
# region Imports
from functools import lru_cache
from pathlib import Path
from typing import Type, TypeVar

from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from .base import APP_ENV, APP_ROOT

# endregion
# region FactoryBaseSettings Class
T = TypeVar("T", bound=BaseSettings)

CONFIG_FILES: list[Path] = [
    APP_ROOT / "clipvault.yaml",
    APP_ROOT / f"clipvault.{APP_ENV}.yaml",
]
"""[list[Path]] YAML files read by every settings class; later files win."""


class FactoryBaseSettings(BaseSettings):
    """
    Base for clipvault settings: environment > .env > YAML > defaults.
    """

    model_config = SettingsConfigDict(
        env_file=APP_ROOT / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        yaml_settings = YamlConfigSettingsSource(settings_cls, yaml_file=CONFIG_FILES)
        return (
            env_settings,
            dotenv_settings,
            yaml_settings,
            init_settings,
        )


# endregion
# region get_settings Factory Function


@lru_cache
def get_settings(settings_cls: Type[T]) -> T:
    """
    Load a clipvault settings class once per process.
    """
    return settings_cls()


# endregion

__all__ = ["CONFIG_FILES", "FactoryBaseSettings", "get_settings"]
