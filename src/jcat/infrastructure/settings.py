"""jcat runtime settings, loaded with ``pydantic-settings``.

Later sources win:

1. ``settings.toml`` in the working directory (flat keys, same names as the fields)
2. ``.env`` in the working directory
3. ``JCAT_*`` environment variables
4. keyword overrides (``Settings.load(...)``, CLI flags)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, TomlConfigSettingsSource

from jcat.infrastructure.io.codecs import CompressionKind

ENV_PREFIX = "JCAT_"
SETTINGS_FILE = "settings.toml"

# Init-only kwarg naming the TOML file(s) to read; ignored as a field.
_TOML_FILES_KEY = "_jcat_toml_files"


def level_from_name(value: Any) -> int:
    """Accept ``logging`` constants, digit strings and level names like ``"debug"``."""

    if isinstance(value, bool):
        raise TypeError("log_level must be an int or a level name")
    if isinstance(value, int):
        return value

    name = str(value).strip().upper()
    if not name:
        return logging.INFO
    if name.isdigit():
        return int(name)

    level = logging.getLevelNamesMapping().get(name)
    if level is None:
        raise ValueError(f"Invalid log_level: {value!r}")
    return level


class Settings(BaseSettings):
    """Runtime settings for jcat."""

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, env_file=".env", extra="ignore")

    recursive: bool = False
    write_compression: CompressionKind = CompressionKind.RAW
    max_workers: int | None = Field(
        default=None,
        ge=1,
        description="Directories processed concurrently. None lets the executor choose.",
    )

    log_format: Literal["text", "ndjson"] = "text"
    log_level: int = logging.INFO
    show_progress: bool = True

    @field_validator("log_level", mode="before")
    @classmethod
    def _parse_log_level(cls, value: Any) -> int:
        return level_from_name(value)

    @field_validator("write_compression", mode="before")
    @classmethod
    def _parse_write_compression(cls, value: Any) -> CompressionKind:
        return CompressionKind.parse(value)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        init_kwargs = getattr(init_settings, "init_kwargs", None) or {}
        toml_files = init_kwargs.get(_TOML_FILES_KEY) or [Path.cwd() / SETTINGS_FILE]
        toml = TomlConfigSettingsSource(settings_cls, toml_file=toml_files)
        # Highest precedence first.
        return init_settings, env_settings, dotenv_settings, toml, file_secret_settings

    @classmethod
    def load(cls, *, cwd: Path | None = None, **overrides: Any) -> "Settings":
        """Load settings relative to ``cwd``; ``None`` overrides are treated as unset."""

        base = (cwd or Path.cwd()).expanduser().resolve()
        explicit = {key: value for key, value in overrides.items() if value is not None}
        return cls(_env_file=base / ".env", **{_TOML_FILES_KEY: [base / SETTINGS_FILE]}, **explicit)


__all__ = ["ENV_PREFIX", "SETTINGS_FILE", "Settings", "level_from_name"]
