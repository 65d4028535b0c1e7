from __future__ import annotations

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from jcat.infrastructure.io.codecs import CompressionKind
from jcat.infrastructure.settings import Settings


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "JCAT_RECURSIVE",
        "JCAT_WRITE_COMPRESSION",
        "JCAT_MAX_WORKERS",
        "JCAT_LOG_FORMAT",
        "JCAT_LOG_LEVEL",
        "JCAT_SHOW_PROGRESS",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults(tmp_path: Path) -> None:
    settings = Settings.load(cwd=tmp_path)

    assert settings.recursive is False
    assert settings.write_compression is CompressionKind.RAW
    assert settings.max_workers is None
    assert settings.log_format == "text"
    assert settings.log_level == logging.INFO
    assert settings.show_progress is True


def test_environment_variables(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("JCAT_WRITE_COMPRESSION", "GZIP")
    monkeypatch.setenv("JCAT_MAX_WORKERS", "4")
    monkeypatch.setenv("JCAT_LOG_LEVEL", "debug")
    monkeypatch.setenv("JCAT_RECURSIVE", "true")

    settings = Settings.load(cwd=tmp_path)

    assert settings.write_compression is CompressionKind.GZIP
    assert settings.max_workers == 4
    assert settings.log_level == logging.DEBUG
    assert settings.recursive is True


def test_settings_toml_in_working_directory(tmp_path: Path) -> None:
    (tmp_path / "settings.toml").write_text(
        'write_compression = "zlib"\nmax_workers = 3\nlog_format = "ndjson"\n',
        encoding="utf-8",
    )

    settings = Settings.load(cwd=tmp_path)

    assert settings.write_compression is CompressionKind.ZLIB
    assert settings.max_workers == 3
    assert settings.log_format == "ndjson"


def test_dotenv_in_working_directory(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("JCAT_WRITE_COMPRESSION=snappy\n", encoding="utf-8")

    settings = Settings.load(cwd=tmp_path)

    assert settings.write_compression is CompressionKind.SNAPPY


def test_precedence_overrides_then_env_then_toml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "settings.toml").write_text(
        'write_compression = "zlib"\nmax_workers = 3\nlog_level = "WARNING"\n',
        encoding="utf-8",
    )
    monkeypatch.setenv("JCAT_WRITE_COMPRESSION", "snappy")
    monkeypatch.setenv("JCAT_MAX_WORKERS", "5")

    settings = Settings.load(cwd=tmp_path, write_compression="gzip", max_workers=None)

    assert settings.write_compression is CompressionKind.GZIP
    assert settings.max_workers == 5
    assert settings.log_level == logging.WARNING


def test_none_accepted_as_raw_alias(tmp_path: Path) -> None:
    assert Settings.load(cwd=tmp_path, write_compression="none").write_compression is CompressionKind.RAW


def test_invalid_values_are_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValidationError):
        Settings.load(cwd=tmp_path, write_compression="brotli")
    with pytest.raises(ValidationError):
        Settings.load(cwd=tmp_path, max_workers=0)
    with pytest.raises(ValidationError):
        Settings.load(cwd=tmp_path, log_level="chatty")
