"""CLI entrypoint for :mod:`jcat`.

Exposes the jcat CLI with:

- `cat`             Concatenate JSON files per directory into `out.<ext>` bundles.
- `data-definition` Print the bundle type definition for custom deserializers.
- `version`         Print the package version.
"""

from __future__ import annotations

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import typer
from typer import BadParameter

from jcat import __version__
from jcat.application.engine import Engine
from jcat.infrastructure.io.codecs import CompressionKind
from jcat.infrastructure.observability.context import create_run_logger_context
from jcat.infrastructure.settings import Settings, level_from_name
from jcat.models.bundle import data_definition
from jcat.models.errors import JcatError, describe_chain
from jcat.models.run import BatchRequest, RunStatus

app = typer.Typer(
    help=(
        "jcat - concatenate directories of JSON documents.\n\n"
        "- **cat** - bundle every directory's JSON files into `out.<ext>`\n"
        "- **data-definition** - show the bundle type definition\n"
        "- **version** - show the jcat version"
    ),
    no_args_is_help=True,
    rich_markup_mode="markdown",
)


class LogFormat(str, Enum):
    """Supported log output formats."""

    text = "text"
    ndjson = "ndjson"


class DefinitionFormat(str, Enum):
    """Supported renderings of the bundle definition."""

    python = "python"
    json_schema = "json-schema"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def resolve_log_level(log_level: Optional[str], default_level: int) -> int:
    """Map a `--log-level` value to a logging constant, falling back to `default_level`."""
    if not log_level:
        return default_level
    try:
        return level_from_name(log_level)
    except ValueError as exc:
        raise BadParameter(f"Invalid log level: {log_level}", param_hint="--log-level") from exc


def resolve_write_compression(value: Optional[str]) -> Optional[CompressionKind]:
    """Parse `--write-compression`, accepting the same names as the settings file."""
    if value is None:
        return None
    try:
        return CompressionKind.parse(value)
    except ValueError as exc:
        raise BadParameter(str(exc), param_hint="--write-compression") from exc


def resolve_logging(
    *,
    log_format: Optional[LogFormat],
    log_level: Optional[str],
    debug: bool,
    quiet: bool,
    settings: Settings,
) -> tuple[str, int]:
    """Compute effective log format/level with explicit precedence.

    Precedence: --quiet > --debug > --log-level > settings.
    """
    effective_format = log_format.value if log_format else settings.log_format
    base_level = resolve_log_level(log_level, settings.log_level)

    if quiet:
        effective_level = logging.WARNING
    elif debug:
        effective_level = logging.DEBUG
    else:
        effective_level = base_level

    return effective_format, effective_level


class ProgressReporter:
    """Renders completed/total directory counts as a progress bar on stderr."""

    def __init__(self, *, enabled: bool) -> None:
        self.enabled = enabled
        self._bar: Any = None

    def __call__(self, completed: int, total: int) -> None:
        if not self.enabled:
            return
        if self._bar is None:
            self._bar = typer.progressbar(length=total, label="Concatenating", file=sys.stderr)
            self._bar.__enter__()
        self._bar.update(1)

    def close(self) -> None:
        if self._bar is not None:
            self._bar.__exit__(None, None, None)
            self._bar = None


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("cat")
def cat_command(
    in_dir: Path = typer.Option(
        ...,
        "--in-dir",
        "-i",
        exists=True,
        file_okay=False,
        dir_okay=True,
        help="Directory to read JSON files from.",
    ),
    out_dir: Path = typer.Option(
        ...,
        "--out-dir",
        "-o",
        file_okay=False,
        dir_okay=True,
        help="Directory to write bundles to (created if missing).",
    ),
    recursive: bool = typer.Option(
        False,
        "--recursive",
        "-r",
        help="Produce one bundle for every subdirectory of --in-dir.",
    ),
    write_compression: Optional[str] = typer.Option(
        None,
        "--write-compression",
        "-w",
        help="Compression to apply on write: raw (alias: none), gzip, snappy or zlib. Default: raw.",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        min=1,
        help="Number of directories processed concurrently.",
    ),
    no_progress: bool = typer.Option(
        False,
        "--no-progress",
        help="Hide the progress bar on stderr.",
    ),
    log_format: Optional[LogFormat] = typer.Option(
        None,
        "--log-format",
        case_sensitive=False,
        help="Log output format.",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        case_sensitive=False,
        help="Log level (debug, info, warning, error, critical).",
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
    quiet: bool = typer.Option(False, "--quiet", help="Reduce output to warnings and errors."),
) -> None:
    """Concatenate the JSON files of each directory into one `out.<ext>` bundle."""

    settings = Settings.load(
        recursive=True if recursive else None,
        write_compression=resolve_write_compression(write_compression),
        max_workers=workers,
    )
    effective_format, effective_level = resolve_logging(
        log_format=log_format,
        log_level=log_level,
        debug=debug,
        quiet=quiet,
        settings=settings,
    )
    engine_settings = settings.model_copy(update={"log_format": effective_format, "log_level": effective_level})
    engine = Engine(settings=engine_settings)

    request = BatchRequest(
        input_dir=in_dir,
        output_dir=out_dir,
        recursive=engine_settings.recursive,
        write_compression=engine_settings.write_compression,
    )
    reporter = ProgressReporter(enabled=engine_settings.show_progress and not (no_progress or quiet))

    with create_run_logger_context(log_format=effective_format, log_level=effective_level) as log_ctx:
        try:
            result = engine.run(request, logger=log_ctx.logger, on_progress=reporter)
        except JcatError as exc:
            typer.echo(f"Error: {describe_chain(exc)}", err=True)
            raise typer.Exit(code=1) from exc
        finally:
            reporter.close()

    if result.status != RunStatus.SUCCEEDED:
        for job in result.failures:
            if job.error is not None:
                typer.echo(f"Error: {job.error.message}", err=True)
        raise typer.Exit(code=1)

    written = len(result.outputs)
    typer.echo(f"Wrote {written} bundle(s) from {len(result.jobs)} directories.")


@app.command("data-definition")
def data_definition_command(
    fmt: DefinitionFormat = typer.Option(
        DefinitionFormat.python,
        "--format",
        "-f",
        case_sensitive=False,
        help="Render the definition as Python source or as JSON Schema.",
    ),
) -> None:
    """Print the bundle type definition for writing custom deserializers."""
    typer.echo(data_definition(fmt.value))


@app.command("version")
def version_command() -> None:
    """Print the jcat version."""
    typer.echo(__version__)


def main() -> None:
    """Entrypoint used by console scripts and `python -m jcat`."""
    app()


__all__ = ["app", "main"]
