from __future__ import annotations

import logging
import sys
import uuid
from dataclasses import dataclass, field
from typing import TextIO

from jcat.infrastructure.observability.formatters import NdjsonFormatter, TextFormatter
from jcat.infrastructure.observability.logger import RunLogger
from jcat.models.events import VALID_LOG_FORMATS


@dataclass
class RunLogContext:
    """A run's logger plus the handler that has to be detached afterwards."""

    logger: RunLogger
    handlers: list[logging.Handler] = field(default_factory=list)

    def close(self) -> None:
        base = self.logger.logger
        while self.handlers:
            handler = self.handlers.pop()
            base.removeHandler(handler)
            handler.close()

    def __enter__(self) -> "RunLogContext":
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:
        self.close()


def create_run_logger_context(
    *,
    log_format: str = "text",
    log_level: int = logging.INFO,
    stream: TextIO | None = None,
) -> RunLogContext:
    """Build an isolated ``jcat.run.<id>`` logger writing to ``stream`` (stderr by default)."""

    fmt = (log_format or "text").strip().lower()
    if fmt not in VALID_LOG_FORMATS:
        raise ValueError("log_format must be 'text' or 'ndjson' (or 'json')")

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(TextFormatter() if fmt == "text" else NdjsonFormatter())

    run_id = uuid.uuid4().hex
    base = logging.getLogger(f"jcat.run.{run_id}")
    base.setLevel(log_level)
    base.propagate = False
    base.addHandler(handler)

    return RunLogContext(logger=RunLogger(base, run_id=run_id), handlers=[handler])


__all__ = ["RunLogContext", "create_run_logger_context"]
