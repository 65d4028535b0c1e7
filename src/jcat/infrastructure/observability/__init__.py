"""Structured logging for jcat runs."""

from jcat.infrastructure.observability.context import RunLogContext, create_run_logger_context
from jcat.infrastructure.observability.logger import NullLogger, RunLogger

__all__ = [
    "NullLogger",
    "RunLogContext",
    "RunLogger",
    "create_run_logger_context",
]
