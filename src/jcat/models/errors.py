"""Error hierarchy for jcat."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing helper only
    from jcat.models.run import JobResult


class JcatError(Exception):
    """Base class for jcat-specific exceptions."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class TraversalError(JcatError):
    """Raised when a directory cannot be read during discovery."""


class MappingError(JcatError):
    """Raised when a discovered directory is not rooted under the input root."""


class InputError(JcatError):
    """Raised when an input directory or file is unusable."""


class ParseError(InputError):
    """Raised when a recognized file does not hold a valid document."""


class OutputError(JcatError):
    """Raised when an output directory or bundle cannot be written."""


class BatchError(JcatError):
    """Raised when one or more directory jobs failed."""

    def __init__(self, failures: list["JobResult"]) -> None:
        noun = "directory" if len(failures) == 1 else "directories"
        super().__init__(f"{len(failures)} {noun} failed to concatenate")
        self.failures = failures


def describe_chain(exc: BaseException) -> str:
    """Render ``exc`` and its causes as ``message: cause: cause``."""

    parts: list[str] = []
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        text = str(current).strip() or type(current).__name__
        parts.append(text)
        if current.__cause__ is not None:
            current = current.__cause__
        elif current.__suppress_context__:
            current = None
        else:
            current = current.__context__
    return ": ".join(parts)


__all__ = [
    "BatchError",
    "InputError",
    "JcatError",
    "MappingError",
    "OutputError",
    "ParseError",
    "TraversalError",
    "describe_chain",
]
