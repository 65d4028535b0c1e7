"""Run-level types for jcat.

- ``BatchRequest`` is user-provided input/options (may include relative paths).
- ``JobResult`` describes one directory job; ``BatchResult`` collects them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from jcat.infrastructure.io.codecs import CompressionKind


class RunStatus(str, Enum):
    """Overall batch outcome."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


class JobStatus(str, Enum):
    """Outcome of a single directory job."""

    SUCCEEDED = "succeeded"
    EMPTY = "empty"
    FAILED = "failed"


class JobErrorCode(str, Enum):
    """Categorization for job failures surfaced to callers."""

    INPUT_ERROR = "input_error"
    PARSE_ERROR = "parse_error"
    OUTPUT_ERROR = "output_error"
    UNKNOWN_ERROR = "unknown_error"


@dataclass(frozen=True)
class PathMapping:
    """One discovered input directory and the directory its bundle goes to."""

    input_dir: Path
    output_dir: Path


@dataclass
class BatchRequest:
    """Inputs and options for a batch run."""

    input_dir: Path
    output_dir: Path
    recursive: bool = False
    write_compression: CompressionKind = CompressionKind.RAW


@dataclass(frozen=True)
class JobError:
    """Structured error info for a failed job."""

    code: JobErrorCode
    message: str
    exception: BaseException | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class JobResult:
    """Outcome summary for one directory."""

    mapping: PathMapping
    status: JobStatus
    output_path: Path | None = None
    document_count: int = 0
    skipped_count: int = 0
    error: JobError | None = None


@dataclass
class BatchResult:
    """Outcome summary for a batch, jobs listed in mapping order."""

    status: RunStatus
    jobs: list[JobResult]
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def failures(self) -> list[JobResult]:
        return [job for job in self.jobs if job.status == JobStatus.FAILED]

    @property
    def outputs(self) -> list[Path]:
        return [job.output_path for job in self.jobs if job.output_path is not None]


__all__ = [
    "BatchRequest",
    "BatchResult",
    "JobError",
    "JobErrorCode",
    "JobResult",
    "JobStatus",
    "PathMapping",
    "RunStatus",
]
