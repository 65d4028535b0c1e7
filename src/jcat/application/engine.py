from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from jcat.application.concat import concatenate
from jcat.infrastructure.io.codecs import CompressionKind
from jcat.infrastructure.io.paths import plan_mappings
from jcat.infrastructure.observability.context import create_run_logger_context
from jcat.infrastructure.observability.logger import RunLogger
from jcat.infrastructure.settings import Settings
from jcat.models.errors import BatchError, InputError, OutputError, ParseError, describe_chain
from jcat.models.run import (
    BatchRequest,
    BatchResult,
    JobError,
    JobErrorCode,
    JobResult,
    JobStatus,
    PathMapping,
    RunStatus,
)

ProgressCallback = Callable[[int, int], None]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _error_code(exc: BaseException) -> JobErrorCode:
    # ParseError subclasses InputError, so it must be checked first.
    code_lookup: tuple[tuple[type[BaseException], JobErrorCode], ...] = (
        (ParseError, JobErrorCode.PARSE_ERROR),
        (InputError, JobErrorCode.INPUT_ERROR),
        (OutputError, JobErrorCode.OUTPUT_ERROR),
    )
    for exc_type, code in code_lookup:
        if isinstance(exc, exc_type):
            return code
    return JobErrorCode.UNKNOWN_ERROR


class ProgressCounter:
    """Thread-safe count of completed jobs."""

    def __init__(self, total: int) -> None:
        self.total = total
        self._completed = 0
        self._lock = threading.Lock()

    @property
    def completed(self) -> int:
        with self._lock:
            return self._completed

    def increment(self) -> int:
        with self._lock:
            self._completed += 1
            return self._completed


class Engine:
    """Plans a batch of directory jobs and runs them on a worker pool."""

    def __init__(self, *, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()

    def _settings_snapshot(self) -> dict[str, Any]:
        return self.settings.model_dump(mode="json", exclude_none=True)

    # ------------------------------------------------------------------
    def run_job(
        self,
        mapping: PathMapping,
        kind: CompressionKind,
        *,
        element_type: Any,
        logger: RunLogger,
    ) -> JobResult:
        """Run one directory job, converting any failure into a FAILED result."""

        logger.event(
            "job.started",
            message="Job started",
            level=logging.DEBUG,
            data={"input_dir": str(mapping.input_dir), "output_dir": str(mapping.output_dir)},
        )
        try:
            result = concatenate(
                mapping.input_dir,
                mapping.output_dir,
                kind,
                element_type=element_type,
                logger=logger,
            )
        except Exception as exc:
            error = JobError(
                code=_error_code(exc),
                message=(
                    f"Failed cat-ing from dir {mapping.input_dir} to {mapping.output_dir} "
                    f"using compression {kind.value}: {describe_chain(exc)}"
                ),
                exception=exc,
            )
            logger.event(
                "job.failed",
                message="Job failed",
                level=logging.ERROR,
                data={
                    "input_dir": str(mapping.input_dir),
                    "output_dir": str(mapping.output_dir),
                    "code": error.code.value,
                    "message": error.message,
                },
            )
            return JobResult(mapping=mapping, status=JobStatus.FAILED, error=error)

        logger.event(
            "job.completed",
            message="Job completed",
            level=logging.INFO if result.status == JobStatus.SUCCEEDED else logging.DEBUG,
            data={
                "input_dir": str(mapping.input_dir),
                "status": result.status.value,
                "output_path": str(result.output_path) if result.output_path is not None else None,
                "document_count": result.document_count,
                "skipped_count": result.skipped_count,
            },
        )
        return result

    # ------------------------------------------------------------------
    def run(
        self,
        request: BatchRequest,
        *,
        element_type: Any = Any,
        logger: RunLogger | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> BatchResult:
        """Concatenate every planned directory of ``request``.

        Planning failures (unreadable tree, bad mapping, uncreatable output
        directory) abort the run by raising. Per-directory failures are
        collected in the returned :class:`BatchResult`.
        """

        if logger is not None:
            return self._run(request, element_type=element_type, logger=logger, on_progress=on_progress)

        with create_run_logger_context(
            log_format=self.settings.log_format,
            log_level=self.settings.log_level,
        ) as log_ctx:
            return self._run(request, element_type=element_type, logger=log_ctx.logger, on_progress=on_progress)

    def _run(
        self,
        request: BatchRequest,
        *,
        element_type: Any,
        logger: RunLogger,
        on_progress: ProgressCallback | None,
    ) -> BatchResult:
        started_at = _utc_now()
        kind = CompressionKind.parse(request.write_compression)
        input_dir = Path(request.input_dir)
        output_dir = Path(request.output_dir)

        logger.event(
            "settings.effective",
            message="Effective settings",
            level=logging.DEBUG,
            data={"settings": self._settings_snapshot()},
        )
        logger.event(
            "run.started",
            message="Run started",
            data={
                "input_dir": str(input_dir),
                "output_dir": str(output_dir),
                "recursive": bool(request.recursive),
                "write_compression": kind.value,
            },
        )

        mappings = plan_mappings(input_dir, output_dir, request.recursive)
        for mapping in mappings:
            try:
                mapping.output_dir.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise OutputError(
                    f"unable to recursively create dir {mapping.output_dir}",
                    path=mapping.output_dir,
                ) from exc

        logger.event(
            "run.planned",
            message="Run planned",
            data={"directory_count": len(mappings), "max_workers": self.settings.max_workers},
        )

        progress = ProgressCounter(total=len(mappings))
        results: dict[PathMapping, JobResult] = {}
        with ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
            futures: dict[Future[JobResult], PathMapping] = {
                executor.submit(
                    self.run_job,
                    mapping,
                    kind,
                    element_type=element_type,
                    logger=logger,
                ): mapping
                for mapping in mappings
            }
            for future in as_completed(futures):
                results[futures[future]] = future.result()
                completed = progress.increment()
                logger.event(
                    "batch.progress",
                    message=f"{completed}/{progress.total} directories",
                    level=logging.DEBUG,
                    data={"completed": completed, "total": progress.total},
                )
                if on_progress is not None:
                    on_progress(completed, progress.total)

        jobs = [results[mapping] for mapping in mappings]
        failed = [job for job in jobs if job.status == JobStatus.FAILED]
        status = RunStatus.FAILED if failed else RunStatus.SUCCEEDED
        completed_at = _utc_now()

        logger.event(
            "run.completed",
            message="Run completed",
            level=logging.ERROR if failed else logging.INFO,
            data={
                "status": status.value,
                "directory_count": len(jobs),
                "written_count": sum(1 for job in jobs if job.status == JobStatus.SUCCEEDED),
                "empty_count": sum(1 for job in jobs if job.status == JobStatus.EMPTY),
                "failed_count": len(failed),
                "duration_ms": int((completed_at - started_at).total_seconds() * 1000),
            },
        )

        return BatchResult(status=status, jobs=jobs, started_at=started_at, completed_at=completed_at)


def run_cat(
    in_dir: Path,
    out_dir: Path,
    *,
    recursive: bool = False,
    write_compression: CompressionKind | str = CompressionKind.RAW,
    element_type: Any = Any,
    settings: Settings | None = None,
    logger: RunLogger | None = None,
) -> BatchResult:
    """Concatenate ``in_dir`` into ``out_dir``, raising :class:`BatchError` on any job failure.

    With ``recursive`` set, every directory beneath ``in_dir`` (and ``in_dir``
    itself) produces its own ``out.<ext>`` under the mirrored path in
    ``out_dir``. Pass ``element_type`` (a pydantic model or any type a
    ``TypeAdapter`` accepts) to validate documents into typed values.
    """

    engine = Engine(settings=settings)
    result = engine.run(
        BatchRequest(
            input_dir=Path(in_dir),
            output_dir=Path(out_dir),
            recursive=recursive,
            write_compression=CompressionKind.parse(write_compression),
        ),
        element_type=element_type,
        logger=logger,
    )
    if result.failures:
        raise BatchError(result.failures)
    return result


__all__ = ["Engine", "ProgressCallback", "ProgressCounter", "run_cat"]
