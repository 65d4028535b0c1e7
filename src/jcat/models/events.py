"""Event payload schemas and schema registry for jcat logging.

Payload models are strict:
- ``extra="forbid"`` to prevent accidental schema drift
- runtime validation uses ``model_validate(..., strict=True)``
"""

from __future__ import annotations

from typing import Annotated, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

JCAT_NAMESPACE = "jcat"

VALID_LOG_FORMATS = {"text", "ndjson", "json"}  # "json" is an alias for ndjson
DEFAULT_EVENT = "log"  # fallback event for plain log lines

PayloadModel: TypeAlias = type[BaseModel] | None


class StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


NonNegativeInt = Annotated[int, Field(ge=0)]

SchemaVersion = Literal[1]
CompressionName = Literal["raw", "gzip", "snappy", "zlib"]


class StrictPayloadV1(StrictModel):
    schema_version: SchemaVersion = 1


# -----------------------
# Run events (v1)
# -----------------------


class RunStartedPayloadV1(StrictPayloadV1):
    input_dir: str
    output_dir: str
    recursive: bool
    write_compression: CompressionName


class RunPlannedPayloadV1(StrictPayloadV1):
    directory_count: NonNegativeInt
    max_workers: int | None = None


class RunCompletedPayloadV1(StrictPayloadV1):
    status: Literal["succeeded", "failed"]
    directory_count: NonNegativeInt
    written_count: NonNegativeInt
    empty_count: NonNegativeInt
    failed_count: NonNegativeInt
    duration_ms: NonNegativeInt


# -----------------------
# Job events (v1)
# -----------------------


class JobStartedPayloadV1(StrictPayloadV1):
    input_dir: str
    output_dir: str


class JobSkippedFilePayloadV1(StrictPayloadV1):
    path: str


class JobCompletedPayloadV1(StrictPayloadV1):
    input_dir: str
    status: Literal["succeeded", "empty"]
    output_path: str | None = None
    document_count: NonNegativeInt
    skipped_count: NonNegativeInt


class JobFailedPayloadV1(StrictPayloadV1):
    input_dir: str
    output_dir: str
    code: str
    message: str


class BatchProgressPayloadV1(StrictPayloadV1):
    completed: NonNegativeInt
    total: NonNegativeInt


JCAT_EVENT_SCHEMAS: dict[str, PayloadModel] = {
    f"{JCAT_NAMESPACE}.{DEFAULT_EVENT}": None,
    f"{JCAT_NAMESPACE}.settings.effective": None,
    f"{JCAT_NAMESPACE}.run.started": RunStartedPayloadV1,
    f"{JCAT_NAMESPACE}.run.planned": RunPlannedPayloadV1,
    f"{JCAT_NAMESPACE}.run.completed": RunCompletedPayloadV1,
    f"{JCAT_NAMESPACE}.job.started": JobStartedPayloadV1,
    f"{JCAT_NAMESPACE}.job.skipped_file": JobSkippedFilePayloadV1,
    f"{JCAT_NAMESPACE}.job.completed": JobCompletedPayloadV1,
    f"{JCAT_NAMESPACE}.job.failed": JobFailedPayloadV1,
    f"{JCAT_NAMESPACE}.batch.progress": BatchProgressPayloadV1,
}


__all__ = [
    "DEFAULT_EVENT",
    "JCAT_EVENT_SCHEMAS",
    "JCAT_NAMESPACE",
    "PayloadModel",
    "VALID_LOG_FORMATS",
]
