"""Domain models shared across jcat."""

from jcat.models.bundle import DocumentBundle, data_definition
from jcat.models.errors import (
    BatchError,
    InputError,
    JcatError,
    MappingError,
    OutputError,
    ParseError,
    TraversalError,
)
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

__all__ = [
    "BatchError",
    "BatchRequest",
    "BatchResult",
    "DocumentBundle",
    "InputError",
    "JcatError",
    "JobError",
    "JobErrorCode",
    "JobResult",
    "JobStatus",
    "MappingError",
    "OutputError",
    "ParseError",
    "PathMapping",
    "RunStatus",
    "TraversalError",
    "data_definition",
]
