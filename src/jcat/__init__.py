"""jcat: concatenate directories of JSON documents into JSON-array bundles."""

from __future__ import annotations

from importlib import metadata as _metadata

from jcat.application import Engine, concatenate, run_cat
from jcat.infrastructure.io.codecs import CompressionKind, classify, extension_for
from jcat.infrastructure.settings import Settings
from jcat.models import BatchError, BatchRequest, BatchResult, DocumentBundle, JcatError, data_definition

try:  # pragma: no cover - executed when package metadata is available
    __version__ = _metadata.version("jcat")
except _metadata.PackageNotFoundError:  # pragma: no cover - local source tree fallback
    __version__ = "0.0.0"

__all__ = [
    "BatchError",
    "BatchRequest",
    "BatchResult",
    "CompressionKind",
    "DocumentBundle",
    "Engine",
    "JcatError",
    "Settings",
    "__version__",
    "classify",
    "concatenate",
    "data_definition",
    "extension_for",
    "run_cat",
]
