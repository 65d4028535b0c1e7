"""Concatenate the JSON documents of one directory into a single bundle."""

from __future__ import annotations

import logging
import math
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError
from pydantic_core import from_json

from jcat.infrastructure.io.codecs import (
    DECODE_ERRORS,
    CompressionKind,
    classify,
    decoder_for,
    encoder_for,
)
from jcat.infrastructure.io.paths import output_path_for
from jcat.infrastructure.observability.logger import NullLogger, RunLogger
from jcat.models.bundle import DocumentBundle
from jcat.models.errors import InputError, OutputError, ParseError
from jcat.models.run import JobResult, JobStatus, PathMapping


@lru_cache(maxsize=32)
def _element_adapter(element_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(element_type)


@lru_cache(maxsize=32)
def _bundle_adapter(element_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(DocumentBundle[element_type])  # type: ignore[valid-type]


def _reject_non_finite(document: Any) -> None:
    # Out-of-range literals such as 1e400 parse to inf.
    stack = [document]
    while stack:
        value = stack.pop()
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError(f"number out of range: {value!r}")
        if isinstance(value, dict):
            stack.extend(value.values())
        elif isinstance(value, list):
            stack.extend(value)


def list_files(input_dir: Path) -> list[Path]:
    """Return the regular files directly inside ``input_dir``, sorted by path."""

    try:
        entries = list(input_dir.iterdir())
    except OSError as exc:
        raise InputError(f"unable to read directory {input_dir}", path=input_dir) from exc
    return sorted(entry for entry in entries if entry.is_file())


def read_document(path: Path, kind: CompressionKind, element_type: Any = Any) -> Any:
    """Decode ``path`` with ``kind`` and parse it as one ``element_type`` document."""

    try:
        with path.open("rb") as handle:
            with decoder_for(kind, handle) as stream:
                payload = stream.read()
    except DECODE_ERRORS as exc:
        raise ParseError(f"unable to decompress {kind.value} file {path}", path=path) from exc
    except OSError as exc:
        raise InputError(f"unable to read file {path}", path=path) from exc

    try:
        document = from_json(payload, allow_inf_nan=False)
        _reject_non_finite(document)
        return _element_adapter(element_type).validate_python(document)
    except (ValueError, ValidationError) as exc:
        raise ParseError(f"unable to read json from file {path}", path=path) from exc


def write_bundle(bundle: DocumentBundle[Any], output_path: Path, kind: CompressionKind, element_type: Any = Any) -> None:
    """Serialize ``bundle`` to ``output_path`` atomically.

    The document is written to a sibling temporary file and renamed into place,
    so a failed write never leaves a truncated bundle behind.
    """

    serialized = _bundle_adapter(element_type).dump_json(bundle)
    tmp_path = output_path.with_name(f".{output_path.name}.tmp")

    try:
        with tmp_path.open("wb") as handle:
            with encoder_for(kind, handle) as stream:
                stream.write(serialized)
        os.replace(tmp_path, output_path)
    except Exception as exc:
        tmp_path.unlink(missing_ok=True)
        raise OutputError(f"unable to write json to file {output_path}", path=output_path) from exc


def concatenate(
    input_dir: Path,
    output_dir: Path,
    output_kind: CompressionKind,
    *,
    element_type: Any = Any,
    logger: RunLogger | None = None,
) -> JobResult:
    """Bundle every recognized JSON file directly inside ``input_dir``.

    Files with unrecognized suffixes are skipped. A recognized file that fails
    to decode or parse fails the whole directory. Nothing is written when no
    document was found.
    """

    log = logger or NullLogger()
    mapping = PathMapping(input_dir=input_dir, output_dir=output_dir)

    bundle: DocumentBundle[Any] = DocumentBundle[element_type]()  # type: ignore[valid-type]
    skipped = 0
    for path in list_files(input_dir):
        classification = classify(path)
        if classification.kind is None:
            skipped += 1
            log.event(
                "job.skipped_file",
                message="Skipping unrecognized file",
                level=logging.DEBUG,
                data={"path": str(path)},
            )
            continue
        bundle.data.append(read_document(path, classification.kind, element_type))

    if not bundle.data:
        return JobResult(mapping=mapping, status=JobStatus.EMPTY, skipped_count=skipped)

    output_path = output_path_for(output_dir, output_kind)
    write_bundle(bundle, output_path, output_kind, element_type)
    return JobResult(
        mapping=mapping,
        status=JobStatus.SUCCEEDED,
        output_path=output_path,
        document_count=len(bundle.data),
        skipped_count=skipped,
    )


__all__ = ["concatenate", "list_files", "read_document", "write_bundle"]
