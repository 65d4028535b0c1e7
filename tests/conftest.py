from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from jcat.infrastructure.io.codecs import CompressionKind, classify, decoder_for, encoder_for


def write_document(path: Path, document: Any, kind: CompressionKind = CompressionKind.RAW) -> Path:
    """Write ``document`` as JSON to ``path`` using compression ``kind``."""

    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(document).encode("utf-8")
    with path.open("wb") as handle:
        stream = encoder_for(kind, handle)
        stream.write(payload)
        if stream is not handle:
            stream.close()
    return path


def load_bundle(path: Path) -> dict[str, Any]:
    """Decode an ``out.<ext>`` bundle according to its suffix."""

    kind = classify(path).kind
    assert kind is not None, f"not a bundle: {path}"
    with path.open("rb") as handle:
        with decoder_for(kind, handle) as stream:
            return json.loads(stream.read())


@pytest.fixture
def write_json() -> Callable[..., Path]:
    return write_document


@pytest.fixture
def read_bundle() -> Callable[[Path], dict[str, Any]]:
    return load_bundle
