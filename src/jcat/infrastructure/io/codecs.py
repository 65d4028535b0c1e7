"""Content classification and compression stream wrappers.

Detection is purely suffix-based (case-sensitive, final path component only);
file contents are never inspected.
"""

from __future__ import annotations

import gzip
import io
import zlib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO

import cramjam
import snappy

_CHUNK_SIZE = 64 * 1024
_DEFAULT_LEVEL = 6  # zlib's Z_DEFAULT_COMPRESSION level


class CompressionKind(str, Enum):
    """Compression applied to a JSON artifact."""

    RAW = "raw"
    GZIP = "gzip"
    SNAPPY = "snappy"
    ZLIB = "zlib"

    @classmethod
    def parse(cls, value: Any) -> "CompressionKind":
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        if text == "none":
            return cls.RAW
        try:
            return cls(text)
        except ValueError:
            choices = ", ".join(kind.value for kind in cls)
            raise ValueError(f"Unknown compression {value!r} (expected one of: {choices})") from None

    @property
    def extension(self) -> str:
        return extension_for(self)


_EXTENSIONS: dict[CompressionKind, str] = {
    CompressionKind.RAW: "json",
    CompressionKind.GZIP: "json.gz",
    CompressionKind.SNAPPY: "json.sz",
    CompressionKind.ZLIB: "json.zz",
}

# Checked in this order; the suffixes are mutually exclusive.
_SUFFIX_ORDER: tuple[CompressionKind, ...] = (
    CompressionKind.GZIP,
    CompressionKind.SNAPPY,
    CompressionKind.ZLIB,
    CompressionKind.RAW,
)


@dataclass(frozen=True)
class ContentClassification:
    """Whether a path is a recognized JSON artifact, and its compression."""

    kind: CompressionKind | None = None

    @property
    def is_json(self) -> bool:
        return self.kind is not None


OTHER = ContentClassification()


# Failures raised by the readers below on malformed or truncated input.
DECODE_ERRORS: tuple[type[Exception], ...] = (
    EOFError,
    gzip.BadGzipFile,
    zlib.error,
    snappy.UncompressError,
    cramjam.DecompressionError,
)


def extension_for(kind: CompressionKind) -> str:
    """Return the filename extension (without leading dot) for ``kind``."""

    return _EXTENSIONS[kind]


def classify(path: Path | str) -> ContentClassification:
    """Classify ``path`` by the trailing characters of its file name."""

    name = Path(path).name
    if not name:
        return OTHER
    for kind in _SUFFIX_ORDER:
        if name.endswith(f".{_EXTENSIONS[kind]}"):
            return ContentClassification(kind)
    return OTHER


# ---------------------------------------------------------------------------
# Stream wrappers
# ---------------------------------------------------------------------------


class _ZlibReader(io.RawIOBase):
    """Incrementally inflate a zlib stream read from ``source``."""

    def __init__(self, source: BinaryIO) -> None:
        super().__init__()
        self._source = source
        self._decompressor = zlib.decompressobj()
        self._pending = b""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        while not self._pending:
            if self._decompressor.eof:
                return 0
            chunk = self._source.read(_CHUNK_SIZE)
            if not chunk:
                raise EOFError("zlib stream ended before the end-of-stream marker was reached")
            self._pending = self._decompressor.decompress(chunk)
        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size


class _ZlibWriter(io.RawIOBase):
    """Deflate everything written and finalize the stream on close."""

    def __init__(self, sink: BinaryIO) -> None:
        super().__init__()
        self._sink = sink
        self._compressor = zlib.compressobj(_DEFAULT_LEVEL)

    def writable(self) -> bool:
        return True

    def write(self, data: Any) -> int:
        payload = bytes(data)
        self._sink.write(self._compressor.compress(payload))
        return len(payload)

    def close(self) -> None:
        if self.closed:
            return
        try:
            self._sink.write(self._compressor.flush())
        finally:
            super().close()


class _SnappyWriter(io.RawIOBase):
    """Buffer everything written and emit it as snappy frames on close."""

    def __init__(self, sink: BinaryIO) -> None:
        super().__init__()
        self._sink = sink
        self._buffer = io.BytesIO()

    def writable(self) -> bool:
        return True

    def write(self, data: Any) -> int:
        return self._buffer.write(data)

    def close(self) -> None:
        if self.closed:
            return
        try:
            self._buffer.seek(0)
            snappy.stream_compress(self._buffer, self._sink)
        finally:
            self._buffer.close()
            super().close()


def _snappy_reader(source: BinaryIO) -> BinaryIO:
    decoded = io.BytesIO()
    snappy.stream_decompress(source, decoded)
    decoded.seek(0)
    return decoded


def decoder_for(kind: CompressionKind, source: BinaryIO) -> BinaryIO:
    """Wrap ``source`` in a reader that undoes ``kind``.

    Closing the returned stream never closes ``source``, except for
    :attr:`CompressionKind.RAW` where ``source`` is returned unchanged.
    """

    if kind is CompressionKind.RAW:
        return source
    if kind is CompressionKind.GZIP:
        return gzip.GzipFile(fileobj=source, mode="rb")  # type: ignore[return-value]
    if kind is CompressionKind.SNAPPY:
        return _snappy_reader(source)
    if kind is CompressionKind.ZLIB:
        return io.BufferedReader(_ZlibReader(source), buffer_size=_CHUNK_SIZE)  # type: ignore[return-value]
    raise ValueError(f"Unsupported compression kind: {kind!r}")


def encoder_for(kind: CompressionKind, sink: BinaryIO) -> BinaryIO:
    """Wrap ``sink`` in a writer that applies ``kind``.

    Closing the returned stream finalizes the compressed stream; ``sink`` stays
    open (except for :attr:`CompressionKind.RAW`, which returns ``sink``).
    Gzip headers carry no timestamp or file name so output is reproducible.
    """

    if kind is CompressionKind.RAW:
        return sink
    if kind is CompressionKind.GZIP:
        return gzip.GzipFile(  # type: ignore[return-value]
            filename="",
            fileobj=sink,
            mode="wb",
            compresslevel=_DEFAULT_LEVEL,
            mtime=0,
        )
    if kind is CompressionKind.SNAPPY:
        return _SnappyWriter(sink)  # type: ignore[return-value]
    if kind is CompressionKind.ZLIB:
        return _ZlibWriter(sink)  # type: ignore[return-value]
    raise ValueError(f"Unsupported compression kind: {kind!r}")


__all__ = [
    "DECODE_ERRORS",
    "OTHER",
    "CompressionKind",
    "ContentClassification",
    "classify",
    "decoder_for",
    "encoder_for",
    "extension_for",
]
