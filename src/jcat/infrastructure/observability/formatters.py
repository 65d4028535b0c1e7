from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from jcat.infrastructure.observability.logger import qualify_event
from jcat.models.events import DEFAULT_EVENT

_TEXT_MAX_FIELDS = 8
_TEXT_MAX_VALUE = 120
_HIDDEN_TEXT_FIELDS = frozenset({"schema_version"})


def _timestamp(created: float) -> str:
    stamp = datetime.fromtimestamp(created, tz=timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def event_record(record: logging.LogRecord, *, exception_text: str | None = None) -> dict[str, Any]:
    """Flatten a log record into the jcat event envelope."""

    out: dict[str, Any] = {
        "event_id": str(getattr(record, "event_id", "") or ""),
        "run_id": str(getattr(record, "run_id", "") or ""),
        "timestamp": _timestamp(record.created),
        "level": record.levelname.lower(),
        "event": str(getattr(record, "event", None) or qualify_event(DEFAULT_EVENT)),
        "message": record.getMessage(),
    }

    data = getattr(record, "data", None)
    if isinstance(data, Mapping) and data:
        out["data"] = dict(data)

    if record.exc_info and exception_text:
        exc = record.exc_info[1]
        out["error"] = {
            "type": type(exc).__name__ if exc is not None else "",
            "message": str(exc) if exc is not None else "",
            "stack_trace": exception_text,
        }
    return out


class NdjsonFormatter(logging.Formatter):
    """One compact JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        exc_text = self.formatException(record.exc_info) if record.exc_info else None
        payload = event_record(record, exception_text=exc_text)
        return json.dumps(payload, ensure_ascii=False, default=str, separators=(",", ":"))


class TextFormatter(logging.Formatter):
    """``[timestamp] LEVEL event: message (key=value, ...)`` for terminals."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        payload = event_record(record)
        line = f"[{payload['timestamp']}] {payload['level'].upper()} {payload['event']}"
        if payload["message"] and payload["message"] != payload["event"]:
            line += f": {payload['message']}"

        fields = self._fields(payload.get("data") or {})
        if fields:
            line += f" ({fields})"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info).rstrip("\n")
        return line

    @staticmethod
    def _fields(data: Mapping[str, Any]) -> str:
        keys = [key for key in sorted(data, key=str) if key not in _HIDDEN_TEXT_FIELDS]
        parts = []
        for key in keys[:_TEXT_MAX_FIELDS]:
            value = str(data[key])
            if len(value) > _TEXT_MAX_VALUE:
                value = value[: _TEXT_MAX_VALUE - 3] + "..."
            parts.append(f"{key}={value}")
        if len(keys) > _TEXT_MAX_FIELDS:
            parts.append("...")
        return ", ".join(parts)


__all__ = ["NdjsonFormatter", "TextFormatter", "event_record"]
