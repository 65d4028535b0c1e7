"""Run-scoped logger that emits validated ``jcat.*`` events."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from jcat.models.events import DEFAULT_EVENT, JCAT_EVENT_SCHEMAS, JCAT_NAMESPACE


def qualify_event(name: str | None) -> str:
    """Return ``name`` under the ``jcat`` namespace (``run.started`` -> ``jcat.run.started``)."""

    short = (name or "").strip().strip(".")
    if not short:
        return f"{JCAT_NAMESPACE}.invalid_event"
    if short == JCAT_NAMESPACE or short.startswith(f"{JCAT_NAMESPACE}."):
        return short
    return f"{JCAT_NAMESPACE}.{short}"


def validate_event_payload(event: str, payload: Mapping[str, Any]) -> dict[str, Any]:
    """Check ``payload`` against the registered schema for ``event``."""

    if event not in JCAT_EVENT_SCHEMAS:
        raise ValueError(f"Unknown jcat event '{event}' (register it in JCAT_EVENT_SCHEMAS)")

    schema = JCAT_EVENT_SCHEMAS[event]
    if schema is None:
        return dict(payload)

    try:
        return schema.model_validate(dict(payload), strict=True).model_dump(mode="python")
    except ValidationError as e:
        raise ValueError(f"Invalid payload for event '{event}': {e}") from e


class RunLogger(logging.LoggerAdapter):
    """LoggerAdapter stamping ``run_id``, ``event_id`` and ``event`` on every record.

    Plain ``info()``/``debug()`` calls are tagged ``jcat.log``; domain events go
    through :meth:`event`, which validates their payload first.
    """

    def __init__(self, logger: logging.Logger, *, run_id: str | None = None) -> None:
        self._run_id = run_id or uuid.uuid4().hex
        super().__init__(logger, {"run_id": self._run_id})

    @property
    def run_id(self) -> str:
        return self._run_id

    def process(self, msg: Any, kwargs: dict[str, Any]) -> tuple[Any, dict[str, Any]]:
        extra = dict(kwargs.pop("extra", None) or {})
        extra["run_id"] = self._run_id
        extra.setdefault("event_id", uuid.uuid4().hex)
        extra.setdefault("event", qualify_event(DEFAULT_EVENT))
        kwargs["extra"] = extra
        return msg, kwargs

    def event(
        self,
        name: str,
        *,
        message: str | None = None,
        level: int = logging.INFO,
        data: Mapping[str, Any] | None = None,
        exc: BaseException | None = None,
    ) -> None:
        if not self.isEnabledFor(level):
            return

        event = qualify_event(name)
        payload = validate_event_payload(event, data or {})

        extra: dict[str, Any] = {"event": event}
        if payload:
            extra["data"] = payload

        exc_info = (type(exc), exc, exc.__traceback__) if exc is not None else None
        self.log(level, message or event, extra=extra, exc_info=exc_info)


class NullLogger(RunLogger):
    """RunLogger that drops everything; used when no logger is supplied."""

    def __init__(self) -> None:
        sink = logging.Logger("jcat.null")
        sink.addHandler(logging.NullHandler())
        sink.propagate = False
        sink.disabled = True
        super().__init__(sink, run_id="null")

    def __bool__(self) -> bool:
        return False


__all__ = ["NullLogger", "RunLogger", "qualify_event", "validate_event_payload"]
