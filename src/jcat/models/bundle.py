"""The document bundle written to every ``out.<ext>`` artifact.

``DocumentBundle`` holds values of type ``T``. For arbitrary JSON documents use
the default (``Any``). For typed documents, parametrize it with a pydantic model
or any type a ``TypeAdapter`` can validate, e.g. ``DocumentBundle[MyRecord]``.

Consumers that want to deserialize bundles with their own types can copy this
definition and swap in their element type.
"""

from __future__ import annotations

import inspect
import json
import sys
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class DocumentBundle(BaseModel, Generic[T]):
    """Ordered documents concatenated from a single directory."""

    data: list[T] = Field(default_factory=list)


DefinitionFormat = Literal["python", "json-schema"]


def data_definition(fmt: DefinitionFormat = "python") -> str:
    """Return the reference definition of :class:`DocumentBundle`."""

    if fmt == "json-schema":
        schema = DocumentBundle[Any].model_json_schema()
        return json.dumps(schema, indent=2, sort_keys=True)
    return inspect.getsource(sys.modules[__name__])


__all__ = ["DefinitionFormat", "DocumentBundle", "data_definition"]
