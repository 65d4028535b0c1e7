from __future__ import annotations

import json

from jcat.models.bundle import DocumentBundle, data_definition
from jcat.models.errors import BatchError, OutputError, describe_chain


def test_data_definition_python_source() -> None:
    source = data_definition()

    assert "class DocumentBundle(BaseModel, Generic[T]):" in source
    assert "data: list[T]" in source


def test_data_definition_json_schema() -> None:
    schema = json.loads(data_definition("json-schema"))

    assert schema["type"] == "object"
    assert schema["properties"]["data"]["type"] == "array"


def test_bundle_defaults_to_empty() -> None:
    assert DocumentBundle().data == []
    assert DocumentBundle[int](data=["1", 2]).data == [1, 2]


def test_describe_chain_follows_causes() -> None:
    try:
        try:
            raise FileNotFoundError("no such file")
        except FileNotFoundError as exc:
            raise OutputError("unable to write json to file out.json") from exc
    except OutputError as err:
        assert describe_chain(err) == "unable to write json to file out.json: no such file"


def test_describe_chain_respects_suppressed_context() -> None:
    try:
        try:
            raise KeyError("inner")
        except KeyError:
            raise OutputError("outer") from None
    except OutputError as err:
        assert describe_chain(err) == "outer"


def test_batch_error_message() -> None:
    assert str(BatchError([object()])) == "1 directory failed to concatenate"  # type: ignore[list-item]
    assert str(BatchError([object(), object()])) == "2 directories failed to concatenate"  # type: ignore[list-item]
