"""Unit tests for best-effort decoding of parameter descriptor lists."""

from __future__ import annotations

import logging

import pytest

from vco_workflows.errors import ParameterDecodeError, UnknownParameterError
from vco_workflows.parameter_set import (
    WorkflowParameterSet,
    decode_parameters,
    parameters_from_json,
    parse_parameters,
)


def test_single_string_descriptor() -> None:
    params = parse_parameters(
        [{"name": "x", "type": "string", "value": {"string": {"value": "squirrel!"}}}]
    )

    assert list(params) == ["x"]
    assert params["x"].is_set
    assert params["x"].get() == "squirrel!"
    assert params["x"].to_wire_struct() == {
        "type": "string",
        "name": "x",
        "scope": "local",
        "value": {"string": {"value": "squirrel!"}},
    }


def test_descriptor_without_value_is_unset() -> None:
    params = parse_parameters([{"name": "x", "type": "number"}])

    assert params["x"].is_set is False
    assert params.failures == ()


def test_null_string_value_becomes_none() -> None:
    params = parse_parameters(
        [{"name": "x", "type": "string", "value": {"string": {"value": "null"}}}]
    )

    assert params["x"].is_set
    assert params["x"].get() is None


def test_array_descriptor_keeps_element_order() -> None:
    params = parse_parameters(
        [
            {
                "name": "runlist",
                "type": "Array/string",
                "value": {
                    "array": {
                        "elements": [
                            {"string": {"value": "c"}},
                            {"string": {"value": "a"}},
                            {"string": {"value": "b"}},
                        ]
                    }
                },
            }
        ]
    )

    assert params["runlist"].get() == ["c", "a", "b"]
    assert params["runlist"].subtype == "string"


def test_one_malformed_value_among_valid_ones(caplog: pytest.LogCaptureFixture) -> None:
    descriptors = [
        {"name": "a", "type": "string", "value": {"string": {"value": "one"}}},
        {"name": "bad", "type": "Array/string", "value": {"array": {"elements": [{"string": 1}]}}},
        {"name": "b", "type": "number", "value": {"number": {"value": 2}}},
        {"name": "c", "type": "boolean", "value": {"boolean": {"value": False}}},
    ]

    with caplog.at_level(logging.WARNING, logger="vco_workflows.parameter_set"):
        params = parse_parameters(descriptors)

    assert list(params) == ["a", "bad", "b", "c"]
    assert params["bad"].is_set is False
    assert [params[n].get() for n in ("a", "b", "c")] == ["one", 2, False]
    assert len(params.failures) == 1
    assert params.failures[0].name == "bad"

    record = next(r for r in caplog.records if r.getMessage() == "Ignoring malformed parameter value")
    assert record.parameter == "bad"
    assert record.parameter_type == "Array/string"
    assert '"bad"' in record.source


def test_decode_results_are_reported_per_descriptor() -> None:
    results = decode_parameters(
        [
            {"name": "a", "type": "string", "value": {"string": {"value": "x"}}},
            {"type": "string"},
            "not-a-descriptor",
            {"name": "b", "type": "string", "value": "x"},
        ]
    )

    assert [r.ok for r in results] == [True, False, False, False]
    assert results[1].parameter is None
    assert results[2].parameter is None
    assert results[3].parameter is not None and results[3].parameter.name == "b"
    assert isinstance(results[3].error, ParameterDecodeError)


def test_nameless_descriptors_are_skipped() -> None:
    params = parse_parameters([{"type": "string"}, {"name": "ok", "type": "string"}])

    assert list(params) == ["ok"]
    assert len(params.failures) == 1


def test_duplicate_names_last_wins(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="vco_workflows.parameter_set"):
        params = parse_parameters(
            [
                {"name": "x", "type": "string", "value": {"string": {"value": "first"}}},
                {"name": "y", "type": "string"},
                {"name": "x", "type": "string", "value": {"string": {"value": "second"}}},
            ]
        )

    assert list(params) == ["x", "y"]
    assert params["x"].get() == "second"
    assert params.duplicates == ("x",)
    assert any("Duplicate parameter name" in r.getMessage() for r in caplog.records)


def test_unknown_name_raises() -> None:
    params = parse_parameters([{"name": "x", "type": "string"}])

    with pytest.raises(UnknownParameterError) as excinfo:
        params["nope"]
    assert excinfo.value.valid_names == ["x"]
    assert "nope" not in params
    assert params.get("nope") is None


def test_required_and_set_views() -> None:
    params = parse_parameters(
        [
            {"name": "a", "type": "string", "value": {"string": {"value": "x"}}},
            {"name": "b", "type": "string"},
        ]
    )
    params["b"].mark_required()

    assert list(params.required()) == ["b"]
    assert list(params.set_parameters()) == ["a"]


def test_none_input_gives_empty_set() -> None:
    assert len(parse_parameters(None)) == 0


def test_parameters_from_json_tolerates_missing_or_wrong_key() -> None:
    assert len(parameters_from_json({}, "input-parameters")) == 0
    assert len(parameters_from_json({"input-parameters": {"a": 1}}, "input-parameters")) == 0
    assert isinstance(parameters_from_json({}, "output-parameters"), WorkflowParameterSet)
