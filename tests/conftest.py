"""Test configuration and fixtures."""

import json
from typing import Any

import pytest

WORKFLOW_ID = "6e04a460-4a45-4e16-9603-db2922c24462"
EXECUTION_ID = "ff8080814a1cb2c4014a1cd2e0a101cd"


@pytest.fixture
def workflow_data() -> dict[str, Any]:
    """A workflow definition as returned by GET workflows/{id}."""
    return {
        "id": WORKFLOW_ID,
        "name": "Request Component",
        "version": "0.0.33",
        "description": "Request a component",
        "input-parameters": [
            {"name": "coreCount", "type": "number"},
            {"name": "ramMB", "type": "number"},
            {"name": "businessUnit", "type": "string"},
            {"name": "runlist", "type": "Array/string"},
            {"name": "machineCount", "type": "number"},
            {"name": "component", "type": "string"},
            {"name": "onBehalfOf", "type": "string"},
        ],
        "output-parameters": [
            {"name": "result", "type": "string"},
            {"name": "requestNumber", "type": "number"},
        ],
    }


@pytest.fixture
def workflow_json(workflow_data: dict[str, Any]) -> str:
    return json.dumps(workflow_data)


@pytest.fixture
def presentation_json() -> str:
    """A presentation marking four inputs mandatory."""
    fields = [
        {"id": name, "type": "string", "constraints": [{"@type": "mandatory"}]}
        for name in ("coreCount", "ramMB", "businessUnit", "component")
    ]
    fields.append({"id": "onBehalfOf", "type": "string", "constraints": []})
    return json.dumps(
        {
            "input-parameters": [],
            "steps": [{"step": {"elements": [{"@type": "group", "fields": fields}]}}],
        }
    )


@pytest.fixture
def execution_data() -> dict[str, Any]:
    """An execution record as returned by GET workflows/{id}/executions/{eid}."""
    return {
        "id": EXECUTION_ID,
        "name": "Request Component",
        "state": "completed",
        "href": f"https://vco.example.com:8281/vco/api/workflows/{WORKFLOW_ID}/executions/{EXECUTION_ID}/",
        "start-date": 1416531417000,
        "end-date": 1416531419000,
        "started-by": "user@example.com",
        "current-item-display-name": "__item-undefined__",
        "current-item-state": None,
        "global-state": None,
        "input-parameters": [
            {"name": "coreCount", "type": "number", "value": {"number": {"value": 2}}},
            {"name": "component", "type": "string", "value": {"string": {"value": "api"}}},
            {
                "name": "runlist",
                "type": "Array/string",
                "value": {
                    "array": {
                        "elements": [
                            {"string": {"value": "role[base]"}},
                            {"string": {"value": "role[api]"}},
                        ]
                    }
                },
            },
        ],
        "output-parameters": [
            {"name": "result", "type": "string", "value": {"string": {"value": "null"}}},
            {"name": "requestNumber", "type": "number"},
        ],
    }


@pytest.fixture
def execution_json(execution_data: dict[str, Any]) -> str:
    return json.dumps(execution_data)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Any) -> None:
    """Run without VCO_* variables and without a stray .env file."""
    for var in ("VCO_URL", "VCO_USER", "VCO_PASSWD", "VCO_VERIFY_SSL", "LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
