"""Unit tests for the CLI (service mocked)."""

from __future__ import annotations

import json
from unittest.mock import Mock

import pytest

from vco_workflows.main import (
    EXIT_INVALID_PARAMETERS,
    EXIT_OK,
    EXIT_USAGE,
    build_parser,
    main,
    parse_parameter_string,
    run_execute,
)
from vco_workflows.service import WorkflowService

WORKFLOW_ID = "6e04a460-4a45-4e16-9603-db2922c24462"
REQUIRED = "coreCount=2,ramMB=2048,businessUnit=aw,component=api"


@pytest.fixture
def service(workflow_json: str, presentation_json: str, execution_json: str) -> Mock:
    svc = Mock(spec=WorkflowService)
    svc.get_workflow_for_id.return_value = workflow_json
    svc.get_workflow_for_name.return_value = workflow_json
    svc.get_presentation.return_value = presentation_json
    svc.get_execution.return_value = execution_json
    svc.execute_workflow.return_value = "exec-1"
    svc.get_log.return_value = json.dumps({"logs": []})
    return svc


def test_parse_parameter_string() -> None:
    assert parse_parameter_string("a=1, b = x ,c=") == {"a": "1", "b": "x", "c": ""}
    assert parse_parameter_string("") == {}
    with pytest.raises(ValueError):
        parse_parameter_string("novalue")


def test_query_prints_workflow(service: Mock, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["query", "--name", "Request Component"], service=service) == EXIT_OK

    out = capsys.readouterr().out
    assert "Workflow:    Request Component" in out
    service.get_workflow_for_name.assert_called_once_with("Request Component")


def test_query_execution_as_json(service: Mock, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(
        ["query", "--id", WORKFLOW_ID, "--execution-id", "e1", "--json"], service=service
    )

    assert code == EXIT_OK
    assert json.loads(capsys.readouterr().out)["state"] == "completed"
    service.get_execution.assert_called_once_with(WORKFLOW_ID, "e1")


def test_query_lists_last_executions(service: Mock, capsys: pytest.CaptureFixture[str]) -> None:
    service.get_execution_list.return_value = {
        "e1": {"id": "e1", "state": "completed", "startDate": "2014-11-20T10:00:00"},
        "e2": {"id": "e2", "state": "failed", "startDate": "2014-11-21T10:00:00"},
        "e3": {"id": "e3", "state": "running", "startDate": "2014-11-22T10:00:00"},
    }

    assert main(["query", "--id", WORKFLOW_ID, "--executions", "--last", "2"], service=service) == 0

    lines = capsys.readouterr().out.splitlines()
    assert [line.split()[1] for line in lines] == ["e2", "e3"]


def test_execute_dry_run_prints_body(service: Mock, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(
        [
            "execute",
            "--id",
            WORKFLOW_ID,
            "--parameters",
            f"{REQUIRED},runlist=role[base];role[api]",
            "--dry-run",
        ],
        service=service,
    )

    assert code == EXIT_OK
    body = json.loads(capsys.readouterr().out)
    runlist = next(p for p in body["parameters"] if p["name"] == "runlist")
    assert runlist["value"]["array"]["elements"] == [
        {"string": {"value": "role[base]"}},
        {"string": {"value": "role[api]"}},
    ]
    service.execute_workflow.assert_not_called()


def test_execute_missing_required_parameters(
    service: Mock, capsys: pytest.CaptureFixture[str]
) -> None:
    code = main(["execute", "--id", WORKFLOW_ID, "--parameters", "component=api"], service=service)

    assert code == EXIT_INVALID_PARAMETERS
    assert "ramMB" in capsys.readouterr().err
    service.execute_workflow.assert_not_called()


def test_execute_unknown_parameter(service: Mock) -> None:
    code = main(["execute", "--id", WORKFLOW_ID, "--parameters", "nope=1"], service=service)

    assert code == EXIT_INVALID_PARAMETERS


def test_execute_watch_polls_until_done(
    service: Mock,
    execution_data: dict[str, object],
    capsys: pytest.CaptureFixture[str],
) -> None:
    running = json.dumps({**execution_data, "state": "running", "end-date": None})
    waiting = json.dumps({**execution_data, "state": "waiting-signal", "end-date": None})
    service.get_execution.side_effect = [running, waiting, json.dumps(execution_data)]
    sleep = Mock()

    args = build_parser().parse_args(
        ["execute", "--id", WORKFLOW_ID, "--parameters", REQUIRED, "--watch", "--poll-seconds", "1"]
    )
    assert run_execute(args, service, sleep=sleep) == EXIT_OK

    assert sleep.call_count == 2
    assert service.get_execution.call_count == 3
    out = capsys.readouterr().out
    assert "Started execution exec-1 of Request Component" in out
    assert "State:             completed" in out


def test_invalid_settings_exit_with_usage_error(
    clean_env: None, capsys: pytest.CaptureFixture[str]
) -> None:
    assert main(["query", "--name", "x"]) == EXIT_USAGE
    assert "Invalid settings" in capsys.readouterr().err


def test_execute_malformed_parameters_is_a_usage_error(
    service: Mock, capsys: pytest.CaptureFixture[str]
) -> None:
    code = main(["execute", "--name", "x", "--parameters", "coreCount"], service=service)

    assert code == EXIT_USAGE
    assert "Invalid parameter assignment" in capsys.readouterr().err
    service.get_workflow_for_name.assert_not_called()
    service.execute_workflow.assert_not_called()
