"""CLI entrypoint: query and execute vCO workflows."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from vco_workflows import __version__
from vco_workflows.config import VcoSettings
from vco_workflows.errors import (
    RequiredParameterMissing,
    UnknownParameterError,
    WorkflowServiceError,
)
from vco_workflows.logging import configure_logging
from vco_workflows.session import VcoSession
from vco_workflows.service import WorkflowService
from vco_workflows.workflow import Workflow

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2
EXIT_INVALID_PARAMETERS = 3

ARRAY_SEPARATOR = ";"


def parse_parameter_string(value: str | None) -> dict[str, str]:
    """Parse ``"a=1,b=x"`` into ``{"a": "1", "b": "x"}``."""

    if not value:
        return {}
    parameters: dict[str, str] = {}
    for item in value.split(","):
        if not item.strip():
            continue
        name, sep, raw = item.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Invalid parameter assignment: {item!r} (expected name=value)")
        parameters[name.strip()] = raw.strip()
    return parameters


def _add_workflow_selector(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--name", default=None, help="Workflow name")
    group.add_argument("--id", dest="workflow_id", default=None, help="Workflow GUID")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vco-workflows",
        description="Query and execute vCenter Orchestrator workflows",
    )
    parser.add_argument("--version", action="version", version=f"vco-workflows {__version__}")
    parser.add_argument(
        "--config-file",
        type=Path,
        default=None,
        help="JSON config file with url, username, password and verify_ssl",
    )
    parser.add_argument("--url", default=None, help="vCO server URL (overrides VCO_URL)")
    parser.add_argument("--username", default=None, help="vCO user (overrides VCO_USER)")
    parser.add_argument("--password", default=None, help="vCO password (overrides VCO_PASSWD)")
    parser.add_argument(
        "--no-verify-ssl",
        dest="verify_ssl",
        action="store_false",
        default=None,
        help="Do not verify the server's TLS certificate",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    query = subparsers.add_parser("query", help="Show a workflow, its executions or one execution")
    _add_workflow_selector(query)
    query.add_argument(
        "--executions", action="store_true", help="List the workflow's executions"
    )
    query.add_argument(
        "--last", type=int, default=0, help="Only list the most recent N executions"
    )
    query.add_argument("--execution-id", default=None, help="Show one execution")
    query.add_argument(
        "--log", action="store_true", help="Also show the log of --execution-id"
    )
    query.add_argument(
        "--json", dest="show_json", action="store_true", help="Print raw JSON documents"
    )

    execute = subparsers.add_parser("execute", help="Execute a workflow")
    _add_workflow_selector(execute)
    execute.add_argument(
        "--parameters",
        default="",
        help=(
            "Comma-separated input values, e.g. 'vm=web01,count=2'. "
            f"Separate Array elements with '{ARRAY_SEPARATOR}'"
        ),
    )
    execute.add_argument(
        "--dry-run", action="store_true", help="Print the request body instead of executing"
    )
    execute.add_argument(
        "--watch", action="store_true", help="Poll the execution until it finishes"
    )
    execute.add_argument(
        "--poll-seconds", type=float, default=10.0, help="Polling interval for --watch"
    )
    execute.add_argument(
        "--log", action="store_true", help="Show the execution log after --watch"
    )

    return parser


def load_settings(args: argparse.Namespace) -> VcoSettings:
    overrides: dict[str, Any] = {
        key: getattr(args, key)
        for key in ("url", "username", "password", "verify_ssl")
        if getattr(args, key) is not None
    }
    if args.config_file is not None:
        return VcoSettings.from_file(args.config_file, **overrides)
    return VcoSettings(**overrides)


def _coerce_values(workflow: Workflow, raw: dict[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for name, text in raw.items():
        parameter = workflow.parameter(name)
        if parameter.param_type.is_array:
            values[name] = [e.strip() for e in text.split(ARRAY_SEPARATOR) if e.strip()]
        else:
            values[name] = text
    return values


def _print_executions(executions: dict[str, dict[str, Any]], last: int) -> None:
    rows = sorted(executions.values(), key=lambda a: str(a.get("startDate") or ""))
    if last > 0:
        rows = rows[-last:]
    for attributes in rows:
        print(
            f"{attributes.get('startDate') or '':<32} {attributes.get('id') or '':<40} "
            f"{attributes.get('state') or ''}"
        )


def run_query(args: argparse.Namespace, service: WorkflowService) -> int:
    workflow = Workflow.fetch(service, name=args.name, workflow_id=args.workflow_id)

    if args.execution_id:
        token = workflow.token(args.execution_id)
        print(token.to_json() if args.show_json else token)
        if args.log:
            print(workflow.log(args.execution_id))
        return EXIT_OK

    if args.executions:
        _print_executions(workflow.executions(), args.last)
        return EXIT_OK

    if args.show_json:
        print(json.dumps(json.loads(workflow.source_json), indent=2, ensure_ascii=False))
    else:
        print(workflow)
    return EXIT_OK


def run_execute(
    args: argparse.Namespace,
    service: WorkflowService,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    try:
        assignments = parse_parameter_string(args.parameters)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return EXIT_USAGE

    workflow = Workflow.fetch(service, name=args.name, workflow_id=args.workflow_id)
    workflow.set_parameters(_coerce_values(workflow, assignments))
    workflow.verify_parameters()

    if args.dry_run:
        print(json.dumps(workflow.execution_body(), indent=2, ensure_ascii=False))
        return EXIT_OK

    execution_id = workflow.execute()
    print(f"Started execution {execution_id} of {workflow.name}")

    if not args.watch:
        return EXIT_OK

    token = workflow.token()
    while token.alive:
        logger.debug(
            "Execution still alive", extra={"execution_id": execution_id, "state": token.state}
        )
        sleep(args.poll_seconds)
        token = workflow.token()

    print(token)
    if args.log:
        print(workflow.log())
    return EXIT_OK


def main(argv: Sequence[str] | None = None, *, service: WorkflowService | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    session: VcoSession | None = None
    if service is None:
        try:
            settings = load_settings(args)
        except (ValidationError, ValueError, OSError) as e:
            print(f"Invalid settings: {e}", file=sys.stderr)
            return EXIT_USAGE
        configure_logging(settings.log_level)
        logger.debug("Loaded settings", extra={"settings": str(settings)})
        session = VcoSession(settings)
        service = WorkflowService(session)

    try:
        if args.command == "query":
            return run_query(args, service)
        if args.command == "execute":
            return run_execute(args, service)

        logger.error("Unknown command", extra={"command": args.command})
        return EXIT_USAGE

    except (RequiredParameterMissing, UnknownParameterError) as e:
        logger.warning(str(e))
        print(str(e), file=sys.stderr)
        return EXIT_INVALID_PARAMETERS

    except WorkflowServiceError as e:
        print(str(e), file=sys.stderr)
        return EXIT_FAILED

    except Exception:
        logger.exception("Command failed")
        return EXIT_FAILED

    finally:
        if session is not None:
            session.close()


if __name__ == "__main__":
    raise SystemExit(main())
