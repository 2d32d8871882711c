#!/usr/bin/env python3
"""Programmatic workflow execution example.

This demonstrates using the components directly:

* load settings from `.env` (or the environment)
* look up a workflow by name and set its inputs
* execute it and poll the execution token until it finishes
"""

from __future__ import annotations

import argparse
import time
from typing import Sequence

from vco_workflows.config import VcoSettings
from vco_workflows.errors import RequiredParameterMissing
from vco_workflows.logging import configure_logging
from vco_workflows.service import WorkflowService
from vco_workflows.session import VcoSession
from vco_workflows.workflow import Workflow


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Execute a vCO workflow (programmatic example).")
    parser.add_argument("--name", required=True, help="Workflow name")
    parser.add_argument(
        "--set",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Input value; may be repeated",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = VcoSettings()
    configure_logging(settings.log_level)

    session = VcoSession(settings)
    try:
        workflow = Workflow.fetch(WorkflowService(session), name=args.name)
        for assignment in args.set:
            name, _, value = assignment.partition("=")
            workflow.set_parameter(name, value)

        try:
            execution_id = workflow.execute()
        except RequiredParameterMissing as exc:
            print(str(exc))
            return 3

        token = workflow.token(execution_id)
        while token.alive:
            time.sleep(5)
            token = workflow.token(execution_id)

        print(token)
        return 0
    finally:
        session.close()


if __name__ == "__main__":
    raise SystemExit(main())
