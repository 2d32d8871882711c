"""Workflow definitions as presented by vCenter Orchestrator."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from vco_workflows.errors import (
    ERRORS,
    RequiredParameterMissing,
    UnknownParameterError,
    WorkflowServiceError,
)
from vco_workflows.execution_log import WorkflowExecutionLog
from vco_workflows.parameter import WorkflowParameter
from vco_workflows.parameter_set import WorkflowParameterSet, parameters_from_json
from vco_workflows.presentation import WorkflowPresentation
from vco_workflows.service import WorkflowService
from vco_workflows.token import WorkflowToken

logger = logging.getLogger(__name__)


class Workflow:
    """A workflow definition with settable input parameters.

    Inputs are set by name, checked with :meth:`verify_parameters`, and
    submitted with :meth:`execute`.
    """

    def __init__(
        self,
        *,
        id: str | None = None,  # noqa: A002
        name: str | None = None,
        version: str | None = None,
        description: str | None = None,
        input_parameters: WorkflowParameterSet | None = None,
        output_parameters: WorkflowParameterSet | None = None,
        source_json: str = "{}",
        service: WorkflowService | None = None,
    ) -> None:
        self.id = id
        self.name = name
        self.version = version
        self.description = description
        self.input_parameters = (
            input_parameters if input_parameters is not None else WorkflowParameterSet()
        )
        self.output_parameters = (
            output_parameters if output_parameters is not None else WorkflowParameterSet()
        )
        self.source_json = source_json
        self.service = service
        self.execution_id: str | None = None

    @classmethod
    def from_json(
        cls,
        json_content: str,
        *,
        service: WorkflowService | None = None,
        required: Iterable[str] = (),
    ) -> Workflow:
        """Build a workflow from its JSON definition.

        ``required`` names the inputs to mark mandatory, normally taken from
        the workflow presentation.
        """

        raw = json.loads(json_content)
        if not isinstance(raw, dict):
            raise ValueError("Workflow definition must be a JSON object")

        def _text(key: str) -> str | None:
            value = raw.get(key)
            return value if isinstance(value, str) else None

        workflow = cls(
            id=_text("id"),
            name=_text("name"),
            version=_text("version"),
            description=_text("description"),
            input_parameters=parameters_from_json(raw, "input-parameters"),
            output_parameters=parameters_from_json(raw, "output-parameters"),
            source_json=json_content,
            service=service,
        )
        workflow.mark_required(required)
        return workflow

    @classmethod
    def fetch(
        cls,
        service: WorkflowService,
        *,
        name: str | None = None,
        workflow_id: str | None = None,
    ) -> Workflow:
        """Look up a workflow by id (preferred) or name, with its required inputs."""

        if workflow_id:
            json_content = service.get_workflow_for_id(workflow_id)
        elif name:
            json_content = service.get_workflow_for_name(name)
        else:
            raise ValueError("A workflow name or id is required")

        workflow = cls.from_json(json_content, service=service)
        if workflow.id is not None:
            presentation = WorkflowPresentation.from_json(service.get_presentation(workflow.id))
            workflow.mark_required(presentation.required)
        return workflow

    def mark_required(self, names: Iterable[str]) -> None:
        for param_name in names:
            if param_name in self.input_parameters:
                self.input_parameters[param_name].mark_required()
            else:
                logger.warning(
                    "Ignoring required flag for an unknown input",
                    extra={"workflow": self.name, "parameter": param_name},
                )

    def parameter(self, name: str) -> WorkflowParameter:
        """Return the named input parameter.

        Raises:
            UnknownParameterError: If the workflow has no such input.
        """

        return self.input_parameters[name]

    def set_parameter(self, name: str, value: Any) -> WorkflowParameter:
        parameter = self.parameter(name)
        parameter.set(value)
        return parameter

    def set_parameters(self, values: Mapping[str, Any]) -> None:
        """Set several inputs. Every name is checked before any value is stored."""

        unknown = [n for n in values if n not in self.input_parameters]
        if unknown:
            raise UnknownParameterError(unknown[0], list(self.input_parameters))
        for name, value in values.items():
            self.input_parameters[name].set(value)

    def is_parameter_set(self, name: str) -> bool:
        return self.parameter(name).is_set

    def required_parameters(self) -> dict[str, WorkflowParameter]:
        return self.input_parameters.required()

    def verify_parameters(self) -> None:
        """Raise RequiredParameterMissing naming every required input without a value."""

        missing: list[str] = []
        for name, parameter in self.required_parameters().items():
            try:
                parameter.validate()
            except RequiredParameterMissing:
                missing.append(name)
        if missing:
            raise RequiredParameterMissing(missing)

    def execution_body(self) -> dict[str, Any]:
        return {
            "parameters": [
                p.to_wire_struct() for p in self.input_parameters.values() if p.is_set
            ]
        }

    def input_parameter_json(self) -> str:
        return json.dumps(self.execution_body(), separators=(",", ":"), ensure_ascii=False)

    def _require_service(self, service: WorkflowService | None = None) -> WorkflowService:
        service = service or self.service
        if service is None:
            raise WorkflowServiceError(ERRORS["no_workflow_service"])
        return service

    def _require_id(self) -> str:
        if self.id is None:
            raise WorkflowServiceError("Workflow has no id")
        return self.id

    def _execution(self, execution_id: str | None) -> str:
        execution_id = execution_id or self.execution_id
        if execution_id is None:
            raise WorkflowServiceError(ERRORS["no_execution_id"])
        return execution_id

    def execute(self, service: WorkflowService | None = None) -> str:
        """Verify inputs, submit an execution and return its id."""

        service = self._require_service(service)
        workflow_id = self._require_id()
        self.verify_parameters()
        self.execution_id = service.execute_workflow(workflow_id, self.input_parameter_json())
        return self.execution_id

    def executions(self) -> dict[str, dict[str, Any]]:
        return self._require_service().get_execution_list(self._require_id())

    def token(self, execution_id: str | None = None) -> WorkflowToken:
        """Fetch a fresh snapshot of an execution (the last submitted one by default)."""

        workflow_id = self._require_id()
        json_content = self._require_service().get_execution(
            workflow_id, self._execution(execution_id)
        )
        return WorkflowToken.from_json(json_content, workflow_id=workflow_id)

    def log(self, execution_id: str | None = None) -> WorkflowExecutionLog:
        json_content = self._require_service().get_log(
            self._require_id(), self._execution(execution_id)
        )
        return WorkflowExecutionLog.from_json(json_content)

    def __str__(self) -> str:
        lines = [
            f"Workflow:    {self.name or ''}",
            f"ID:          {self.id or ''}",
            f"Description: {self.description or ''}",
            f"Version:     {self.version or ''}",
            "",
            "Input Parameters:",
            *(f" {p}" for p in self.input_parameters.values()),
            "",
            "Output Parameters:",
            *(f" {p}" for p in self.output_parameters.values()),
        ]
        return "\n".join(lines) + "\n"
