"""Execution tokens: point-in-time snapshots of one workflow execution."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from vco_workflows.parameter_set import WorkflowParameterSet, parameters_from_json

RUNNING_STATE = "running"
WAITING_MARKER = "waiting"


def _str_or_none(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _int_or_none(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _format_millis(value: int | None) -> str:
    if value is None:
        return ""
    return datetime.fromtimestamp(value / 1000, tz=UTC).isoformat()


@dataclass(frozen=True, slots=True)
class WorkflowToken:
    """A decoded execution record.

    Tokens are never updated; fetch a new one to observe a newer status.
    Timestamps are kept as epoch milliseconds.
    """

    id: str | None = None
    workflow_id: str | None = None
    name: str | None = None
    state: str | None = None
    href: str | None = None
    start_date: int | None = None
    end_date: int | None = None
    started_by: str | None = None
    current_item_name: str | None = None
    current_item_state: str | None = None
    global_state: str | None = None
    content_exception: str | None = None
    input_parameters: WorkflowParameterSet = field(default_factory=WorkflowParameterSet)
    output_parameters: WorkflowParameterSet = field(default_factory=WorkflowParameterSet)
    json_content: str = "{}"

    @staticmethod
    def from_json(json_content: str, workflow_id: str | None = None) -> WorkflowToken:
        raw: Any = json.loads(json_content)
        if not isinstance(raw, dict):
            raise ValueError("Execution record must be a JSON object")

        return WorkflowToken(
            id=_str_or_none(raw.get("id")),
            workflow_id=workflow_id,
            name=_str_or_none(raw.get("name")),
            state=_str_or_none(raw.get("state")),
            href=_str_or_none(raw.get("href")),
            start_date=_int_or_none(raw.get("start-date")),
            end_date=_int_or_none(raw.get("end-date")),
            started_by=_str_or_none(raw.get("started-by")),
            current_item_name=_str_or_none(raw.get("current-item-display-name")),
            current_item_state=_str_or_none(raw.get("current-item-state")),
            global_state=_str_or_none(raw.get("global-state")),
            # The server spells this key without the second "c".
            content_exception=_str_or_none(raw.get("content-exeption")),
            input_parameters=parameters_from_json(raw, "input-parameters"),
            output_parameters=parameters_from_json(raw, "output-parameters"),
            json_content=json_content,
        )

    @property
    def running(self) -> bool:
        return self.state == RUNNING_STATE

    @property
    def waiting(self) -> bool:
        return self.state is not None and WAITING_MARKER in self.state

    @property
    def alive(self) -> bool:
        """True while the execution is running or waiting."""

        return self.running or self.waiting

    def to_json(self) -> str:
        return json.dumps(json.loads(self.json_content), indent=2, ensure_ascii=False)

    def __str__(self) -> str:
        lines = [
            f"Execution ID:      {self.id or ''}",
            f"Name:              {self.name or ''}",
            f"Workflow ID:       {self.workflow_id or ''}",
            f"State:             {self.state or ''}",
            f"Start Date:        {_format_millis(self.start_date)}",
            f"End Date:          {_format_millis(self.end_date)}",
            f"Started By:        {self.started_by or ''}",
        ]
        if self.content_exception is not None:
            lines.append(f"Content Exception: {self.content_exception}")

        lines.append("")
        lines.append("Input Parameters:")
        lines.extend(f" {p}" for p in self.input_parameters.values() if p.is_set)
        lines.append("")
        lines.append("Output Parameters:")
        lines.extend(f" {p}" for p in self.output_parameters.values())
        return "\n".join(lines) + "\n"
