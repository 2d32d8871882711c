"""Workflow presentation parsing.

The presentation is the server's description of the input form for a
workflow. The only thing read from it is which inputs are mandatory.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

MANDATORY_CONSTRAINT = "mandatory"


def _dicts(value: object) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


@dataclass(frozen=True, slots=True)
class WorkflowPresentation:
    required: tuple[str, ...] = ()

    @staticmethod
    def from_json(json_content: str) -> WorkflowPresentation:
        raw = json.loads(json_content)
        if not isinstance(raw, dict):
            return WorkflowPresentation()

        required: list[str] = []
        for step in _dicts(raw.get("steps")):
            step_body = step.get("step")
            if not isinstance(step_body, dict):
                continue
            for element in _dicts(step_body.get("elements")):
                for presented in _dicts(element.get("fields")):
                    field_id = presented.get("id")
                    if not isinstance(field_id, str) or field_id in required:
                        continue
                    if any(
                        c.get("@type") == MANDATORY_CONSTRAINT
                        for c in _dicts(presented.get("constraints"))
                    ):
                        required.append(field_id)

        return WorkflowPresentation(required=tuple(required))
