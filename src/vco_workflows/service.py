"""Wrappers for the vCO workflow REST endpoints.

Every method returns the raw JSON text (or a small derived value); decoding
into model objects happens in the callers.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any
from urllib.parse import quote

from vco_workflows.errors import (
    ERRORS,
    AmbiguousWorkflowError,
    WorkflowNotFoundError,
    WorkflowServiceError,
)
from vco_workflows.session import VcoSession

logger = logging.getLogger(__name__)

_EXECUTION_ID_RE = re.compile(r"/executions/([^/]+)/?$")


def _link_attributes(link: dict[str, Any]) -> dict[str, Any]:
    attributes = link.get("attributes")
    if not isinstance(attributes, list):
        return {}
    return {
        a["name"]: a.get("value")
        for a in attributes
        if isinstance(a, dict) and isinstance(a.get("name"), str)
    }


class WorkflowService:
    """Workflow operations over a :class:`VcoSession`."""

    def __init__(self, session: VcoSession) -> None:
        self.session = session

    def get_workflow_for_id(self, workflow_id: str) -> str:
        return self.session.get(f"workflows/{workflow_id}").text

    def get_workflow_for_name(self, name: str) -> str:
        """Fetch the one workflow called ``name``.

        Raises:
            WorkflowNotFoundError: If no workflow has that name.
            AmbiguousWorkflowError: If more than one does.
        """

        query = f"workflows?conditions=name={quote(name, safe='')}"
        data = json.loads(self.session.get(query).text)
        links = [link for link in data.get("link") or [] if isinstance(link, dict)]
        total = data.get("total", len(links))

        if not links or total == 0:
            raise WorkflowNotFoundError(f"{ERRORS['no_workflow_found']}: {name!r}")
        if total > 1 or len(links) > 1:
            raise AmbiguousWorkflowError(f"{ERRORS['too_many_workflows']}: {name!r}")

        workflow_id = _link_attributes(links[0]).get("id")
        if not isinstance(workflow_id, str) or not workflow_id:
            raise WorkflowServiceError(f"Workflow {name!r} listing has no id attribute")

        logger.debug("Resolved workflow name", extra={"workflow": name, "workflow_id": workflow_id})
        return self.get_workflow_for_id(workflow_id)

    def get_presentation(self, workflow_id: str) -> str:
        return self.session.get(f"workflows/{workflow_id}/presentation/").text

    def execute_workflow(self, workflow_id: str, parameter_json: str) -> str:
        """Submit an execution and return its id, taken from the Location header."""

        resp = self.session.post(f"workflows/{workflow_id}/executions/", parameter_json)
        location = resp.headers.get("Location", "")
        match = _EXECUTION_ID_RE.search(location)
        if match is None:
            raise WorkflowServiceError(
                f"Execution response has no usable Location header: {location!r}"
            )
        execution_id = match.group(1)
        logger.info(
            "Workflow execution submitted",
            extra={"workflow_id": workflow_id, "execution_id": execution_id},
        )
        return execution_id

    def get_execution(self, workflow_id: str, execution_id: str) -> str:
        return self.session.get(f"workflows/{workflow_id}/executions/{execution_id}").text

    def get_execution_list(self, workflow_id: str) -> dict[str, dict[str, Any]]:
        """Return execution attributes keyed by execution id."""

        data = json.loads(self.session.get(f"workflows/{workflow_id}/executions/").text)
        relations = data.get("relations") or {}
        executions: dict[str, dict[str, Any]] = {}
        for link in relations.get("link") or []:
            # Navigation links carry no attributes.
            if not isinstance(link, dict) or "attributes" not in link:
                continue
            attributes = _link_attributes(link)
            execution_id = attributes.get("id")
            if isinstance(execution_id, str):
                executions[execution_id] = attributes
        return executions

    def get_log(self, workflow_id: str, execution_id: str) -> str:
        return self.session.get(f"workflows/{workflow_id}/executions/{execution_id}/logs/").text
