"""Exception types and their message table."""

from __future__ import annotations

from types import MappingProxyType

ERRORS: MappingProxyType[str, str] = MappingProxyType(
    {
        "unset_parameter": "Parameter has no value",
        "no_such_parameter": "No such parameter",
        "decode_failed": "Unable to decode parameter value",
        "encode_unset": "Cannot encode a parameter that has no value",
        "param_verify_failed": "Required parameters missing",
        "no_workflow_service": "No workflow service defined",
        "no_workflow_found": "No workflow found",
        "too_many_workflows": "More than one workflow found",
        "no_execution_id": "No execution id available",
    }
)


class VcoWorkflowsError(Exception):
    """Base class for every error raised by this package."""


class UnsetParameterError(VcoWorkflowsError):
    def __init__(self, name: str) -> None:
        super().__init__(f"{ERRORS['unset_parameter']}: {name}")
        self.name = name


class UnknownParameterError(VcoWorkflowsError, KeyError):
    """Raised when a parameter name is not part of a workflow's schema."""

    def __init__(self, name: str, valid_names: list[str] | None = None) -> None:
        super().__init__(name)
        self.name = name
        self.valid_names = list(valid_names or [])

    def __str__(self) -> str:
        message = f"{ERRORS['no_such_parameter']}: {self.name!r}"
        if self.valid_names:
            message += f" (valid names: {', '.join(self.valid_names)})"
        return message


class ParameterDecodeError(VcoWorkflowsError, ValueError):
    """A single parameter descriptor did not match its tagged wire shape."""

    def __init__(self, name: str | None, type_name: str | None, reason: str) -> None:
        super().__init__(f"{ERRORS['decode_failed']} {name!r} ({type_name}): {reason}")
        self.name = name
        self.type_name = type_name
        self.reason = reason


class ParameterEncodingError(VcoWorkflowsError):
    def __init__(self, name: str) -> None:
        super().__init__(f"{ERRORS['encode_unset']}: {name}")
        self.name = name


class RequiredParameterMissing(VcoWorkflowsError):
    """Raised before submission when required inputs have no value."""

    def __init__(self, names: list[str]) -> None:
        super().__init__(f"{ERRORS['param_verify_failed']}: {', '.join(names)}")
        self.names = list(names)


class WorkflowServiceError(VcoWorkflowsError):
    pass


class WorkflowNotFoundError(WorkflowServiceError):
    pass


class AmbiguousWorkflowError(WorkflowServiceError):
    pass
