"""Client-side model for vCenter Orchestrator workflows.

Provides:
- typed workflow parameters and their tagged JSON wire encoding
- workflow definitions with input validation and execution submission
- execution tokens (status snapshots) and execution logs
"""

__version__ = "0.1.0"

from vco_workflows.errors import (
    ParameterDecodeError,
    ParameterEncodingError,
    RequiredParameterMissing,
    UnknownParameterError,
    UnsetParameterError,
    VcoWorkflowsError,
)
from vco_workflows.parameter import UNSET, ParameterType, WorkflowParameter
from vco_workflows.parameter_set import WorkflowParameterSet, parse_parameters
from vco_workflows.token import WorkflowToken

__all__ = [
    "__version__",
    "UNSET",
    "ParameterDecodeError",
    "ParameterEncodingError",
    "ParameterType",
    "RequiredParameterMissing",
    "UnknownParameterError",
    "UnsetParameterError",
    "VcoWorkflowsError",
    "WorkflowParameter",
    "WorkflowParameterSet",
    "WorkflowToken",
    "parse_parameters",
]
