"""Decoding of server parameter descriptor lists.

Decoding is best effort: every descriptor yields a :class:`ParameterDecodeResult`,
and a malformed value leaves only that parameter unset.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from vco_workflows.errors import ParameterDecodeError, UnknownParameterError
from vco_workflows.parameter import ParameterType, WorkflowParameter, decode_value

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ParameterDecodeResult:
    """Outcome of decoding one descriptor.

    ``parameter`` is None only when the descriptor could not name a parameter.
    """

    parameter: WorkflowParameter | None
    error: ParameterDecodeError | None = None
    source: object = None

    @property
    def ok(self) -> bool:
        return self.error is None


class WorkflowParameterSet(Mapping[str, WorkflowParameter]):
    """Insertion-ordered, read-only mapping of parameter name to parameter."""

    def __init__(
        self,
        parameters: Iterable[WorkflowParameter] = (),
        *,
        failures: Iterable[ParameterDecodeError] = (),
        duplicates: Iterable[str] = (),
    ) -> None:
        self._parameters: dict[str, WorkflowParameter] = {}
        for parameter in parameters:
            self._parameters[parameter.name] = parameter
        self.failures: tuple[ParameterDecodeError, ...] = tuple(failures)
        self.duplicates: tuple[str, ...] = tuple(duplicates)

    def __getitem__(self, name: str) -> WorkflowParameter:
        try:
            return self._parameters[name]
        except KeyError:
            raise UnknownParameterError(name, list(self._parameters)) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._parameters)

    def __len__(self) -> int:
        return len(self._parameters)

    def required(self) -> dict[str, WorkflowParameter]:
        return {name: p for name, p in self._parameters.items() if p.required}

    def set_parameters(self) -> dict[str, WorkflowParameter]:
        return {name: p for name, p in self._parameters.items() if p.is_set}

    def __repr__(self) -> str:
        return f"WorkflowParameterSet({list(self._parameters.values())!r})"


def _decode_descriptor(descriptor: object) -> ParameterDecodeResult:
    if not isinstance(descriptor, dict):
        error = ParameterDecodeError(None, None, "descriptor is not an object")
        return ParameterDecodeResult(parameter=None, error=error, source=descriptor)

    name = descriptor.get("name")
    type_string = descriptor.get("type")
    if not isinstance(name, str) or not isinstance(type_string, str):
        error = ParameterDecodeError(
            name if isinstance(name, str) else None,
            type_string if isinstance(type_string, str) else None,
            "descriptor needs a string name and type",
        )
        return ParameterDecodeResult(parameter=None, error=error, source=descriptor)

    parameter = WorkflowParameter(name, ParameterType.parse(type_string))
    if descriptor.get("value") is None:
        return ParameterDecodeResult(parameter=parameter, source=descriptor)

    try:
        parameter.set(decode_value(descriptor["value"], parameter.param_type, name=name))
    except ParameterDecodeError as error:
        return ParameterDecodeResult(parameter=parameter, error=error, source=descriptor)
    return ParameterDecodeResult(parameter=parameter, source=descriptor)


def decode_parameters(descriptors: Iterable[object] | None) -> list[ParameterDecodeResult]:
    """Decode every descriptor, logging each failure."""

    results: list[ParameterDecodeResult] = []
    for descriptor in descriptors or ():
        result = _decode_descriptor(descriptor)
        if result.error is not None:
            logger.warning(
                "Ignoring malformed parameter value",
                extra={
                    "parameter": result.error.name,
                    "parameter_type": result.error.type_name,
                    "reason": result.error.reason,
                    "source": json.dumps(descriptor, default=str),
                },
            )
        results.append(result)
    return results


def fold_results(results: Iterable[ParameterDecodeResult]) -> WorkflowParameterSet:
    parameters: dict[str, WorkflowParameter] = {}
    failures: list[ParameterDecodeError] = []
    duplicates: list[str] = []

    for result in results:
        if result.error is not None:
            failures.append(result.error)
        parameter = result.parameter
        if parameter is None:
            continue
        if parameter.name in parameters:
            logger.warning(
                "Duplicate parameter name; keeping the last one",
                extra={"parameter": parameter.name},
            )
            duplicates.append(parameter.name)
        parameters[parameter.name] = parameter

    return WorkflowParameterSet(parameters.values(), failures=failures, duplicates=duplicates)


def parse_parameters(descriptors: Iterable[object] | None) -> WorkflowParameterSet:
    """Decode a descriptor list into a parameter set. Never raises for the whole set."""

    return fold_results(decode_parameters(descriptors))


def parameters_from_json(data: Mapping[str, Any], key: str) -> WorkflowParameterSet:
    raw = data.get(key)
    if raw is None:
        return WorkflowParameterSet()
    if not isinstance(raw, list):
        logger.warning("Parameter list is not an array; ignoring it", extra={"key": key})
        return WorkflowParameterSet()
    return parse_parameters(raw)
