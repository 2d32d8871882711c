"""Workflow parameters and the tagged value codec.

vCO describes every value with its type at each level of nesting:

    {"string": {"value": "squirrel!"}}
    {"array": {"elements": [{"string": {"value": "a"}}, {"string": {"value": "b"}}]}}

Type names form an open set defined by the server, so a type is carried as a
plain name (plus an element subtype for arrays) rather than an enum.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sized
from dataclasses import dataclass
from enum import Enum
from typing import Any, Final

from vco_workflows.errors import (
    ParameterDecodeError,
    ParameterEncodingError,
    RequiredParameterMissing,
    UnsetParameterError,
)

ARRAY_TYPE: Final = "Array"
DEFAULT_SUBTYPE: Final = "Any"
PARAMETER_SCOPE: Final = "local"

# The server sometimes sends null as the string "null".
_NULL_STRING: Final = "null"


class _Unset(Enum):
    UNSET = "UNSET"

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Final = _Unset.UNSET


@dataclass(frozen=True, slots=True)
class ParameterType:
    """A server type name, with the element subtype for arrays."""

    name: str
    subtype: str | None = None

    def __post_init__(self) -> None:
        if self.is_array and self.subtype is None:
            object.__setattr__(self, "subtype", DEFAULT_SUBTYPE)
        elif not self.is_array and self.subtype is not None:
            raise ValueError(f"Only {ARRAY_TYPE} types carry a subtype, got {self.name!r}")

    @classmethod
    def parse(cls, type_string: str) -> ParameterType:
        """Split a declared type such as ``"Array/string"`` into base type and subtype."""

        base, sep, subtype = type_string.partition("/")
        if sep and base == ARRAY_TYPE:
            return cls(name=base, subtype=subtype or None)
        return cls(name=type_string)

    @property
    def is_array(self) -> bool:
        return self.name == ARRAY_TYPE

    @property
    def wire_key(self) -> str:
        return self.name.lower()

    def __str__(self) -> str:
        if self.is_array:
            return f"{self.name}/{self.subtype}"
        return self.name


def _tagged_value(node: object, key: str, *, name: str | None, type_name: str) -> Any:
    if not isinstance(node, dict) or key not in node:
        raise ParameterDecodeError(name, type_name, f"missing {key!r} tag")
    inner = node[key]
    if not isinstance(inner, dict) or "value" not in inner:
        raise ParameterDecodeError(name, type_name, f"{key!r} tag has no value")
    return inner["value"]


def _normalize_null(value: Any) -> Any:
    return None if value == _NULL_STRING else value


def decode_value(node: object, param_type: ParameterType, *, name: str | None = None) -> Any:
    """Decode a tagged wire value for ``param_type``.

    Raises:
        ParameterDecodeError: If ``node`` does not have the expected tagged shape.
    """

    type_name = str(param_type)
    if not isinstance(node, dict):
        raise ParameterDecodeError(name, type_name, "value is not an object")

    if param_type.is_array:
        array = node.get("array")
        # A null array travels as {"array": {"value": null}}.
        if isinstance(array, dict) and "elements" not in array and "value" in array:
            if _normalize_null(array["value"]) is None:
                return None
        elements = array.get("elements") if isinstance(array, dict) else None
        if not isinstance(elements, list):
            raise ParameterDecodeError(name, type_name, "missing array elements")

        values: list[Any] = []
        for index, element in enumerate(elements):
            if not isinstance(element, dict) or len(element) != 1:
                raise ParameterDecodeError(
                    name, type_name, f"array element {index} is not a single tagged value"
                )
            (element_key,) = element
            values.append(
                _normalize_null(
                    _tagged_value(element, element_key, name=name, type_name=type_name)
                )
            )
        return values

    wanted = param_type.wire_key
    key = next((k for k in node if isinstance(k, str) and k.lower() == wanted), None)
    if key is None and len(node) == 1:
        (key,) = node
    if key is None:
        raise ParameterDecodeError(name, type_name, f"no {wanted!r} tag in value")
    return _normalize_null(_tagged_value(node, key, name=name, type_name=type_name))


def encode_value(value: Any, param_type: ParameterType) -> dict[str, Any]:
    """Encode ``value`` into the tagged wire form for ``param_type``."""

    if param_type.is_array:
        if value is None:
            return {"array": {"value": None}}
        subtype_key = (param_type.subtype or DEFAULT_SUBTYPE).lower()
        return {
            "array": {"elements": [{subtype_key: {"value": element}} for element in value]}
        }
    return {param_type.wire_key: {"value": value}}


class WorkflowParameter:
    """A named, typed workflow parameter.

    A parameter is either unset or holds a value; ``None`` is a value. The
    name and type never change after construction, and ``required`` can only
    be turned on.
    """

    def __init__(
        self,
        name: str,
        type: str | ParameterType,  # noqa: A002 (mirrors the wire key)
        value: Any = UNSET,
        required: bool = False,
    ) -> None:
        self._name = name
        self._type = type if isinstance(type, ParameterType) else ParameterType.parse(type)
        self._value: Any = UNSET
        self._required = bool(required)
        if value is not UNSET:
            self.set(value)

    @property
    def name(self) -> str:
        return self._name

    @property
    def type(self) -> str:  # noqa: A003
        """Base type name (``"Array"`` for arrays)."""

        return self._type.name

    @property
    def subtype(self) -> str | None:
        return self._type.subtype

    @property
    def param_type(self) -> ParameterType:
        return self._type

    @property
    def scope(self) -> str:
        return PARAMETER_SCOPE

    @property
    def is_set(self) -> bool:
        return self._value is not UNSET

    @property
    def required(self) -> bool:
        return self._required

    def mark_required(self, required: bool = True) -> None:
        """Mark the parameter required. Passing False never clears the flag."""

        self._required = self._required or required

    def set(self, value: Any) -> None:
        """Store ``value``. Array parameters keep a list; a lone scalar becomes one element."""

        if self._type.is_array and value is not None:
            if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
                value = [value]
            else:
                value = list(value)
        self._value = value

    def get(self) -> Any:
        """Return the value.

        Raises:
            UnsetParameterError: If no value was ever set.
        """

        if self._value is UNSET:
            raise UnsetParameterError(self._name)
        return self._value

    @property
    def value(self) -> Any:
        """The value, or ``UNSET``."""

        return self._value

    def validate(self) -> None:
        """Raise RequiredParameterMissing if required and without a usable value."""

        if not self._required:
            return
        missing = self._value is UNSET or self._value is None
        if not missing and self._type.is_array and isinstance(self._value, Sized):
            missing = len(self._value) == 0
        if missing:
            raise RequiredParameterMissing([self._name])

    def to_wire_struct(self) -> dict[str, Any]:
        """Return the parameter as sent to the server.

        Raises:
            ParameterEncodingError: If the parameter is unset.
        """

        if self._value is UNSET:
            raise ParameterEncodingError(self._name)
        return {
            "type": self._type.name,
            "name": self._name,
            "scope": PARAMETER_SCOPE,
            "value": encode_value(self._value, self._type),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_wire_struct(), separators=(",", ":"), ensure_ascii=False)

    def __str__(self) -> str:
        shown = "<unset>" if self._value is UNSET else self._value
        marker = " [required]" if self._required else ""
        return f"{self._name} ({self._type}){marker}: {shown}"

    def __repr__(self) -> str:
        return (
            f"WorkflowParameter(name={self._name!r}, type={str(self._type)!r}, "
            f"value={self._value!r}, required={self._required!r})"
        )
