"""Conversion helpers imported by the generated client modules.

The generic client accepts selectors, a flat ``list[str]`` of parameters and
an optional JSON body string. Everything that turns those untyped values into
typed arguments, and typed results back into plain JSON-compatible data,
lives here so the generated code stays a thin table of calls.

Errors raised to callers of the generated code derive from
:class:`DshApiError`:

* :class:`ParameterError` -- wrong parameter count, missing or unexpected
  body, or a value that does not convert to the expected type.
* :class:`ConfigurationError` -- unknown selector, or no operations for
  the requested method.
"""

from __future__ import annotations

import typing
from collections.abc import Iterable, Sequence
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError


class DshApiError(Exception):
    """Base class for errors raised by generated client code."""


class ParameterError(DshApiError):
    """A generic call was made with parameters or a body that do not fit the operation."""


class ConfigurationError(DshApiError):
    """A generic call named a selector that the generated client does not know."""


class MethodDescriptor(BaseModel):
    """Static description of one generic operation.

    ``parameters`` holds ``(name, type, description)`` triples in the order
    the generic call expects them.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    description: Optional[str] = None
    parameters: tuple[tuple[str, str, Optional[str]], ...] = ()
    body_type: Optional[str] = None
    response_type: Optional[str] = None


# --- Argument checks ---


def check_parameters(parameters: Sequence[str], expected: int) -> None:
    """Raise :class:`ParameterError` unless exactly *expected* parameters were given."""
    if len(parameters) == expected:
        return
    if expected == 0:
        detail = "none expected"
    elif expected == 1:
        detail = "one parameter expected"
    else:
        detail = f"{expected} parameters expected"
    raise ParameterError(f"wrong number of parameters ({detail})")


def check_body(body: Optional[str], body_type: Optional[str]) -> None:
    """Check body presence against the operation's body type (``None`` means no body)."""
    if body_type is not None and body is None:
        raise ParameterError(f"body expected ({body_type})")
    if body_type is None and body is not None:
        raise ParameterError("no body expected")


# --- Conversions ---


def _type_label(tp: Any) -> str:
    origin = typing.get_origin(tp)
    if origin is not None:
        arguments = ", ".join(_type_label(arg) for arg in typing.get_args(tp))
        return f"{getattr(origin, '__name__', str(origin))}[{arguments}]"
    return getattr(tp, "__name__", str(tp))


def parse_constructed(tp: Any, value: str) -> Any:
    """Construct a validated string type (enum or pattern type) from *value*.

    Raises:
        ParameterError: If the constructor rejects the value.
    """
    try:
        return tp(value)
    except (ValueError, TypeError) as exc:
        raise ParameterError(f"'{value}' is not a valid {_type_label(tp)}") from exc


def parse_json(tp: Any, text: str) -> Any:
    """Validate JSON *text* into *tp*, which may be a model, ``list[X]`` or ``dict[str, X]``.

    Raises:
        ParameterError: If the text is not valid JSON for the type.
    """
    try:
        return TypeAdapter(tp).validate_json(text)
    except ValidationError as exc:
        raise ParameterError(
            f"json could not be parsed as a valid {_type_label(tp)}"
        ) from exc


def parse_json_string(text: str) -> str:
    """Decode a quoted JSON string body, e.g. ``'"ABCDEF"'`` gives ``'ABCDEF'``."""
    try:
        return TypeAdapter(str).validate_json(text)
    except ValidationError as exc:
        raise ParameterError("json body could not be parsed as a valid string") from exc


def to_serializable(value: Any) -> Any:
    """Convert a typed result (models, lists, maps, enums) into JSON-compatible data."""
    return TypeAdapter(Any).dump_python(value, mode="json")


def to_ids(value: Any) -> list[str]:
    """Flatten an identifier collection result into a list of strings."""
    items: Iterable[Any] = getattr(value, "root", value)
    return [str(getattr(item, "root", item)) for item in items]
