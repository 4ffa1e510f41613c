"""Jinja2 rendering shared by the generic and the wrapped emitter.

Templates live in ``generator/templates/`` and only lay out text. Anything
that needs a decision (argument lists, literals, docstrings) is computed in
Python and passed in ready to print, so whitespace in the templates stays
predictable.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from dsh_api_build import __version__
from dsh_api_build.generator.naming import type_names
from dsh_api_build.models import BodyKind, Operation, ParameterKind, ResponseKind

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``generator/templates/``)."""


def py_literal(value: Any) -> str:
    """Render strings, numbers, ``None`` and tuples as Python source literals.

    Strings use double quotes; JSON string escapes are valid Python escapes.
    """
    if value is None or isinstance(value, bool):
        return repr(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (tuple, list)):
        items = [py_literal(item) for item in value]
        if len(items) == 1:
            return f"({items[0]},)"
        return "(" + ", ".join(items) + ")"
    raise TypeError(f"cannot render {type(value).__name__} as a literal")


def docstring_text(text: str) -> str:
    """Escape text for use inside a triple-quoted docstring."""
    return text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')


def one_line(text: str) -> str:
    """Collapse all whitespace runs, including newlines, into single spaces."""
    return " ".join(text.split())


def docstring_block(lines: list[str], indent: str) -> str:
    """Indent docstring lines, leaving blank lines without trailing spaces."""
    return "\n".join(indent + line if line else "" for line in lines)


def create_environment() -> Environment:
    """Create the Jinja2 environment for the code templates.

    ``trim_blocks`` and ``lstrip_blocks`` keep block tags from leaving blank
    lines or indentation behind; ``keep_trailing_newline`` makes every
    generated module end with a newline.
    """
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["py"] = py_literal
    env.filters["doc"] = docstring_text
    return env


def render(template_name: str, context: dict[str, Any]) -> str:
    """Render *template_name* with the common header variables added."""
    env = create_environment()
    template = env.get_template(template_name)
    return template.render(generator_version=__version__, **context)


def collect_type_names(operations: Iterable[Operation]) -> list[str]:
    """Return the sorted schema names the generated code must import.

    Raises:
        SpecificationError: If a type name is not a valid Python type
            expression.
    """
    names: set[str] = set()
    for operation in operations:
        for parameter in operation.parameters:
            if parameter.type.kind != ParameterKind.PLAIN_STRING:
                names.update(type_names(parameter.type.annotation))
        body = operation.request_body
        if body is not None and body.kind == BodyKind.NAMED_SCHEMA:
            names.update(type_names(body.annotation))
        if operation.ok_response.kind != ResponseKind.NO_CONTENT:
            names.update(type_names(operation.ok_response.annotation))
    return sorted(names)


def document_version(document: dict[str, Any]) -> str:
    """Return ``info.version`` of the document, or ``unknown``."""
    version = (document.get("info") or {}).get("version")
    return str(version) if version is not None else "unknown"
