"""Emit the generic client module.

The generic client calls any operation by selector with a flat list of
string parameters::

    bucket = await client.get("bucket", ["my-bucket"])
    await client.put("secret", ["my-secret"], '"ABCDEF"')

The emitted module contains, per supported method:

* one handler coroutine per operation (``_get_bucket``) that checks the
  parameter count and body, converts the strings through
  :mod:`dsh_api_build.runtime` and calls the typed client;
* a dispatch table from selector, operation id and (optionally) path
  template to handler;
* a ``GET_METHODS``-style descriptor table.

A ``GenericClientMixin`` exposes ``get``, ``delete``, ``post`` and ``put``
on top of the tables.
"""

from __future__ import annotations

from typing import Any, TextIO

from dsh_api_build import output
from dsh_api_build.exceptions import DuplicateSelectorError, SpecificationError
from dsh_api_build.generator.naming import selector_identifier
from dsh_api_build.generator.rendering import (
    collect_type_names,
    docstring_block,
    docstring_text,
    document_version,
    one_line,
    render,
)
from dsh_api_build.models import (
    BodyKind,
    GeneratorConfig,
    HTTPMethod,
    Operation,
    ParameterKind,
    ResponseKind,
)
from dsh_api_build.parser.extractor import collect_operations

TEMPLATE_NAME = "generic.py.j2"


# ---------------------------------------------------------------------------
# Per-operation views
# ---------------------------------------------------------------------------


def handler_name(operation: Operation) -> str:
    return f"_{operation.method.value}_{selector_identifier(operation.selector)}"


def call_arguments(operation: Operation) -> list[str]:
    """Arguments of the typed client call, built from ``parameters`` and ``body``."""
    arguments = ["client.tenant_name"]
    if operation.requires_token:
        arguments.append("await client.token()")
    for index, parameter in enumerate(operation.parameters):
        value = f"parameters[{index}]"
        if parameter.type.kind == ParameterKind.PLAIN_STRING:
            arguments.append(value)
        elif parameter.type.is_constructed:
            arguments.append(f"parse_constructed({parameter.type.annotation}, {value})")
        else:
            arguments.append(f"parse_json({parameter.type.annotation}, {value})")
    body = operation.request_body
    if body is not None:
        if body.kind == BodyKind.PLAIN_STRING:
            arguments.append("parse_json_string(body)")
        else:
            arguments.append(f"parse_json({body.annotation}, body)")
    return arguments


def return_description(operation: Operation) -> str:
    response = operation.ok_response
    if response.kind == ResponseKind.NO_CONTENT:
        return f"None when {one_line(response.description or 'successful')}"
    return response.annotation


def _comments(operation: Operation) -> list[str]:
    lines = [f"{operation.method.value.upper()} {operation.path}"]
    for parameter in operation.parameters:
        if parameter.description:
            lines.append(
                f"{parameter.name}: {parameter.type}, {one_line(parameter.description)}"
            )
        else:
            lines.append(f"{parameter.name}: {parameter.type}")
    if operation.request_body is not None:
        lines.append(f"body: {operation.request_body}")
    lines.append(f"returns {return_description(operation)}")
    return lines


def _response_type(operation: Operation) -> str:
    response = operation.ok_response
    if response.kind == ResponseKind.NO_CONTENT:
        return one_line(response.description or "")
    return response.annotation


def _descriptor(operation: Operation) -> dict[str, Any]:
    parameters = tuple(
        (p.name, str(p.type), one_line(p.description) if p.description else None)
        for p in operation.parameters
    )
    return {
        "path": operation.path,
        "description": one_line(operation.description) if operation.description else None,
        "parameters": parameters,
        "body_type": str(operation.request_body) if operation.request_body else None,
        "response_type": _response_type(operation),
    }


def _operation_view(operation: Operation) -> dict[str, Any]:
    method = operation.method
    is_get = method == HTTPMethod.GET
    has_result = is_get and operation.ok_response.kind != ResponseKind.NO_CONTENT
    if not has_result:
        result = "None"
    elif operation.ok_response.kind == ResponseKind.ID_COLLECTION:
        result = "to_serializable(to_ids(result))"
    else:
        result = "to_serializable(result)"
    return {
        "handler": handler_name(operation),
        "selector": operation.selector,
        "operation_id": operation.operation_id,
        "comments": _comments(operation),
        "parameter_count": len(operation.parameters),
        "checks_body": method.has_body,
        "body_type": str(operation.request_body) if operation.request_body else None,
        "call_prefix": "_, result = " if has_result else "",
        "process": "process_string" if operation.ok_response.is_text else "process",
        "arguments": call_arguments(operation),
        "result": result,
        "descriptor": _descriptor(operation),
    }


# ---------------------------------------------------------------------------
# Per-method views
# ---------------------------------------------------------------------------


def dispatch_keys(
    method: HTTPMethod, operations: list[Operation], path_aliases: bool
) -> list[tuple[str, str]]:
    """Return ``(key, handler)`` pairs for one method's dispatch table.

    Every operation is reachable by selector and by operation id, and by
    path template when *path_aliases* is set.

    Raises:
        DuplicateSelectorError: If one key would select two operations.
    """
    entries: list[tuple[str, str]] = []
    owners: dict[str, str] = {}
    clashes: set[str] = set()
    for operation in operations:
        handler = handler_name(operation)
        keys = [operation.selector, operation.operation_id]
        if path_aliases:
            keys.append(operation.path)
        for key in dict.fromkeys(keys):
            if key in owners and owners[key] != handler:
                clashes.add(key)
                continue
            if key not in owners:
                owners[key] = handler
                entries.append((key, handler))
    if clashes:
        raise DuplicateSelectorError(method.value, sorted(clashes))
    return entries


def _method_docstring(method: HTTPMethod, operations: list[Operation]) -> str:
    upper = method.value.upper()
    lines = [f"Call a ``{upper}`` operation by selector.", ""]
    if method == HTTPMethod.GET:
        lines.append("The result is returned as JSON-compatible data.")
    else:
        lines.append("Only errors are reported; response data is discarded.")
    if method.has_body:
        lines.append("``body`` is the JSON text of the request body, when the operation has one.")
    lines.append("")
    if operations:
        lines.append("Supported selectors:")
        lines.append("")
        for operation in operations:
            lines.append(
                f"* ``{operation.selector}`` -- ``{upper} {docstring_text(operation.path)}``"
            )
    else:
        lines.append(f"There are no supported selectors for the ``{method.value}`` method.")
    lines.extend(
        [
            "",
            "Raises:",
            "    ConfigurationError: If the selector is not recognized.",
            "    ParameterError: If the parameters or body do not fit the operation.",
        ]
    )
    return docstring_block(lines, " " * 8)


def _method_view(
    method: HTTPMethod, operations: list[Operation], path_aliases: bool
) -> dict[str, Any]:
    return {
        "name": method.value,
        "constant": method.value.upper(),
        "has_body": method.has_body,
        "operations": [_operation_view(operation) for operation in operations],
        "dispatch": dispatch_keys(method, operations, path_aliases),
        "docstring": _method_docstring(method, operations),
    }


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def render_generic(
    collected: dict[HTTPMethod, list[Operation]],
    config: GeneratorConfig,
    document: dict[str, Any] | None = None,
) -> str:
    """Render the generic client module for already collected operations.

    Raises:
        SpecificationError: If a type name cannot be imported or two
            handlers end up with the same name.
        DuplicateSelectorError: If dispatch keys collide.
    """
    operations = [op for ops in collected.values() for op in ops]
    handlers = [handler_name(op) for op in operations]
    duplicates = sorted({name for name in handlers if handlers.count(name) > 1})
    if duplicates:
        raise SpecificationError(f"duplicate handler names ({', '.join(duplicates)})")

    methods = [
        _method_view(method, collected.get(method, []), config.path_aliases)
        for method in collected
    ]
    return render(
        TEMPLATE_NAME,
        {
            "api_version": document_version(document or {}),
            "runtime_module": config.runtime_module,
            "types_module": config.types_module,
            "type_names": collect_type_names(operations),
            "methods": methods,
        },
    )


def generate_generic(
    writer: TextIO, document: dict[str, Any], config: GeneratorConfig | None = None
) -> None:
    """Write the generic client module for an updated *document* to *writer*.

    The module text is rendered completely before anything is written, so a
    failing build never produces partial output.
    """
    config = config or GeneratorConfig()
    collected = collect_operations(document, config)
    text = render_generic(collected, config, document)
    writer.write(text)
    output.debug(
        f"Generic client: {sum(len(ops) for ops in collected.values())} operation(s)"
    )
