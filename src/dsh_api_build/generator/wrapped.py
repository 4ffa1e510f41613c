"""Emit the wrapped client module: one typed coroutine per operation.

Every operation becomes a ``WrappedClientMixin`` method named
``{method}_{selector}``::

    async def get_bucket(self, id: str) -> Bucket:
        _, result = await self.process(
            self.generated_client.get_bucket_by_id(self.tenant_name, await self.token(), id)
        )
        return result

The typed client is always called with the tenant name first, then the
token when the operation needs one, then the parameters in declared order
and finally the body.
"""

from __future__ import annotations

from typing import Any, TextIO

from dsh_api_build import output
from dsh_api_build.exceptions import SpecificationError
from dsh_api_build.generator.naming import sanitize_param_name, selector_identifier
from dsh_api_build.generator.rendering import (
    collect_type_names,
    docstring_block,
    docstring_text,
    document_version,
    one_line,
    render,
)
from dsh_api_build.models import (
    GeneratorConfig,
    HTTPMethod,
    Operation,
    OperationKind,
    ResponseKind,
)
from dsh_api_build.parser.extractor import all_operations, collect_operations

TEMPLATE_NAME = "wrapped.py.j2"

_FEATURE_KINDS = (OperationKind.MANAGE, OperationKind.ROBOT, OperationKind.APPCATALOG)


def method_name(operation: Operation) -> str:
    """Name of the wrapped method, e.g. ``get`` and ``bucket-status`` give ``get_bucket_status``."""
    return f"{operation.method.value}_{selector_identifier(operation.selector)}"


def argument_names(operation: Operation) -> list[str]:
    """Python argument names for the operation's parameters, in declared order.

    Raises:
        SpecificationError: If two parameters sanitize to the same name.
    """
    names = [sanitize_param_name(parameter.name) for parameter in operation.parameters]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise SpecificationError(
            f"{operation.method.value} {operation.path}: parameters map to the same "
            f"argument name ({', '.join(duplicates)})"
        )
    return names


def _docstring(operation: Operation, names: list[str]) -> str:
    title = f"{operation.method.value.capitalize()} {operation.selector.replace('-', ' ')}."
    lines = [docstring_text(title), ""]
    if operation.description:
        lines.extend([docstring_text(one_line(operation.description)), ""])
    lines.append(f"``{operation.method.value.upper()} {docstring_text(operation.path)}``")

    if operation.kind in _FEATURE_KINDS:
        lines.extend(
            ["", f"Only available when the ``{operation.kind.value}`` feature is enabled."]
        )

    if operation.parameters or operation.request_body is not None:
        lines.extend(["", "Args:"])
        for name, parameter in zip(names, operation.parameters):
            text = one_line(parameter.description) if parameter.description else str(parameter.type)
            lines.append(f"    {name}: {docstring_text(text)}")
        if operation.request_body is not None:
            lines.append(f"    body: Request body, {docstring_text(str(operation.request_body))}.")

    response = operation.ok_response
    if response.kind != ResponseKind.NO_CONTENT:
        lines.extend(["", "Returns:", f"    {docstring_text(response.annotation)}"])
    return docstring_block(lines, " " * 8)


def _operation_view(operation: Operation) -> dict[str, Any]:
    names = argument_names(operation)
    signature = ["self"] + [
        f"{name}: {parameter.type.annotation}"
        for name, parameter in zip(names, operation.parameters)
    ]
    arguments = ["self.tenant_name"]
    if operation.requires_token:
        arguments.append("await self.token()")
    arguments.extend(names)
    if operation.request_body is not None:
        signature.append(f"body: {operation.request_body.annotation}")
        arguments.append("body")

    kind = operation.ok_response.kind
    if kind == ResponseKind.NO_CONTENT:
        result = None
    elif kind == ResponseKind.ID_COLLECTION:
        result = "to_ids(result)"
    else:
        result = "result"
    return {
        "name": method_name(operation),
        "signature": ", ".join(signature),
        "returns": operation.ok_response.annotation,
        "docstring": _docstring(operation, names),
        "process": "process_string" if operation.ok_response.is_text else "process",
        "operation_id": operation.operation_id,
        "arguments": arguments,
        "call_prefix": "" if result is None else "_, result = ",
        "result": result,
    }


def render_wrapped(
    operations: list[Operation],
    config: GeneratorConfig,
    document: dict[str, Any] | None = None,
) -> str:
    """Render the wrapped client module for operations sorted by selector.

    Raises:
        SpecificationError: If two operations map to the same method name or
            a type name cannot be imported.
    """
    names = [method_name(operation) for operation in operations]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise SpecificationError(f"duplicate wrapped method names ({', '.join(duplicates)})")

    return render(
        TEMPLATE_NAME,
        {
            "api_version": document_version(document or {}),
            "runtime_module": config.runtime_module,
            "types_module": config.types_module,
            "type_names": collect_type_names(operations),
            "uses_ids": any(
                op.ok_response.kind == ResponseKind.ID_COLLECTION for op in operations
            ),
            "operations": [_operation_view(operation) for operation in operations],
        },
    )


def generate_wrapped(
    writer: TextIO, document: dict[str, Any], config: GeneratorConfig | None = None
) -> None:
    """Write the wrapped client module for an updated *document* to *writer*.

    Rendering completes before the first write, so errors never leave
    partial output behind.
    """
    config = config or GeneratorConfig()
    collected: dict[HTTPMethod, list[Operation]] = collect_operations(document, config)
    operations = all_operations(collected)
    writer.write(render_wrapped(operations, config, document))
    output.debug(f"Wrapped client: {len(operations)} method(s)")
