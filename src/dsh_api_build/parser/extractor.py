"""Extract typed :class:`~dsh_api_build.models.Operation` records from an updated document.

The extractor works on the document returned by
:func:`~dsh_api_build.parser.updater.update_openapi`, so every operation
already carries a synthesized ``operationId`` and the managed
``Authorization`` header parameter.

For each ``(method, path, operation)`` triple :func:`extract_operation`:

* requires a non-empty ``operationId``;
* merges path-level with operation-level parameters (operation-level wins
  for the same ``name`` and ``in``), skips the first one, which is the
  tenant slot supplied by the client, and turns the ``Authorization``
  header into ``requires_token``;
* classifies the request body and every numeric response code, with the
  lowest 2xx code as the canonical ``ok_response``;
* derives the kind from the first path literal and a default selector.

:func:`collect_operations` runs this for every supported method and hands
each method's operations to the selector deduplication.
"""

from __future__ import annotations

from typing import Any

from dsh_api_build import output
from dsh_api_build.exceptions import (
    SpecParseError,
    SpecificationError,
    UnsupportedMethodError,
    UnsupportedSchemaError,
)
from dsh_api_build.generator.selectors import (
    assign_selectors,
    selector_from_path_elements,
    sort_operations,
)
from dsh_api_build.models import (
    SUPPORTED_METHODS,
    UNSUPPORTED_METHODS,
    GeneratorConfig,
    HTTPMethod,
    Operation,
    OperationParameter,
    ResponseBodyType,
)
from dsh_api_build.parser.path_elements import parse_path
from dsh_api_build.parser.resolver import resolve_object
from dsh_api_build.parser.schema_mapper import (
    parameter_type,
    request_body_type,
    response_body_type,
    revise,
)
from dsh_api_build.parser.updater import is_authorization_name, operation_kind


def method_path_operations(
    document: dict[str, Any], method: HTTPMethod
) -> list[tuple[str, dict[str, Any]]]:
    """Return every ``(path, raw_operation)`` pair for *method*, in document order."""
    pairs: list[tuple[str, dict[str, Any]]] = []
    for path, path_item in (document.get("paths") or {}).items():
        path_item = resolve_object(path_item, document)
        if not isinstance(path_item, dict):
            continue
        operation = path_item.get(method.value)
        if isinstance(operation, dict):
            pairs.append((path, operation))
    return pairs


def extract_operation(
    method: HTTPMethod,
    path: str,
    raw_operation: dict[str, Any],
    document: dict[str, Any],
    config: GeneratorConfig | None = None,
) -> Operation:
    """Build the :class:`Operation` for one method and path.

    Args:
        method: The HTTP method.
        path: The raw path template.
        raw_operation: The OpenAPI operation object.
        document: The whole document, used to resolve component references.
        config: Generator settings; defaults apply when omitted.

    Returns:
        The operation with its default (not yet deduplicated) selector.

    Raises:
        SpecificationError: For a missing operation id, a missing tenant
            slot or the absence of any 2xx response.
        UnsupportedSchemaError: For parameter, body or response schemas
            without a type mapping.
        UnrecognizedKindError: If the path does not start with a known kind.
    """
    config = config or GeneratorConfig()
    operation_id = raw_operation.get("operationId")
    if not isinstance(operation_id, str) or not operation_id:
        raise SpecificationError(f"missing operation id for {method.value} {path}")

    path_elements = parse_path(path)
    kind = operation_kind(path_elements, path)

    parameters, requires_token = _extract_parameters(
        _merged_parameters(path, raw_operation, document), operation_id, method, path
    )

    request_body = None
    if raw_operation.get("requestBody") is not None:
        request_body = request_body_type(
            resolve_object(raw_operation["requestBody"], document)
        )

    ok_responses, error_responses = _extract_responses(
        raw_operation.get("responses") or {}, document, config.id_collection_schema
    )
    if not ok_responses:
        raise SpecificationError(f"no 2xx response defined for {method.value} {path}")
    # min() returns the first of equal codes, so declaration order breaks ties
    ok_response = min(ok_responses, key=lambda pair: pair[0])[1]

    summary = raw_operation.get("summary")
    description = revise(summary) if isinstance(summary, str) else ""
    return Operation(
        method=method,
        path=path,
        path_elements=path_elements,
        description=description or None,
        parameters=parameters,
        requires_token=requires_token,
        request_body=request_body,
        operation_id=operation_id,
        selector=selector_from_path_elements(path_elements, ok_response),
        ok_response=ok_response,
        ok_responses=ok_responses,
        error_responses=error_responses,
        kind=kind,
    )


def _merged_parameters(
    path: str, raw_operation: dict[str, Any], document: dict[str, Any]
) -> list[dict[str, Any]]:
    """Resolve and merge path-level and operation-level parameters."""
    path_item = resolve_object((document.get("paths") or {}).get(path) or {}, document)
    path_params = [_resolve_parameter(p, document) for p in path_item.get("parameters") or []]
    op_params = [_resolve_parameter(p, document) for p in raw_operation.get("parameters") or []]

    overridden = {(p.get("name"), p.get("in")) for p in op_params}
    merged = [p for p in path_params if (p.get("name"), p.get("in")) not in overridden]
    merged.extend(op_params)
    return merged


def _resolve_parameter(parameter: Any, document: dict[str, Any]) -> dict[str, Any]:
    try:
        resolved = resolve_object(parameter, document)
    except SpecParseError as exc:
        raise UnsupportedSchemaError(f"unresolvable parameter reference: {exc}") from exc
    if not isinstance(resolved, dict):
        raise UnsupportedSchemaError(f"unsupported parameter {parameter!r}")
    return resolved


def _is_authorization(parameter: dict[str, Any]) -> bool:
    return is_authorization_name(parameter.get("name")) and parameter.get("in") == "header"


def _extract_parameters(
    parameters: list[dict[str, Any]], operation_id: str, method: HTTPMethod, path: str
) -> tuple[list[OperationParameter], bool]:
    if not parameters:
        return [], False
    if _is_authorization(parameters[0]):
        raise SpecificationError(
            f"{method.value} {path} has no tenant parameter before the Authorization header"
        )

    extracted: list[OperationParameter] = []
    requires_token = False
    for parameter in parameters[1:]:
        if _is_authorization(parameter):
            requires_token = True
            continue
        name, param_type, description = parameter_type(parameter, operation_id)
        extracted.append(OperationParameter(name=name, type=param_type, description=description))
    return extracted, requires_token


def _extract_responses(
    responses: dict[str, Any], document: dict[str, Any], id_collection_schema: str
) -> tuple[list[tuple[int, ResponseBodyType]], list[tuple[int, ResponseBodyType]]]:
    ok: list[tuple[int, ResponseBodyType]] = []
    errors: list[tuple[int, ResponseBodyType]] = []
    for code, response in responses.items():
        code_text = str(code)
        # "default" and range codes such as "5XX" carry no numeric status
        if not code_text.isdigit():
            continue
        status = int(code_text)
        body_type = response_body_type(resolve_object(response, document), id_collection_schema)
        if 200 <= status < 300:
            ok.append((status, body_type))
        else:
            errors.append((status, body_type))
    return ok, errors


def collect_operations(
    document: dict[str, Any], config: GeneratorConfig | None = None
) -> dict[HTTPMethod, list[Operation]]:
    """Extract and deduplicate the operations of every supported method.

    Returns:
        A mapping with one entry per supported method, in emission order
        (``get``, ``delete``, ``post``, ``put``). Each list is sorted by
        selector. Methods without operations map to an empty list.

    Raises:
        UnsupportedMethodError: If the document has ``head`` or ``patch``
            operations.
        DuplicateSelectorError: If a method's selectors stay ambiguous.
    """
    config = config or GeneratorConfig()
    for method in UNSUPPORTED_METHODS:
        pairs = method_path_operations(document, method)
        if pairs:
            raise UnsupportedMethodError(
                f"{method.value} method is not supported "
                f"({', '.join(path for path, _ in pairs)})"
            )

    collected: dict[HTTPMethod, list[Operation]] = {}
    for method in SUPPORTED_METHODS:
        operations = [
            extract_operation(method, path, raw, document, config)
            for path, raw in method_path_operations(document, method)
        ]
        collected[method] = sort_operations(assign_selectors(method, operations))
        output.debug(f"{method.value}: {len(operations)} operation(s)")
    return collected


def all_operations(collected: dict[HTTPMethod, list[Operation]]) -> list[Operation]:
    """Flatten collected operations into one list sorted by selector and method."""
    return sort_operations([op for operations in collected.values() for op in operations])
