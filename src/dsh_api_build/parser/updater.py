"""Pre-process the raw OpenAPI document before operations are extracted.

The published DSH document is not directly usable by the generator, so
:func:`update_openapi` returns an updated deep copy with:

1. ``/manage/...`` and ``/robot/...`` paths removed unless the matching
   feature is enabled.
2. An ``Authorization`` header parameter added to every operation that does
   not declare one yet.
3. An ``operationId`` synthesized for every operation (see
   :func:`synthesize_operation_id`). Existing ids are overwritten, since the
   synthesized id is the stable key for dispatch and method naming.
4. A note appended to ``info.description``.
"""

from __future__ import annotations

import copy
from typing import Any, Iterable

from dsh_api_build import output
from dsh_api_build.exceptions import SpecificationError, UnrecognizedKindError
from dsh_api_build.models import FEATURES, OperationKind, PathElement
from dsh_api_build.parser.path_elements import first_literal, join_path, parse_path

AUTHORIZATION = "Authorization"
AUTHORIZATION_DESCRIPTION = "Authorization header (bearer token)"
UPDATE_NOTE = "Updated from original version (added authorization parameters and operation ids)"

PATH_ITEM_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")
"""Operation keys of an OpenAPI path item."""


def update_openapi(document: dict[str, Any], features: Iterable[str] = ()) -> dict[str, Any]:
    """Return an updated copy of *document*. The input is not modified.

    Args:
        document: The raw OpenAPI document.
        features: Enabled optional kinds. Paths of kinds listed in
            :data:`~dsh_api_build.models.FEATURES` but not enabled are pruned.

    Raises:
        UnrecognizedKindError: If a remaining path does not start with a
            known kind literal.
        SpecificationError: If a path template is malformed or yields an
            operation id that is not an identifier.
    """
    updated = copy.deepcopy(document)
    paths = updated.setdefault("paths", {})

    enabled = set(features)
    for feature in FEATURES:
        if feature not in enabled:
            _prune_paths(paths, f"/{feature}/")

    for path, path_item in paths.items():
        elements = parse_path(path)
        for method, operation in _path_item_operations(path_item):
            _add_authorization_parameter(operation)
            operation["operationId"] = synthesize_operation_id(method, elements)

    info = updated.setdefault("info", {})
    description = info.get("description")
    info["description"] = f"{description}\n{UPDATE_NOTE}" if description else UPDATE_NOTE
    return updated


def _prune_paths(paths: dict[str, Any], prefix: str) -> None:
    pruned = [path for path in paths if path.startswith(prefix)]
    for path in pruned:
        del paths[path]
    if pruned:
        output.debug(f"Pruned {len(pruned)} path(s) starting with {prefix}")


def _path_item_operations(path_item: Any) -> list[tuple[str, dict[str, Any]]]:
    if not isinstance(path_item, dict):
        return []
    return [
        (method, path_item[method])
        for method in PATH_ITEM_METHODS
        if isinstance(path_item.get(method), dict)
    ]


def is_authorization_name(name: Any) -> bool:
    """Header names are case-insensitive, so ``authorization`` matches too."""
    return isinstance(name, str) and name.lower() == AUTHORIZATION.lower()


def _add_authorization_parameter(operation: dict[str, Any]) -> None:
    parameters = operation.setdefault("parameters", [])
    for parameter in parameters:
        if (
            isinstance(parameter, dict)
            and is_authorization_name(parameter.get("name"))
            and parameter.get("in") == "header"
        ):
            return
    parameters.append(
        {
            "name": AUTHORIZATION,
            "in": "header",
            "description": AUTHORIZATION_DESCRIPTION,
            "required": True,
            "deprecated": False,
            "schema": {"type": "string"},
        }
    )


def operation_kind(elements: list[PathElement], path: str) -> OperationKind:
    """Return the kind named by the first path literal.

    Raises:
        UnrecognizedKindError: If the path is empty, starts with a variable,
            or the literal is not a known kind.
    """
    literal = first_literal(elements)
    if literal is None:
        raise UnrecognizedKindError(f"path '{path}' does not start with an operation kind")
    try:
        return OperationKind(literal)
    except ValueError:
        raise UnrecognizedKindError(
            f"unrecognized operation kind '{literal}' in path '{path}'"
        ) from None


def _identifier_part(text: str) -> str:
    return text.lower().replace("-", "_")


def synthesize_operation_id(method: str, elements: list[PathElement]) -> str:
    """Build the operation id for *method* on a parsed path.

    The id is ``{method}[_{kind}]_{subjects}[_by_{variable}]*``:

    * ``kind`` is the first literal, left out when it is ``allocation``;
    * ``subjects`` are the other literals in order, joined by ``_``;
    * every variable adds ``_by_{variable}`` in path order, except a first
      variable named ``tenant``, which the client always supplies.

    Literals and variables are lower-cased with ``-`` replaced by ``_``.
    The result names a method of the typed client, so it must be a Python
    identifier.

    Example::

        >>> synthesize_operation_id("get", parse_path("/allocation/{tenant}/bucket/{id}/status"))
        'get_bucket_status_by_id'
    """
    kind = operation_kind(elements, join_path(elements))
    subjects = [_identifier_part(e.value) for e in elements[1:] if not e.variable]
    variables = [e.value for e in elements if e.variable]
    if variables and variables[0] == "tenant":
        variables = variables[1:]

    parts = [method.lower()]
    if kind != OperationKind.ALLOCATION:
        parts.append(kind.value)
    parts.extend(subjects)
    operation_id = "_".join(parts)
    for variable in variables:
        operation_id += f"_by_{_identifier_part(variable)}"
    if not operation_id.isidentifier():
        raise SpecificationError(
            f"operation id '{operation_id}' for {method} {join_path(elements)} "
            "is not a valid identifier"
        )
    return operation_id
