"""Derive collision-free selectors from path structure and response shape.

A selector is the short, lower-case, hyphen-joined name of an operation,
unique within one HTTP method. It keys the generic dispatcher and names the
wrapped methods (``get`` + ``bucket-status`` gives ``get_bucket_status``).

Derivation (:func:`selector_from_path_elements`):

1. Literals are lower-cased; ``allocation`` is dropped.
2. Variables ``tenant`` and ``manager`` are always dropped. ``id`` and
   ``appid`` are dropped unless ``include_variables`` is set. Other
   variables are lower-cased and kept.
3. Segments are joined with ``-`` and the response suffix is appended
   (``-ids``, ``-map``, ``s`` or nothing).

Deduplication (:func:`assign_selectors`) runs per method. Operations are
visited in path template order; an operation whose default selector was
already taken is re-derived with ``include_variables=True``. Any selector
that is still not unique afterwards fails the build.
"""

from __future__ import annotations

from collections import Counter

from dsh_api_build import output
from dsh_api_build.exceptions import DuplicateSelectorError
from dsh_api_build.models import HTTPMethod, Operation, PathElement, ResponseBodyType

_DROPPED_LITERALS = frozenset({"allocation"})
_ALWAYS_DROPPED_VARIABLES = frozenset({"tenant", "manager"})
_DEFAULT_DROPPED_VARIABLES = frozenset({"id", "appid"})


def selector_from_path_elements(
    elements: list[PathElement],
    ok_response: ResponseBodyType,
    include_variables: bool = False,
) -> str:
    """Derive the selector for a path and its canonical ok response.

    Example::

        >>> selector_from_path_elements(parse_path("/allocation/{tenant}/bucket/{id}/status"), ok)
        'bucket-status'
    """
    segments: list[str] = []
    for element in elements:
        if not element.variable:
            if element.value not in _DROPPED_LITERALS:
                segments.append(element.value.lower())
        elif element.value in _ALWAYS_DROPPED_VARIABLES:
            continue
        elif include_variables or element.value not in _DEFAULT_DROPPED_VARIABLES:
            segments.append(element.value.lower())
    return "-".join(segments) + ok_response.selector_suffix


def assign_selectors(method: HTTPMethod, operations: list[Operation]) -> list[Operation]:
    """Assign unique selectors to all operations of one method.

    The input order does not matter: operations are ordered by path template
    before the collision pass, so the same set always gets the same
    selectors.

    Args:
        method: The HTTP method shared by *operations*.
        operations: Extracted operations carrying their default selector.

    Returns:
        Copies of the operations with final selectors, in path order.

    Raises:
        DuplicateSelectorError: If selectors collide after widening. Every
            duplicated selector is listed, sorted.
    """
    seen: set[str] = set()
    assigned: list[Operation] = []
    for operation in sorted(operations, key=lambda op: op.path):
        selector = operation.selector
        if selector in seen:
            selector = selector_from_path_elements(
                operation.path_elements, operation.ok_response, include_variables=True
            )
            output.debug(
                f"{method.value} {operation.path}: selector '{operation.selector}' "
                f"taken, widened to '{selector}'"
            )
            operation = operation.model_copy(update={"selector": selector})
        seen.add(selector)
        assigned.append(operation)

    counts = Counter(operation.selector for operation in assigned)
    duplicates = sorted(selector for selector, count in counts.items() if count > 1)
    if duplicates:
        raise DuplicateSelectorError(method.value, duplicates)
    return assigned


def sort_operations(operations: list[Operation]) -> list[Operation]:
    """Order operations by selector, then by method."""
    return sorted(operations, key=lambda op: (op.selector, op.method.value))
