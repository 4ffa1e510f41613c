"""Resolve component ``$ref`` pointers for parameters, responses and request bodies.

The generator never inlines *schema* references: the referenced schema name
is exactly what ends up in the generated type annotations. Parameter,
response and request body objects, however, may themselves be references
into ``#/components/parameters``, ``#/components/responses`` or
``#/components/requestBodies``. Those are followed here, one object at a
time, with cycle detection.

Only internal references (``#/...``) are supported. Pointer segments use
RFC 6901 escaping (``~1`` for ``/``, ``~0`` for ``~``).
"""

from __future__ import annotations

from typing import Any

from dsh_api_build.exceptions import SpecParseError, SpecificationError

SCHEMA_PREFIX = "#/components/schemas/"


def resolve_pointer(ref: str, document: dict[str, Any]) -> Any:
    """Return the value a JSON pointer ``$ref`` refers to.

    Args:
        ref: The reference, e.g. ``"#/components/parameters/tenant"``.
        document: The root OpenAPI document.

    Raises:
        SpecParseError: If the reference is external or any segment does not
            exist in the document.
    """
    if not ref.startswith("#/"):
        raise SpecParseError(
            f"External $ref not supported: {ref}, only internal references (#/...) are handled"
        )

    current: Any = document
    for raw_segment in ref[2:].split("/"):
        segment = raw_segment.replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict):
            if segment not in current:
                raise SpecParseError(f"Cannot resolve $ref '{ref}': key '{segment}' not found")
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise SpecParseError(
                f"Cannot resolve $ref '{ref}': cannot navigate into {type(current).__name__}"
            )
    return current


def resolve_object(obj: Any, document: dict[str, Any]) -> Any:
    """Follow ``$ref`` chains on a parameter, response or request body object.

    Schema references are returned untouched. Nested values of the resolved
    object are not walked.

    Raises:
        SpecificationError: If the references form a cycle.
        SpecParseError: If a reference cannot be resolved.
    """
    seen: list[str] = []
    while isinstance(obj, dict) and "$ref" in obj:
        ref = obj["$ref"]
        if not isinstance(ref, str) or ref.startswith(SCHEMA_PREFIX):
            return obj
        if ref in seen:
            raise SpecificationError(
                f"circular reference {' -> '.join(seen + [ref])}"
            )
        seen.append(ref)
        obj = resolve_pointer(ref, document)
    return obj
