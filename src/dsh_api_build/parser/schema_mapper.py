"""Map OpenAPI schema nodes to the generator's semantic type categories.

Parameters, request bodies and responses are all classified here. The
mapping is deliberately narrow: the DSH API only uses strings, named schema
references, arrays of those and string-keyed maps of those. Everything else
(numbers, booleans, free-form objects, ``oneOf`` and friends) raises
:class:`~dsh_api_build.exceptions.UnsupportedSchemaError` so the build stops
instead of emitting code with a guessed type.

**Parameter rules** (inline string schemas):

=====================  ======================  ==============================
pattern                enum                    result
=====================  ======================  ==============================
no                     no                      ``PLAIN_STRING``
no                     yes                     ``CONSTRUCTED_OWNED``
yes                    no                      ``CONSTRUCTED_REF``
yes                    yes                     unsupported
=====================  ======================  ==============================

Constructed type names are synthesized from the operation id and the
parameter name, e.g. ``get_bucket_by_id`` and ``kind`` give
``GetBucketByIdKind``.
"""

from __future__ import annotations

from typing import Any, Optional

from dsh_api_build.exceptions import UnsupportedSchemaError
from dsh_api_build.models import (
    BodyKind,
    ParameterKind,
    ParameterType,
    RequestBodyType,
    ResponseBodyType,
    ResponseKind,
)
from dsh_api_build.parser.resolver import SCHEMA_PREFIX

JSON_MEDIA_TYPE = "application/json"
TEXT_MEDIA_TYPE = "text/plain"


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def capitalize(text: str) -> str:
    """Upper-case the first character and leave the rest untouched."""
    return text[:1].upper() + text[1:]


def revise(description: str) -> str:
    """Turn a summary into a sentence: trimmed, capitalized, ending with a period."""
    trimmed = description.strip()
    if not trimmed:
        return trimmed
    sentence = capitalize(trimmed)
    return sentence if sentence.endswith(".") else sentence + "."


def reference_to_type_name(ref: str) -> str:
    """Return the schema name of a ``#/components/schemas/...`` reference.

    A reference with any other prefix is returned as ``"$ref: <ref>"`` so it
    shows up verbatim in diagnostics instead of being dropped.
    """
    if ref.startswith(SCHEMA_PREFIX):
        return ref[len(SCHEMA_PREFIX):]
    return f"$ref: {ref}"


def to_type_name(operation_id: str, parameter_name: str) -> str:
    """Synthesize the type name of a constructed parameter type."""
    return "".join(capitalize(word) for word in operation_id.split("_")) + capitalize(
        parameter_name
    )


def _describe(schema: Any) -> str:
    if isinstance(schema, dict):
        if "type" in schema:
            return f"type '{schema['type']}'"
        for combinator in ("oneOf", "anyOf", "allOf", "not"):
            if combinator in schema:
                return combinator
    return "untyped schema"


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


def schema_type_expression(schema: Any) -> str:
    """Return the Python type expression for a body or item schema.

    * ``{"$ref": "#/components/schemas/Foo"}`` gives ``Foo``
    * ``{"type": "string"}`` gives ``str``
    * ``{"type": "array", "items": X}`` gives ``list[X]``
    * ``{"type": "object", "additionalProperties": X}`` gives ``dict[str, X]``

    Raises:
        UnsupportedSchemaError: For any other shape, including objects whose
            ``additionalProperties`` is ``true`` instead of a schema.
    """
    if not isinstance(schema, dict):
        raise UnsupportedSchemaError(f"unsupported schema {schema!r}")
    if "$ref" in schema:
        return reference_to_type_name(schema["$ref"])

    schema_type = schema.get("type")
    if schema_type == "string":
        return "str"
    if schema_type == "array":
        if "items" not in schema:
            raise UnsupportedSchemaError("array schema without items")
        return f"list[{schema_type_expression(schema['items'])}]"
    if schema_type == "object":
        return f"dict[str, {schema_type_expression(_map_value_schema(schema))}]"
    raise UnsupportedSchemaError(f"unsupported schema with {_describe(schema)}")


def _map_value_schema(schema: dict[str, Any]) -> Any:
    additional = schema.get("additionalProperties")
    if not isinstance(additional, dict):
        raise UnsupportedSchemaError(
            "object schema without an additionalProperties schema"
        )
    return additional


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------


def parameter_type(
    parameter: dict[str, Any], operation_id: str
) -> tuple[str, ParameterType, Optional[str]]:
    """Classify one (already resolved) parameter object.

    Args:
        parameter: The parameter object, with component references followed.
        operation_id: The owning operation's id, used to name constructed types.

    Returns:
        ``(name, ParameterType, description)`` where the description is
        capitalized, or ``None`` when absent.

    Raises:
        UnsupportedSchemaError: For ``content`` parameters, non-string
            inline schemas and strings with both a pattern and an enum.
    """
    name = parameter.get("name")
    if not isinstance(name, str) or not name:
        raise UnsupportedSchemaError(f"parameter without a name in operation {operation_id}")
    description = parameter.get("description")
    description = capitalize(description) if description else None

    if "content" in parameter or "schema" not in parameter:
        raise UnsupportedSchemaError(
            f"parameter '{name}' of operation {operation_id} must be described by a schema"
        )

    schema = parameter["schema"]
    if isinstance(schema, dict) and "$ref" in schema:
        return (
            name,
            ParameterType(
                kind=ParameterKind.NAMED_SCHEMA,
                type_name=reference_to_type_name(schema["$ref"]),
            ),
            description,
        )

    if not isinstance(schema, dict) or schema.get("type") != "string":
        raise UnsupportedSchemaError(
            f"parameter '{name}' of operation {operation_id} has {_describe(schema)}, "
            "only strings are supported"
        )

    has_pattern = "pattern" in schema
    has_enum = bool(schema.get("enum"))
    if has_pattern and has_enum:
        raise UnsupportedSchemaError(
            f"parameter '{name}' of operation {operation_id} has both a pattern and an enum"
        )
    if has_enum:
        kind = ParameterKind.CONSTRUCTED_OWNED
    elif has_pattern:
        kind = ParameterKind.CONSTRUCTED_REF
    else:
        return name, ParameterType(kind=ParameterKind.PLAIN_STRING), description
    return name, ParameterType(kind=kind, type_name=to_type_name(operation_id, name)), description


# ---------------------------------------------------------------------------
# Request and response bodies
# ---------------------------------------------------------------------------


def request_body_type(body: dict[str, Any]) -> RequestBodyType:
    """Classify a (resolved) request body object.

    Raises:
        UnsupportedSchemaError: If the body has neither JSON nor plain text
            content, or its JSON content has no schema.
    """
    content = body.get("content") or {}
    if JSON_MEDIA_TYPE in content:
        media = content[JSON_MEDIA_TYPE] or {}
        if "schema" not in media:
            raise UnsupportedSchemaError("json request body without schema")
        return RequestBodyType(
            kind=BodyKind.NAMED_SCHEMA, type_name=schema_type_expression(media["schema"])
        )
    if TEXT_MEDIA_TYPE in content:
        return RequestBodyType(kind=BodyKind.PLAIN_STRING)
    raise UnsupportedSchemaError(
        f"unsupported request body media type(s): {', '.join(sorted(content)) or 'none'}"
    )


def response_body_type(
    response: dict[str, Any], id_collection_schema: str = "ChildList"
) -> ResponseBodyType:
    """Classify a (resolved) response object.

    JSON content takes precedence over plain text. A response without
    either is ``NO_CONTENT`` and keeps its description, which documents
    when the call succeeds.

    Raises:
        UnsupportedSchemaError: If the JSON schema has no mapping.
    """
    content = response.get("content") or {}
    if JSON_MEDIA_TYPE in content:
        media = content[JSON_MEDIA_TYPE] or {}
        if "schema" not in media:
            raise UnsupportedSchemaError("json response without schema")
        return _json_response_type(media["schema"], id_collection_schema)
    if TEXT_MEDIA_TYPE in content:
        return ResponseBodyType(kind=ResponseKind.PLAIN_STRING)
    return ResponseBodyType(
        kind=ResponseKind.NO_CONTENT, description=response.get("description") or ""
    )


def _json_response_type(schema: Any, id_collection_schema: str) -> ResponseBodyType:
    if isinstance(schema, dict) and "$ref" in schema:
        name = reference_to_type_name(schema["$ref"])
        if name == id_collection_schema:
            return ResponseBodyType(kind=ResponseKind.ID_COLLECTION)
        return ResponseBodyType(kind=ResponseKind.NAMED_SCALAR, type_name=name)

    schema_type = schema.get("type") if isinstance(schema, dict) else None
    if schema_type == "string":
        return ResponseBodyType(kind=ResponseKind.PLAIN_STRING)
    if schema_type == "array" and "items" in schema:
        return ResponseBodyType(
            kind=ResponseKind.COLLECTION, type_name=schema_type_expression(schema["items"])
        )
    if schema_type == "object":
        return ResponseBodyType(
            kind=ResponseKind.MAP,
            type_name=schema_type_expression(_map_value_schema(schema)),
        )
    raise UnsupportedSchemaError(f"unsupported response schema with {_describe(schema)}")
