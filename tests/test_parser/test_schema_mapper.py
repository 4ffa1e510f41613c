"""Tests for dsh_api_build.parser.schema_mapper."""

from __future__ import annotations

from typing import Any

import pytest

from dsh_api_build.exceptions import UnsupportedSchemaError
from dsh_api_build.models import BodyKind, ParameterKind, ResponseKind
from dsh_api_build.parser.schema_mapper import (
    capitalize,
    parameter_type,
    reference_to_type_name,
    request_body_type,
    response_body_type,
    revise,
    schema_type_expression,
    to_type_name,
)


def _ref(name: str) -> dict[str, str]:
    return {"$ref": f"#/components/schemas/{name}"}


def _json(schema: Any) -> dict[str, Any]:
    return {"description": "ok", "content": {"application/json": {"schema": schema}}}


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


class TestTextHelpers:
    def test_capitalize_keeps_rest(self) -> None:
        assert capitalize("return bucketStatus") == "Return bucketStatus"
        assert capitalize("") == ""

    @pytest.mark.parametrize(
        ("summary", "expected"),
        [
            ("return bucket", "Return bucket."),
            ("  return bucket.  ", "Return bucket."),
            ("", ""),
            ("   ", ""),
        ],
    )
    def test_revise(self, summary: str, expected: str) -> None:
        assert revise(summary) == expected

    def test_reference_to_type_name(self) -> None:
        assert reference_to_type_name("#/components/schemas/Bucket") == "Bucket"

    def test_foreign_reference_is_kept_verbatim(self) -> None:
        assert reference_to_type_name("#/definitions/Bucket") == "$ref: #/definitions/Bucket"

    def test_to_type_name(self) -> None:
        assert to_type_name("get_bucket_by_id", "kind") == "GetBucketByIdKind"


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


class TestSchemaTypeExpression:
    def test_reference(self) -> None:
        assert schema_type_expression(_ref("Bucket")) == "Bucket"

    def test_string(self) -> None:
        assert schema_type_expression({"type": "string"}) == "str"

    def test_nested_collections(self) -> None:
        schema = {
            "type": "object",
            "additionalProperties": {"type": "array", "items": _ref("Task")},
        }
        assert schema_type_expression(schema) == "dict[str, list[Task]]"

    def test_array_without_items(self) -> None:
        with pytest.raises(UnsupportedSchemaError, match="array schema without items"):
            schema_type_expression({"type": "array"})

    def test_free_form_object(self) -> None:
        with pytest.raises(UnsupportedSchemaError, match="additionalProperties"):
            schema_type_expression({"type": "object", "additionalProperties": True})

    @pytest.mark.parametrize(
        "schema",
        [{"type": "integer"}, {"type": "boolean"}, {"oneOf": [_ref("A"), _ref("B")]}, {}],
    )
    def test_unsupported(self, schema: dict[str, Any]) -> None:
        with pytest.raises(UnsupportedSchemaError):
            schema_type_expression(schema)


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------


class TestParameterType:
    def test_plain_string(self) -> None:
        name, param_type, description = parameter_type(
            {"name": "id", "in": "path", "description": "bucket name", "schema": {"type": "string"}},
            "get_bucket_by_id",
        )
        assert name == "id"
        assert param_type.kind == ParameterKind.PLAIN_STRING
        assert param_type.annotation == "str"
        assert description == "Bucket name"

    def test_enum_is_constructed_owned(self) -> None:
        _, param_type, description = parameter_type(
            {"name": "kind", "in": "query", "schema": {"type": "string", "enum": ["a", "b"]}},
            "get_task",
        )
        assert param_type.kind == ParameterKind.CONSTRUCTED_OWNED
        assert param_type.annotation == "GetTaskKind"
        assert param_type.is_constructed
        assert description is None

    def test_pattern_is_constructed_ref(self) -> None:
        _, param_type, _ = parameter_type(
            {"name": "id", "in": "path", "schema": {"type": "string", "pattern": "^[a-z]+$"}},
            "get_volume_by_id",
        )
        assert param_type.kind == ParameterKind.CONSTRUCTED_REF
        assert str(param_type) == "GetVolumeByIdId"

    def test_schema_reference_is_named(self) -> None:
        _, param_type, _ = parameter_type(
            {"name": "limit", "in": "query", "schema": _ref("LimitValue")}, "get_limit"
        )
        assert param_type.kind == ParameterKind.NAMED_SCHEMA
        assert param_type.annotation == "LimitValue"
        assert not param_type.is_constructed

    def test_pattern_and_enum(self) -> None:
        with pytest.raises(UnsupportedSchemaError, match="both a pattern and an enum"):
            parameter_type(
                {
                    "name": "kind",
                    "in": "query",
                    "schema": {"type": "string", "pattern": "^a$", "enum": ["a"]},
                },
                "get_task",
            )

    def test_non_string(self) -> None:
        with pytest.raises(UnsupportedSchemaError, match="only strings are supported"):
            parameter_type(
                {"name": "limit", "in": "query", "schema": {"type": "integer"}}, "get_task"
            )

    def test_content_parameter(self) -> None:
        with pytest.raises(UnsupportedSchemaError, match="must be described by a schema"):
            parameter_type(
                {"name": "filter", "in": "query", "content": {"application/json": {}}},
                "get_task",
            )

    def test_missing_name(self) -> None:
        with pytest.raises(UnsupportedSchemaError, match="without a name"):
            parameter_type({"in": "query", "schema": {"type": "string"}}, "get_task")


# ---------------------------------------------------------------------------
# Request and response bodies
# ---------------------------------------------------------------------------


class TestRequestBodyType:
    def test_json_reference(self) -> None:
        body = request_body_type({"content": {"application/json": {"schema": _ref("Bucket")}}})
        assert body.kind == BodyKind.NAMED_SCHEMA
        assert body.annotation == "Bucket"

    def test_json_collection(self) -> None:
        body = request_body_type(
            {"content": {"application/json": {"schema": {"type": "array", "items": _ref("Acl")}}}}
        )
        assert body.annotation == "list[Acl]"

    def test_json_wins_over_text(self) -> None:
        body = request_body_type(
            {
                "content": {
                    "text/plain": {"schema": {"type": "string"}},
                    "application/json": {"schema": _ref("Bucket")},
                }
            }
        )
        assert body.kind == BodyKind.NAMED_SCHEMA

    def test_plain_text(self) -> None:
        body = request_body_type({"content": {"text/plain": {"schema": {"type": "string"}}}})
        assert body.kind == BodyKind.PLAIN_STRING
        assert str(body) == "str"

    def test_unsupported_media_type(self) -> None:
        with pytest.raises(UnsupportedSchemaError, match="application/xml"):
            request_body_type({"content": {"application/xml": {}}})

    def test_json_without_schema(self) -> None:
        with pytest.raises(UnsupportedSchemaError, match="without schema"):
            request_body_type({"content": {"application/json": {}}})


class TestResponseBodyType:
    def test_no_content_keeps_description(self) -> None:
        response = response_body_type({"description": "accepted"})
        assert response.kind == ResponseKind.NO_CONTENT
        assert response.description == "accepted"
        assert response.annotation == "None"
        assert response.selector_suffix == ""

    def test_named_scalar(self) -> None:
        response = response_body_type(_json(_ref("Bucket")))
        assert response.kind == ResponseKind.NAMED_SCALAR
        assert response.annotation == "Bucket"
        assert response.description is None

    def test_id_collection(self) -> None:
        response = response_body_type(_json(_ref("ChildList")))
        assert response.kind == ResponseKind.ID_COLLECTION
        assert response.annotation == "list[str]"
        assert response.selector_suffix == "-ids"

    def test_id_collection_schema_is_configurable(self) -> None:
        response = response_body_type(_json(_ref("ChildList")), id_collection_schema="Ids")
        assert response.kind == ResponseKind.NAMED_SCALAR

    def test_collection(self) -> None:
        response = response_body_type(_json({"type": "array", "items": _ref("Task")}))
        assert response.kind == ResponseKind.COLLECTION
        assert response.annotation == "list[Task]"
        assert response.selector_suffix == "s"

    def test_map(self) -> None:
        response = response_body_type(
            _json({"type": "object", "additionalProperties": _ref("Application")})
        )
        assert response.kind == ResponseKind.MAP
        assert response.annotation == "dict[str, Application]"
        assert response.selector_suffix == "-map"

    def test_json_string(self) -> None:
        response = response_body_type(_json({"type": "string"}))
        assert response.kind == ResponseKind.PLAIN_STRING
        assert response.is_text

    def test_plain_text(self) -> None:
        response = response_body_type(
            {"description": "ok", "content": {"text/plain": {"schema": {"type": "string"}}}}
        )
        assert response.kind == ResponseKind.PLAIN_STRING
        assert response.annotation == "str"

    def test_unsupported_json_schema(self) -> None:
        with pytest.raises(UnsupportedSchemaError, match="unsupported response schema"):
            response_body_type(_json({"type": "integer"}))
