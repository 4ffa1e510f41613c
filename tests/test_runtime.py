"""Tests for dsh_api_build.runtime, the helpers imported by generated code."""

from __future__ import annotations

import enum

import pytest
from pydantic import BaseModel, RootModel, ValidationError

from dsh_api_build.runtime import (
    ConfigurationError,
    DshApiError,
    MethodDescriptor,
    ParameterError,
    check_body,
    check_parameters,
    parse_constructed,
    parse_json,
    parse_json_string,
    to_ids,
    to_serializable,
)


class Bucket(BaseModel):
    encrypted: bool


class Kind(str, enum.Enum):
    STREAM = "stream"


class ChildList(RootModel[list[str]]):
    pass


class TestErrors:
    def test_hierarchy(self) -> None:
        assert issubclass(ParameterError, DshApiError)
        assert issubclass(ConfigurationError, DshApiError)


class TestCheckParameters:
    def test_exact_count(self) -> None:
        check_parameters(["a", "b"], 2)
        check_parameters((), 0)

    @pytest.mark.parametrize(
        ("parameters", "expected", "message"),
        [
            (["a"], 0, "none expected"),
            ([], 1, "one parameter expected"),
            (["a"], 3, "3 parameters expected"),
        ],
    )
    def test_wrong_count(self, parameters: list[str], expected: int, message: str) -> None:
        with pytest.raises(ParameterError, match=f"wrong number of parameters \\({message}\\)"):
            check_parameters(parameters, expected)


class TestCheckBody:
    def test_matching(self) -> None:
        check_body("{}", "Bucket")
        check_body(None, None)

    def test_missing(self) -> None:
        with pytest.raises(ParameterError, match=r"body expected \(list\[Acl\]\)"):
            check_body(None, "list[Acl]")

    def test_unexpected(self) -> None:
        with pytest.raises(ParameterError, match="no body expected"):
            check_body("{}", None)


class TestConversions:
    def test_parse_constructed_enum(self) -> None:
        assert parse_constructed(Kind, "stream") is Kind.STREAM

    def test_parse_constructed_invalid(self) -> None:
        with pytest.raises(ParameterError, match="'batch' is not a valid Kind"):
            parse_constructed(Kind, "batch")

    def test_parse_json_model(self) -> None:
        assert parse_json(Bucket, '{"encrypted": true}') == Bucket(encrypted=True)

    def test_parse_json_collection(self) -> None:
        assert parse_json(dict[str, Bucket], '{"a": {"encrypted": false}}') == {
            "a": Bucket(encrypted=False)
        }

    def test_parse_json_invalid(self) -> None:
        with pytest.raises(ParameterError, match=r"json could not be parsed as a valid list\[Bucket\]"):
            parse_json(list[Bucket], "{")

    def test_parse_json_string(self) -> None:
        assert parse_json_string('"ABCDEF"') == "ABCDEF"

    def test_parse_json_string_unquoted(self) -> None:
        with pytest.raises(ParameterError, match="valid string"):
            parse_json_string("ABCDEF")

    def test_to_serializable(self) -> None:
        assert to_serializable([Bucket(encrypted=True)]) == [{"encrypted": True}]
        assert to_serializable({"k": Kind.STREAM}) == {"k": "stream"}

    def test_to_ids(self) -> None:
        assert to_ids(["a", "b"]) == ["a", "b"]
        assert to_ids(ChildList(["x", "y"])) == ["x", "y"]


class TestMethodDescriptor:
    def test_defaults(self) -> None:
        descriptor = MethodDescriptor(path="/allocation/{tenant}/bucket")
        assert descriptor.parameters == ()
        assert descriptor.body_type is None

    def test_frozen(self) -> None:
        descriptor = MethodDescriptor(path="/allocation/{tenant}/bucket")
        with pytest.raises(ValidationError):
            descriptor.path = "/other"  # type: ignore[misc]
