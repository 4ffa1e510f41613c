"""Shared test fixtures for dsh_api_build.

Provides a small DSH-shaped OpenAPI document, isolated config
environments, output state management and a CLI runner. These fixtures are
automatically discovered by pytest and available to all test modules without
explicit imports.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import pytest

from dsh_api_build.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    Resetting forces a fresh manager to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Spec fixtures
# ---------------------------------------------------------------------------


def _ref(name: str) -> dict[str, str]:
    return {"$ref": f"#/components/schemas/{name}"}


def _json(schema: dict[str, Any], description: str = "successful operation") -> dict[str, Any]:
    return {"description": description, "content": {"application/json": {"schema": schema}}}


def _text(description: str = "successful operation") -> dict[str, Any]:
    return {"description": description, "content": {"text/plain": {"schema": {"type": "string"}}}}


_TENANT = {"$ref": "#/components/parameters/tenant"}
_ID = {
    "name": "id",
    "in": "path",
    "description": "name of the requested resource",
    "required": True,
    "schema": {"type": "string"},
}
_APPID = {
    "name": "appid",
    "in": "path",
    "description": "application name",
    "required": True,
    "schema": {"type": "string"},
}
_ERROR = {"description": "bad request", "content": {"text/plain": {"schema": {"type": "string"}}}}


DSH_SPEC: dict[str, Any] = {
    "openapi": "3.0.1",
    "info": {
        "title": "DSH Resource Management API",
        "version": "1.9.0",
        "description": "Resource management API for DSH",
    },
    "paths": {
        "/allocation/{tenant}/bucket": {
            "get": {
                "summary": "return list of bucket names",
                "parameters": [_TENANT],
                "responses": {"200": _json(_ref("ChildList"))},
            }
        },
        "/allocation/{tenant}/bucket/{id}": {
            "parameters": [_TENANT, _ID],
            "get": {
                "operationId": "getBucketById",
                "summary": "return bucket configuration",
                "responses": {"200": _json(_ref("Bucket")), "400": _ERROR},
            },
            "put": {
                "summary": "create or update a bucket",
                "requestBody": {
                    "content": {"application/json": {"schema": _ref("Bucket")}},
                    "required": True,
                },
                "responses": {"202": {"description": "accepted"}, "400": _ERROR},
            },
            "delete": {
                "summary": "delete a bucket",
                "responses": {"204": {"description": "deleted"}, "default": _ERROR},
            },
        },
        "/allocation/{tenant}/bucket/{id}/status": {
            "get": {
                "summary": "return bucket status",
                "parameters": [_TENANT, _ID],
                "responses": {"200": _json(_ref("BucketStatus"))},
            }
        },
        "/allocation/{tenant}/secret/{id}": {
            "put": {
                "summary": "create a secret",
                "parameters": [_TENANT, _ID],
                "requestBody": {"content": {"text/plain": {"schema": {"type": "string"}}}},
                "responses": {"204": {"description": "created"}},
            }
        },
        "/allocation/{tenant}/secret/{id}/configuration": {
            "get": {
                "summary": "return secret value",
                "parameters": [_TENANT, _ID],
                "responses": {"200": _text()},
            }
        },
        "/allocation/{tenant}/application/configuration": {
            "get": {
                "summary": "return all application configurations",
                "parameters": [_TENANT],
                "responses": {
                    "200": _json(
                        {"type": "object", "additionalProperties": _ref("Application")}
                    )
                },
            }
        },
        "/allocation/{tenant}/application/configuration/{id}": {
            "get": {
                "summary": "return application configuration",
                "parameters": [_TENANT, _ID],
                "responses": {"200": _json(_ref("Application"))},
            }
        },
        "/allocation/{tenant}/application/{appid}/configuration": {
            "get": {
                "summary": "return application configuration by application id",
                "parameters": [_TENANT, _APPID],
                "responses": {"200": _json(_ref("Application"))},
            }
        },
        "/allocation/{tenant}/task": {
            "get": {
                "summary": "return tasks",
                "parameters": [
                    _TENANT,
                    {
                        "name": "kind",
                        "in": "query",
                        "required": True,
                        "schema": {"type": "string", "enum": ["stream", "batch"]},
                    },
                ],
                "responses": {"200": _json({"type": "array", "items": _ref("Task")})},
            }
        },
        "/allocation/{tenant}/volume/{id}": {
            "get": {
                "summary": "return volume",
                "parameters": [
                    _TENANT,
                    {
                        "name": "id",
                        "in": "path",
                        "required": True,
                        "schema": {"type": "string", "pattern": "^[a-z]+$"},
                    },
                ],
                "responses": {"200": _json(_ref("Volume"))},
            }
        },
        "/appcatalog/{tenant}/manifest": {
            "get": {
                "summary": "return manifest ids",
                "parameters": [_TENANT],
                "responses": {"200": _json(_ref("ChildList"))},
            }
        },
        "/manage/{manager}/tenant/{tenant}/limit": {
            "get": {
                "summary": "return tenant limits",
                "parameters": [
                    {"name": "manager", "in": "path", "required": True, "schema": {"type": "string"}},
                    {"name": "tenant", "in": "path", "required": True, "schema": {"type": "string"}},
                ],
                "responses": {"200": _json({"type": "array", "items": _ref("LimitValue")})},
            }
        },
        "/robot/{tenant}/generate-secret": {
            "post": {
                "summary": "generate a robot secret",
                "parameters": [_TENANT],
                "responses": {"201": _text("created"), "200": _text()},
            }
        },
    },
    "components": {
        "parameters": {
            "tenant": {
                "name": "tenant",
                "in": "path",
                "description": "tenant name",
                "required": True,
                "schema": {"type": "string"},
            }
        },
        "schemas": {
            "Application": {"type": "object", "properties": {"image": {"type": "string"}}},
            "Bucket": {
                "type": "object",
                "properties": {
                    "encrypted": {"type": "boolean"},
                    "versioned": {"type": "boolean"},
                },
            },
            "BucketStatus": {"type": "object"},
            "ChildList": {"type": "array", "items": {"type": "string"}},
            "LimitValue": {"type": "object"},
            "Task": {"type": "object"},
            "Volume": {"type": "object"},
        },
    },
}
"""A trimmed DSH resource management document covering every type category."""


@pytest.fixture
def dsh_raw() -> dict[str, Any]:
    """A fresh deep copy of :data:`DSH_SPEC`, safe to mutate."""
    return copy.deepcopy(DSH_SPEC)


@pytest.fixture
def dsh_updated(dsh_raw: dict[str, Any]) -> dict[str, Any]:
    """The fixture document after pre-processing with every feature enabled."""
    from dsh_api_build.parser.updater import update_openapi

    return update_openapi(dsh_raw, ["manage", "robot"])


@pytest.fixture
def dsh_spec_file(tmp_path: Path, dsh_raw: dict[str, Any]) -> Path:
    """The fixture document written to a JSON file."""
    path = tmp_path / "openapi.json"
    path.write_text(json.dumps(dsh_raw, indent=2), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_DATA_HOME to a subdirectory of tmp_path so that crash logs
    never touch the real user directory, clears all DSH_API_BUILD_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in [
        "DSH_API_BUILD_SPEC",
        "DSH_API_BUILD_FEATURES",
        "DSH_API_BUILD_TYPES_MODULE",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
