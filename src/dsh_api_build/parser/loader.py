"""Load the DSH OpenAPI document from a local file, a URL or stdin.

The build normally reads a JSON document from a fixed relative path, but the
loader accepts any of:

* ``-`` -- read the document from stdin;
* ``http://`` or ``https://`` URLs -- fetched with :mod:`httpx`;
* anything else -- a local file path.

JSON is tried first, YAML second, unless the file extension or the
response content type says otherwise. Once parsed, the document must declare
an OpenAPI 3.x version; Swagger 2 documents are rejected.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from dsh_api_build.exceptions import SpecParseError

_FETCH_TIMEOUT = 30.0


def load_document(source: str) -> dict[str, Any]:
    """Load and parse an OpenAPI document.

    Args:
        source: A URL (http/https), file path, or ``-`` for stdin.

    Returns:
        The parsed document as a dictionary. It is not validated beyond
        being a JSON/YAML object; call :func:`validate_openapi_version` for that.

    Raises:
        SpecParseError: If the source cannot be read or parsed. The
            underlying I/O or HTTP error is chained.
    """
    if source == "-":
        content, hint, origin = _read_stdin(), "", "stdin"
    elif source.startswith(("http://", "https://")):
        content, hint = _fetch_url(source)
        origin = source
    else:
        content, hint = _read_file(source)
        origin = source

    if not content.strip():
        raise SpecParseError(f"OpenAPI document from {origin} is empty")
    return _parse_content(content, hint)


def _read_stdin() -> str:
    try:
        return sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc


def _fetch_url(url: str) -> tuple[str, str]:
    try:
        response = httpx.get(url, timeout=_FETCH_TIMEOUT, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching OpenAPI document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch OpenAPI document from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        return response.text, "json"
    if "yaml" in content_type or "yml" in content_type:
        return response.text, "yaml"
    return response.text, ""


def _read_file(path: str) -> tuple[str, str]:
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"OpenAPI document not found: {path}")
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read OpenAPI document {path}: {exc}") from exc

    suffix = file_path.suffix.lower()
    if suffix == ".json":
        return content, "json"
    if suffix in (".yaml", ".yml"):
        return content, "yaml"
    return content, ""


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse *content* as JSON, falling back to YAML unless the hint forbids it.

    Raises:
        SpecParseError: If neither parser accepts the content, or the result
            is not a mapping.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            return _require_mapping(json.loads(content))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
            json_error = exc

    try:
        return _require_mapping(yaml.safe_load(content))
    except yaml.YAMLError as exc:
        msg = "Failed to parse OpenAPI document as JSON or YAML"
        if json_error is not None:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise SpecParseError(msg) from exc


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        found = type(result).__name__ if result is not None else "empty document"
        raise SpecParseError(f"OpenAPI document must be an object (got {found})")
    return result


def validate_openapi_version(document: dict[str, Any]) -> str:
    """Check that *document* is OpenAPI 3.x and return its version string.

    Raises:
        SpecParseError: For Swagger 2.x documents, a missing ``openapi``
            field, or any major version other than 3.
    """
    if "swagger" in document:
        raise SpecParseError(
            f"Swagger {document['swagger']} is not supported, "
            "only OpenAPI 3.x documents can be processed"
        )

    version = document.get("openapi")
    if version is None:
        raise SpecParseError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version_str = str(version)
    if not version_str.startswith("3."):
        raise SpecParseError(
            f"Unsupported OpenAPI version: {version_str}, only 3.x is supported"
        )
    return version_str


def load_spec(source: str) -> dict[str, Any]:
    """Load a document and validate its OpenAPI version in one step."""
    document = load_document(source)
    validate_openapi_version(document)
    return document
