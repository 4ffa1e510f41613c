"""End-to-end build: load, update, extract and emit.

:func:`build` is what the ``build`` command and build scripts call. It
renders every artifact in memory first and only then replaces files with
:func:`~dsh_api_build.config.atomic_write`, so a failing generation leaves
all existing files untouched.
"""

from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Any, Iterable

from dsh_api_build import output
from dsh_api_build.config import atomic_write
from dsh_api_build.exceptions import InvalidUsageError
from dsh_api_build.generator.generic import generate_generic
from dsh_api_build.generator.wrapped import generate_wrapped
from dsh_api_build.models import GeneratorConfig
from dsh_api_build.parser.loader import load_spec
from dsh_api_build.parser.updater import update_openapi

__all__ = [
    "build",
    "dump_document",
    "generate_generic",
    "generate_wrapped",
    "load_and_update",
    "render_all",
]


def load_and_update(source: str, features: Iterable[str] = ()) -> dict[str, Any]:
    """Load the document from *source* and return its updated copy.

    Raises:
        SpecParseError: If the document cannot be loaded or is not OpenAPI 3.x.
        UnrecognizedKindError: If a path has an unknown first literal.
    """
    output.debug(f"Loading OpenAPI document from {source}")
    document = load_spec(source)
    return update_openapi(document, features)


def dump_document(document: dict[str, Any]) -> str:
    """Serialize an (updated) document as indented JSON with a trailing newline."""
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def _render(generate: Any, document: dict[str, Any], config: GeneratorConfig) -> str:
    buffer = io.StringIO()
    generate(buffer, document, config)
    return buffer.getvalue()


def render_all(document: dict[str, Any], config: GeneratorConfig) -> dict[str, str]:
    """Render every artifact for an updated document, keyed by file name."""
    artifacts: dict[str, str] = {}
    if config.updated_spec_file:
        artifacts[config.updated_spec_file] = dump_document(document)
    artifacts[config.generic_file] = _render(generate_generic, document, config)
    artifacts[config.wrapped_file] = _render(generate_wrapped, document, config)
    return artifacts


def build(config: GeneratorConfig) -> list[Path]:
    """Run the whole pipeline and write the generated files to ``config.out_dir``.

    Returns:
        The written paths, in write order.

    Raises:
        InvalidUsageError: If no spec source is configured.
        DshApiBuildError: Any pipeline error. Nothing is written in that case.
        OutputError: If a file cannot be written.
    """
    if not config.spec:
        raise InvalidUsageError(
            "No OpenAPI document configured. Pass SPEC, set DSH_API_BUILD_SPEC "
            "or add 'spec' to dsh-api-build.json"
        )
    document = load_and_update(config.spec, config.features)
    artifacts = render_all(document, config)

    out_dir = Path(config.out_dir)
    written: list[Path] = []
    for name, text in artifacts.items():
        path = out_dir / name
        atomic_write(path, text)
        output.debug(f"Wrote {path}")
        written.append(path)
    return written
