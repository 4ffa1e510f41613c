"""Inspect commands -- show what the generator derives from a spec.

Provides the ``dsh-api-build inspect`` sub-command group with read-only
commands. Both load and update the document exactly like ``build`` does, so the
selectors and operation ids shown are the ones the generated code uses.
"""

from __future__ import annotations

from typing import List, Optional

import typer

from dsh_api_build.output import get_output, info


inspect_app = typer.Typer(no_args_is_help=True)


def _collect(spec: str, feature: Optional[List[str]]):  # noqa: ANN202
    """Load, update and extract *spec*, returning ``(document, collected)``."""
    from dsh_api_build.config import resolve_config
    from dsh_api_build.parser.extractor import collect_operations
    from dsh_api_build.pipeline import load_and_update

    config = resolve_config(cli_spec=spec, cli_features=feature)
    document = load_and_update(spec, config.features)
    return document, collect_operations(document, config)


@inspect_app.command("selectors")
def inspect_selectors(
    spec: str = typer.Argument(..., help="OpenAPI document: file path, URL or '-'."),
    method: Optional[str] = typer.Option(
        None, "--method", "-m", help="Only show operations of this method."
    ),
    feature: Optional[List[str]] = typer.Option(
        None, "--feature", "-f", help="Enable an optional kind (manage, robot)."
    ),
) -> None:
    """List every operation with its selector.

    Example::

        dsh-api-build inspect selectors openapi.json --method get
    """
    from dsh_api_build.app import handle_errors
    from dsh_api_build.exceptions import InvalidUsageError
    from dsh_api_build.models import SUPPORTED_METHODS, HTTPMethod

    with handle_errors():
        wanted: Optional[HTTPMethod] = None
        if method is not None:
            try:
                wanted = HTTPMethod(method.lower())
            except ValueError:
                raise InvalidUsageError(f"Unknown method '{method}'") from None
            if wanted not in SUPPORTED_METHODS:
                raise InvalidUsageError(f"{wanted.value} method is not supported")

        _, collected = _collect(spec, feature)
        rows: list[list[str]] = []
        for http_method, operations in collected.items():
            if wanted is not None and http_method != wanted:
                continue
            for op in operations:
                rows.append([
                    op.selector,
                    http_method.value.upper(),
                    op.path,
                    op.operation_id,
                    op.ok_response.annotation,
                ])

        if not rows:
            info("No operations found.")
            return
        get_output().print_table(
            ["Selector", "Method", "Path", "Operation Id", "Returns"],
            rows,
            title=f"Selectors ({len(rows)})",
        )


@inspect_app.command("operations")
def inspect_operations(
    spec: str = typer.Argument(..., help="OpenAPI document: file path, URL or '-'."),
    feature: Optional[List[str]] = typer.Option(
        None, "--feature", "-f", help="Enable an optional kind (manage, robot)."
    ),
) -> None:
    """Count operations per kind and method.

    Disabled kinds are pruned before counting, so the table reflects the
    enabled features.
    """
    from dsh_api_build.app import handle_errors
    from dsh_api_build.parser.extractor import all_operations

    with handle_errors():
        document, collected = _collect(spec, feature)
        counts: dict[tuple[str, str], int] = {}
        for op in all_operations(collected):
            key = (op.kind.value, op.method.value.upper())
            counts[key] = counts.get(key, 0) + 1

        rows = [[kind, method, str(count)] for (kind, method), count in sorted(counts.items())]
        version = (document.get("info") or {}).get("version", "unknown")
        get_output().print_table(
            ["Kind", "Method", "Operations"],
            rows,
            title=f"Operations in API version {version}",
        )
