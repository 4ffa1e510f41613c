"""Typer application and console-script entry point for dsh-api-build.

Commands:

* ``update`` -- write the pre-processed OpenAPI document.
* ``generic`` / ``wrapped`` -- emit one client module.
* ``build`` -- run the whole pipeline into an output directory.
* ``inspect selectors`` / ``inspect operations`` -- show what would be
  generated.

Every command resolves its configuration through
:func:`~dsh_api_build.config.resolve_config`, so CLI flags override
environment variables, which override ``dsh-api-build.json``.

:func:`main` is the console-script entry point. Known errors exit with their
exit code; anything unexpected writes a crash log under the data directory.
"""

from __future__ import annotations

import io
import signal
import sys
import traceback
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, List, Optional

import typer

from dsh_api_build import __version__
from dsh_api_build.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="dsh-api-build",
    help="Generate DSH API client modules from an OpenAPI 3.x document.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


@contextmanager
def handle_errors() -> Iterator[None]:
    """Report :class:`~dsh_api_build.exceptions.DshApiBuildError` and exit with its code."""
    from dsh_api_build.exceptions import DshApiBuildError
    from dsh_api_build.output import error

    try:
        yield
    except DshApiBuildError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"dsh-api-build {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON table output."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text table output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~dsh_api_build.output.OutputManager` from
    the CLI flags.
    """
    from dsh_api_build.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))


# ------------------------------------------------------------------ #
# Shared options
# ------------------------------------------------------------------ #

_FEATURE_HELP = "Enable an optional kind (manage, robot). Repeatable."


def _emit(text: str, output_file: Optional[Path]) -> None:
    """Write generated text to *output_file* atomically, or to stdout."""
    from dsh_api_build.config import atomic_write
    from dsh_api_build.output import print_data, success

    if output_file is None:
        print_data(text)
        return
    atomic_write(output_file, text)
    success(f"Wrote {output_file}")


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("update")
def update_command(
    spec: str = typer.Argument(..., help="OpenAPI document: file path, URL or '-'."),
    output_file: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write to this file instead of stdout."
    ),
    feature: Optional[List[str]] = typer.Option(None, "--feature", "-f", help=_FEATURE_HELP),
) -> None:
    """Write the pre-processed OpenAPI document.

    Prunes disabled kinds, adds Authorization parameters and synthesizes
    operation ids.
    """
    from dsh_api_build.config import resolve_config
    from dsh_api_build.pipeline import dump_document, load_and_update

    with handle_errors():
        config = resolve_config(cli_spec=spec, cli_features=feature)
        document = load_and_update(spec, config.features)
        _emit(dump_document(document), output_file)


def _generate(
    which: str,
    spec: str,
    output_file: Optional[Path],
    feature: Optional[List[str]],
    types_module: Optional[str],
) -> None:
    from dsh_api_build.config import resolve_config
    from dsh_api_build.pipeline import generate_generic, generate_wrapped, load_and_update

    with handle_errors():
        config = resolve_config(
            cli_spec=spec, cli_features=feature, cli_types_module=types_module
        )
        document = load_and_update(spec, config.features)
        buffer = io.StringIO()
        generate = generate_generic if which == "generic" else generate_wrapped
        generate(buffer, document, config)
        _emit(buffer.getvalue(), output_file)


@app.command("generic")
def generic_command(
    spec: str = typer.Argument(..., help="OpenAPI document: file path, URL or '-'."),
    output_file: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write to this file instead of stdout."
    ),
    feature: Optional[List[str]] = typer.Option(None, "--feature", "-f", help=_FEATURE_HELP),
    types_module: Optional[str] = typer.Option(
        None, "--types-module", help="Module the generated code imports schema types from."
    ),
) -> None:
    """Emit the generic (selector dispatched) client module."""
    _generate("generic", spec, output_file, feature, types_module)


@app.command("wrapped")
def wrapped_command(
    spec: str = typer.Argument(..., help="OpenAPI document: file path, URL or '-'."),
    output_file: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write to this file instead of stdout."
    ),
    feature: Optional[List[str]] = typer.Option(None, "--feature", "-f", help=_FEATURE_HELP),
    types_module: Optional[str] = typer.Option(
        None, "--types-module", help="Module the generated code imports schema types from."
    ),
) -> None:
    """Emit the wrapped (one typed method per operation) client module."""
    _generate("wrapped", spec, output_file, feature, types_module)


@app.command("build")
def build_command(
    spec: Optional[str] = typer.Argument(
        None, help="OpenAPI document. Defaults to the configured spec."
    ),
    out_dir: Optional[str] = typer.Option(
        None, "--out-dir", "-d", help="Directory for the generated files."
    ),
    feature: Optional[List[str]] = typer.Option(None, "--feature", "-f", help=_FEATURE_HELP),
    types_module: Optional[str] = typer.Option(
        None, "--types-module", help="Module the generated code imports schema types from."
    ),
) -> None:
    """Run the full pipeline: updated document, generic and wrapped modules."""
    from dsh_api_build.config import resolve_config
    from dsh_api_build.output import success
    from dsh_api_build.pipeline import build

    with handle_errors():
        config = resolve_config(
            cli_spec=spec,
            cli_features=feature,
            cli_out_dir=out_dir,
            cli_types_module=types_module,
        )
        for path in build(config):
            success(f"Wrote {path}")


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _register_commands() -> None:
    from dsh_api_build.commands.inspect import inspect_app

    if not any(group.name == "inspect" for group in app.registered_groups):
        app.add_typer(inspect_app, name="inspect", help="Inspect derived operations.")


_register_commands()


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from dsh_api_build.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``dsh-api-build`` console script.

    :class:`~dsh_api_build.exceptions.DshApiBuildError` instances that escape
    a command cause a clean exit with the error's ``exit_code``. All other
    exceptions produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from dsh_api_build.exceptions import DshApiBuildError
        from dsh_api_build.output import error

        if isinstance(exc, DshApiBuildError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
