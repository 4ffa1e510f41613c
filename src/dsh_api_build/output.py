"""Console output for dsh-api-build.

Generated modules, updated documents and inspect tables are written to
stdout so they can be redirected into files. Progress, debug and error
messages go to stderr and never mix with generated text.

Tables are rendered as Rich tables on an interactive terminal and as
tab-separated text otherwise; ``--json`` and ``--plain`` force a format.
Colour follows ``NO_COLOR``, ``TERM=dumb`` and ``--no-color``
(`clig.dev <https://clig.dev/>`_).

:func:`~dsh_api_build.app.main_callback` installs one :class:`OutputManager`
with :func:`set_output`; the pipeline reports through the module-level
:func:`info`, :func:`success`, :func:`error` and :func:`debug`.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Optional

from rich.console import Console
from rich.table import Table


class OutputFormat(str, Enum):
    """Table formats. ``AUTO`` picks ``RICH`` on a colour terminal, else ``PLAIN``."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Routes generated text to stdout and diagnostics to stderr.

    Args:
        format: Table format; ``AUTO`` is resolved once, at construction.
        no_color: Print diagnostics without Rich markup.
        quiet: Drop ``info`` and ``success`` messages. Errors always show.
        verbose: Show ``debug`` messages (selector widening, pruned paths).
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            rich = _is_tty() and not self._no_color
            format = OutputFormat.RICH if rich else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # --- stdout ---

    def print_data(self, text: str) -> None:
        """Write *text* verbatim, ending it with a newline.

        Generated source contains ``[...]`` subscripts, so it must never go
        through Rich markup.
        """
        sys.stdout.write(text if text.endswith("\n") else text + "\n")
        sys.stdout.flush()

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows as JSON records, tab-separated lines or a Rich table."""
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
            return
        if self._format == OutputFormat.PLAIN:
            for row in [headers, *rows]:
                self.print_data("\t".join(row))
            return

        table = Table(title=title, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    # --- stderr ---

    def _diagnostic(self, plain: str, styled: str) -> None:
        if self._no_color:
            print(plain, file=sys.stderr, flush=True)
        else:
            self._stderr.print(styled)

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, message)

    def success(self, message: str) -> None:
        """Report a written file or finished step. Hidden by ``--quiet``."""
        if not self._quiet:
            self._diagnostic(message, f"[green]{message}[/green]")

    def error(self, message: str) -> None:
        """Report a build failure. Shown even with ``--quiet``."""
        self._diagnostic(f"Error: {message}", f"[bold red]Error:[/bold red] {message}")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnostic(f"[debug] {message}", f"[dim]\\[debug] {message}[/dim]")


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (to anything) or ``TERM`` is ``dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# --- Global instance ---

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed manager, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager; tests call this between CLI runs."""
    global _output
    _output = None


def print_data(text: str) -> None:
    get_output().print_data(text)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
