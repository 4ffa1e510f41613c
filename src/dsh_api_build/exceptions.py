"""Exception hierarchy for dsh_api_build.

All exceptions inherit from :class:`DshApiBuildError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`dsh_api_build.exit_codes`.
The top-level error handler in :func:`dsh_api_build.app.main` catches
``DshApiBuildError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

None of these errors is recovered from inside the pipeline. The only retry
is the selector widening pass, which happens before
:class:`DuplicateSelectorError` is ever raised.

Subclass hierarchy::

    DshApiBuildError (exit 1)
    +-- InvalidUsageError          (exit 2)
    +-- ConfigError                (exit 1)
    +-- SpecParseError             (exit 7)
    +-- SpecificationError         (exit 8)
    |   +-- UnsupportedSchemaError
    |   +-- UnrecognizedKindError
    |   +-- UnsupportedMethodError
    +-- DuplicateSelectorError     (exit 9)
    +-- OutputError                (exit 10)
"""

from __future__ import annotations

from dsh_api_build.exit_codes import (
    EXIT_DUPLICATE_SELECTOR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_OUTPUT_ERROR,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_SPECIFICATION_ERROR,
)


class DshApiBuildError(Exception):
    """Base exception for all dsh_api_build errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`dsh_api_build.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(DshApiBuildError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(DshApiBuildError):
    """Raised for configuration problems (invalid project file, bad feature names)."""

    exit_code = EXIT_GENERIC_FAILURE


class SpecParseError(DshApiBuildError):
    """Raised when the OpenAPI spec cannot be read, parsed or fails validation."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class SpecificationError(DshApiBuildError):
    """Raised when the OpenAPI document is readable but describes something the generator cannot map.

    Examples are a missing ``operationId`` or an operation without any 2xx
    response.
    """

    exit_code = EXIT_SPECIFICATION_ERROR


class UnsupportedSchemaError(SpecificationError):
    """Raised for schema shapes without a type mapping (numbers, pattern plus enum, ...)."""


class UnrecognizedKindError(SpecificationError):
    """Raised when the first path literal is not one of the known operation kinds."""


class UnsupportedMethodError(SpecificationError):
    """Raised when the OpenAPI document contains operations for ``head`` or ``patch``."""


class DuplicateSelectorError(DshApiBuildError):
    """Raised when selectors for one HTTP method are still ambiguous after widening.

    Args:
        method: The HTTP method whose operations clash.
        selectors: Every duplicated selector, not just the first one found.
    """

    exit_code = EXIT_DUPLICATE_SELECTOR

    def __init__(self, method: str, selectors: list[str]):
        self.method = method
        self.selectors = list(selectors)
        super().__init__(
            f"duplicate selectors for {method} method ({', '.join(self.selectors)})"
        )


class OutputError(DshApiBuildError):
    """Raised when generated output cannot be written. The OS error is chained."""

    exit_code = EXIT_OUTPUT_ERROR
