"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~dsh_api_build.exceptions.DshApiBuildError` subclass.
Build scripts can inspect the exit code to tell a broken document from a
selector clash without parsing stderr.

Example::

    $ dsh-api-build generic openapi.json -o generic.py
    $ echo $?
    9   # EXIT_DUPLICATE_SELECTOR -- two operations share a selector
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI specification could not be read, parsed or validated."""

EXIT_SPECIFICATION_ERROR = 8
"""The OpenAPI specification contains a construct the generator does not support."""

EXIT_DUPLICATE_SELECTOR = 9
"""Operation selectors are still ambiguous after widening."""

EXIT_OUTPUT_ERROR = 10
"""Generated output could not be written."""
