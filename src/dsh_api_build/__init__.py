"""dsh_api_build -- Generate Python client modules from the DSH resource management OpenAPI spec.

This package turns the OpenAPI 3.x document of the DSH resource management
API into two Python source modules that sit on top of a typed client with one
coroutine per ``operationId``:

* a *generic* module whose ``get``/``delete``/``post``/``put`` coroutines
  select an operation by a string key and take flat string parameters;
* a *wrapped* module with one strongly-typed coroutine per operation.

Typical workflow::

    dsh-api-build update openapi.json -o openapi-updated.json
    dsh-api-build build openapi.json --out-dir src/dsh_api/generated

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: Project configuration, precedence resolution and atomic writes.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    pipeline: Load, update and generate in one pass.
    runtime: Conversion helpers imported by the generated modules.
"""

__version__ = "0.6.1"
