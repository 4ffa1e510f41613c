"""OpenAPI document parser -- load, pre-process and extract operations.

This sub-package is the first half of the dsh-api-build pipeline: it turns
the DSH resource management OpenAPI 3.x document (JSON or YAML, local file,
remote URL or stdin) into typed :class:`~dsh_api_build.models.Operation`
records that the emitters consume.

Typical usage::

    from dsh_api_build.parser import collect_operations, load_spec, update_openapi

    document = update_openapi(load_spec("openapi_spec/openapi_1_9_0.json"), ["manage"])
    collected = collect_operations(document)

Sub-modules:

* :mod:`~dsh_api_build.parser.loader` -- I/O layer plus format detection and
  OpenAPI version validation.
* :mod:`~dsh_api_build.parser.resolver` -- ``$ref`` pointer lookup with
  circular-reference detection.
* :mod:`~dsh_api_build.parser.path_elements` -- path template parsing.
* :mod:`~dsh_api_build.parser.updater` -- kind pruning, Authorization
  parameters and operation id synthesis.
* :mod:`~dsh_api_build.parser.schema_mapper` -- parameter, body and response
  type classification.
* :mod:`~dsh_api_build.parser.extractor` -- builds the operation records.
"""

from dsh_api_build.parser.extractor import collect_operations
from dsh_api_build.parser.loader import load_spec, validate_openapi_version
from dsh_api_build.parser.path_elements import parse_path
from dsh_api_build.parser.updater import update_openapi

__all__ = [
    "collect_operations",
    "load_spec",
    "parse_path",
    "update_openapi",
    "validate_openapi_version",
]
