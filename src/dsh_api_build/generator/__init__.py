"""Code generator -- emit Python client modules from extracted operations.

This sub-package is the second half of the dsh-api-build pipeline. It takes
the :class:`~dsh_api_build.models.Operation` records produced by
:mod:`dsh_api_build.parser` and renders two modules through Jinja2
templates:

* :mod:`~dsh_api_build.generator.generic` -- the generic client, which
  dispatches ``get``/``delete``/``post``/``put`` calls on a selector and a
  flat list of string parameters.
* :mod:`~dsh_api_build.generator.wrapped` -- the wrapped client, with one
  typed coroutine per operation.

Supporting modules:

* :mod:`~dsh_api_build.generator.selectors` -- selector derivation and
  deduplication.
* :mod:`~dsh_api_build.generator.naming` -- Python identifiers for
  parameters, selectors and imported type names.
* :mod:`~dsh_api_build.generator.rendering` -- the shared Jinja2
  environment and literal/docstring helpers.

Import the emitters from their modules; this package does not re-export
them because the extractor itself depends on
:mod:`~dsh_api_build.generator.selectors`.
"""
