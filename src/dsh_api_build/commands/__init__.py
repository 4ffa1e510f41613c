"""Built-in CLI sub-command groups for dsh-api-build.

* :mod:`~dsh_api_build.commands.inspect` -- show the operations, selectors
  and operation ids derived from a spec without generating any code.

The generation commands themselves (``update``, ``generic``, ``wrapped`` and
``build``) are registered directly on the root app in
:mod:`dsh_api_build.app`.
"""
