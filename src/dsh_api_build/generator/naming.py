"""Python identifiers and type expressions for generated code.

* :func:`sanitize_param_name` -- OpenAPI parameter names to argument names
  (``appId`` to ``app_id``, ``X-Request-ID`` to ``x_request_id``).
* :func:`selector_identifier` -- selectors to the identifier part of method
  names (``bucket-status`` to ``bucket_status``).
* :func:`type_names` -- validates a type expression such as
  ``dict[str, Bucket]`` and returns the schema names it references, which
  the generated module imports from the types module.
"""

from __future__ import annotations

import ast
import keyword
import re

from dsh_api_build.exceptions import SpecificationError

BUILTIN_TYPES = frozenset({"str", "list", "dict"})

RESERVED_ARGUMENTS = frozenset({"self", "body"})
"""Names used by the generated method signatures themselves."""


def sanitize_param_name(name: str) -> str:
    """Convert an OpenAPI parameter name to a valid Python identifier.

    CamelCase boundaries become underscores, the result is lower-cased,
    separators and other non-identifier characters become ``_``, runs of
    underscores collapse, a leading digit is prefixed with ``_``, and
    keywords and reserved argument names get a trailing underscore.

    Example::

        >>> sanitize_param_name("appId")
        'app_id'
        >>> sanitize_param_name("class")
        'class_'
    """
    result = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    result = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", result)
    result = result.lower()
    result = re.sub(r"[^a-z0-9_]", "_", result)
    result = re.sub(r"_+", "_", result).strip("_")
    if not result:
        result = "param"
    if result[0].isdigit():
        result = f"_{result}"
    if keyword.iskeyword(result) or result in RESERVED_ARGUMENTS:
        result = f"{result}_"
    return result


def selector_identifier(selector: str) -> str:
    """Replace every character that cannot appear in an identifier with ``_``."""
    return re.sub(r"\W", "_", selector, flags=re.ASCII)


def type_names(expression: str) -> list[str]:
    """Return the schema names referenced by a type expression.

    Args:
        expression: A name, or ``list[...]`` / ``dict[str, ...]`` around names.

    Raises:
        SpecificationError: If the expression is not a plain Python type
            expression, which is the case for unresolved references rendered
            as ``$ref: ...``.
    """
    try:
        tree = ast.parse(expression, mode="eval")
    except SyntaxError:
        raise SpecificationError(f"'{expression}' is not a valid type name") from None

    names: list[str] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Name):
            if node.id not in BUILTIN_TYPES:
                names.append(node.id)
        elif not isinstance(node, (ast.Expression, ast.Subscript, ast.Tuple, ast.Load)):
            raise SpecificationError(f"'{expression}' is not a valid type name")
    return names
