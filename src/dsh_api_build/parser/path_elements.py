"""Split URL path templates into literal and variable segments.

A DSH path template such as ``/allocation/{tenant}/bucket/{id}`` is parsed
into::

    [PathElement.literal("allocation"), PathElement.var("tenant"),
     PathElement.literal("bucket"), PathElement.var("id")]

Empty segments (leading, trailing or doubled slashes) are discarded.
Braces are only allowed as one balanced pair wrapping a whole segment; any
other use of ``{`` or ``}`` raises :class:`~dsh_api_build.exceptions.SpecificationError`.
"""

from __future__ import annotations

from dsh_api_build.exceptions import SpecificationError
from dsh_api_build.models import PathElement


def parse_path(path: str) -> list[PathElement]:
    """Parse a path template into its :class:`PathElement` sequence.

    Args:
        path: The raw path template, e.g. ``"/allocation/{tenant}/bucket/{id}"``.

    Returns:
        The ordered segments. An empty or slash-only path gives an empty list.

    Raises:
        SpecificationError: If a segment contains an unbalanced brace, an
            empty ``{}`` variable or text outside the braces.
    """
    elements: list[PathElement] = []
    for segment in path.split("/"):
        if not segment:
            continue
        if "{" not in segment and "}" not in segment:
            elements.append(PathElement.literal(segment))
            continue
        inner = segment[1:-1]
        if (
            len(segment) < 3
            or not segment.startswith("{")
            or not segment.endswith("}")
            or "{" in inner
            or "}" in inner
        ):
            raise SpecificationError(
                f"malformed path segment '{segment}' in path template '{path}'"
            )
        elements.append(PathElement.var(inner))
    return elements


def join_path(elements: list[PathElement]) -> str:
    """Render path elements back into a template with a leading slash."""
    return "/" + "/".join(str(element) for element in elements)


def first_literal(elements: list[PathElement]) -> str | None:
    """Return the first segment if it is a literal, else ``None``."""
    if elements and not elements[0].variable:
        return elements[0].value
    return None
