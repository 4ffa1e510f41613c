"""Canonical Pydantic models shared across all dsh_api_build modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into two groups:

**Configuration models** -- read from ``dsh-api-build.json`` in the project
directory and overridden by environment variables and CLI flags:
    :class:`GeneratorConfig`.

**Parser output models** -- produced by the operation extractor and consumed
by the selector deriver and the code emitters:
    :class:`HTTPMethod`, :class:`OperationKind`, :class:`PathElement`,
    :class:`ParameterType`, :class:`RequestBodyType`,
    :class:`ResponseBodyType`, :class:`OperationParameter` and
    :class:`Operation`.

Parser output models are frozen. Selector deduplication produces updated
copies through ``model_copy`` instead of mutating operations in place.
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# --- Generator Config ---


FEATURES = ("manage", "robot")
"""Optional operation kinds. Paths of a disabled feature are pruned from the document."""


class GeneratorConfig(BaseModel):
    """Build configuration for one generator run.

    Loaded by :func:`~dsh_api_build.config.resolve_config` from the
    project file, environment variables and CLI flags. Every field has a
    default so an empty project file is valid.

    Example::

        GeneratorConfig(
            spec="openapi_spec/openapi_1_9_0.json",
            features=["manage"],
            types_module="dsh_api.types",
        )
    """

    model_config = ConfigDict(extra="forbid")

    spec: Optional[str] = Field(
        default=None, description="URL or file path to the original OpenAPI spec"
    )
    features: list[str] = Field(
        default_factory=list,
        description="Enabled optional kinds (manage, robot); other kinds are pruned",
    )
    types_module: str = Field(
        default="dsh_api.types",
        description="Module the generated code imports named schema types from",
    )
    runtime_module: str = Field(
        default="dsh_api_build.runtime",
        description="Module the generated code imports conversion helpers from",
    )
    id_collection_schema: str = Field(
        default="ChildList",
        description="Schema name of the well-known list of identifiers response",
    )
    out_dir: str = Field(default=".", description="Directory for generated files")
    generic_file: str = Field(default="generic.py")
    wrapped_file: str = Field(default="wrapped.py")
    updated_spec_file: Optional[str] = Field(
        default="openapi.json",
        description="File name for the updated spec, None to skip writing it",
    )
    path_aliases: bool = Field(
        default=True,
        description="Also dispatch generic calls on operation id and path template",
    )

    @field_validator("features")
    @classmethod
    def _known_features(cls, value: list[str]) -> list[str]:
        unknown = [feature for feature in value if feature not in FEATURES]
        if unknown:
            raise ValueError(
                f"unknown feature(s) {', '.join(unknown)}, expected one of {', '.join(FEATURES)}"
            )
        return sorted(set(value))


# --- Parser Output Models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods that can appear on a DSH path item."""

    GET = "get"
    DELETE = "delete"
    POST = "post"
    PUT = "put"
    HEAD = "head"
    PATCH = "patch"

    @property
    def has_body(self) -> bool:
        """Whether the generic dispatcher for this method accepts a body argument."""
        return self in (HTTPMethod.POST, HTTPMethod.PUT, HTTPMethod.PATCH)


SUPPORTED_METHODS: tuple[HTTPMethod, ...] = (
    HTTPMethod.GET,
    HTTPMethod.DELETE,
    HTTPMethod.POST,
    HTTPMethod.PUT,
)
"""Methods the emitters generate code for, in emission order."""

UNSUPPORTED_METHODS: tuple[HTTPMethod, ...] = (HTTPMethod.HEAD, HTTPMethod.PATCH)


class OperationKind(str, enum.Enum):
    """The first literal of a DSH path. Non-allocation kinds gate optional features."""

    ALLOCATION = "allocation"
    MANAGE = "manage"
    APPCATALOG = "appcatalog"
    ROBOT = "robot"


class PathElement(BaseModel):
    """One segment of a URL path template: a literal or a ``{variable}``."""

    model_config = ConfigDict(frozen=True)

    value: str
    variable: bool = False

    @classmethod
    def literal(cls, text: str) -> PathElement:
        return cls(value=text)

    @classmethod
    def var(cls, name: str) -> PathElement:
        return cls(value=name, variable=True)

    def __str__(self) -> str:
        return "{" + self.value + "}" if self.variable else self.value


class ParameterKind(str, enum.Enum):
    PLAIN_STRING = "plain_string"
    CONSTRUCTED_OWNED = "constructed_owned"
    CONSTRUCTED_REF = "constructed_ref"
    NAMED_SCHEMA = "named_schema"


class ParameterType(BaseModel):
    """Semantic classification of one operation parameter.

    * ``PLAIN_STRING`` -- unconstrained string, passed through as is.
    * ``CONSTRUCTED_OWNED`` -- string with an enumeration, represented by an
      enum type the caller constructs from the string value.
    * ``CONSTRUCTED_REF`` -- string with a pattern, represented by a
      validated string type.
    * ``NAMED_SCHEMA`` -- reference to a component schema, parsed from JSON.
    """

    model_config = ConfigDict(frozen=True)

    kind: ParameterKind
    type_name: Optional[str] = None

    @property
    def annotation(self) -> str:
        """Python annotation used in generated signatures."""
        if self.kind == ParameterKind.PLAIN_STRING:
            return "str"
        return self.type_name or "str"

    @property
    def is_constructed(self) -> bool:
        return self.kind in (ParameterKind.CONSTRUCTED_OWNED, ParameterKind.CONSTRUCTED_REF)

    def __str__(self) -> str:
        return self.annotation


class BodyKind(str, enum.Enum):
    PLAIN_STRING = "plain_string"
    NAMED_SCHEMA = "named_schema"


class RequestBodyType(BaseModel):
    """Request body classification, ``type_name`` may be ``list[X]`` or ``dict[str, X]``."""

    model_config = ConfigDict(frozen=True)

    kind: BodyKind
    type_name: Optional[str] = None

    @property
    def annotation(self) -> str:
        if self.kind == BodyKind.PLAIN_STRING:
            return "str"
        return self.type_name or "str"

    def __str__(self) -> str:
        return self.annotation


class ResponseKind(str, enum.Enum):
    NO_CONTENT = "no_content"
    NAMED_SCALAR = "named_scalar"
    COLLECTION = "collection"
    MAP = "map"
    ID_COLLECTION = "id_collection"
    PLAIN_STRING = "plain_string"


class ResponseBodyType(BaseModel):
    """Response body classification for one status code.

    ``type_name`` holds the scalar type, the collection element type or the
    map value type. ``description`` is only kept for ``NO_CONTENT`` responses,
    where it documents when the call succeeds.
    """

    model_config = ConfigDict(frozen=True)

    kind: ResponseKind
    type_name: Optional[str] = None
    description: Optional[str] = None

    @property
    def annotation(self) -> str:
        """Python return annotation of the wrapped method."""
        if self.kind == ResponseKind.NO_CONTENT:
            return "None"
        if self.kind == ResponseKind.NAMED_SCALAR:
            return self.type_name or "Any"
        if self.kind == ResponseKind.COLLECTION:
            return f"list[{self.type_name}]"
        if self.kind == ResponseKind.MAP:
            return f"dict[str, {self.type_name}]"
        if self.kind == ResponseKind.ID_COLLECTION:
            return "list[str]"
        return "str"

    @property
    def selector_suffix(self) -> str:
        if self.kind == ResponseKind.ID_COLLECTION:
            return "-ids"
        if self.kind == ResponseKind.MAP:
            return "-map"
        if self.kind == ResponseKind.COLLECTION:
            return "s"
        return ""

    @property
    def is_text(self) -> bool:
        """Text bodies are streamed and must be drained by ``process_string``."""
        return self.kind == ResponseKind.PLAIN_STRING


class OperationParameter(BaseModel):
    """A user-supplied operation parameter in declaration order."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: ParameterType
    description: Optional[str] = None


class Operation(BaseModel):
    """One HTTP method and path template combination with its derived typing.

    ``parameters`` excludes the leading tenant parameter, which the client
    supplies from its own context, and the managed ``Authorization`` header,
    which is recorded as ``requires_token``.
    """

    model_config = ConfigDict(frozen=True)

    method: HTTPMethod
    path: str
    path_elements: list[PathElement]
    description: Optional[str] = None
    parameters: list[OperationParameter] = Field(default_factory=list)
    requires_token: bool = False
    request_body: Optional[RequestBodyType] = None
    operation_id: str
    selector: str
    ok_response: ResponseBodyType
    ok_responses: list[tuple[int, ResponseBodyType]] = Field(default_factory=list)
    error_responses: list[tuple[int, ResponseBodyType]] = Field(default_factory=list)
    kind: OperationKind
