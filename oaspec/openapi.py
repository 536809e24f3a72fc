"""Resolved model of an OpenAPI document: operations, parameters and components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from oaspec.schema import Schema


class ParameterLocation(str, Enum):
    """Where an operation parameter is located."""

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"

    def __str__(self) -> str:
        return self.value


class ParameterStyle(str, Enum):
    """How a parameter value is serialized.

    Styles shared by several locations are aliases of one member.
    """

    PATH_SIMPLE = "simple"
    PATH_LABEL = "label"
    PATH_MATRIX = "matrix"

    QUERY_FORM = "form"
    QUERY_SPACE_DELIMITED = "spaceDelimited"
    QUERY_PIPE_DELIMITED = "pipeDelimited"
    QUERY_DEEP_OBJECT = "deepObject"

    HEADER_SIMPLE = "simple"

    COOKIE_FORM = "form"

    def __str__(self) -> str:
        return self.value


@dataclass
class Parameter:
    """An operation parameter, unique by name and location."""

    name: str
    in_: ParameterLocation
    schema: Schema | None = None
    description: str = ""
    style: ParameterStyle | None = None
    explode: bool = False
    required: bool = False


@dataclass
class PathPart:
    """A literal piece of a path, or a reference to a path parameter."""

    raw: str = ""
    param: Parameter | None = None


class Path(list):
    """Sequence of path parts; renders back to the templated path."""

    def __str__(self) -> str:
        return "".join(
            part.raw if part.raw else "{" + part.param.name + "}" for part in self
        )


@dataclass
class Content:
    """Schema of one media type together with its collected examples."""

    schema: Schema | None = None
    examples: list[Any] = field(default_factory=list)

    def add_example(self, example: Any) -> None:
        """Record an example value; absent values are ignored."""
        if example is None:
            return
        self.examples.append(example)


@dataclass
class RequestBody:
    """Request body of an operation, keyed by content type."""

    contents: dict[str, Content] = field(default_factory=dict)
    required: bool = False


@dataclass
class Response:
    """Response definition, keyed by content type."""

    ref: str = ""
    contents: dict[str, Content] = field(default_factory=dict)


@dataclass
class Example:
    """An example object."""

    ref: str = ""
    summary: str = ""
    description: str = ""
    value: Any = None
    external_value: str = ""


@dataclass
class OAuthFlow:
    """Configuration details of a supported OAuth flow."""

    authorization_url: str = ""
    token_url: str = ""
    refresh_url: str = ""
    scopes: dict[str, str] = field(default_factory=dict)


@dataclass
class OAuthFlows:
    """The supported OAuth flows."""

    implicit: OAuthFlow | None = None
    password: OAuthFlow | None = None
    client_credentials: OAuthFlow | None = None
    authorization_code: OAuthFlow | None = None


@dataclass
class Security:
    """A resolved security scheme."""

    type: str = ""
    description: str = ""
    name: str = ""
    in_: str = ""
    scheme: str = ""
    bearer_format: str = ""
    flows: OAuthFlows = field(default_factory=OAuthFlows)
    openid_connect_url: str = ""


@dataclass
class SecurityRequirement:
    """A named security scheme required by an operation, with its scopes."""

    name: str = ""
    scopes: list[str] = field(default_factory=list)
    security: Security = field(default_factory=Security)


@dataclass
class Operation:
    """A resolved API operation.

    Response keys are status codes, "default" or a range such as "2XX".
    """

    http_method: str
    path: Path = field(default_factory=Path)
    operation_id: str = ""
    description: str = ""
    parameters: list[Parameter] = field(default_factory=list)
    request_body: RequestBody | None = None
    security: list[SecurityRequirement] = field(default_factory=list)
    responses: dict[str, Response] = field(default_factory=dict)


@dataclass
class Components:
    """Resolved reusable components."""

    parameters: dict[str, Parameter] = field(default_factory=dict)
    schemas: dict[str, Schema] = field(default_factory=dict)
    request_bodies: dict[str, RequestBody] = field(default_factory=dict)
    responses: dict[str, Response] = field(default_factory=dict)


@dataclass
class API:
    """A fully resolved API description."""

    operations: list[Operation] = field(default_factory=list)
    components: Components = field(default_factory=Components)