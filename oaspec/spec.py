"""Root OpenAPI document model and its loading from JSON or YAML."""

from __future__ import annotations

import datetime
import json
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, TypeVar

import yaml

from oaspec.schema import Schema

T = TypeVar("T")


class SpecError(ValueError):
    """Raised when a document cannot be read as an OpenAPI specification."""


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, list):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def _object(value: Any, what: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise SpecError(f"{what}: expected object, got {_type_name(value)}")
    return value


def _str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise SpecError(f"{key}: expected string, got {_type_name(value)}")
    return value


def _bool(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise SpecError(f"{key}: expected bool, got {_type_name(value)}")
    return value


def _optional_bool(data: Mapping[str, Any], key: str) -> bool | None:
    if data.get(key) is None:
        return None
    return _bool(data, key)


def _list(data: Mapping[str, Any], key: str) -> list[Any] | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise SpecError(f"{key}: expected array, got {_type_name(value)}")
    return value


def _str_list(value: Any, what: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise SpecError(f"{what}: expected array, got {_type_name(value)}")
    for item in value:
        if not isinstance(item, str):
            raise SpecError(f"{what}: expected string item, got {_type_name(item)}")
    return list(value)


def _str_map(value: Any, what: str) -> dict[str, str]:
    mapping = _object(value, what)
    for key, item in mapping.items():
        if not isinstance(item, str):
            raise SpecError(f"{what} {key!r}: expected string, got {_type_name(item)}")
    return dict(mapping)


def _optional(value: Any, make: Callable[[Any], T]) -> T | None:
    return None if value is None else make(value)


def _list_of(data: Mapping[str, Any], key: str, make: Callable[[Any], T]) -> list[T | None]:
    return [_optional(item, make) for item in _list(data, key) or []]


def _map_of(
    data: Mapping[str, Any],
    key: str,
    make: Callable[[Any], T],
    nullable: bool = True,
) -> dict[str, T | None]:
    result: dict[str, T | None] = {}
    for name, value in _object(data.get(key), key).items():
        if value is None:
            result[name] = None if nullable else make({})
        else:
            result[name] = make(value)
    return result


def _schema(value: Any) -> Schema:
    return Schema.from_dict(value)


def _security_requirements(value: Any) -> list[dict[str, list[str]]]:
    if not isinstance(value, list):
        raise SpecError(f"security: expected array, got {_type_name(value)}")
    return [
        {name: _str_list(scopes, name) for name, scopes in _object(req, "security").items()}
        for req in value
    ]


@dataclass
class OAuthFlow:
    """Configuration details of a supported OAuth flow."""

    authorization_url: str = ""
    token_url: str = ""
    refresh_url: str = ""
    scopes: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> OAuthFlow:
        data = _object(data, "flow")
        return cls(
            authorization_url=_str(data, "authorizationUrl"),
            token_url=_str(data, "tokenUrl"),
            refresh_url=_str(data, "refreshUrl"),
            scopes=_str_map(data.get("scopes"), "scopes"),
        )


@dataclass
class OAuthFlows:
    """The supported OAuth flows."""

    implicit: OAuthFlow | None = None
    password: OAuthFlow | None = None
    client_credentials: OAuthFlow | None = None
    authorization_code: OAuthFlow | None = None

    @classmethod
    def from_dict(cls, data: Any) -> OAuthFlows:
        data = _object(data, "flows")
        return cls(
            implicit=_optional(data.get("implicit"), OAuthFlow.from_dict),
            password=_optional(data.get("password"), OAuthFlow.from_dict),
            client_credentials=_optional(data.get("clientCredentials"), OAuthFlow.from_dict),
            authorization_code=_optional(data.get("authorizationCode"), OAuthFlow.from_dict),
        )


@dataclass
class SecuritySchema:
    """A security scheme usable by operations."""

    ref: str = ""
    type: str = ""
    description: str = ""
    name: str = ""
    in_: str = ""
    scheme: str = ""
    bearer_format: str = ""
    flows: OAuthFlows = field(default_factory=OAuthFlows)
    openid_connect_url: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> SecuritySchema:
        data = _object(data, "security scheme")
        return cls(
            ref=_str(data, "ref"),
            type=_str(data, "type"),
            description=_str(data, "description"),
            name=_str(data, "name"),
            in_=_str(data, "in"),
            scheme=_str(data, "scheme"),
            bearer_format=_str(data, "bearerFormat"),
            flows=OAuthFlows.from_dict(data.get("flows")),
            openid_connect_url=_str(data, "openIdConnectUrl"),
        )


@dataclass
class Example:
    """An example value, inline or referenced."""

    ref: str = ""
    summary: str = ""
    description: str = ""
    value: Any = None
    external_value: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> Example:
        data = _object(data, "example")
        return cls(
            ref=_str(data, "$ref"),
            summary=_str(data, "summary"),
            description=_str(data, "description"),
            value=data.get("value"),
            external_value=_str(data, "externalValue"),
        )


@dataclass
class Tag:
    """Metadata of a tag used by operations."""

    name: str = ""
    description: str = ""


@dataclass
class Contact:
    """Contact information for the exposed API."""

    name: str = ""
    url: str = ""
    email: str = ""


@dataclass
class License:
    """License information for the exposed API."""

    name: str = ""
    url: str = ""


@dataclass
class Server:
    """A server hosting the API."""

    url: str = ""
    description: str = ""


def _tag(data: Any) -> Tag:
    data = _object(data, "tag")
    return Tag(name=_str(data, "name"), description=_str(data, "description"))


def _contact(data: Any) -> Contact:
    data = _object(data, "contact")
    return Contact(name=_str(data, "name"), url=_str(data, "url"), email=_str(data, "email"))


def _license(data: Any) -> License:
    data = _object(data, "license")
    return License(name=_str(data, "name"), url=_str(data, "url"))


def _server(data: Any) -> Server:
    data = _object(data, "server")
    return Server(url=_str(data, "url"), description=_str(data, "description"))


def _servers(data: Mapping[str, Any]) -> list[Server]:
    return [_server(item) for item in _list(data, "servers") or []]


@dataclass
class Info:
    """Metadata about the API."""

    title: str = ""
    description: str = ""
    terms_of_service: str = ""
    contact: Contact | None = None
    license: License | None = None
    version: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> Info:
        data = _object(data, "info")
        return cls(
            title=_str(data, "title"),
            description=_str(data, "description"),
            terms_of_service=_str(data, "termsOfService"),
            contact=_optional(data.get("contact"), _contact),
            license=_optional(data.get("license"), _license),
            version=_str(data, "version"),
        )


@dataclass
class Media:
    """Schema and examples for one media type."""

    schema: Schema | None = None
    example: Any = None
    examples: dict[str, Example | None] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> Media:
        data = _object(data, "media")
        return cls(
            schema=_optional(data.get("schema"), _schema),
            example=data.get("example"),
            examples=_map_of(data, "examples", Example.from_dict),
        )


@dataclass
class Parameter:
    """A single operation parameter, identified by name and location."""

    ref: str = ""
    name: str = ""
    in_: str = ""
    description: str = ""
    schema: Schema = field(default_factory=Schema)
    required: bool = False
    deprecated: bool = False
    content: dict[str, Media] = field(default_factory=dict)
    style: str = ""
    explode: bool | None = None
    example: Any = None
    examples: dict[str, Example | None] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> Parameter:
        data = _object(data, "parameter")
        schema = data.get("schema")
        return cls(
            ref=_str(data, "$ref"),
            name=_str(data, "name"),
            in_=_str(data, "in"),
            description=_str(data, "description"),
            schema=Schema() if schema is None else Schema.from_dict(schema),
            required=_bool(data, "required"),
            deprecated=_bool(data, "deprecated"),
            content=_map_of(data, "content", Media.from_dict, nullable=False),
            style=_str(data, "style"),
            explode=_optional_bool(data, "explode"),
            example=data.get("example"),
            examples=_map_of(data, "examples", Example.from_dict),
        )


@dataclass
class RequestBody:
    """A single request body."""

    ref: str = ""
    description: str = ""
    content: dict[str, Media] = field(default_factory=dict)
    required: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> RequestBody:
        data = _object(data, "requestBody")
        return cls(
            ref=_str(data, "$ref"),
            description=_str(data, "description"),
            content=_map_of(data, "content", Media.from_dict, nullable=False),
            required=_bool(data, "required"),
        )


@dataclass
class Response:
    """A single response of an operation."""

    ref: str = ""
    description: str = ""
    header: dict[str, Any] = field(default_factory=dict)
    content: dict[str, Media] = field(default_factory=dict)
    links: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> Response:
        data = _object(data, "response")
        return cls(
            ref=_str(data, "$ref"),
            description=_str(data, "description"),
            header=dict(_object(data.get("header"), "header")),
            content=_map_of(data, "content", Media.from_dict, nullable=False),
            links=dict(_object(data.get("links"), "links")),
        )


@dataclass
class Operation:
    """A single API operation on a path.

    ``security`` is None when the operation does not declare it, so that the
    document-level requirements apply; an empty list disables them.
    """

    tags: list[str] = field(default_factory=list)
    summary: str = ""
    description: str = ""
    operation_id: str = ""
    parameters: list[Parameter | None] = field(default_factory=list)
    request_body: RequestBody | None = None
    responses: dict[str, Response | None] = field(default_factory=dict)
    security: list[dict[str, list[str]]] | None = None
    deprecated: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> Operation:
        data = _object(data, "operation")
        security = data.get("security")
        return cls(
            tags=_str_list(data.get("tags"), "tags"),
            summary=_str(data, "summary"),
            description=_str(data, "description"),
            operation_id=_str(data, "operationId"),
            parameters=_list_of(data, "parameters", Parameter.from_dict),
            request_body=_optional(data.get("requestBody"), RequestBody.from_dict),
            responses=_map_of(data, "responses", Response.from_dict),
            security=None if security is None else _security_requirements(security),
            deprecated=_bool(data, "deprecated"),
        )


@dataclass
class PathItem:
    """Operations available on a single path."""

    ref: str = ""
    description: str = ""
    get: Operation | None = None
    put: Operation | None = None
    post: Operation | None = None
    delete: Operation | None = None
    options: Operation | None = None
    head: Operation | None = None
    patch: Operation | None = None
    trace: Operation | None = None
    servers: list[Server] = field(default_factory=list)
    parameters: list[Parameter | None] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> PathItem:
        data = _object(data, "pathItem")
        ops = {
            method: _optional(data.get(method), Operation.from_dict)
            for method in ("get", "put", "post", "delete", "options", "head", "patch", "trace")
        }
        return cls(
            ref=_str(data, "$ref"),
            description=_str(data, "description"),
            servers=_servers(data),
            parameters=_list_of(data, "parameters", Parameter.from_dict),
            **ops,
        )


@dataclass
class Components:
    """Reusable objects referenced from elsewhere in the document."""

    schemas: dict[str, Schema | None] = field(default_factory=dict)
    responses: dict[str, Response | None] = field(default_factory=dict)
    parameters: dict[str, Parameter | None] = field(default_factory=dict)
    examples: dict[str, Example | None] = field(default_factory=dict)
    request_bodies: dict[str, RequestBody | None] = field(default_factory=dict)
    security_schemes: dict[str, SecuritySchema | None] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> Components:
        data = _object(data, "components")
        return cls(
            schemas=_map_of(data, "schemas", _schema),
            responses=_map_of(data, "responses", Response.from_dict),
            parameters=_map_of(data, "parameters", Parameter.from_dict),
            examples=_map_of(data, "examples", Example.from_dict),
            request_bodies=_map_of(data, "requestBodies", RequestBody.from_dict),
            security_schemes=_map_of(data, "securitySchemes", SecuritySchema.from_dict),
        )


@dataclass
class Spec:
    """Root object of an OpenAPI document; ``raw`` holds the decoded document."""

    openapi: str = ""
    info: Info = field(default_factory=Info)
    servers: list[Server] = field(default_factory=list)
    paths: dict[str, PathItem | None] = field(default_factory=dict)
    components: Components | None = None
    security: list[dict[str, list[str]]] = field(default_factory=list)
    tags: list[Tag] = field(default_factory=list)
    raw: Any = field(default=None, repr=False)

    @classmethod
    def from_dict(cls, data: Any) -> Spec:
        if not isinstance(data, Mapping):
            raise SpecError(f"spec: expected object, got {_type_name(data)}")
        security = data.get("security")
        return cls(
            openapi=_str(data, "openapi"),
            info=Info.from_dict(data.get("info")),
            servers=_servers(data),
            paths=_map_of(data, "paths", PathItem.from_dict),
            components=_optional(data.get("components"), Components.from_dict),
            security=[] if security is None else _security_requirements(security),
            tags=[_tag(item) for item in _list(data, "tags") or []],
            raw=data,
        )

    def init(self) -> None:
        """Make sure the components object exists."""
        if self.components is None:
            self.components = Components()


def _yaml_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, bool):
        return "true" if key else "false"
    if key is None:
        return "null"
    if isinstance(key, (datetime.date, datetime.datetime)):
        return key.isoformat()
    return str(key)


def _normalize(value: Any) -> Any:
    """Turn a YAML value into what the equivalent JSON document would hold."""
    if isinstance(value, Mapping):
        return {_yaml_key(k): _normalize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_normalize(item) for item in value]
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    return value


def parse(data: str | bytes | bytearray) -> Spec:
    """Read a specification from JSON text, falling back to YAML."""
    if isinstance(data, (bytes, bytearray)):
        try:
            text = bytes(data).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SpecError(f"decode: {exc}") from exc
    else:
        text = data
    if not text.strip():
        raise SpecError("blank data")

    try:
        document = json.loads(text)
    except json.JSONDecodeError:
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise SpecError(f"yaml: {exc}") from exc
        document = _normalize(document)

    if document is None:
        raise SpecError("blank data")
    try:
        return Spec.from_dict(document)
    except SpecError:
        raise
    except ValueError as exc:
        raise SpecError(str(exc)) from exc