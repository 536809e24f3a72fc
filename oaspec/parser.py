"""Resolution of a loaded specification into operations and components."""

from __future__ import annotations

import json
import re
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Mapping
from urllib.parse import unquote

from oaspec import openapi
from oaspec.path_parser import parse_path
from oaspec.schema import Schema
from oaspec.spec import (
    Media,
    Operation as SpecOperation,
    Parameter as SpecParameter,
    PathItem,
    RequestBody as SpecRequestBody,
    Response as SpecResponse,
    SecuritySchema,
    Spec,
)

_SCHEMAS_PREFIX = "#/components/schemas/"
_PARAMETERS_PREFIX = "#/components/parameters/"
_REQUEST_BODIES_PREFIX = "#/components/requestBodies/"
_RESPONSES_PREFIX = "#/components/responses/"
_EXAMPLES_PREFIX = "#/components/examples/"
_SECURITY_PREFIX = "#/components/securitySchemes/"

_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

_LOCATIONS = {loc.value: loc for loc in openapi.ParameterLocation}

_DEFAULT_STYLES = {
    openapi.ParameterLocation.PATH: openapi.ParameterStyle.PATH_SIMPLE,
    openapi.ParameterLocation.QUERY: openapi.ParameterStyle.QUERY_FORM,
    openapi.ParameterLocation.HEADER: openapi.ParameterStyle.HEADER_SIMPLE,
    openapi.ParameterLocation.COOKIE: openapi.ParameterStyle.COOKIE_FORM,
}

# spaceDelimited is deliberately not supported.
_ALLOWED_STYLES = {
    openapi.ParameterLocation.PATH: {
        "simple": openapi.ParameterStyle.PATH_SIMPLE,
        "label": openapi.ParameterStyle.PATH_LABEL,
        "matrix": openapi.ParameterStyle.PATH_MATRIX,
    },
    openapi.ParameterLocation.QUERY: {
        "form": openapi.ParameterStyle.QUERY_FORM,
        "pipeDelimited": openapi.ParameterStyle.QUERY_PIPE_DELIMITED,
        "deepObject": openapi.ParameterStyle.QUERY_DEEP_OBJECT,
    },
    openapi.ParameterLocation.HEADER: {
        "simple": openapi.ParameterStyle.HEADER_SIMPLE,
    },
    openapi.ParameterLocation.COOKIE: {
        "form": openapi.ParameterStyle.COOKIE_FORM,
    },
}

_STATUS_RANGES = frozenset({"default", "1XX", "2XX", "3XX", "4XX", "5XX"})
_INTEGER = re.compile(r"[+-]?[0-9]+")


def _q(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


@contextmanager
def _context(prefix: str) -> Iterator[None]:
    try:
        yield
    except ValueError as exc:
        raise ValueError(f"{prefix}: {exc}") from exc


def param_style(
    location: openapi.ParameterLocation, style: str
) -> openapi.ParameterStyle:
    """Check a parameter style for its location, applying the default when empty."""
    location = openapi.ParameterLocation(location)
    if not style:
        return _DEFAULT_STYLES[location]
    found = _ALLOWED_STYLES[location].get(style)
    if found is None:
        raise ValueError(f"unexpected style: {_q(style)}")
    return found


def param_explode(location: openapi.ParameterLocation, explode: bool | None) -> bool:
    """Return the explode flag; form styles (query, cookie) default to true."""
    if explode is not None:
        return explode
    return location in (openapi.ParameterLocation.QUERY, openapi.ParameterLocation.COOKIE)


def validate_status_code(value: str) -> None:
    """Accept "default", a range like "2XX" or a code from 100 to 599."""
    if value in _STATUS_RANGES:
        return
    if not _INTEGER.fullmatch(value):
        raise ValueError(f"parse status code: invalid syntax: {_q(value)}")
    code = int(value)
    if code < 100 or code > 599:
        raise ValueError(f"unknown status code: {code}")


def merge_params(
    op_params: Iterable[openapi.Parameter], item_params: Iterable[openapi.Parameter]
) -> list[openapi.Parameter]:
    """Add path item parameters not overridden by an operation parameter."""
    result = list(op_params)
    defined = {(p.name, p.in_) for p in result}
    result.extend(p for p in item_params if (p.name, p.in_) not in defined)
    return result


def _subschemas(schema: Schema) -> Iterator[Schema | None]:
    for prop in schema.properties:
        yield prop.schema
    for pattern in schema.pattern_properties:
        yield pattern.schema
    additional = schema.additional_properties
    if additional is not None and not additional.allow:
        yield additional.schema
    yield schema.items
    yield from schema.all_of
    yield from schema.one_of
    yield from schema.any_of


def _pointer_get(document: Any, pointer: str) -> Any:
    if pointer == "":
        return document
    if not pointer.startswith("/"):
        raise KeyError(pointer)
    node = document
    for token in pointer[1:].split("/"):
        token = unquote(token).replace("~1", "/").replace("~0", "~")
        if isinstance(node, Mapping):
            node = node[token]
        elif isinstance(node, list):
            node = node[int(token)]
        else:
            raise KeyError(token)
    return node


class _Parser:
    def __init__(self, spec: Spec) -> None:
        spec.init()
        self.spec = spec
        self.components = spec.components
        self.operations: list[openapi.Operation] = []
        self.request_bodies: dict[str, openapi.RequestBody] = {}
        self.responses: dict[str, openapi.Response] = {}
        self.parameters: dict[str, openapi.Parameter] = {}
        self.examples: dict[str, openapi.Example] = {}
        self.security_schemes: dict[str, SecuritySchema | None] = dict(
            self.components.security_schemes
        )

    # Schemas.

    def _lookup_schema(self, ref: str) -> Schema:
        if ref.startswith(_SCHEMAS_PREFIX):
            found = self.components.schemas.get(ref[len(_SCHEMAS_PREFIX):])
            if found is not None:
                return found
        if ref.startswith("#"):
            try:
                node = _pointer_get(self.spec.raw, ref[1:])
            except (KeyError, IndexError, ValueError, TypeError):
                node = None
            if isinstance(node, Mapping):
                return Schema.from_dict(node)
        raise ValueError(f"unknown ref {_q(ref)}")

    def _check_refs(self, schema: Schema) -> None:
        stack = list(_subschemas(schema))
        while stack:
            sub = stack.pop()
            if sub is None:
                continue
            if sub.ref:
                self._lookup_schema(sub.ref)
                continue
            stack.extend(_subschemas(sub))

    def _follow(self, ref: str) -> Schema:
        seen: set[str] = set()
        while True:
            if ref in seen:
                raise ValueError(f"infinite recursion: {_q(ref)}")
            seen.add(ref)
            schema = self._lookup_schema(ref)
            if not schema.ref:
                return schema
            ref = schema.ref

    def parse_schema(self, schema: Schema | None) -> Schema | None:
        if schema is None:
            return None
        self._check_refs(schema)
        if not schema.ref:
            return schema
        return self._follow(schema.ref)

    # Components.

    def parse_components(self) -> openapi.Components:
        result = openapi.Components()
        c = self.components
        for name in c.parameters:
            with _context(f"parameters: {_q(name)}"):
                result.parameters[name] = self.resolve_parameter(
                    _PARAMETERS_PREFIX + name, set()
                )
        for name in c.schemas:
            with _context(f"schemas: {_q(name)}"):
                result.schemas[name] = self._follow(_SCHEMAS_PREFIX + name)
                self._check_refs(result.schemas[name])
        for name in c.request_bodies:
            with _context(f"requestBodies: {_q(name)}"):
                result.request_bodies[name] = self.resolve_request_body(
                    _REQUEST_BODIES_PREFIX + name, set()
                )
        for name in c.responses:
            with _context(f"responses: {_q(name)}"):
                result.responses[name] = self.resolve_response(
                    _RESPONSES_PREFIX + name, set()
                )
        return result

    # References.

    def _enter(self, ref: str, ctx: set[str]) -> None:
        if ref in ctx:
            raise ValueError(f"infinite recursion: {_q(ref)}")
        ctx.add(ref)

    @staticmethod
    def _component(components: Mapping[str, Any], prefix: str, ref: str) -> Any:
        name = ref[len(prefix):]
        if name not in components or components[name] is None:
            raise ValueError(f"component by reference {_q(ref)} not found")
        return components[name]

    def resolve_request_body(self, ref: str, ctx: set[str]) -> openapi.RequestBody:
        if not ref.startswith(_REQUEST_BODIES_PREFIX):
            raise ValueError(f"invalid requestBody reference: {_q(ref)}")
        if ref in self.request_bodies:
            return self.request_bodies[ref]
        self._enter(ref, ctx)
        component = self._component(
            self.components.request_bodies, _REQUEST_BODIES_PREFIX, ref
        )
        body = self.parse_request_body(component, ctx)
        self.request_bodies[ref] = body
        return body

    def resolve_response(self, ref: str, ctx: set[str]) -> openapi.Response:
        if not ref.startswith(_RESPONSES_PREFIX):
            raise ValueError(f"invalid response reference: {_q(ref)}")
        if ref in self.responses:
            return self.responses[ref]
        self._enter(ref, ctx)
        component = self._component(self.components.responses, _RESPONSES_PREFIX, ref)
        response = self.parse_response(component, ctx)
        response.ref = ref
        self.responses[ref] = response
        return response

    def resolve_parameter(self, ref: str, ctx: set[str]) -> openapi.Parameter:
        if not ref.startswith(_PARAMETERS_PREFIX):
            raise ValueError(f"invalid parameter reference: {_q(ref)}")
        if ref in self.parameters:
            return self.parameters[ref]
        self._enter(ref, ctx)
        component = self._component(self.components.parameters, _PARAMETERS_PREFIX, ref)
        param = self.parse_parameter(component, ctx)
        self.parameters[ref] = param
        return param

    def resolve_example(self, ref: str) -> openapi.Example:
        if not ref.startswith(_EXAMPLES_PREFIX):
            raise ValueError(f"invalid example reference: {_q(ref)}")
        if ref in self.examples:
            return self.examples[ref]
        component = self._component(self.components.examples, _EXAMPLES_PREFIX, ref)
        example = openapi.Example(
            ref=component.ref,
            summary=component.summary,
            description=component.description,
            value=component.value,
            external_value=component.external_value,
        )
        self.examples[ref] = example
        return example

    def resolve_security_schema(self, ref: str, ctx: set[str]) -> SecuritySchema:
        if not ref.startswith(_SECURITY_PREFIX):
            raise ValueError(f"invalid securitySchema reference: {_q(ref)}")
        cached = self.security_schemes.get(ref)
        if cached is not None:
            return cached
        self._enter(ref, ctx)
        component = self._component(
            self.components.security_schemes, _SECURITY_PREFIX, ref
        )
        self.security_schemes[ref] = component
        return component

    # Parameters.

    def parse_params(
        self, params: Iterable[SpecParameter | None]
    ) -> list[openapi.Parameter]:
        result: list[openapi.Parameter] = []
        unique: set[tuple[str, openapi.ParameterLocation]] = set()
        for idx, spec in enumerate(params):
            if spec is None:
                raise ValueError(f"parameter {idx} is empty or null")
            with _context(f"parse parameter {_q(spec.name)}"):
                param = self.parse_parameter(spec, set())
            key = (param.name, param.in_)
            if key in unique:
                raise ValueError(
                    f"duplicate parameter: {_q(param.name)} in {_q(param.in_.value)}"
                )
            unique.add(key)
            result.append(param)
        return result

    def parse_parameter(self, param: SpecParameter, ctx: set[str]) -> openapi.Parameter:
        if param.ref:
            with _context(f"resolve {_q(param.ref)} reference"):
                return self.resolve_parameter(param.ref, ctx)

        location = _LOCATIONS.get(param.in_.lower())
        if location is None:
            raise ValueError(f"unsupported parameter type {_q(param.in_)}")
        if location is openapi.ParameterLocation.PATH and not param.required:
            raise ValueError("path parameters must be required")

        with _context("schema"):
            schema = self.parse_schema(param.schema)
        with _context("style"):
            style = param_style(location, param.style)
        return openapi.Parameter(
            name=param.name,
            in_=location,
            schema=schema,
            description=param.description,
            style=style,
            explode=param_explode(location, param.explode),
            required=param.required,
        )

    # Bodies and responses.

    def parse_request_body(
        self, body: SpecRequestBody, ctx: set[str]
    ) -> openapi.RequestBody:
        if body.ref:
            with _context(f"resolve {_q(body.ref)} reference"):
                return self.resolve_request_body(body.ref, ctx)
        if not body.content:
            raise ValueError("content must have at least one entry")
        result = openapi.RequestBody(required=body.required)
        for content_type, media in body.content.items():
            with _context(f"content: {_q(content_type)}: parse schema"):
                schema = self.parse_schema(media.schema)
            result.contents[content_type] = openapi.Content(schema=schema)
        return result

    def _response_content(self, media: Media) -> openapi.Content:
        content = openapi.Content(schema=self.parse_schema(media.schema))
        content.add_example(media.example)
        return content

    def parse_response(self, resp: SpecResponse, ctx: set[str]) -> openapi.Response:
        if resp.ref:
            with _context(f"resolve {_q(resp.ref)} reference"):
                return self.resolve_response(resp.ref, ctx)
        response = openapi.Response()
        for content_type, media in resp.content.items():
            with _context(f"content: {_q(content_type)}: schema"):
                content = self._response_content(media)
            for example in media.examples.values():
                if example is None:
                    continue
                content.add_example(example.value)
                if example.ref:
                    with _context(f"resolve: {_q(example.ref)}"):
                        content.add_example(self.resolve_example(example.ref).value)
            response.contents[content_type] = content
        return response

    def parse_responses(
        self, responses: Mapping[str, SpecResponse | None]
    ) -> dict[str, openapi.Response]:
        if not responses:
            raise ValueError("no responses")
        result: dict[str, openapi.Response] = {}
        for status, response in responses.items():
            with _context(status):
                validate_status_code(status)
                if response is None:
                    raise ValueError("response object is empty or null")
                result[status] = self.parse_response(response, set())
        return result

    # Security.

    def parse_security_schema(
        self, schema: SecuritySchema | None, ctx: set[str]
    ) -> SecuritySchema:
        if schema is None:
            raise ValueError("security schema must not be null")
        if schema.ref:
            with _context("resolve security schema"):
                return self.resolve_security_schema(schema.ref, ctx)
        return schema

    def parse_security_requirements(
        self, requirements: Iterable[Mapping[str, list[str]]]
    ) -> list[openapi.SecurityRequirement]:
        result: list[openapi.SecurityRequirement] = []
        for requirement in requirements:
            for name, scopes in requirement.items():
                if name not in self.security_schemes:
                    raise ValueError(f"unknown security schema {_q(name)}")
                with _context(f"resolve {_q(name)}"):
                    spec = self.parse_security_schema(self.security_schemes[name], set())
                result.append(
                    openapi.SecurityRequirement(
                        name=name,
                        scopes=list(scopes),
                        security=openapi.Security(
                            type=spec.type,
                            description=spec.description,
                            name=spec.name,
                            in_=spec.in_,
                            scheme=spec.scheme,
                            bearer_format=spec.bearer_format,
                            flows=_clone_flows(spec.flows),
                            openid_connect_url=spec.openid_connect_url,
                        ),
                    )
                )
        return result

    # Operations.

    def parse_ops(self) -> None:
        operation_ids: set[str] = set()
        for path, item in self.spec.paths.items():
            if item is None:
                raise ValueError(f"{path}: unexpected nil schema")
            if item.ref:
                raise ValueError(f"{path}: referenced pathItem not supported")
            with _context(f"{path}: parameters"):
                item_params = self.parse_params(item.parameters)
            with _context(f"paths: {path}"):
                for method, op in _each_operation(item):
                    with _context(method):
                        if op.operation_id:
                            if op.operation_id in operation_ids:
                                raise ValueError(
                                    f"duplicate operationId: {_q(op.operation_id)}"
                                )
                            operation_ids.add(op.operation_id)
                        with _context(f"operation {_q(op.operation_id)}"):
                            parsed = self.parse_op(path, method, op, item_params)
                        self.operations.append(parsed)

    def parse_op(
        self,
        path: str,
        method: str,
        spec: SpecOperation,
        item_params: list[openapi.Parameter],
    ) -> openapi.Operation:
        with _context("parameters"):
            op_params = self.parse_params(spec.parameters)
        parameters = merge_params(op_params, item_params)
        with _context("parse path"):
            parsed_path = parse_path(path, parameters)

        request_body = None
        if spec.request_body is not None:
            with _context("requestBody"):
                request_body = self.parse_request_body(spec.request_body, set())

        with _context("responses"):
            responses = self.parse_responses(spec.responses)

        requirements = spec.security if spec.security is not None else self.spec.security
        with _context("security"):
            security = self.parse_security_requirements(requirements)

        return openapi.Operation(
            http_method=method.upper(),
            path=parsed_path,
            operation_id=spec.operation_id,
            description=spec.description,
            parameters=parameters,
            request_body=request_body,
            security=security,
            responses=responses,
        )


def _each_operation(item: PathItem) -> Iterator[tuple[str, SpecOperation]]:
    for method in _METHODS:
        op = getattr(item, method)
        if op is not None:
            yield method, op


def _clone_flow(flow: Any) -> openapi.OAuthFlow | None:
    if flow is None:
        return None
    return openapi.OAuthFlow(
        authorization_url=flow.authorization_url,
        token_url=flow.token_url,
        refresh_url=flow.refresh_url,
        scopes=dict(flow.scopes),
    )


def _clone_flows(flows: Any) -> openapi.OAuthFlows:
    return openapi.OAuthFlows(
        implicit=_clone_flow(flows.implicit),
        password=_clone_flow(flows.password),
        client_credentials=_clone_flow(flows.client_credentials),
        authorization_code=_clone_flow(flows.authorization_code),
    )


def parse(spec: Spec) -> openapi.API:
    """Resolve a specification into its operations and components.

    Raises ValueError describing where the document is invalid.
    """
    parser = _Parser(spec)
    with _context("parse components"):
        components = parser.parse_components()
    with _context("parse operations"):
        parser.parse_ops()
    return openapi.API(operations=parser.operations, components=components)