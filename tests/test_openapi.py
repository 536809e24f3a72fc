import pytest

from oaspec.openapi import (
    API,
    Content,
    Operation,
    Parameter,
    ParameterLocation,
    ParameterStyle,
    Path,
    PathPart,
    RequestBody,
    Response,
)
from oaspec.schema import Schema


def _param(name):
    return Parameter(name=name, in_=ParameterLocation.PATH, schema=Schema(type="integer"))


def test_path_str_renders_raw_and_params():
    path = Path([PathPart(raw="/foo."), PathPart(param=_param("bar")),
                 PathPart(raw="."), PathPart(param=_param("baz")), PathPart(raw="abc/def")])
    assert str(path) == "/foo.{bar}.{baz}abc/def"


def test_empty_path_renders_empty():
    assert str(Path()) == ""


def test_path_is_a_list():
    path = Path([PathPart(raw="/a")])
    path.append(PathPart(param=_param("id")))
    assert len(path) == 2
    assert str(path) == "/a{id}"


@pytest.mark.parametrize("value", ["query", "header", "path", "cookie"])
def test_location_from_value(value):
    assert ParameterLocation(value).value == value
    assert str(ParameterLocation(value)) == value


def test_unknown_location_raises():
    with pytest.raises(ValueError):
        ParameterLocation("body")


def test_shared_styles_are_aliases():
    assert ParameterStyle.PATH_SIMPLE is ParameterStyle.HEADER_SIMPLE
    assert ParameterStyle.QUERY_FORM is ParameterStyle.COOKIE_FORM
    assert ParameterStyle("deepObject") is ParameterStyle.QUERY_DEEP_OBJECT
    assert str(ParameterStyle.QUERY_PIPE_DELIMITED) == "pipeDelimited"


def test_content_add_example_skips_missing():
    content = Content(schema=Schema(type="string"))
    content.add_example(None)
    content.add_example("a")
    content.add_example({"b": 1})
    assert content.examples == ["a", {"b": 1}]


def test_containers_default_to_empty():
    op = Operation(http_method="GET")
    assert op.parameters == []
    assert op.responses == {}
    assert op.request_body is None
    assert str(op.path) == ""
    api = API()
    assert api.operations == []
    assert api.components.schemas == {}


def test_request_body_and_response_hold_contents():
    body = RequestBody(contents={"application/json": Content(Schema(type="object"))}, required=True)
    resp = Response(ref="#/components/responses/error")
    assert body.contents["application/json"].schema.type == "object"
    assert body.required is True
    assert resp.contents == {}