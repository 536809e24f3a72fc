import pytest

from oaspec.openapi import Parameter, ParameterLocation, PathPart
from oaspec.path_parser import parse_path
from oaspec.schema import Schema

BAR = Parameter(name="bar", in_=ParameterLocation.PATH, schema=Schema(type="integer"))
BAZ = Parameter(name="baz", in_=ParameterLocation.PATH, schema=Schema(type="string"))


@pytest.mark.parametrize(
    "path, params, expected",
    [
        ("/foo/{bar}", [BAR], [PathPart(raw="/foo/"), PathPart(param=BAR)]),
        ("/foo.{bar}", [BAR], [PathPart(raw="/foo."), PathPart(param=BAR)]),
        (
            "/foo.{bar}.{baz}abc/def",
            [BAR, BAZ],
            [
                PathPart(raw="/foo."),
                PathPart(param=BAR),
                PathPart(raw="."),
                PathPart(param=BAZ),
                PathPart(raw="abc/def"),
            ],
        ),
    ],
)
def test_parse_path(path, params, expected):
    result = parse_path(path, params)
    assert list(result) == expected
    assert str(result) == path


def test_missing_parameter():
    with pytest.raises(ValueError) as exc:
        parse_path("/foo/{bar}/{baz}", [BAR])
    assert str(exc.value) == 'path parameter not specified: "baz"'


def test_parameter_in_other_location_is_not_used():
    query_bar = Parameter(name="bar", in_=ParameterLocation.QUERY)
    with pytest.raises(ValueError, match="path parameter not specified"):
        parse_path("/foo/{bar}", [query_bar])


@pytest.mark.parametrize("path", ["/foo/{bar", "/foo/bar}", "/foo/{{bar}}", "/foo/{ba/r}"])
def test_invalid_paths(path):
    with pytest.raises(ValueError, match="invalid path"):
        parse_path(path, [BAR])


def test_plain_path_is_single_part():
    result = parse_path("/pets", [])
    assert list(result) == [PathPart(raw="/pets")]