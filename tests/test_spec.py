import json

import pytest

from oaspec.schema import Schema
from oaspec.spec import (
    Components,
    Example,
    OAuthFlow,
    OAuthFlows,
    Operation,
    Parameter,
    PathItem,
    RequestBody,
    Response,
    SecuritySchema,
    Spec,
    SpecError,
    parse,
)

DOCUMENT = {
    "openapi": "3.0.3",
    "info": {"title": "Pets", "version": "1.0.0", "contact": {"email": "team@example.com"}},
    "servers": [{"url": "https://api.example.com"}],
    "paths": {
        "/pets/{id}": {
            "parameters": [
                {"name": "id", "in": "path", "required": True, "schema": {"type": "integer"}}
            ],
            "get": {
                "operationId": "getPet",
                "tags": ["pets"],
                "responses": {
                    "200": {
                        "description": "ok",
                        "content": {"application/json": {"schema": {"type": "string"}}},
                    }
                },
            },
        }
    },
    "components": {
        "schemas": {
            "Pet": {
                "type": "object",
                "properties": {"foo": {"type": "integer"}, "bar": {"type": "string"}},
            }
        }
    },
    "tags": [{"name": "pets"}],
}

YAML_DOCUMENT = """
openapi: 3.0.3
info:
  title: Pets
  version: 1.0.0
  contact:
    email: team@example.com
servers:
  - url: https://api.example.com
paths:
  /pets/{id}:
    parameters:
      - name: id
        in: path
        required: true
        schema:
          type: integer
    get:
      operationId: getPet
      tags: [pets]
      responses:
        200:
          description: ok
          content:
            application/json:
              schema:
                type: string
components:
  schemas:
    Pet:
      type: object
      properties:
        foo:
          type: integer
        bar:
          type: string
tags:
  - name: pets
"""


def test_parse_json_document():
    spec = parse(json.dumps(DOCUMENT))
    assert spec.openapi == "3.0.3"
    assert spec.info.title == "Pets"
    assert spec.info.contact.email == "team@example.com"
    assert spec.servers[0].url == "https://api.example.com"
    item = spec.paths["/pets/{id}"]
    assert item.get.operation_id == "getPet"
    assert item.get.tags == ["pets"]
    assert item.parameters[0].in_ == "path"
    assert item.parameters[0].schema == Schema(type="integer")
    assert item.get.responses["200"].content["application/json"].schema == Schema(type="string")
    assert item.post is None


def test_parse_yaml_matches_json():
    from_yaml = parse(YAML_DOCUMENT)
    from_json = parse(json.dumps(DOCUMENT))
    assert from_yaml == from_json
    assert list(from_yaml.paths["/pets/{id}"].get.responses) == ["200"]


def test_parse_bytes_input():
    spec = parse(json.dumps(DOCUMENT).encode("utf-8"))
    assert spec.info.version == "1.0.0"


def test_raw_holds_document():
    spec = parse(json.dumps(DOCUMENT))
    assert spec.raw == DOCUMENT


def test_component_properties_keep_order():
    spec = parse(json.dumps(DOCUMENT))
    names = [p.name for p in spec.components.schemas["Pet"].properties]
    assert names == ["foo", "bar"]


@pytest.mark.parametrize("data", ["", "   \n", b""])
def test_blank_data(data):
    with pytest.raises(SpecError, match="blank data"):
        parse(data)


def test_invalid_yaml():
    with pytest.raises(SpecError):
        parse("key: [unclosed")


def test_type_mismatch():
    with pytest.raises(SpecError):
        parse('{"openapi": 3}')


def test_non_object_document():
    with pytest.raises(SpecError):
        parse("[1, 2]")


def test_schema_errors_become_spec_errors():
    doc = {"components": {"schemas": {"A": {"maxLength": -1}}}}
    with pytest.raises(SpecError):
        parse(json.dumps(doc))


def test_operation_security_absent_vs_empty():
    assert Operation.from_dict({}).security is None
    assert Operation.from_dict({"security": []}).security == []
    op = Operation.from_dict({"security": [{"api_key": []}, {"oauth": ["read"]}]})
    assert op.security == [{"api_key": []}, {"oauth": ["read"]}]


def test_root_security():
    spec = Spec.from_dict({"security": [{"basic": []}]})
    assert spec.security == [{"basic": []}]
    assert Spec.from_dict({}).security == []


def test_init_creates_components():
    spec = Spec.from_dict({})
    assert spec.components is None
    spec.init()
    assert spec.components == Components()


def test_init_keeps_existing_components():
    spec = Spec.from_dict({"components": {"schemas": {"A": {"type": "string"}}}})
    spec.init()
    assert spec.components.schemas == {"A": Schema(type="string")}


def test_parameter_explode_and_null_schema():
    assert Parameter.from_dict({"name": "q", "in": "query"}).explode is None
    assert Parameter.from_dict({"explode": False}).explode is False
    assert Parameter.from_dict({"schema": None}).schema == Schema()


def test_parameter_bad_explode():
    with pytest.raises(SpecError):
        Parameter.from_dict({"explode": "yes"})


def test_security_schema_uses_plain_ref_key():
    scheme = SecuritySchema.from_dict(
        {
            "ref": "#/components/securitySchemes/other",
            "type": "oauth2",
            "in": "header",
            "flows": {
                "implicit": {
                    "authorizationUrl": "https://auth.example.com",
                    "scopes": {"read": "Read access"},
                }
            },
        }
    )
    assert scheme.ref == "#/components/securitySchemes/other"
    assert scheme.in_ == "header"
    assert scheme.flows == OAuthFlows(
        implicit=OAuthFlow(
            authorization_url="https://auth.example.com", scopes={"read": "Read access"}
        )
    )
    assert scheme.flows.password is None


def test_example_keeps_value():
    example = Example.from_dict({"summary": "s", "value": {"a": [1, 2]}})
    assert example.value == {"a": [1, 2]}
    assert example.summary == "s"


def test_null_map_entries():
    item = PathItem.from_dict({})
    assert item.parameters == []
    spec = Spec.from_dict({"paths": {"/a": None}})
    assert spec.paths == {"/a": None}
    body = RequestBody.from_dict({"content": {"text/plain": None}})
    assert body.content["text/plain"].schema is None


def test_response_reference():
    response = Response.from_dict({"$ref": "#/components/responses/error"})
    assert response.ref == "#/components/responses/error"
    assert response.content == {}


def test_components_from_dict():
    components = Components.from_dict(
        {
            "requestBodies": {"body": {"required": True, "content": {}}},
            "securitySchemes": {"basic": {"type": "http", "scheme": "basic"}},
        }
    )
    assert components.request_bodies["body"].required is True
    assert components.security_schemes["basic"].scheme == "basic"
    assert components.schemas == {}