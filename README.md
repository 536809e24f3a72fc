# oaspec

`oaspec` reads an OpenAPI v3 document, written in JSON or YAML, and turns it
into a resolved API model that code generators and other tools can build on.

The work happens in two stages.

1. **Loading** (`oaspec.spec`). `parse(data)` takes the text or bytes of a
   document and returns a `Spec`. The input is first read as JSON. If it is
   not valid JSON, it is read as YAML, and keys and dates are turned into
   strings the way JSON would hold them. The `Spec` mirrors the document:
   `info`, `servers`, `paths`, `components`, `security` and `tags`. The
   decoded document itself is kept in `raw`. Schemas become
   `oaspec.schema.Schema` objects, and their properties keep document order.
   Blank input, or input of the wrong shape, raises `SpecError`, which is a
   subclass of `ValueError`.
2. **Resolving** (`oaspec.parser`). `parse(spec)` walks every path item and
   operation and returns an `oaspec.openapi.API`. The result holds a list of
   `Operation` objects and the resolved `Components`. Along the way it:
   - resolves `$ref` references to parameters, request bodies, responses,
     examples and security schemes;
   - resolves schema references through `components.schemas`, or by JSON
     pointer into the raw document;
   - checks parameter locations, styles and uniqueness;
   - checks status codes, `operationId` uniqueness and security
     requirements.

   Each operation receives its parameters merged with the path item's, a
   parsed `Path`, and its security requirements. These come from the
   operation itself, or from the document when the operation declares none.
   Response contents collect their examples in `Content.examples`. Any
   problem raises a `ValueError`, and the message says where in the document
   it was found.

## Installation

```
pip install .
```

## Usage

```python
from oaspec import spec, parser

document = b"""
openapi: 3.0.3
info:
  title: Pets
  version: 1.0.0
paths:
  /pets/{id}:
    get:
      operationId: getPet
      parameters:
        - name: id
          in: path
          required: true
          schema:
            type: integer
      responses:
        "200":
          description: A pet
          content:
            application/json:
              schema:
                type: object
"""

loaded = spec.parse(document)
api = parser.parse(loaded)

for op in api.operations:
    print(op.http_method, str(op.path), op.operation_id)
    # GET /pets/{id} getPet
```

The following are rejected, among others:

- a path parameter that is not marked `required`;
- a duplicate `operationId`, or a duplicate parameter name in the same location;
- a status code other than `default`, `1XX` to `5XX`, or 100 to 599;
- a request body without content, or an operation without responses;
- the `spaceDelimited` query style;
- a reference that cannot be resolved, or one that loops back on itself.

## Helpers

- `oaspec.schema` holds `Schema`, `Property`, `PatternProperty`,
  `AdditionalProperties` and `Discriminator`. `Schema.from_dict` and
  `Schema.to_dict` convert schemas to and from plain dicts.
  `properties_from_json` and `properties_to_json` (and their
  pattern-property counterparts) keep property order.
- `oaspec.path_parser.parse_path(path, params)` splits a templated path such
  as `/foo.{bar}` into raw parts and parameter parts.
- `oaspec.parser.param_style(location, style)` checks that a style is allowed
  for the location, or returns the location's default style when none is
  given. `oaspec.parser.param_explode(location, explode)` returns the explode
  flag, which defaults to true for query and cookie parameters.
  `oaspec.parser.validate_status_code(value)` checks a response key.
  `oaspec.parser.merge_params(op_params, item_params)` adds the path item
  parameters that the operation does not override.
- `oaspec.otelogen` provides metric names, the `oas.operation` attribute key
  with `operation_id(value)`, and `version()` / `sem_version()`.

## What it does not do

`oaspec` stops at the resolved model. It does not generate client or server
code, it has no command-line tool, and it does not serve or call HTTP APIs.
`oaspec.otelogen` only supplies names and a version string. It does not set
up tracing or metrics itself.

## Running the tests

```
pip install .[test]
pytest
```