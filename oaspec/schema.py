"""Schema objects of an OpenAPI document and their JSON representation."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Union

JSONText = Union[str, bytes, bytearray]

_JSON_TYPE_NAMES: tuple[tuple[type, str], ...] = (
    (bool, "bool"),
    (str, "string"),
    (int, "number"),
    (float, "number"),
    (list, "array"),
    (dict, "object"),
)


def _json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    for kind, name in _JSON_TYPE_NAMES:
        if isinstance(value, kind):
            return name
    return type(value).__name__


def _load(data: Any) -> Any:
    if isinstance(data, (bytes, bytearray)):
        data = data.decode("utf-8")
    if isinstance(data, str):
        return json.loads(data)
    return data


def _dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _expect_object(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"{what}: expected object, got {_json_type_name(value)}")
    return value


def _str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key}: expected string, got {_json_type_name(value)}")
    return value


def _bool(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"{key}: expected bool, got {_json_type_name(value)}")
    return value


def _num(data: Mapping[str, Any], key: str) -> int | float | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key}: expected number, got {_json_type_name(value)}")
    return value


def _uint(data: Mapping[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key}: expected integer, got {_json_type_name(value)}")
    if value < 0:
        raise ValueError(f"{key}: value {value} must not be negative")
    return value


def _str_list(data: Mapping[str, Any], key: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{key}: expected array, got {_json_type_name(value)}")
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"{key}: expected string item, got {_json_type_name(item)}")
    return list(value)


def _optional_schema(value: Any) -> Schema | None:
    return None if value is None else Schema.from_dict(value)


def _schema_list(data: Mapping[str, Any], key: str) -> list[Schema | None]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{key}: expected array, got {_json_type_name(value)}")
    return [_optional_schema(item) for item in value]


def _schema_value(schema: Schema | None) -> dict[str, Any] | None:
    return None if schema is None else schema.to_dict()


@dataclass
class Discriminator:
    """Discriminates types for oneOf, allOf and anyOf."""

    property_name: str = ""
    mapping: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> Discriminator:
        data = _expect_object(data, "discriminator")
        mapping = data.get("mapping")
        if mapping is None:
            mapping = {}
        mapping = _expect_object(mapping, "mapping")
        for key, value in mapping.items():
            if not isinstance(value, str):
                raise ValueError(
                    f"mapping {key!r}: expected string, got {_json_type_name(value)}"
                )
        return cls(property_name=_str(data, "propertyName"), mapping=dict(mapping))

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"propertyName": self.property_name}
        if self.mapping:
            result["mapping"] = dict(self.mapping)
        return result


@dataclass
class Property:
    """A named property of an object schema."""

    name: str
    schema: Schema | None


@dataclass
class PatternProperty:
    """A property schema applying to names that match a pattern."""

    pattern: str
    schema: Schema | None


def _named_from_json(data: Any, what: str, make: Callable[[str, Schema], Any]) -> list:
    data = _expect_object(_load(data), what)
    return [make(key, Schema.from_dict(value)) for key, value in data.items()]


def properties_from_json(data: Any) -> list[Property]:
    """Decode an ordered list of properties from a JSON object."""
    return _named_from_json(data, "properties", lambda k, s: Property(name=k, schema=s))


def properties_to_json(properties: list[Property]) -> str:
    """Encode properties as a JSON object, keeping their order."""
    return _dumps({p.name: _schema_value(p.schema) for p in properties})


def pattern_properties_from_json(data: Any) -> list[PatternProperty]:
    """Decode an ordered list of pattern properties from a JSON object."""
    return _named_from_json(
        data, "patternProperties", lambda k, s: PatternProperty(pattern=k, schema=s)
    )


def pattern_properties_to_json(properties: list[PatternProperty]) -> str:
    """Encode pattern properties as a JSON object, keeping their order."""
    return _dumps({p.pattern: _schema_value(p.schema) for p in properties})


@dataclass
class AdditionalProperties:
    """Value of additionalProperties: either a boolean or a schema."""

    allow: bool = False
    schema: Schema = field(default_factory=lambda: Schema())

    @classmethod
    def from_json(cls, data: Any) -> AdditionalProperties:
        value = _load(data)
        if isinstance(value, bool):
            # Any boolean literal marks the flag as set.
            return cls(allow=True)
        if isinstance(value, Mapping):
            return cls(schema=Schema.from_dict(value))
        raise ValueError(f"unexpected type {_json_type_name(value)}")

    def to_json(self) -> bool | dict[str, Any]:
        if self.allow:
            return True
        return self.schema.to_dict()


@dataclass
class Schema:
    """Definition of an input or output data type."""

    ref: str = ""
    description: str = ""
    type: str = ""
    format: str = ""
    properties: list[Property] = field(default_factory=list)
    additional_properties: AdditionalProperties | None = None
    pattern_properties: list[PatternProperty] = field(default_factory=list)
    required: list[str] = field(default_factory=list)
    items: Schema | None = None
    nullable: bool = False
    all_of: list[Schema | None] = field(default_factory=list)
    one_of: list[Schema | None] = field(default_factory=list)
    any_of: list[Schema | None] = field(default_factory=list)
    discriminator: Discriminator | None = None
    enum: list[Any] = field(default_factory=list)
    multiple_of: int | float | None = None
    maximum: int | float | None = None
    exclusive_maximum: bool = False
    minimum: int | float | None = None
    exclusive_minimum: bool = False
    max_length: int | None = None
    min_length: int | None = None
    pattern: str = ""
    max_items: int | None = None
    min_items: int | None = None
    unique_items: bool = False
    max_properties: int | None = None
    min_properties: int | None = None
    default: Any = None
    example: Any = None
    deprecated: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> Schema:
        data = _expect_object(data, "schema")

        properties = data.get("properties")
        pattern_properties = data.get("patternProperties")
        additional = data.get("additionalProperties")
        discriminator = data.get("discriminator")
        enum = data.get("enum")
        if enum is not None and not isinstance(enum, list):
            raise ValueError(f"enum: expected array, got {_json_type_name(enum)}")

        return cls(
            ref=_str(data, "$ref"),
            description=_str(data, "description"),
            type=_str(data, "type"),
            format=_str(data, "format"),
            properties=[] if properties is None else properties_from_json(properties),
            additional_properties=(
                None if additional is None else AdditionalProperties.from_json(additional)
            ),
            pattern_properties=(
                []
                if pattern_properties is None
                else pattern_properties_from_json(pattern_properties)
            ),
            required=_str_list(data, "required"),
            items=_optional_schema(data.get("items")),
            nullable=_bool(data, "nullable"),
            all_of=_schema_list(data, "allOf"),
            one_of=_schema_list(data, "oneOf"),
            any_of=_schema_list(data, "anyOf"),
            discriminator=(
                None if discriminator is None else Discriminator.from_dict(discriminator)
            ),
            enum=[] if enum is None else list(enum),
            multiple_of=_num(data, "multipleOf"),
            maximum=_num(data, "maximum"),
            exclusive_maximum=_bool(data, "exclusiveMaximum"),
            minimum=_num(data, "minimum"),
            exclusive_minimum=_bool(data, "exclusiveMinimum"),
            max_length=_uint(data, "maxLength"),
            min_length=_uint(data, "minLength"),
            pattern=_str(data, "pattern"),
            max_items=_uint(data, "maxItems"),
            min_items=_uint(data, "minItems"),
            unique_items=_bool(data, "uniqueItems"),
            max_properties=_uint(data, "maxProperties"),
            min_properties=_uint(data, "minProperties"),
            default=data.get("default"),
            example=data.get("example"),
            deprecated=_bool(data, "deprecated"),
        )

    def to_dict(self) -> dict[str, Any]:
        entries: list[tuple[str, Any, bool]] = [
            ("$ref", self.ref, bool(self.ref)),
            ("description", self.description, bool(self.description)),
            ("type", self.type, bool(self.type)),
            ("format", self.format, bool(self.format)),
            (
                "properties",
                {p.name: _schema_value(p.schema) for p in self.properties},
                bool(self.properties),
            ),
            (
                "additionalProperties",
                None if self.additional_properties is None else self.additional_properties.to_json(),
                self.additional_properties is not None,
            ),
            (
                "patternProperties",
                {p.pattern: _schema_value(p.schema) for p in self.pattern_properties},
                bool(self.pattern_properties),
            ),
            ("required", list(self.required), bool(self.required)),
            ("items", _schema_value(self.items), self.items is not None),
            ("nullable", True, self.nullable),
            ("allOf", [_schema_value(s) for s in self.all_of], bool(self.all_of)),
            ("oneOf", [_schema_value(s) for s in self.one_of], bool(self.one_of)),
            ("anyOf", [_schema_value(s) for s in self.any_of], bool(self.any_of)),
            (
                "discriminator",
                None if self.discriminator is None else self.discriminator.to_dict(),
                self.discriminator is not None,
            ),
            ("enum", list(self.enum), bool(self.enum)),
            ("multipleOf", self.multiple_of, self.multiple_of is not None),
            ("maximum", self.maximum, self.maximum is not None),
            ("exclusiveMaximum", True, self.exclusive_maximum),
            ("minimum", self.minimum, self.minimum is not None),
            ("exclusiveMinimum", True, self.exclusive_minimum),
            ("maxLength", self.max_length, self.max_length is not None),
            ("minLength", self.min_length, self.min_length is not None),
            ("pattern", self.pattern, bool(self.pattern)),
            ("maxItems", self.max_items, self.max_items is not None),
            ("minItems", self.min_items, self.min_items is not None),
            ("uniqueItems", True, self.unique_items),
            ("maxProperties", self.max_properties, self.max_properties is not None),
            ("minProperties", self.min_properties, self.min_properties is not None),
            ("default", self.default, self.default is not None),
            ("example", self.example, self.example is not None),
            ("deprecated", True, self.deprecated),
        ]
        return {key: value for key, value, present in entries if present}