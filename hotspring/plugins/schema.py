"""
Hotspring Plugin Config Schema
==============================

Declarative configuration schemas for plugins and the validator that
checks a configuration mapping against them.

A property is checked against a small closed set of constraint kinds:
type, enum, range and pattern, plus a custom predicate. Every constraint
of every property is evaluated, so a single validation pass reports all
problems at once.

Example:
    schema = create_config_schema(
        {
            "provider": {"type": "string", "enum": ["smtp", "sendgrid"]},
            "port": {"type": "number", "minimum": 1, "maximum": 65535},
        },
        required=["provider"],
    )

    result = ConfigValidator().validate({"port": 0}, schema)
    result.valid   # False
    result.errors  # ['Required property "provider" is missing',
                   #  'Property "port" must be >= 1']
"""

from __future__ import annotations

import math
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

PROPERTY_TYPES = ("string", "number", "boolean", "object", "array")

# Custom predicate: True passes, False fails, a string fails with that message
Predicate = Callable[[Any], Union[bool, str]]


def check_type(value: Any, expected: str) -> bool:
    """Check ``value`` against a schema type name."""
    if expected == "string":
        return isinstance(value, str)
    if expected == "number":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        return not (isinstance(value, float) and math.isnan(value))
    if expected == "boolean":
        return isinstance(value, bool)
    if expected == "object":
        return isinstance(value, Mapping)
    if expected == "array":
        return isinstance(value, (list, tuple))
    return True


class Constraint(ABC):
    """
    A single declarative check on a property value.

    ``check`` returns the error messages for ``value``; an empty list
    means the value satisfies the constraint.
    """

    @abstractmethod
    def check(self, value: Any, path: str) -> List[str]:
        ...


@dataclass
class TypeConstraint(Constraint):
    """Value must be of the declared schema type."""

    type: str

    def check(self, value: Any, path: str) -> List[str]:
        if check_type(value, self.type):
            return []
        return [f'Property "{path}" must be of type {self.type}']


@dataclass
class EnumConstraint(Constraint):
    """Value must be one of a fixed set."""

    choices: Sequence[Any]

    def check(self, value: Any, path: str) -> List[str]:
        if value in self.choices:
            return []
        allowed = ", ".join(str(choice) for choice in self.choices)
        return [f'Property "{path}" must be one of: {allowed}']


@dataclass
class RangeConstraint(Constraint):
    """Numeric value must lie within inclusive bounds."""

    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def check(self, value: Any, path: str) -> List[str]:
        errors = []
        if self.minimum is not None and value < self.minimum:
            errors.append(f'Property "{path}" must be >= {self.minimum}')
        if self.maximum is not None and value > self.maximum:
            errors.append(f'Property "{path}" must be <= {self.maximum}')
        return errors


@dataclass
class PatternConstraint(Constraint):
    """String value must match a regular expression."""

    pattern: str

    def check(self, value: Any, path: str) -> List[str]:
        if re.search(self.pattern, value):
            return []
        return [f'Property "{path}" must match pattern: {self.pattern}']


@dataclass
class CustomConstraint(Constraint):
    """Arbitrary predicate supplied by the plugin author."""

    predicate: Predicate

    def check(self, value: Any, path: str) -> List[str]:
        try:
            result = self.predicate(value)
        except Exception as e:
            return [f'Property "{path}" validation raised: {e}']

        if isinstance(result, str):
            return [f'Property "{path}": {result}']
        if not result:
            return [f'Property "{path}" failed validation']
        return []


@dataclass
class PropertySchema:
    """
    Schema for a single configuration property.

    Attributes:
        type: One of string, number, boolean, object, array
        description: Human readable description
        default: Documented default (defaults are applied from the
            plugin's ``default_config``, not from here)
        enum: Allowed values
        minimum: Lower bound for numbers
        maximum: Upper bound for numbers
        pattern: Regular expression for strings
        required: Property must be present in its parent mapping
        properties: Nested property schemas for objects
        items: Item schema for arrays
        validation: Custom predicate
    """

    type: str
    description: str = ""
    default: Any = None
    enum: Optional[List[Any]] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    pattern: Optional[str] = None
    required: bool = False
    properties: Dict[str, "PropertySchema"] = field(default_factory=dict)
    items: Optional["PropertySchema"] = None
    validation: Optional[Predicate] = None

    def __post_init__(self) -> None:
        if self.type not in PROPERTY_TYPES:
            raise ValueError(
                f"Unknown property type {self.type!r}, expected one of {PROPERTY_TYPES}"
            )
        if self.pattern is not None:
            try:
                re.compile(self.pattern)
            except re.error as e:
                raise ValueError(f"Invalid pattern {self.pattern!r}: {e}") from e
        self.properties = {
            name: as_property_schema(prop) for name, prop in self.properties.items()
        }
        if self.items is not None:
            self.items = as_property_schema(self.items)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PropertySchema":
        """Build from a JSON-schema-like mapping."""
        return cls(
            type=data["type"],
            description=data.get("description", ""),
            default=data.get("default"),
            enum=data.get("enum"),
            minimum=data.get("minimum"),
            maximum=data.get("maximum"),
            pattern=data.get("pattern"),
            required=bool(data.get("required", False)),
            properties=dict(data.get("properties") or {}),
            items=data.get("items"),
            validation=data.get("validation"),
        )

    def constraints(self) -> List[Constraint]:
        """Value constraints that apply once the type check has passed."""
        result: List[Constraint] = []

        if self.enum is not None:
            result.append(EnumConstraint(self.enum))
        if self.type == "number" and (self.minimum is not None or self.maximum is not None):
            result.append(RangeConstraint(self.minimum, self.maximum))
        if self.type == "string" and self.pattern:
            result.append(PatternConstraint(self.pattern))

        return result


def as_property_schema(value: Union[PropertySchema, Mapping[str, Any]]) -> PropertySchema:
    """Coerce a mapping into a ``PropertySchema``."""
    if isinstance(value, PropertySchema):
        return value
    return PropertySchema.from_dict(value)


@dataclass
class ConfigSchema:
    """
    Top-level plugin configuration schema.

    Attributes:
        type: Always "object"
        properties: Property name to schema
        required: Names that must be present
        additional_properties: Whether keys not listed in ``properties``
            are expected. Descriptive only: the validator never rejects
            unknown keys
    """

    type: str = "object"
    properties: Dict[str, PropertySchema] = field(default_factory=dict)
    required: List[str] = field(default_factory=list)
    additional_properties: bool = True

    def __post_init__(self) -> None:
        self.properties = {
            name: as_property_schema(prop) for name, prop in self.properties.items()
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConfigSchema":
        """Build from a JSON-schema-like mapping."""
        return cls(
            type=data.get("type", "object"),
            properties=dict(data.get("properties") or {}),
            required=list(data.get("required") or []),
            additional_properties=data.get(
                "additional_properties", data.get("additionalProperties", True)
            ),
        )

    def required_names(self) -> List[str]:
        """Names from ``required`` plus properties flagged as required."""
        names = list(self.required)
        for name, prop in self.properties.items():
            if prop.required and name not in names:
                names.append(name)
        return names


def as_config_schema(value: Union[ConfigSchema, Mapping[str, Any], None]) -> Optional[ConfigSchema]:
    """Coerce a mapping into a ``ConfigSchema``."""
    if value is None or isinstance(value, ConfigSchema):
        return value
    return ConfigSchema.from_dict(value)


@dataclass
class ValidationResult:
    """
    Result of validating a configuration.

    Attributes:
        valid: True when no errors were found
        errors: Every error message, in evaluation order
    """

    valid: bool
    errors: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.valid


class ConfigValidator:
    """
    Validates configuration mappings against a ``ConfigSchema``.

    Never stops at the first failure: missing required properties, then
    each present property in schema order, are all checked before the
    result is returned.
    """

    def validate(
        self,
        config: Mapping[str, Any],
        schema: Union[ConfigSchema, Mapping[str, Any]],
    ) -> ValidationResult:
        """
        Validate ``config`` against ``schema``.

        Args:
            config: Configuration supplied by the caller
            schema: Schema or JSON-schema-like mapping

        Returns:
            Validation result with the complete error list
        """
        schema = as_config_schema(schema)

        if schema.type != "object":
            return ValidationResult(False, ["Config schema must be of type object"])

        errors = self._validate_mapping(
            config,
            schema.properties,
            schema.required_names(),
            prefix="",
        )

        return ValidationResult(not errors, errors)

    def _validate_mapping(
        self,
        values: Mapping[str, Any],
        properties: Mapping[str, PropertySchema],
        required: Sequence[str],
        prefix: str,
    ) -> List[str]:
        errors = []

        for name in required:
            if name not in values:
                errors.append(f'Required property "{prefix}{name}" is missing')

        for name, prop in properties.items():
            if name in values:
                errors.extend(self._validate_property(values[name], prop, f"{prefix}{name}"))

        return errors

    def _validate_property(self, value: Any, prop: PropertySchema, path: str) -> List[str]:
        type_errors = TypeConstraint(prop.type).check(value, path)
        if type_errors:
            return type_errors

        errors = []
        for constraint in prop.constraints():
            errors.extend(constraint.check(value, path))

        if prop.type == "object" and prop.properties:
            nested_required = [n for n, p in prop.properties.items() if p.required]
            errors.extend(
                self._validate_mapping(value, prop.properties, nested_required, prefix=f"{path}.")
            )

        if prop.type == "array" and prop.items is not None:
            for index, item in enumerate(value):
                errors.extend(self._validate_property(item, prop.items, f"{path}[{index}]"))

        if prop.validation is not None:
            errors.extend(CustomConstraint(prop.validation).check(value, path))

        return errors


def validate_config(
    config: Mapping[str, Any],
    schema: Union[ConfigSchema, Mapping[str, Any]],
) -> ValidationResult:
    """Validate ``config`` against ``schema`` with a default validator."""
    return ConfigValidator().validate(config, schema)


def create_config_schema(
    properties: Mapping[str, Union[PropertySchema, Mapping[str, Any]]],
    required: Optional[List[str]] = None,
    additional_properties: bool = False,
) -> ConfigSchema:
    """
    Create a plugin configuration schema.

    Schemas built here are marked as not expecting unknown keys; the
    validator still ignores any it finds.
    """
    return ConfigSchema(
        type="object",
        properties=dict(properties),
        required=list(required or []),
        additional_properties=additional_properties,
    )
