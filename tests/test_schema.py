"""Tests for plugin config schemas and the validator."""

import math

import pytest

from hotspring.plugins.schema import (
    ConfigSchema,
    ConfigValidator,
    PropertySchema,
    check_type,
    create_config_schema,
    validate_config,
)


@pytest.fixture
def validator():
    return ConfigValidator()


class TestCheckType:
    """Schema type names against Python values."""

    def test_number_excludes_bool_and_nan(self):
        assert check_type(3, "number")
        assert check_type(2.5, "number")
        assert not check_type(True, "number")
        assert not check_type(math.nan, "number")
        assert not check_type("3", "number")

    def test_object_and_array(self):
        assert check_type({"a": 1}, "object")
        assert not check_type([1], "object")
        assert check_type([1, 2], "array")
        assert check_type((1, 2), "array")
        assert not check_type("ab", "array")

    def test_boolean_and_string(self):
        assert check_type(False, "boolean")
        assert not check_type(0, "boolean")
        assert check_type("", "string")


class TestRequired:

    def test_all_missing_required_properties_reported(self, validator):
        schema = create_config_schema(
            {"host": {"type": "string"}, "port": {"type": "number"}},
            required=["host", "port"],
        )

        result = validator.validate({}, schema)

        assert not result.valid
        assert result.errors == [
            'Required property "host" is missing',
            'Required property "port" is missing',
        ]

    def test_required_flag_on_property(self, validator):
        schema = ConfigSchema(properties={"token": {"type": "string", "required": True}})

        result = validator.validate({}, schema)

        assert result.errors == ['Required property "token" is missing']

    def test_valid_config(self, validator):
        schema = create_config_schema({"host": {"type": "string"}}, required=["host"])

        result = validator.validate({"host": "localhost"}, schema)

        assert result.valid
        assert result
        assert result.errors == []


class TestConstraints:

    def test_type_mismatch_skips_other_checks(self, validator):
        schema = create_config_schema(
            {"port": {"type": "number", "minimum": 1, "enum": [25, 587]}}
        )

        result = validator.validate({"port": "25"}, schema)

        assert result.errors == ['Property "port" must be of type number']

    def test_enum(self, validator):
        schema = create_config_schema(
            {"provider": {"type": "string", "enum": ["smtp", "sendgrid"]}}
        )

        result = validator.validate({"provider": "mailgun"}, schema)

        assert result.errors == ['Property "provider" must be one of: smtp, sendgrid']

    def test_range(self, validator):
        schema = create_config_schema(
            {"port": {"type": "number", "minimum": 1, "maximum": 65535}}
        )

        assert validator.validate({"port": 0}, schema).errors == [
            'Property "port" must be >= 1'
        ]
        assert validator.validate({"port": 70000}, schema).errors == [
            'Property "port" must be <= 65535'
        ]
        assert validator.validate({"port": 65535}, schema).valid

    def test_pattern(self, validator):
        schema = create_config_schema(
            {"sender": {"type": "string", "pattern": r"^[^@]+@[^@]+$"}}
        )

        assert validator.validate({"sender": "a@b"}, schema).valid
        assert validator.validate({"sender": "nobody"}, schema).errors == [
            'Property "sender" must match pattern: ^[^@]+@[^@]+$'
        ]

    def test_custom_predicate_false(self, validator):
        schema = create_config_schema(
            {"retries": {"type": "number", "validation": lambda v: v % 2 == 0}}
        )

        result = validator.validate({"retries": 3}, schema)

        assert result.errors == ['Property "retries" failed validation']

    def test_custom_predicate_message(self, validator):
        schema = create_config_schema(
            {"name": {"type": "string", "validation": lambda v: v.islower() or "must be lowercase"}}
        )

        result = validator.validate({"name": "Shop"}, schema)

        assert result.errors == ['Property "name": must be lowercase']

    def test_custom_predicate_raising(self, validator):
        def explode(value):
            raise RuntimeError("boom")

        schema = create_config_schema({"x": {"type": "string", "validation": explode}})

        result = validator.validate({"x": "y"}, schema)

        assert result.errors == ['Property "x" validation raised: boom']

    def test_errors_across_properties_aggregated(self, validator):
        schema = create_config_schema(
            {
                "provider": {"type": "string", "enum": ["smtp"]},
                "port": {"type": "number", "minimum": 1},
                "secure": {"type": "boolean"},
            },
            required=["apiKey"],
        )

        result = validator.validate(
            {"provider": "x", "port": -1, "secure": "yes"}, schema
        )

        assert len(result.errors) == 4
        assert result.errors[0] == 'Required property "apiKey" is missing'


class TestNested:

    def test_nested_object_paths(self, validator):
        schema = create_config_schema(
            {
                "smtp": {
                    "type": "object",
                    "properties": {
                        "host": {"type": "string", "required": True},
                        "port": {"type": "number", "maximum": 65535},
                    },
                },
            }
        )

        result = validator.validate({"smtp": {"port": 99999}}, schema)

        assert result.errors == [
            'Required property "smtp.host" is missing',
            'Property "smtp.port" must be <= 65535',
        ]

    def test_array_items(self, validator):
        schema = create_config_schema(
            {"recipients": {"type": "array", "items": {"type": "string"}}}
        )

        result = validator.validate({"recipients": ["a", 2, "c", None]}, schema)

        assert result.errors == [
            'Property "recipients[1]" must be of type string',
            'Property "recipients[3]" must be of type string',
        ]


class TestAdditionalProperties:

    def test_unknown_keys_accepted(self, validator):
        schema = create_config_schema({"host": {"type": "string"}})

        result = validator.validate({"host": "h", "extra": 1}, schema)

        assert schema.additional_properties is False
        assert result.valid
        assert result.errors == []

    def test_bare_schema_allows_unknown_keys(self, validator):
        schema = ConfigSchema(properties={"host": {"type": "string"}})

        assert validator.validate({"host": "h", "extra": 1}, schema).valid

    def test_from_dict_camel_case_flag(self):
        schema = ConfigSchema.from_dict(
            {"properties": {"a": {"type": "string"}}, "additionalProperties": False}
        )

        assert schema.additional_properties is False
        assert isinstance(schema.properties["a"], PropertySchema)


class TestSchemaShape:

    def test_non_object_schema(self):
        result = validate_config({}, {"type": "array"})

        assert result.errors == ["Config schema must be of type object"]

    def test_unknown_property_type_rejected(self):
        with pytest.raises(ValueError, match="Unknown property type"):
            PropertySchema(type="date")

    def test_invalid_pattern_rejected_at_definition(self):
        with pytest.raises(ValueError, match="Invalid pattern"):
            create_config_schema({"host": {"type": "string", "pattern": "("}})
