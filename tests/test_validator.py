import pytest

from api_to_mcp.exceptions import ToolValidationError
from api_to_mcp.models import InputSchema, Property, Tool
from api_to_mcp.validator import ToolValidator


def _noop(arguments):
    return arguments


def _tool(**overrides):
    values = {
        "name": "getusers",
        "description": "Get all users",
        "input_schema": InputSchema(
            properties={"id": Property(type="integer", description="User ID")},
            required=["id"],
        ),
        "handler": _noop,
    }
    values.update(overrides)
    return Tool(**values)


@pytest.fixture
def validator():
    return ToolValidator()


def test_valid_tool_passes(validator):
    validator.validate(_tool())


def test_empty_properties_are_valid(validator):
    validator.validate(_tool(input_schema=InputSchema()))


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"name": ""}, "name"),
        ({"description": ""}, "description"),
        ({"input_schema": None}, "inputSchema"),
        ({"handler": None}, "handler"),
    ],
)
def test_missing_tool_fields(validator, overrides, field):
    """Test that each missing top-level field is reported by name."""
    with pytest.raises(ToolValidationError) as exc_info:
        validator.validate(_tool(**overrides))
    assert exc_info.value.field == field
    assert f"field '{field}'" in str(exc_info.value)


def test_none_tool(validator):
    with pytest.raises(ToolValidationError) as exc_info:
        validator.validate(None)
    assert exc_info.value.field == "tool"


def test_checks_run_in_order(validator):
    """Test that the first failed check is the one reported."""
    with pytest.raises(ToolValidationError) as exc_info:
        validator.validate(_tool(name="", description="", handler=None))
    assert exc_info.value.field == "name"


def test_schema_type_must_be_object(validator):
    with pytest.raises(ToolValidationError) as exc_info:
        validator.validate(_tool(input_schema=InputSchema(type="array")))
    assert exc_info.value.field == "inputSchema.type"
    assert "unsupported schema type: array" in str(exc_info.value)

    with pytest.raises(ToolValidationError):
        validator.validate(_tool(input_schema=InputSchema(type="")))


def test_required_must_be_declared(validator):
    """Test that a required name missing from properties is rejected."""
    schema = InputSchema(
        properties={"id": Property(type="integer")},
        required=["id", "name"],
    )
    with pytest.raises(ToolValidationError) as exc_info:
        validator.validate(_tool(input_schema=schema))

    assert exc_info.value.field == "inputSchema.required.name"
    assert "required field 'name' not found in properties" in str(exc_info.value)


def test_empty_required_name(validator):
    schema = InputSchema(properties={"id": Property(type="integer")}, required=[""])
    with pytest.raises(ToolValidationError) as exc_info:
        validator.validate(_tool(input_schema=schema))
    assert exc_info.value.field == "inputSchema.required"


def test_property_needs_type(validator):
    schema = InputSchema(properties={"id": Property()})
    with pytest.raises(ToolValidationError) as exc_info:
        validator.validate(_tool(input_schema=schema))
    assert exc_info.value.field == "inputSchema.properties.id"


def test_length_bounds(validator):
    ok = Property(type="string", min_length=1, max_length=1)
    validator.validate_property("name", ok)

    bad = Property(type="string", min_length=5, max_length=2)
    with pytest.raises(ToolValidationError) as exc_info:
        validator.validate_property("name", bad)
    assert "minLength (5) cannot be greater than maxLength (2)" in str(exc_info.value)


@pytest.mark.parametrize("type_", ["integer", "number"])
def test_numeric_bounds(validator, type_):
    with pytest.raises(ToolValidationError) as exc_info:
        validator.validate_property("count", Property(type=type_, minimum=10, maximum=1))
    assert exc_info.value.field == "inputSchema.properties.count"


def test_bounds_ignored_for_other_types(validator):
    validator.validate_property("flag", Property(type="boolean", minimum=10, maximum=1))


def test_enum_only_on_strings(validator):
    """Test that enum values are only allowed on string properties."""
    validator.validate_property("status", Property(type="string", enum=["a", "b"]))

    with pytest.raises(ToolValidationError) as exc_info:
        validator.validate_property("level", Property(type="integer", enum=["1", "2"]))
    assert "enum can only be used with string type, got integer" in str(exc_info.value)


def test_empty_enum_on_non_string_is_rejected(validator):
    """Test that an empty enum list still counts as an enum."""
    with pytest.raises(ToolValidationError) as exc_info:
        validator.validate_property("level", Property(type="integer", enum=[]))
    assert exc_info.value.field == "inputSchema.properties.level"
    assert "enum can only be used with string type, got integer" in str(exc_info.value)
