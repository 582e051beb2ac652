"""
Consistency checks for synthesized tools.
"""

from typing import Optional

import structlog

from .exceptions import ToolValidationError
from .models import InputSchema, Property, Tool


class ToolValidator:
    """Rejects tools whose input schema is not internally consistent."""

    def __init__(self, logger=None):
        self.logger = logger or structlog.get_logger(__name__)

    def validate(self, tool: Optional[Tool]) -> None:
        """Validate a generated tool.

        Args:
            tool: The tool to check

        Raises:
            ToolValidationError: On the first failed check
        """
        if tool is None:
            raise ToolValidationError("tool", "tool is nil")
        if not tool.name:
            raise ToolValidationError("name", "tool name is empty")
        if not tool.description:
            raise ToolValidationError("description", "tool description is empty")
        if tool.input_schema is None:
            raise ToolValidationError("inputSchema", "tool input schema is nil")
        if tool.handler is None:
            raise ToolValidationError("handler", "tool handler is nil")

        self.validate_input_schema(tool.input_schema)

    def validate_input_schema(self, schema: InputSchema) -> None:
        if not schema.type:
            raise ToolValidationError("inputSchema.type", "schema type is empty")
        if schema.type != "object":
            raise ToolValidationError(
                "inputSchema.type", f"unsupported schema type: {schema.type}"
            )

        for name, prop in schema.properties.items():
            if not name:
                raise ToolValidationError("inputSchema.properties", "property name is empty")
            self.validate_property(name, prop)

        for required in schema.required:
            if not required:
                raise ToolValidationError("inputSchema.required", "required field name is empty")
            if required not in schema.properties:
                raise ToolValidationError(
                    f"inputSchema.required.{required}",
                    f"required field '{required}' not found in properties",
                )

    def validate_property(self, name: str, prop: Property) -> None:
        field = f"inputSchema.properties.{name}"

        if not prop.type:
            raise ToolValidationError(field, "property type is empty")

        if prop.type == "string":
            if prop.min_length is not None and prop.max_length is not None:
                if prop.min_length > prop.max_length:
                    raise ToolValidationError(
                        field,
                        f"minLength ({prop.min_length}) cannot be greater than "
                        f"maxLength ({prop.max_length})",
                    )
        elif prop.type in ("integer", "number"):
            if prop.minimum is not None and prop.maximum is not None:
                if prop.minimum > prop.maximum:
                    raise ToolValidationError(
                        field,
                        f"minimum ({prop.minimum}) cannot be greater than "
                        f"maximum ({prop.maximum})",
                    )

        if prop.enum is not None and prop.type != "string":
            raise ToolValidationError(
                field, f"enum can only be used with string type, got {prop.type}"
            )
