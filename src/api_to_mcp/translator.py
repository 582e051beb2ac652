"""
Translation of OpenAPI schema nodes into MCP input schema properties.

The MCP input schema is flat: a property has no slot for nested item or
object schemas. Nested structure is therefore summarized in the property
description, and only the root of a request body is expanded into real
top-level properties.
"""

from typing import Any, Optional

import structlog

from .exceptions import SchemaStructureError
from .models import InputSchema, Property, SchemaNode

TYPE_MAP = {
    "string": "string",
    "integer": "integer",
    "number": "number",
    "boolean": "boolean",
    "array": "array",
    "object": "object",
}

DEFAULT_TYPE = "string"


def stringify(value: Any) -> str:
    """Render a literal the way it appears in a JSON document.

    Args:
        value: Any scalar literal

    Returns:
        str: ``true``/``false`` for booleans, ``null`` for None, integral
             floats without a fraction, ``str()`` otherwise
    """
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class SchemaTranslator:
    """Converts schema nodes into MCP properties."""

    def __init__(self, logger=None):
        self.logger = logger or structlog.get_logger(__name__)

    def map_type(self, openapi_type: Optional[str]) -> str:
        """Map an OpenAPI type to an MCP type, defaulting to string.

        Args:
            openapi_type: The source type, possibly empty or unknown

        Returns:
            str: The MCP type
        """
        return TYPE_MAP.get(openapi_type or "", DEFAULT_TYPE)

    def translate(self, node: SchemaNode, description: Optional[str] = None) -> Property:
        """Translate a schema node and its descendants into a property.

        Args:
            node: The schema node to translate
            description: Description to use instead of the node's own, as
                         parameters carry their description outside the schema

        Returns:
            Property: The translated property

        Raises:
            SchemaStructureError: If an array node, here or below, has no items
        """
        prop = Property(
            type=self.map_type(node.type),
            description=node.description if description is None else description,
            format=node.format or None,
            default=node.default,
            minimum=node.minimum,
            maximum=node.maximum,
            min_length=node.min_length,
            max_length=node.max_length,
            pattern=node.pattern or None,
        )

        if node.enum:
            prop.enum = [stringify(value) for value in node.enum]

        if node.type == "array":
            if node.items is None:
                raise SchemaStructureError("array schema has no items schema")
            try:
                item = self.translate(node.items)
            except SchemaStructureError as e:
                raise SchemaStructureError(f"failed to convert array items: {e}") from e
            prop.description = f"{prop.description} (array of {item.type})"

        if node.type == "object" and node.properties:
            for name, child in node.properties.items():
                try:
                    self.translate(child)
                except SchemaStructureError as e:
                    raise SchemaStructureError(
                        f"failed to convert property '{name}': {e}"
                    ) from e
            names = list(node.properties)
            prop.description = (
                f"{prop.description} (object with {len(names)} properties)"
                f" - properties: {', '.join(names)}"
            )

        return prop

    def translate_body(self, node: SchemaNode) -> InputSchema:
        """Translate a request body root schema into an input schema.

        Object roots are expanded into top-level properties; any other root
        becomes a single ``value`` property.

        Args:
            node: The root schema of the request body

        Returns:
            InputSchema: The body's properties and required names

        Raises:
            SchemaStructureError: If any nested schema is structurally invalid
        """
        schema = InputSchema()

        if node.type == "object":
            for name, child in node.properties.items():
                try:
                    schema.properties[name] = self.translate(child)
                except SchemaStructureError as e:
                    raise SchemaStructureError(
                        f"failed to convert property '{name}': {e}"
                    ) from e
            schema.required.extend(node.required)
        else:
            schema.properties["value"] = self.translate(node)
            if node.required:
                schema.required.append("value")

        return schema
