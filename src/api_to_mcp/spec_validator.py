"""
Structural validation of a parsed OpenAPI specification.
"""

from typing import Dict, List, Optional

import structlog

from .exceptions import SpecValidationError
from .models import (
    HTTP_METHODS,
    PARAMETER_LOCATIONS,
    SCHEMA_TYPES,
    Endpoint,
    Info,
    Parameter,
    ParsedSpec,
    SchemaNode,
)


def _one_of(value: Optional[str], choices: List[str]) -> bool:
    value = (value or "").casefold()
    return any(value == choice.casefold() for choice in choices)


class SpecValidator:
    """Validates a ParsedSpec before tools are generated from it."""

    def __init__(self, logger=None):
        self.logger = logger or structlog.get_logger(__name__)

    def validate(self, spec: ParsedSpec) -> None:
        """Validate a parsed specification.

        The info, endpoints and components sections are checked
        independently; the first problem found in each is reported.

        Args:
            spec: The parsed specification

        Raises:
            SpecValidationError: If any section is invalid
        """
        errors: List[SpecValidationError] = []

        for check in (
            lambda: self.validate_info(spec.info),
            lambda: self.validate_endpoints(spec.endpoints),
            lambda: self.validate_components(spec.components),
        ):
            try:
                check()
            except SpecValidationError as e:
                errors.append(e)

        if len(errors) == 1:
            raise errors[0]
        if errors:
            raise SpecValidationError(
                errors[0].field,
                "validation failed: " + "; ".join(str(e) for e in errors),
            )

        self.logger.info("OpenAPI specification validation passed")

    def validate_info(self, info: Info) -> None:
        if not info.title:
            raise SpecValidationError("info.title", "title is required")
        if not info.version:
            raise SpecValidationError("info.version", "version is required")

    def validate_endpoints(self, endpoints: List[Endpoint]) -> None:
        if not endpoints:
            raise SpecValidationError("paths", "at least one endpoint is required")
        for index, endpoint in enumerate(endpoints):
            self.validate_endpoint(endpoint, index)

    def validate_endpoint(self, endpoint: Endpoint, index: int) -> None:
        prefix = f"paths[{index}]"

        if not endpoint.path:
            raise SpecValidationError(f"{prefix}.path", "path is required")
        if not endpoint.method:
            raise SpecValidationError(f"{prefix}.method", "method is required")
        if not _one_of(endpoint.method, HTTP_METHODS):
            raise SpecValidationError(
                f"{prefix}.method", f"unsupported method: {endpoint.method}"
            )

        for param_index, param in enumerate(endpoint.parameters):
            self.validate_parameter(param, f"{prefix}.parameters[{param_index}]")

        if not endpoint.responses:
            raise SpecValidationError(
                f"{prefix}.responses", "at least one response is required"
            )

    def validate_parameter(self, param: Parameter, field: str) -> None:
        if not param.name:
            raise SpecValidationError(f"{field}.name", "parameter name is required")
        if not _one_of(param.location, PARAMETER_LOCATIONS):
            raise SpecValidationError(
                f"{field}.in", f"invalid parameter location: {param.location}"
            )
        self.validate_schema(param.schema_, f"{field}.schema")

    def validate_schema(self, schema: SchemaNode, field: str) -> None:
        """Validate a schema node and its descendants.

        Args:
            schema: The schema node
            field: Dotted location of the node, used in error messages

        Raises:
            SpecValidationError: If the node or a descendant is invalid
        """
        if not schema.type:
            raise SpecValidationError(field, "schema type is required")
        if not _one_of(schema.type, SCHEMA_TYPES):
            raise SpecValidationError(field, f"invalid schema type: {schema.type}")

        self.validate_constraints(schema, field)

        if schema.type == "object":
            for name in schema.required:
                if name not in schema.properties:
                    raise SpecValidationError(
                        f"{field}.required", f"required property '{name}' is not defined"
                    )
            for name, child in schema.properties.items():
                self.validate_schema(child, f"{field}.properties.{name}")

        if schema.type == "array" and schema.items is not None:
            self.validate_schema(schema.items, f"{field}.items")

    def validate_constraints(self, schema: SchemaNode, field: str) -> None:
        if schema.type in ("integer", "number"):
            if (
                schema.minimum is not None
                and schema.maximum is not None
                and schema.minimum > schema.maximum
            ):
                raise SpecValidationError(field, "minimum cannot be greater than maximum")

        if schema.type == "string":
            if (
                schema.min_length is not None
                and schema.max_length is not None
                and schema.min_length > schema.max_length
            ):
                raise SpecValidationError(field, "minLength cannot be greater than maxLength")

        if schema.enum and schema.type != "string":
            raise SpecValidationError(field, f"enum is only allowed on string schemas, got {schema.type}")

    def validate_components(self, components: Dict[str, SchemaNode]) -> None:
        for name, schema in components.items():
            self.validate_schema(schema, f"components.{name}.schema")
