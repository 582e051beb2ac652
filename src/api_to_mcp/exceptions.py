"""
Exceptions raised while loading specifications and generating MCP tools.
"""

from typing import List, Optional


class ApiToMcpError(Exception):
    """Base exception for api-to-mcp errors."""
    pass


class SpecLoadError(ApiToMcpError):
    """Raised when an OpenAPI document cannot be read, parsed or normalized."""
    pass


class DereferenceError(SpecLoadError):
    """Raised when a reference cannot be resolved."""
    pass


class FieldError(ApiToMcpError):
    """An error tied to a named field of the artifact being checked."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"validation error in field '{field}': {message}")


class SpecValidationError(FieldError):
    """Raised when a parsed specification violates a structural rule."""
    pass


class ToolValidationError(FieldError):
    """Raised when a synthesized tool is not internally consistent."""
    pass


class SchemaStructureError(ApiToMcpError):
    """Raised when a schema node lacks a child schema it requires."""
    pass


class InputContractError(ApiToMcpError):
    """Raised when the generator's preconditions are not met."""
    pass


class GenerationError(ApiToMcpError):
    """Raised when a generation run produces no tools at all."""

    ALL_FILTERED = "all_filtered"
    ALL_ERRORED = "all_errored"

    def __init__(self, reason: str, errors: Optional[List] = None, skipped: int = 0):
        self.reason = reason
        self.errors = list(errors or [])
        self.skipped = skipped
        if reason == self.ALL_FILTERED:
            message = "no tools could be generated: all endpoints were filtered out"
        else:
            message = f"no tools could be generated: {len(self.errors)} errors occurred"
        super().__init__(message)


class ExecutionError(ApiToMcpError):
    """Raised when the HTTP call behind a tool fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class ToolNotFoundError(ApiToMcpError):
    """Raised when a tool is requested by a name that was never generated."""
    pass


class ConfigError(ApiToMcpError):
    """Raised when the configuration cannot be loaded or is invalid."""
    pass
