"""Expose REST APIs described by OpenAPI as MCP tools."""

from .exceptions import (
    ApiToMcpError,
    ExecutionError,
    GenerationError,
    InputContractError,
    SchemaStructureError,
    SpecLoadError,
    ToolValidationError,
)
from .executor import HTTPExecutor
from .filtering import EndpointFilter, include
from .generator import ToolGenerator, generate_tools
from .loader import load_spec
from .models import Endpoint, FilterPolicy, ParsedSpec, SchemaNode, Tool
from .service import MCPService
from .synthesizer import ToolSynthesizer
from .translator import SchemaTranslator
from .validator import ToolValidator

__version__ = "0.1.0"
__all__ = [
    "ApiToMcpError",
    "Endpoint",
    "EndpointFilter",
    "ExecutionError",
    "FilterPolicy",
    "GenerationError",
    "HTTPExecutor",
    "InputContractError",
    "MCPService",
    "ParsedSpec",
    "SchemaNode",
    "SchemaStructureError",
    "SchemaTranslator",
    "SpecLoadError",
    "Tool",
    "ToolGenerator",
    "ToolSynthesizer",
    "ToolValidationError",
    "ToolValidator",
    "generate_tools",
    "include",
    "load_spec",
]
