"""
Data models for OpenAPI to MCP conversion.

The first group of models is the normalized intermediate form of an OpenAPI
document; the second group is the MCP side (tools and their input schemas).
"""

from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

HTTP_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]
PARAMETER_LOCATIONS = ["path", "query", "header", "cookie"]
SCHEMA_TYPES = ["string", "integer", "number", "boolean", "array", "object"]


class SchemaNode(BaseModel):
    """One node of an OpenAPI schema tree."""

    model_config = ConfigDict(populate_by_name=True)

    type: Optional[str] = None
    format: Optional[str] = None
    description: str = ""
    properties: Dict[str, "SchemaNode"] = Field(default_factory=dict)
    required: List[str] = Field(default_factory=list)
    items: Optional["SchemaNode"] = None
    enum: Optional[List[Any]] = None
    default: Any = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    min_length: Optional[int] = Field(default=None, alias="minLength")
    max_length: Optional[int] = Field(default=None, alias="maxLength")
    pattern: Optional[str] = None


class Parameter(BaseModel):
    """A path, query, header or cookie parameter of an endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    location: str = Field(default="query", alias="in")
    description: str = ""
    required: bool = False
    schema_: SchemaNode = Field(default_factory=SchemaNode, alias="schema")


class MediaType(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    schema_: Optional[SchemaNode] = Field(default=None, alias="schema")


class RequestBody(BaseModel):
    description: str = ""
    required: bool = False
    content: Dict[str, MediaType] = Field(default_factory=dict)


class Response(BaseModel):
    description: str = ""
    content: Dict[str, MediaType] = Field(default_factory=dict)


class Endpoint(BaseModel):
    """One (path, method) operation of the API."""

    model_config = ConfigDict(populate_by_name=True)

    path: str
    method: str
    operation_id: str = Field(default="", alias="operationId")
    summary: str = ""
    description: str = ""
    parameters: List[Parameter] = Field(default_factory=list)
    request_body: Optional[RequestBody] = Field(default=None, alias="requestBody")
    responses: Dict[str, Response] = Field(default_factory=dict)


class Info(BaseModel):
    title: str = ""
    version: str = ""
    description: str = ""


class Server(BaseModel):
    url: str
    description: str = ""


class ParsedSpec(BaseModel):
    """The normalized form of an OpenAPI document."""

    info: Info = Field(default_factory=Info)
    servers: List[Server] = Field(default_factory=list)
    endpoints: List[Endpoint] = Field(default_factory=list)
    components: Dict[str, SchemaNode] = Field(default_factory=dict)


class Property(BaseModel):
    """A property of an MCP tool input schema."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = ""
    description: str = ""
    format: Optional[str] = None
    enum: Optional[List[str]] = None
    default: Any = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    min_length: Optional[int] = Field(default=None, alias="minLength")
    max_length: Optional[int] = Field(default=None, alias="maxLength")
    pattern: Optional[str] = None

    def to_json_schema(self) -> Dict[str, Any]:
        """Return the JSON Schema form, leaving out unset keywords."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        if not data.get("description"):
            data.pop("description", None)
        if not data.get("format"):
            data.pop("format", None)
        if not data.get("pattern"):
            data.pop("pattern", None)
        return data


class InputSchema(BaseModel):
    """The object schema describing a tool's arguments."""

    type: str = "object"
    properties: Dict[str, Property] = Field(default_factory=dict)
    required: List[str] = Field(default_factory=list)

    def to_json_schema(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type,
            "properties": {
                name: prop.to_json_schema() for name, prop in self.properties.items()
            },
        }
        if self.required:
            data["required"] = list(self.required)
        return data


class Tool(BaseModel):
    """An MCP tool bound to one API endpoint."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = ""
    description: str = ""
    input_schema: Optional[InputSchema] = Field(default=None, alias="inputSchema")
    handler: Optional[Callable[[Dict[str, Any]], Any]] = Field(default=None, exclude=True)

    def to_mcp(self) -> Dict[str, Any]:
        """Return the entry describing this tool in a ``tools/list`` result."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": (
                self.input_schema.to_json_schema() if self.input_schema else None
            ),
        }


class FilterPolicy(BaseModel):
    """Include/exclude rules deciding which endpoints become tools."""

    include_paths: List[str] = Field(default_factory=list)
    exclude_paths: List[str] = Field(default_factory=list)
    include_methods: List[str] = Field(default_factory=list)
    exclude_methods: List[str] = Field(default_factory=list)


class EndpointError(BaseModel):
    """A per-endpoint failure recorded during generation."""

    method: str
    path: str
    stage: str
    message: str

    def __str__(self) -> str:
        return f"{self.stage} failed for {self.method} {self.path}: {self.message}"


class GenerationResult(BaseModel):
    """The outcome of one generation pass."""

    tools: List[Tool] = Field(default_factory=list)
    errors: List[EndpointError] = Field(default_factory=list)
    skipped: int = 0
    total: int = 0
