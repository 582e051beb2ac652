"""
Loading of OpenAPI documents into the intermediate specification model.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json

import structlog
import yaml
from pydantic import ValidationError

from .dereferencer import CIRCULAR_REF_KEY, PathDereferencer
from .exceptions import SpecLoadError
from .models import (
    Endpoint,
    Info,
    MediaType,
    Parameter,
    ParsedSpec,
    RequestBody,
    Response,
    SchemaNode,
    Server,
)

logger = structlog.get_logger(__name__)

OPERATION_METHODS = ["get", "post", "put", "delete", "patch", "head", "options"]
REQUIRED_FIELDS = ["openapi", "info", "paths"]


def _is_file(candidate: str) -> bool:
    if "\n" in candidate or candidate.lstrip().startswith("{"):
        return False
    try:
        return Path(candidate).is_file()
    except OSError:
        return False


def read_document(source: Union[str, dict, Path]) -> Dict[str, Any]:
    """Read an OpenAPI document.

    Args:
        source: A dictionary, a Path, or a string holding either a file path
                or a JSON/YAML document

    Returns:
        dict: The raw document

    Raises:
        SpecLoadError: If the document cannot be read or parsed
    """
    if isinstance(source, dict):
        return source

    if isinstance(source, Path) or (
        isinstance(source, str) and _is_file(source)
    ):
        path = Path(source)
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise SpecLoadError(f"Failed to read specification file {path}: {e}") from e
    else:
        content = source

    try:
        # Try JSON first
        data = json.loads(content)
    except json.JSONDecodeError:
        try:
            # Try YAML if JSON fails
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise SpecLoadError(f"Failed to parse specification: {e}") from e

    if not isinstance(data, dict):
        raise SpecLoadError("Specification must be a mapping")
    return data


def check_document(document: Dict[str, Any]) -> None:
    """Check the top-level structure of a raw document.

    Raises:
        SpecLoadError: If a required field is missing or the version is unsupported
    """
    for field in REQUIRED_FIELDS:
        if field not in document:
            raise SpecLoadError(f"Missing required field: {field}")

    version = str(document["openapi"])
    if not (version.startswith("3.0") or version.startswith("3.1")):
        raise SpecLoadError(f"Unsupported OpenAPI version: {version}")


def _infer_type(raw: Dict[str, Any]) -> Optional[str]:
    schema_type = raw.get("type")
    if isinstance(schema_type, list):
        # OpenAPI 3.1 allows ["string", "null"]
        schema_type = next((t for t in schema_type if t != "null"), None)
    if schema_type:
        return schema_type
    if "properties" in raw:
        return "object"
    if "items" in raw:
        return "array"
    if "enum" in raw:
        return "string"
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def convert_schema(raw: Optional[Dict[str, Any]]) -> SchemaNode:
    """Convert a dereferenced schema object into a SchemaNode.

    Args:
        raw: The schema object, or None

    Returns:
        SchemaNode: The normalized schema
    """
    if not isinstance(raw, dict):
        return SchemaNode()

    if CIRCULAR_REF_KEY in raw:
        return SchemaNode(
            type="object", description=f"Circular reference to {raw[CIRCULAR_REF_KEY]}"
        )

    items = raw.get("items")
    enum = raw.get("enum")
    required = raw.get("required")

    return SchemaNode(
        type=_infer_type(raw),
        format=_optional_text(raw.get("format")),
        description=_text(raw.get("description")),
        properties={
            str(name): convert_schema(child)
            for name, child in (raw.get("properties") or {}).items()
        },
        required=[str(name) for name in required] if isinstance(required, list) else [],
        items=convert_schema(items) if isinstance(items, dict) else None,
        enum=list(enum) if isinstance(enum, list) else None,
        default=raw.get("default"),
        minimum=_number(raw.get("minimum")),
        maximum=_number(raw.get("maximum")),
        min_length=raw.get("minLength"),
        max_length=raw.get("maxLength"),
        pattern=_optional_text(raw.get("pattern")),
    )


def _convert_content(content: Optional[Dict[str, Any]]) -> Dict[str, MediaType]:
    result = {}
    for media_type, media in (content or {}).items():
        schema = media.get("schema") if isinstance(media, dict) else None
        result[media_type] = MediaType(
            schema=convert_schema(schema) if isinstance(schema, dict) else None
        )
    return result


def convert_parameter(raw: Dict[str, Any]) -> Parameter:
    return Parameter(
        name=_text(raw.get("name")),
        location=_text(raw.get("in")),
        description=_text(raw.get("description")),
        required=bool(raw.get("required", False)),
        schema=convert_schema(raw.get("schema")),
    )


def _merge_parameters(path_level: List[Any], operation_level: List[Any]) -> List[Dict[str, Any]]:
    """Combine path-level and operation-level parameters.

    An operation parameter replaces a path-level one with the same name and
    location, keeping the path-level position.
    """
    merged: List[Dict[str, Any]] = [p for p in path_level if isinstance(p, dict)]
    for param in operation_level:
        if not isinstance(param, dict):
            continue
        key = (param.get("name"), param.get("in"))
        for i, existing in enumerate(merged):
            if (existing.get("name"), existing.get("in")) == key:
                merged[i] = param
                break
        else:
            merged.append(param)
    return merged


def convert_operation(
    path: str, method: str, path_item: Dict[str, Any], operation: Dict[str, Any]
) -> Endpoint:
    """Convert one operation of a path item into an Endpoint.

    Args:
        path: The path template
        method: Lower-case method key of the operation
        path_item: The enclosing path item
        operation: The operation object

    Returns:
        Endpoint: The normalized endpoint
    """
    parameters = _merge_parameters(
        path_item.get("parameters") or [], operation.get("parameters") or []
    )

    request_body = None
    raw_body = operation.get("requestBody")
    if isinstance(raw_body, dict):
        request_body = RequestBody(
            description=_text(raw_body.get("description")),
            required=bool(raw_body.get("required", False)),
            content=_convert_content(raw_body.get("content")),
        )

    responses = {}
    for status, raw_response in (operation.get("responses") or {}).items():
        if not isinstance(raw_response, dict):
            continue
        responses[str(status)] = Response(
            description=_text(raw_response.get("description")),
            content=_convert_content(raw_response.get("content")),
        )

    return Endpoint(
        path=path,
        method=method.upper(),
        operation_id=_text(operation.get("operationId")),
        summary=_text(operation.get("summary")),
        description=_text(operation.get("description")),
        parameters=[convert_parameter(p) for p in parameters],
        request_body=request_body,
        responses=responses,
    )


def convert_document(document: Dict[str, Any]) -> ParsedSpec:
    """Convert a dereferenced OpenAPI document into a ParsedSpec.

    Endpoints keep the document order of paths and of operations within
    each path.
    """
    raw_info = document.get("info") or {}
    info = Info(
        title=_text(raw_info.get("title")),
        version=_text(raw_info.get("version")),
        description=_text(raw_info.get("description")),
    )

    servers = [
        Server(url=str(server["url"]), description=_text(server.get("description")))
        for server in document.get("servers") or []
        if isinstance(server, dict) and server.get("url")
    ]

    endpoints = []
    for path, path_item in (document.get("paths") or {}).items():
        if not isinstance(path_item, dict):
            continue
        for method, operation in path_item.items():
            if method.lower() not in OPERATION_METHODS or not isinstance(operation, dict):
                continue
            endpoints.append(convert_operation(path, method.lower(), path_item, operation))

    schemas = ((document.get("components") or {}).get("schemas")) or {}
    components = {str(name): convert_schema(schema) for name, schema in schemas.items()}

    return ParsedSpec(info=info, servers=servers, endpoints=endpoints, components=components)


def load_spec(source: Union[str, dict, Path]) -> ParsedSpec:
    """Load, dereference and normalize an OpenAPI document.

    Args:
        source: A dictionary, a Path, or a string holding either a file path
                or a JSON/YAML document

    Returns:
        ParsedSpec: The normalized specification

    Raises:
        SpecLoadError: If the document cannot be loaded
    """
    document = read_document(source)
    check_document(document)
    document = PathDereferencer(document).dereference()
    try:
        spec = convert_document(document)
    except ValidationError as e:
        raise SpecLoadError(f"Invalid value in specification: {e}") from e

    logger.info(
        "Successfully parsed OpenAPI specification",
        title=spec.info.title,
        version=spec.info.version,
        endpoints=len(spec.endpoints),
        components=len(spec.components),
    )
    return spec
