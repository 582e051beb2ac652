"""
Synthesis of one MCP tool from one API endpoint.
"""

from typing import Any, Callable, Collection, Dict, Optional, Tuple
from urllib.parse import quote

import structlog

from .exceptions import SchemaStructureError
from .executor import BODY_METHODS
from .models import Endpoint, InputSchema, Property, RequestBody, SchemaNode, Tool
from .translator import SchemaTranslator, stringify

JSON_CONTENT_TYPE = "application/json"

# How the request body appears among the tool arguments
BODY_FIELDS = "fields"
BODY_VALUE = "value"
BODY_OPAQUE = "opaque"

Executor = Callable[[str, str, Dict[str, Any]], Any]


def tool_name(endpoint: Endpoint) -> str:
    """Derive a tool name from an endpoint.

    Args:
        endpoint: The endpoint

    Returns:
        str: The lower-cased operationId, or ``{method}_{path}`` built from the path
    """
    if endpoint.operation_id:
        return endpoint.operation_id.lower()

    path = endpoint.path
    if path.startswith("/"):
        path = path[1:]
    path = path.replace("/", "_").replace("{", "").replace("}", "")
    return f"{endpoint.method.lower()}_{path}"


def tool_description(endpoint: Endpoint) -> str:
    if endpoint.summary:
        return endpoint.summary
    if endpoint.description:
        return endpoint.description
    return f"{endpoint.method} {endpoint.path}"


def _is_json_compatible(content_type: str) -> bool:
    content_type = content_type.lower()
    return (
        content_type in ("application/*", "*/*")
        or content_type.startswith(JSON_CONTENT_TYPE)
        or content_type.split(";")[0].endswith("+json")
    )


def select_json_schema(request_body: RequestBody) -> Optional[SchemaNode]:
    """Pick the schema of the JSON content of a request body.

    ``application/json`` wins; otherwise the first JSON-compatible content
    type in document order is used.

    Args:
        request_body: The request body

    Returns:
        Optional[SchemaNode]: The selected schema, or None if no content qualifies
    """
    media = request_body.content.get(JSON_CONTENT_TYPE)
    if media is None:
        for content_type, candidate in request_body.content.items():
            if _is_json_compatible(content_type):
                media = candidate
                break
    if media is None:
        return None
    return media.schema_


def build_url(path: str, arguments: Dict[str, Any]) -> str:
    """Substitute ``{name}`` placeholders with argument values.

    Args:
        path: Path template
        arguments: Tool call arguments

    Returns:
        str: The path with every matching placeholder replaced by the
             percent-encoded value
    """
    url = path
    for key, value in arguments.items():
        placeholder = "{" + key + "}"
        if placeholder in url:
            url = url.replace(placeholder, quote(stringify(value), safe=""))
    return url


def bind_handler(
    method: str,
    path: str,
    executor: Executor,
    query_names: Collection[str] = (),
    body_mode: Optional[str] = None,
) -> Callable[[Dict[str, Any]], Any]:
    """Create the handler that proxies a tool call to the HTTP API.

    For POST, PUT and PATCH endpoints with a request body, the arguments
    that are not query parameters are gathered under a single ``body``
    argument, which the executor sends as the JSON body. Everything else
    is passed on as query parameters.

    Args:
        method: HTTP method of the endpoint
        path: Path template of the endpoint
        executor: Callable performing ``(method, url, arguments)`` HTTP calls
        query_names: Names of the endpoint's query parameters
        body_mode: BODY_FIELDS when body properties are flattened into the
                   arguments, BODY_VALUE when a non-object body is held by
                   ``value``, BODY_OPAQUE when ``body`` holds the whole body,
                   None when the endpoint has no request body

    Returns:
        Callable: A handler taking the tool call arguments
    """

    def handler(arguments: Dict[str, Any]) -> Any:
        arguments = dict(arguments or {})
        url = build_url(path, arguments)
        remaining = {
            key: value
            for key, value in arguments.items()
            if "{" + key + "}" not in path
        }
        if body_mode is None or method.upper() not in BODY_METHODS:
            return executor(method, url, remaining)

        request = {key: value for key, value in remaining.items() if key in query_names}
        fields = {key: value for key, value in remaining.items() if key not in query_names}
        if body_mode == BODY_FIELDS:
            if fields:
                request["body"] = fields
        else:
            key = "value" if body_mode == BODY_VALUE else "body"
            if key in fields:
                request["body"] = fields.pop(key)
            request.update(fields)
        return executor(method, url, request)

    return handler


class ToolSynthesizer:
    """Builds a Tool for a single endpoint."""

    def __init__(self, executor: Executor, translator: Optional[SchemaTranslator] = None, logger=None):
        self.executor = executor
        self.logger = logger or structlog.get_logger(__name__)
        self.translator = translator or SchemaTranslator(logger=self.logger)

    def synthesize(self, endpoint: Endpoint) -> Tool:
        """Generate a tool for an endpoint.

        Args:
            endpoint: The endpoint

        Returns:
            Tool: The synthesized tool

        Raises:
            SchemaStructureError: If a parameter schema is structurally invalid
        """
        name = tool_name(endpoint)
        schema, body_mode = self._assemble(endpoint)
        query_names = [p.name for p in endpoint.parameters if p.location == "query"]
        tool = Tool(
            name=name,
            description=tool_description(endpoint),
            input_schema=schema,
            handler=bind_handler(
                endpoint.method,
                endpoint.path,
                self.executor,
                query_names=query_names,
                body_mode=body_mode,
            ),
        )
        self.logger.debug(
            "Generated tool for endpoint",
            tool_name=name,
            path=endpoint.path,
            method=endpoint.method,
        )
        return tool

    def build_input_schema(self, endpoint: Endpoint) -> InputSchema:
        """Assemble the input schema from parameters and the request body.

        Path parameters come first, then query parameters, then the body.
        Body properties overwrite parameters of the same name; required
        names are appended in the same order.

        Args:
            endpoint: The endpoint

        Returns:
            InputSchema: The tool's input schema

        Raises:
            SchemaStructureError: If a parameter schema is structurally invalid
        """
        return self._assemble(endpoint)[0]

    def _assemble(self, endpoint: Endpoint) -> Tuple[InputSchema, Optional[str]]:
        schema = InputSchema()
        body_mode = None

        for location in ("path", "query"):
            for param in endpoint.parameters:
                if param.location != location:
                    continue
                try:
                    prop = self.translator.translate(param.schema_, description=param.description)
                except SchemaStructureError as e:
                    raise SchemaStructureError(
                        f"{location} parameter '{param.name}': {e}"
                    ) from e
                schema.properties[param.name] = prop
                if param.required:
                    schema.required.append(param.name)

        if endpoint.request_body is not None:
            try:
                body = self.parse_request_body(endpoint.request_body)
            except SchemaStructureError as e:
                self.logger.warning(
                    "Failed to parse request body schema, using fallback",
                    path=endpoint.path,
                    method=endpoint.method,
                    error=str(e),
                )
                schema.properties["body"] = Property(
                    type="object", description=endpoint.request_body.description
                )
                body_mode = BODY_OPAQUE
            else:
                schema.properties.update(body.properties)
                schema.required.extend(body.required)
                root = select_json_schema(endpoint.request_body)
                body_mode = BODY_FIELDS if root.type == "object" else BODY_VALUE

        return schema, body_mode

    def parse_request_body(self, request_body: RequestBody) -> InputSchema:
        """Translate the JSON schema of a request body.

        Args:
            request_body: The request body

        Returns:
            InputSchema: The translated body

        Raises:
            SchemaStructureError: If there is no JSON schema or it cannot be translated
        """
        node = select_json_schema(request_body)
        if node is None:
            raise SchemaStructureError("no supported content type found in request body")
        return self.translator.translate_body(node)
