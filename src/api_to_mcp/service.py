"""
MCP dispatch over JSON-RPC 2.0.

MCPService answers ``initialize``, ``tools/list`` and ``tools/call`` for a
fixed list of generated tools. serve_stdio exposes it over newline-delimited
JSON on a pair of text streams.
"""

from typing import Any, Dict, List, Optional, TextIO
import json

import structlog

from .exceptions import ApiToMcpError, ToolNotFoundError
from .models import Tool

JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "2024-11-05"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

METHOD_INITIALIZE = "initialize"
METHOD_PING = "ping"
METHOD_LIST_TOOLS = "tools/list"
METHOD_CALL_TOOL = "tools/call"


def error_response(request_id: Any, code: int, message: str, data: Any = None) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error}


def result_response(request_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def _as_text(result: Any) -> str:
    if isinstance(result, str):
        return result
    return json.dumps(result, indent=2, default=str)


class MCPService:
    """Serves generated tools to MCP clients."""

    def __init__(self, tools: List[Tool], server_name: str = "api-to-mcp", version: str = "1.0.0", logger=None):
        self.tools = list(tools)
        self.server_name = server_name
        self.version = version
        self.logger = logger or structlog.get_logger(__name__)

    def list_tools(self) -> List[Dict[str, Any]]:
        self.logger.info("Listed available tools", tool_count=len(self.tools))
        return [tool.to_mcp() for tool in self.tools]

    def get_tool(self, name: str) -> Tool:
        """Find a tool by name; the first one wins if names collide.

        Raises:
            ToolNotFoundError: If no tool has this name
        """
        for tool in self.tools:
            if tool.name == name:
                return tool
        raise ToolNotFoundError(f"Tool not found: {name}")

    def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Invoke a tool and wrap its outcome as an MCP call result.

        Args:
            name: Tool name
            arguments: Tool call arguments

        Returns:
            dict: The ``tools/call`` result; failures of the underlying call
                  are reported with ``isError`` set

        Raises:
            ToolNotFoundError: If no tool has this name
        """
        tool = self.get_tool(name)
        self.logger.debug("Handling tools/call request", tool_name=name, arguments=arguments)

        try:
            result = tool.handler(arguments or {})
        except ApiToMcpError as e:
            self.logger.error("Tool execution failed", tool_name=name, error=str(e))
            return {
                "content": [{"type": "text", "text": f"Tool execution failed: {e}"}],
                "isError": True,
            }

        self.logger.info("Tool executed successfully", tool_name=name)
        return {"content": [{"type": "text", "text": _as_text(result)}], "isError": False}

    def handle_request(self, request: Any) -> Optional[Dict[str, Any]]:
        """Handle one decoded JSON-RPC message.

        Args:
            request: The decoded message

        Returns:
            Optional[dict]: The response, or None for notifications
        """
        if not isinstance(request, dict) or not isinstance(request.get("method"), str):
            request_id = request.get("id") if isinstance(request, dict) else None
            return error_response(request_id, INVALID_REQUEST, "Invalid request")

        method = request["method"]
        request_id = request.get("id")
        params = request.get("params") or {}

        if "id" not in request:
            self.logger.debug("Received notification", method=method)
            return None

        if not isinstance(params, dict):
            return error_response(request_id, INVALID_PARAMS, "params must be an object")

        if method == METHOD_INITIALIZE:
            return result_response(
                request_id,
                {
                    "protocolVersion": params.get("protocolVersion", PROTOCOL_VERSION),
                    "capabilities": {"tools": {"listChanged": False}},
                    "serverInfo": {"name": self.server_name, "version": self.version},
                },
            )

        if method == METHOD_PING:
            return result_response(request_id, {})

        if method == METHOD_LIST_TOOLS:
            return result_response(request_id, {"tools": self.list_tools()})

        if method == METHOD_CALL_TOOL:
            name = params.get("name")
            arguments = params.get("arguments") or {}
            if not isinstance(name, str) or not isinstance(arguments, dict):
                return error_response(
                    request_id, INVALID_PARAMS, "tools/call requires a name and an arguments object"
                )
            try:
                return result_response(request_id, self.call_tool(name, arguments))
            except ToolNotFoundError as e:
                return error_response(request_id, INVALID_PARAMS, str(e))
            except Exception as e:
                self.logger.exception("Unexpected error in tool handler", tool_name=name)
                return error_response(request_id, INTERNAL_ERROR, f"Tool execution failed: {e}")

        return error_response(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")


def serve_stdio(service: MCPService, stdin: TextIO, stdout: TextIO) -> None:
    """Serve JSON-RPC messages, one per line, until stdin is exhausted.

    Args:
        service: The service answering requests
        stdin: Stream of incoming messages
        stdout: Stream responses are written to
    """
    for line in stdin:
        line = line.strip()
        if not line:
            continue
        try:
            request = json.loads(line)
        except json.JSONDecodeError as e:
            response = error_response(None, PARSE_ERROR, f"Parse error: {e}")
        else:
            response = service.handle_request(request)
        if response is not None:
            stdout.write(json.dumps(response, default=str) + "\n")
            stdout.flush()
