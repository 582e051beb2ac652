import io
import json

import pytest

from api_to_mcp.exceptions import ExecutionError, ToolNotFoundError
from api_to_mcp.generator import generate_tools
from api_to_mcp.models import Endpoint, FilterPolicy, ParsedSpec
from api_to_mcp.service import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    PROTOCOL_VERSION,
    MCPService,
    serve_stdio,
)


@pytest.fixture
def service(simple_spec, executor):
    tools = generate_tools(simple_spec, FilterPolicy(), "https://api.example.com", executor=executor)
    return MCPService(tools, server_name="test-server", version="0.0.1")


def _request(method, params=None, request_id=1):
    request = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        request["params"] = params
    return request


def test_initialize(service):
    response = service.handle_request(_request("initialize", {}))

    result = response["result"]
    assert response["id"] == 1
    assert result["protocolVersion"] == PROTOCOL_VERSION
    assert result["serverInfo"] == {"name": "test-server", "version": "0.0.1"}
    assert "tools" in result["capabilities"]


def test_list_tools(service):
    response = service.handle_request(_request("tools/list"))

    tools = response["result"]["tools"]
    assert [tool["name"] for tool in tools] == ["getusers", "getuserbyid"]
    assert tools[1]["inputSchema"] == {
        "type": "object",
        "properties": {"id": {"type": "integer", "description": "User ID"}},
        "required": ["id"],
    }
    assert tools[0]["inputSchema"] == {"type": "object", "properties": {}}


def test_call_tool(service, executor):
    """Test that a tool call goes through the executor and returns text content."""
    executor.response = {"id": 3, "name": "Ada"}
    response = service.handle_request(
        _request("tools/call", {"name": "getuserbyid", "arguments": {"id": 3}})
    )

    result = response["result"]
    assert result["isError"] is False
    assert json.loads(result["content"][0]["text"]) == {"id": 3, "name": "Ada"}
    assert executor.calls == [("GET", "/users/3", {})]


def test_call_tool_text_result(service, executor):
    executor.response = "pong"
    result = service.call_tool("getusers")
    assert result["content"] == [{"type": "text", "text": "pong"}]


def test_call_tool_execution_error(service, executor):
    executor.error = ExecutionError("HTTP error 500: boom", status_code=500)
    result = service.call_tool("getusers", {})

    assert result["isError"] is True
    assert "HTTP error 500: boom" in result["content"][0]["text"]


def test_unknown_tool(service):
    with pytest.raises(ToolNotFoundError):
        service.get_tool("nope")

    response = service.handle_request(_request("tools/call", {"name": "nope"}))
    assert response["error"]["code"] == INVALID_PARAMS
    assert response["error"]["message"] == "Tool not found: nope"


def test_unexpected_handler_failure(service, executor):
    executor.error = RuntimeError("kaboom")
    response = service.handle_request(_request("tools/call", {"name": "getusers"}))
    assert response["error"]["code"] == INTERNAL_ERROR


def test_invalid_call_params(service):
    response = service.handle_request(_request("tools/call", {"arguments": {}}))
    assert response["error"]["code"] == INVALID_PARAMS

    response = service.handle_request(_request("tools/list", ["not", "an", "object"]))
    assert response["error"]["code"] == INVALID_PARAMS


def test_unknown_method(service):
    response = service.handle_request(_request("resources/list"))
    assert response["error"]["code"] == METHOD_NOT_FOUND


def test_invalid_request(service):
    assert service.handle_request([1, 2])["error"]["code"] == INVALID_REQUEST
    assert service.handle_request({"id": 4})["error"]["code"] == INVALID_REQUEST


def test_notifications_get_no_response(service):
    assert service.handle_request({"jsonrpc": "2.0", "method": "notifications/initialized"}) is None


def test_first_tool_wins_on_name_collision(executor):
    spec = ParsedSpec(
        endpoints=[
            Endpoint(path="/a", method="GET", operation_id="same"),
            Endpoint(path="/b", method="GET", operation_id="same"),
        ]
    )
    tools = generate_tools(spec, FilterPolicy(), "https://api.example.com", executor=executor)
    MCPService(tools).call_tool("same")
    assert executor.calls == [("GET", "/a", {})]


def test_serve_stdio(service):
    stdin = io.StringIO(
        "\n".join(
            [
                json.dumps(_request("ping", request_id=1)),
                "",
                "{not json",
                json.dumps({"jsonrpc": "2.0", "method": "notifications/initialized"}),
                json.dumps(_request("tools/list", request_id=2)),
            ]
        )
    )
    stdout = io.StringIO()

    serve_stdio(service, stdin, stdout)

    responses = [json.loads(line) for line in stdout.getvalue().splitlines()]
    assert [r.get("id") for r in responses] == [1, None, 2]
    assert responses[0]["result"] == {}
    assert responses[1]["error"]["code"] == PARSE_ERROR
    assert len(responses[2]["result"]["tools"]) == 2
