import json

import pytest
import requests

from api_to_mcp.exceptions import ExecutionError
from api_to_mcp.executor import HTTPExecutor


def _response(status_code=200, payload=None, text=None):
    response = requests.Response()
    response.status_code = status_code
    if text is not None:
        response._content = text.encode()
    else:
        response._content = json.dumps(payload if payload is not None else {}).encode()
    return response


class StubSession(requests.Session):
    """A session that records requests instead of sending them."""

    def __init__(self, response=None, error=None):
        super().__init__()
        self.response = response if response is not None else _response()
        self.error = error
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


def test_get_sends_query_parameters():
    session = StubSession(_response(payload={"id": 1}))
    executor = HTTPExecutor("https://api.example.com/", session=session)

    result = executor("GET", "/users/1", {"expand": "true"})

    assert result == {"id": 1}
    method, url, kwargs = session.requests[0]
    assert method == "GET"
    assert url == "https://api.example.com/users/1"
    assert kwargs["params"] == {"expand": "true"}
    assert kwargs["json"] is None
    assert kwargs["timeout"] == 30.0


def test_post_without_body_sends_query_parameters():
    """Test that a POST without a body argument sends everything in the query string."""
    session = StubSession()
    executor = HTTPExecutor("https://api.example.com", session=session)

    executor("post", "/users", {"name": "Ada", "age": 36})

    method, _, kwargs = session.requests[0]
    assert method == "POST"
    assert kwargs["params"] == {"name": "Ada", "age": 36}
    assert kwargs["json"] is None


def test_post_with_query_parameter_and_body():
    session = StubSession()
    executor = HTTPExecutor("https://api.example.com", session=session)

    executor("POST", "/users", {"dry_run": True, "body": {"name": "Ada"}})

    _, url, kwargs = session.requests[0]
    assert url == "https://api.example.com/users"
    assert kwargs["params"] == {"dry_run": True}
    assert kwargs["json"] == {"name": "Ada"}


def test_explicit_body_argument():
    """Test that a body argument is sent as-is and the rest as query parameters."""
    session = StubSession()
    executor = HTTPExecutor("https://api.example.com", session=session)

    executor("PUT", "/files", {"body": {"raw": True}, "overwrite": "yes"})

    _, _, kwargs = session.requests[0]
    assert kwargs["json"] == {"raw": True}
    assert kwargs["params"] == {"overwrite": "yes"}


def test_json_headers_are_set():
    session = StubSession()
    HTTPExecutor("https://api.example.com", session=session, headers={"Authorization": "Bearer x"})

    assert session.headers["Content-Type"] == "application/json"
    assert session.headers["Accept"] == "application/json"
    assert session.headers["Authorization"] == "Bearer x"


def test_full_url():
    executor = HTTPExecutor("https://api.example.com/v1/", session=StubSession())
    assert executor.full_url("/users") == "https://api.example.com/v1/users"
    assert executor.full_url("users") == "https://api.example.com/v1/users"
    assert executor.full_url("http://other.example.com/x") == "http://other.example.com/x"


def test_error_status_raises():
    session = StubSession(_response(status_code=404, text="not found"))
    executor = HTTPExecutor("https://api.example.com", session=session)

    with pytest.raises(ExecutionError) as exc_info:
        executor("GET", "/missing", {})
    assert exc_info.value.status_code == 404
    assert "HTTP error 404: not found" in str(exc_info.value)


def test_transport_error_raises():
    session = StubSession(error=requests.ConnectionError("connection refused"))
    executor = HTTPExecutor("https://api.example.com", session=session)

    with pytest.raises(ExecutionError) as exc_info:
        executor("GET", "/users", {})
    assert exc_info.value.status_code is None
    assert "connection refused" in str(exc_info.value)


def test_non_json_response_returns_text():
    session = StubSession(_response(text="plain text"))
    executor = HTTPExecutor("https://api.example.com", session=session)
    assert executor("GET", "/health", {}) == "plain text"


def test_default_session_has_retries():
    executor = HTTPExecutor("https://api.example.com", retries=5)
    adapter = executor.session.get_adapter("https://api.example.com/users")
    assert adapter.max_retries.total == 5
    assert 503 in adapter.max_retries.status_forcelist
