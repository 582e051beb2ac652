"""Shared fixtures for the api-to-mcp tests."""

from pathlib import Path
from typing import Any, Dict, List, Tuple

import pytest

from api_to_mcp.models import Endpoint, FilterPolicy, ParsedSpec

FIXTURES = Path(__file__).parent / "fixtures"


class RecordingExecutor:
    """Stands in for the HTTP executor and remembers every call."""

    def __init__(self, response: Any = None, error: Exception = None):
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []
        self.response = response if response is not None else {"ok": True}
        self.error = error

    def __call__(self, method: str, url: str, arguments: Dict[str, Any]) -> Any:
        self.calls.append((method, url, arguments))
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def executor():
    return RecordingExecutor()


@pytest.fixture
def petstore_path():
    return FIXTURES / "petstore.yaml"


@pytest.fixture
def simple_spec():
    """Two GET endpoints on /users, one with a path parameter."""
    return ParsedSpec(
        info={"title": "Test API", "version": "1.0.0"},
        endpoints=[
            Endpoint(
                path="/users",
                method="GET",
                operation_id="getUsers",
                summary="Get all users",
                responses={"200": {"description": "OK"}},
            ),
            Endpoint(
                path="/users/{id}",
                method="GET",
                operation_id="getUserById",
                summary="Get user by ID",
                parameters=[
                    {
                        "name": "id",
                        "in": "path",
                        "description": "User ID",
                        "required": True,
                        "schema": {"type": "integer"},
                    }
                ],
                responses={"200": {"description": "OK"}},
            ),
        ],
    )


@pytest.fixture
def empty_policy():
    return FilterPolicy()
