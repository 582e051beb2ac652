"""Tests for the OpenAPI reference dereferencer."""

import pytest

from api_to_mcp.dereferencer import CIRCULAR_REF_KEY, PathDereferencer
from api_to_mcp.exceptions import DereferenceError


def test_schema_references_are_inlined():
    """Test that component references inside paths are replaced by their values."""
    spec = {
        "paths": {
            "/pets": {
                "get": {
                    "responses": {
                        "200": {
                            "content": {
                                "application/json": {
                                    "schema": {
                                        "type": "array",
                                        "items": {"$ref": "#/components/schemas/Pet"},
                                    }
                                }
                            }
                        }
                    }
                }
            }
        },
        "components": {"schemas": {"Pet": {"type": "object", "properties": {"name": {"type": "string"}}}}},
    }

    result = PathDereferencer(spec).dereference()

    schema = result["paths"]["/pets"]["get"]["responses"]["200"]["content"]["application/json"]["schema"]
    assert schema["items"] == {"type": "object", "properties": {"name": {"type": "string"}}}


def test_input_is_not_modified():
    spec = {
        "paths": {"/a": {"$ref": "#/paths/~1b"}, "/b": {"get": {"summary": "B"}}},
    }
    PathDereferencer(spec).dereference()
    assert spec["paths"]["/a"] == {"$ref": "#/paths/~1b"}


def test_circular_references():
    """Test that a self-referencing schema is cut with a marker."""
    spec = {
        "paths": {
            "/nodes": {
                "post": {
                    "requestBody": {
                        "content": {
                            "application/json": {"schema": {"$ref": "#/components/schemas/Node"}}
                        }
                    }
                }
            }
        },
        "components": {
            "schemas": {
                "Node": {
                    "type": "object",
                    "properties": {"next": {"$ref": "#/components/schemas/Node"}},
                }
            }
        },
    }

    result = PathDereferencer(spec).dereference()

    schema = result["paths"]["/nodes"]["post"]["requestBody"]["content"]["application/json"]["schema"]
    assert schema["type"] == "object"
    assert schema["properties"]["next"] == {CIRCULAR_REF_KEY: "#/components/schemas/Node"}


def test_invalid_path_ref_error():
    """Test that invalid path references raise appropriate errors."""
    spec = {"paths": {"/invalid": {"$ref": "#/paths/nonexistent"}}}

    dereferencer = PathDereferencer(spec)
    with pytest.raises(DereferenceError):
        dereferencer.dereference()


def test_external_reference_error():
    spec = {"paths": {"/remote": {"$ref": "other.yaml#/paths/~1remote"}}}

    with pytest.raises(DereferenceError) as exc_info:
        PathDereferencer(spec).dereference()
    assert "Only local references are supported" in str(exc_info.value)


def test_list_index_pointer():
    spec = {
        "paths": {
            "/a": {"get": {"parameters": [{"name": "limit", "in": "query"}]}},
            "/b": {"get": {"parameters": [{"$ref": "#/paths/~1a/get/parameters/0"}]}},
        }
    }
    result = PathDereferencer(spec).dereference()
    assert result["paths"]["/b"]["get"]["parameters"] == [{"name": "limit", "in": "query"}]


def test_additional_path_properties_preservation():
    """Test that additional properties alongside path $ref are preserved."""
    spec = {
        "paths": {
            "/base": {"get": {"summary": "Base endpoint"}},
            "/extended": {
                "$ref": "#/paths/~1base",
                "description": "Extended endpoint",
                "servers": [{"url": "https://api.example.com"}],
            },
        }
    }

    dereferencer = PathDereferencer(spec)
    result = dereferencer.dereference()

    extended = result["paths"]["/extended"]
    assert "get" in extended  # From base
    assert extended["description"] == "Extended endpoint"  # Additional property
    assert (
        extended["servers"][0]["url"] == "https://api.example.com"
    )  # Additional property


def test_non_path_content_preserved():
    """Test that non-path content in the spec is preserved."""
    spec = {
        "openapi": "3.0.0",
        "info": {"title": "Test API", "version": "1.0.0"},
        "paths": {"/test": {"get": {"summary": "Test endpoint"}}},
        "components": {"schemas": {"Test": {"type": "object"}}},
    }

    dereferencer = PathDereferencer(spec)
    result = dereferencer.dereference()

    # Check that non-path content is unchanged
    assert result["openapi"] == "3.0.0"
    assert result["info"]["title"] == "Test API"
    assert "components" in result
    assert result["components"]["schemas"]["Test"]["type"] == "object"
