"""
Reference dereferencer for OpenAPI documents.

Resolves local ``$ref`` pointers (e.g. "#/components/schemas/Pet") in the
paths and components of a document. References to other files or URLs are
not supported.
"""

from typing import Any, Dict, List
import copy

from .exceptions import DereferenceError

CIRCULAR_REF_KEY = "$$circular_ref"


class PathDereferencer:
    """Resolves local references in an OpenAPI document."""

    def __init__(self, spec: Dict[str, Any]):
        """Initialize the dereferencer.

        Args:
            spec: The OpenAPI specification dictionary
        """
        self.spec = copy.deepcopy(spec)
        self._ref_stack: List[str] = []

    def _resolve_json_pointer(self, obj: Dict[str, Any], pointer: str) -> Any:
        """Resolve a JSON pointer within an object.

        Args:
            obj: The object to traverse
            pointer: JSON pointer (e.g. "/components/schemas/Pet")

        Returns:
            The referenced value

        Raises:
            DereferenceError: If the pointer cannot be resolved
        """
        if not pointer.startswith("/"):
            raise DereferenceError(f"Invalid JSON pointer: {pointer}")

        current = obj
        for part in pointer[1:].split("/"):
            # Unescape JSON pointer encoding
            part = part.replace("~1", "/").replace("~0", "~")

            if isinstance(current, list):
                try:
                    current = current[int(part)]
                except (ValueError, IndexError):
                    raise DereferenceError(f"Could not resolve pointer {pointer}")
                continue

            try:
                current = current[part]
            except (KeyError, TypeError):
                raise DereferenceError(f"Could not resolve pointer {pointer}")

        return current

    def _resolve_ref(self, ref: str) -> Any:
        """Resolve a $ref string to its value.

        Args:
            ref: The reference string (e.g. "#/components/schemas/Pet")

        Returns:
            The referenced value

        Raises:
            DereferenceError: If the reference is not local or cannot be resolved
        """
        if not ref.startswith("#"):
            raise DereferenceError(f"Only local references are supported: {ref}")

        pointer = ref[1:]
        if not pointer:
            return self.spec
        return self._resolve_json_pointer(self.spec, pointer)

    def _dereference_value(self, value: Any) -> Any:
        if isinstance(value, dict):
            return self._dereference_object(value)
        if isinstance(value, list):
            return [self._dereference_value(item) for item in value]
        return value

    def _dereference_object(self, obj: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively dereference an object and its nested properties.

        Args:
            obj: The object to dereference

        Returns:
            The dereferenced object
        """
        if "$ref" in obj and isinstance(obj["$ref"], str):
            ref = obj["$ref"]
            if ref in self._ref_stack:
                return {CIRCULAR_REF_KEY: ref}

            self._ref_stack.append(ref)
            try:
                ref_value = self._dereference_value(self._resolve_ref(ref))
            finally:
                self._ref_stack.pop()

            if not isinstance(ref_value, dict):
                return ref_value

            # Sibling keys of the $ref override the referenced value
            result = dict(ref_value)
            for key, value in obj.items():
                if key != "$ref":
                    result[key] = self._dereference_value(value)
            return result

        return {key: self._dereference_value(value) for key, value in obj.items()}

    def dereference(self) -> Dict[str, Any]:
        """Dereference all references in the paths and components.

        Returns:
            The specification with local references replaced by their values

        Raises:
            DereferenceError: If any reference cannot be resolved
        """
        self._ref_stack.clear()
        result = copy.deepcopy(self.spec)

        if "paths" in result:
            result["paths"] = {
                path: self._dereference_value(path_item)
                for path, path_item in (result["paths"] or {}).items()
            }

        if "components" in result:
            result["components"] = self._dereference_value(result["components"])

        return result
