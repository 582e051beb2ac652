"""
Endpoint filtering by path prefix and HTTP method.
"""

from typing import List

import structlog

from .models import Endpoint, FilterPolicy


def _matches_prefix(path: str, prefixes: List[str]) -> bool:
    return any(path.startswith(prefix) for prefix in prefixes)


def _matches_method(method: str, methods: List[str]) -> bool:
    method = method.casefold()
    return any(method == candidate.casefold() for candidate in methods)


def include(endpoint: Endpoint, policy: FilterPolicy) -> bool:
    """Decide whether an endpoint takes part in tool generation.

    The four rules are independent and all must pass. An empty rule list
    never excludes anything.

    Args:
        endpoint: The endpoint to check
        policy: The include/exclude rules

    Returns:
        bool: True if the endpoint is retained
    """
    if policy.include_paths and not _matches_prefix(endpoint.path, policy.include_paths):
        return False

    if policy.exclude_paths and _matches_prefix(endpoint.path, policy.exclude_paths):
        return False

    if policy.include_methods and not _matches_method(endpoint.method, policy.include_methods):
        return False

    if policy.exclude_methods and _matches_method(endpoint.method, policy.exclude_methods):
        return False

    return True


class EndpointFilter:
    """Applies a FilterPolicy and logs what it drops."""

    def __init__(self, policy: FilterPolicy, logger=None):
        self.policy = policy
        self.logger = logger or structlog.get_logger(__name__)

    def include(self, endpoint: Endpoint) -> bool:
        retained = include(endpoint, self.policy)
        if not retained:
            self.logger.debug(
                "Skipping filtered endpoint", path=endpoint.path, method=endpoint.method
            )
        return retained
