"""
Generation of MCP tools from a parsed OpenAPI specification.
"""

from typing import List, Optional

import structlog

from .exceptions import (
    GenerationError,
    InputContractError,
    SchemaStructureError,
    ToolValidationError,
)
from .executor import HTTPExecutor
from .filtering import EndpointFilter
from .models import EndpointError, FilterPolicy, GenerationResult, ParsedSpec, Tool
from .synthesizer import Executor, ToolSynthesizer
from .validator import ToolValidator


class ToolGenerator:
    """Generates MCP tools from an OpenAPI specification."""

    def __init__(
        self,
        spec: Optional[ParsedSpec],
        policy: Optional[FilterPolicy],
        base_url: str,
        executor: Optional[Executor] = None,
        logger=None,
    ):
        """Initialize the generator.

        Args:
            spec: The parsed specification
            policy: Endpoint include/exclude rules
            base_url: Base URL of the API the tools call
            executor: Callable performing HTTP calls for tool handlers. If not
                      provided, an HTTPExecutor for ``base_url`` is created.
            logger: structlog logger to report to
        """
        self.spec = spec
        self.policy = policy
        self.base_url = base_url
        self.executor = executor
        self.logger = logger or structlog.get_logger(__name__)

    def validate_input(self) -> None:
        """Check the generator's preconditions.

        Raises:
            InputContractError: If the spec, policy or base URL is missing, or
                                the spec has no endpoints
        """
        if self.spec is None:
            raise InputContractError("input validation failed: specification is nil")
        if self.policy is None:
            raise InputContractError("input validation failed: filter policy is nil")
        if not self.spec.endpoints:
            raise InputContractError(
                "input validation failed: no endpoints found in specification"
            )
        if not self.base_url:
            raise InputContractError("input validation failed: base URL is required")

    def generate(self) -> GenerationResult:
        """Run one generation pass over the endpoints, in document order.

        Returns:
            GenerationResult: The tools that passed validation, the per-endpoint
                              errors and the number of filtered endpoints

        Raises:
            InputContractError: If the preconditions are not met
            GenerationError: If no tool could be generated
        """
        self.validate_input()
        self.logger.info("Generating MCP tools from OpenAPI specification")

        executor = self.executor
        if executor is None:
            executor = HTTPExecutor(self.base_url, logger=self.logger)

        endpoint_filter = EndpointFilter(self.policy, logger=self.logger)
        synthesizer = ToolSynthesizer(executor, logger=self.logger)
        validator = ToolValidator(logger=self.logger)
        result = GenerationResult(total=len(self.spec.endpoints))

        for endpoint in self.spec.endpoints:
            if not endpoint_filter.include(endpoint):
                result.skipped += 1
                continue

            log = self.logger.bind(path=endpoint.path, method=endpoint.method)

            try:
                tool = synthesizer.synthesize(endpoint)
            except SchemaStructureError as e:
                result.errors.append(
                    EndpointError(
                        method=endpoint.method,
                        path=endpoint.path,
                        stage="generation",
                        message=str(e),
                    )
                )
                log.error("Failed to generate tool for endpoint", error=str(e))
                continue

            try:
                validator.validate(tool)
            except ToolValidationError as e:
                result.errors.append(
                    EndpointError(
                        method=endpoint.method,
                        path=endpoint.path,
                        stage="validation",
                        message=str(e),
                    )
                )
                log.error("Generated tool failed validation", tool=tool.name, error=str(e))
                continue

            if any(existing.name == tool.name for existing in result.tools):
                log.warning("Duplicate tool name", tool=tool.name)

            result.tools.append(tool)

        self.logger.info(
            "Generated MCP tools",
            tool_count=len(result.tools),
            skipped_count=result.skipped,
            error_count=len(result.errors),
            total_endpoints=result.total,
        )

        if result.errors:
            self.logger.warning("Some tools failed to generate", error_count=len(result.errors))
            for error in result.errors:
                self.logger.warning("Tool generation error", error=str(error))

        if not result.tools:
            if result.errors:
                raise GenerationError(
                    GenerationError.ALL_ERRORED, errors=result.errors, skipped=result.skipped
                )
            raise GenerationError(GenerationError.ALL_FILTERED, skipped=result.skipped)

        return result


def generate_tools(
    spec: Optional[ParsedSpec],
    policy: Optional[FilterPolicy],
    base_url: str,
    executor: Optional[Executor] = None,
    logger=None,
) -> List[Tool]:
    """Generate the ordered list of tools for a specification.

    Args:
        spec: The parsed specification
        policy: Endpoint include/exclude rules
        base_url: Base URL of the API the tools call
        executor: Callable performing HTTP calls for tool handlers
        logger: structlog logger to report to

    Returns:
        List[Tool]: The generated tools, in endpoint order
    """
    return ToolGenerator(spec, policy, base_url, executor=executor, logger=logger).generate().tools
