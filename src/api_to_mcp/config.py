"""Configuration management for api-to-mcp."""

import os
from pathlib import Path
from typing import Union

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError
from .models import FilterPolicy

CONFIG_PATH_ENV = "API_TO_MCP_CONFIG"
DEFAULT_CONFIG_PATH = "config.yaml"

DEFAULT_CONFIG_YAML = """server:
  host: localhost
  port: 8080

openapi:
  spec_path: ./examples/petstore.yaml
  base_url: https://petstore3.swagger.io/api/v3
  timeout: 30
  retries: 3

mcp:
  server_name: api-to-mcp
  version: 1.0.0

filters:
  include_paths: []
  exclude_paths: []
  include_methods: []
  exclude_methods: []

logging:
  level: info
  format: json
"""


class ServerConfig(BaseModel):
    """Configuration for the listening address."""

    host: str = Field(default="localhost", description="Host to bind")
    port: int = Field(default=8080, ge=1, le=65535, description="Port to bind")


class OpenAPIConfig(BaseModel):
    """Where the API description lives and how to reach the API."""

    spec_path: str = Field(default="./examples/petstore.yaml", description="Path to the OpenAPI document")
    base_url: str = Field(default="https://petstore3.swagger.io/api/v3", description="Base URL of the API")
    timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")
    retries: int = Field(default=3, ge=0, description="HTTP retry count")


class MCPConfig(BaseModel):
    server_name: str = Field(default="api-to-mcp", description="Name reported to MCP clients")
    version: str = Field(default="1.0.0", description="Version reported to MCP clients")


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = Field(default="info", description="Log level")
    format: str = Field(default="json", description="Log format, 'json' or 'console'")


class Config(BaseSettings):
    """Main configuration. Loads from environment variables prefixed with API_TO_MCP_."""

    model_config = SettingsConfigDict(
        env_prefix="API_TO_MCP_",
        env_nested_delimiter="__",  # e.g. API_TO_MCP_OPENAPI__BASE_URL
        extra="ignore",
    )

    server: ServerConfig = Field(default_factory=ServerConfig)
    openapi: OpenAPIConfig = Field(default_factory=OpenAPIConfig)
    mcp: MCPConfig = Field(default_factory=MCPConfig)
    filters: FilterPolicy = Field(default_factory=FilterPolicy)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "Config":
        """Load configuration from a YAML file layered over the environment.

        A missing file is not an error: environment variables and defaults
        are used instead. Values in the file take precedence over the
        environment.

        Args:
            path: Path to the YAML configuration file

        Returns:
            Config: The loaded configuration

        Raises:
            ConfigError: If the file cannot be parsed or holds invalid values
        """
        path = Path(path)
        data = {}
        if path.exists():
            try:
                with open(path) as f:
                    data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigError(f"failed to read config file: {e}") from e
            if not isinstance(data, dict):
                raise ConfigError(f"config file {path} must contain a mapping")

        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigError(f"invalid configuration: {e}") from e

    def validate_paths(self) -> None:
        """Check that the configured OpenAPI document exists.

        Raises:
            ConfigError: If the spec path is empty or missing
        """
        if not self.openapi.spec_path:
            raise ConfigError("openapi.spec_path is required")
        if not Path(self.openapi.spec_path).exists():
            raise ConfigError(f"openapi spec file not found: {self.openapi.spec_path}")


def get_config_path() -> str:
    """Return the configuration file path, honoring API_TO_MCP_CONFIG."""
    return os.environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH


def write_default_config(path: Union[str, Path]) -> None:
    """Write the default configuration file, creating parent directories.

    Args:
        path: Destination of the YAML file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG_YAML)
