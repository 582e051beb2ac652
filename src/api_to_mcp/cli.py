"""
Command-line interface for api-to-mcp.
"""

import json
import sys
from pathlib import Path
from typing import List, Optional

import structlog
import typer
import yaml

from .config import Config, get_config_path, write_default_config
from .dereferencer import PathDereferencer
from .exceptions import ApiToMcpError, SpecValidationError
from .executor import HTTPExecutor
from .generator import ToolGenerator
from .loader import load_spec, read_document
from .logs import configure_logging
from .models import FilterPolicy, GenerationResult
from .service import MCPService, serve_stdio
from .spec_validator import SpecValidator

app = typer.Typer(help="Expose REST APIs described by OpenAPI as MCP tools")

logger = structlog.get_logger(__name__)


def _save_yaml(content: object, path: Path) -> None:
    """Save content to a YAML file.

    Args:
        content: The content to save
        path: Path where to save the file

    Raises:
        typer.Exit: If the file cannot be saved
    """
    try:
        with open(path, "w") as f:
            yaml.safe_dump(content, f, sort_keys=False)
    except OSError as e:
        typer.echo(f"Error saving to {path}: {str(e)}", err=True)
        raise typer.Exit(1)


def _load_config(config_file: Optional[Path], log_level: Optional[str]) -> Config:
    """Load configuration and set up logging.

    Raises:
        typer.Exit: If the configuration is invalid
    """
    try:
        config = Config.from_yaml(config_file or get_config_path())
    except ApiToMcpError as e:
        typer.echo(f"Error: {str(e)}", err=True)
        raise typer.Exit(1)

    if log_level:
        config.logging.level = log_level
    configure_logging(config.logging.level, config.logging.format)
    return config


def _merge_policy(
    base: FilterPolicy,
    include_paths: Optional[List[str]],
    exclude_paths: Optional[List[str]],
    include_methods: Optional[List[str]],
    exclude_methods: Optional[List[str]],
) -> FilterPolicy:
    return FilterPolicy(
        include_paths=base.include_paths + list(include_paths or []),
        exclude_paths=base.exclude_paths + list(exclude_paths or []),
        include_methods=base.include_methods + list(include_methods or []),
        exclude_methods=base.exclude_methods + list(exclude_methods or []),
    )


def _generate(
    config: Config,
    spec_file: Optional[Path],
    base_url: Optional[str],
    policy: FilterPolicy,
    strict: bool,
) -> GenerationResult:
    """Load the spec and generate tools.

    Raises:
        ApiToMcpError: If loading, validation (in strict mode) or generation fails
    """
    spec = load_spec(Path(spec_file or config.openapi.spec_path))

    try:
        SpecValidator(logger=logger).validate(spec)
    except SpecValidationError as e:
        if strict:
            raise
        logger.warning("OpenAPI specification has validation problems", error=str(e))

    base_url = base_url or config.openapi.base_url
    executor = HTTPExecutor(
        base_url,
        timeout=config.openapi.timeout,
        retries=config.openapi.retries,
        logger=logger,
    )
    return ToolGenerator(spec, policy, base_url, executor=executor, logger=logger).generate()


@app.command()
def generate(
    spec_file: Optional[Path] = typer.Argument(
        None, help="Path to the OpenAPI document. Defaults to openapi.spec_path from the config"
    ),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to the YAML configuration file"),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Base URL of the API"),
    output_file: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Where to write the tool list. Prints to stdout if not provided"
    ),
    output_format: str = typer.Option("json", "--format", "-f", help="Output format: json or yaml"),
    include_path: Optional[List[str]] = typer.Option(None, "--include-path", help="Only keep paths with this prefix"),
    exclude_path: Optional[List[str]] = typer.Option(None, "--exclude-path", help="Drop paths with this prefix"),
    include_method: Optional[List[str]] = typer.Option(None, "--include-method", help="Only keep this HTTP method"),
    exclude_method: Optional[List[str]] = typer.Option(None, "--exclude-method", help="Drop this HTTP method"),
    strict: bool = typer.Option(False, "--strict", help="Fail if the OpenAPI document does not validate"),
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="Override the log level"),
) -> None:
    """Generate the MCP tool list for an OpenAPI specification."""
    if output_format not in ("json", "yaml"):
        typer.echo(f"Unsupported format: {output_format}", err=True)
        raise typer.Exit(1)

    config = _load_config(config_file, log_level)
    policy = _merge_policy(config.filters, include_path, exclude_path, include_method, exclude_method)

    try:
        result = _generate(config, spec_file, base_url, policy, strict)
    except ApiToMcpError as e:
        typer.echo(f"Error: {str(e)}", err=True)
        raise typer.Exit(1)

    tools = [tool.to_mcp() for tool in result.tools]
    if output_file is None:
        if output_format == "yaml":
            typer.echo(yaml.safe_dump({"tools": tools}, sort_keys=False))
        else:
            typer.echo(json.dumps({"tools": tools}, indent=2))
    elif output_format == "yaml":
        _save_yaml({"tools": tools}, output_file)
    else:
        try:
            output_file.write_text(json.dumps({"tools": tools}, indent=2))
        except OSError as e:
            typer.echo(f"Error saving to {output_file}: {str(e)}", err=True)
            raise typer.Exit(1)

    typer.echo(
        f"Generated {len(result.tools)} tools "
        f"(skipped {result.skipped}, errored {len(result.errors)}, total {result.total})",
        err=True,
    )
    for error in result.errors:
        typer.echo(f"  {error}", err=True)


@app.command()
def dereference(
    input_file: Path = typer.Argument(..., help="Path to the input OpenAPI spec"),
    output_file: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Path to save the dereferenced spec. If not provided, will use input filename with .dereferenced.yaml suffix",
    ),
) -> None:
    """Resolve local references in an OpenAPI specification."""
    if not input_file.exists():
        typer.echo(f"Input file not found: {input_file}", err=True)
        raise typer.Exit(1)

    # Default output file is input file with .dereferenced.yaml suffix
    if output_file is None:
        output_file = input_file.parent / f"{input_file.stem}.dereferenced.yaml"

    try:
        spec = read_document(input_file)
        result = PathDereferencer(spec).dereference()
    except ApiToMcpError as e:
        typer.echo(f"Error dereferencing spec: {str(e)}", err=True)
        raise typer.Exit(1)

    _save_yaml(result, output_file)
    typer.echo(f"Successfully dereferenced {input_file} to {output_file}")


@app.command()
def validate(
    spec_file: Path = typer.Argument(..., help="Path to the OpenAPI document"),
) -> None:
    """Check that an OpenAPI document loads and validates."""
    try:
        spec = load_spec(spec_file)
        SpecValidator(logger=logger).validate(spec)
    except ApiToMcpError as e:
        typer.echo(f"Error: {str(e)}", err=True)
        raise typer.Exit(1)

    typer.echo(f"{spec_file} is valid ({len(spec.endpoints)} endpoints)")


@app.command("init-config")
def init_config(
    path: Optional[Path] = typer.Argument(None, help="Where to write the configuration file"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write the default configuration file."""
    path = path or Path(get_config_path())
    if path.exists() and not force:
        typer.echo(f"{path} already exists, use --force to overwrite", err=True)
        raise typer.Exit(1)

    try:
        write_default_config(path)
    except OSError as e:
        typer.echo(f"Error saving to {path}: {str(e)}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Wrote default configuration to {path}")


@app.command()
def serve(
    spec_file: Optional[Path] = typer.Argument(
        None, help="Path to the OpenAPI document. Defaults to openapi.spec_path from the config"
    ),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to the YAML configuration file"),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Base URL of the API"),
    strict: bool = typer.Option(False, "--strict", help="Fail if the OpenAPI document does not validate"),
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="Override the log level"),
) -> None:
    """Serve the generated tools over stdio (newline-delimited JSON-RPC)."""
    config = _load_config(config_file, log_level)

    try:
        result = _generate(config, spec_file, base_url, config.filters, strict)
    except ApiToMcpError as e:
        typer.echo(f"Error: {str(e)}", err=True)
        raise typer.Exit(1)

    service = MCPService(
        result.tools,
        server_name=config.mcp.server_name,
        version=config.mcp.version,
        logger=logger,
    )
    logger.info("Serving MCP tools over stdio", tool_count=len(result.tools))
    serve_stdio(service, sys.stdin, sys.stdout)


def main():
    """Entry point for the CLI."""
    app()
