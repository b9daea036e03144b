"""mcp-datastore CLI: inspect compiled tools and the remote registry.

Usage:
    mcp-datastore tools                 Print tool descriptors for configured models
    mcp-datastore tools --model acct/Widgets --json
    mcp-datastore check                 Verify the endpoint registers every tool
    mcp-datastore config show           Display resolved config (secrets masked)
"""

import asyncio
import logging
from typing import Optional

import typer
from rich.console import Console

from src.cli.config import DatastoreConfig, load_config
from src.cli.output import format_tool_check, format_tool_table
from src.errors.domain import DatastoreError
from src.errors.formatter import format_error
from src.schema.compiler import compile_tools_for_model
from src.services.session_manager import MCPSessionManager
from src.utils.redaction import mask_config

_log = logging.getLogger(__name__)

app = typer.Typer(
    name="mcp-datastore",
    help="Model-backed MCP datastore: tool compiler and endpoint checks",
    no_args_is_help=True,
)
config_app = typer.Typer(help="Configuration management")
app.add_typer(config_app, name="config")

console = Console()

# --- Global state ---
_config_path: str | None = None
_verbose: bool = False


@app.callback()
def main(
    config: Optional[str] = typer.Option(
        None, "--config", help="Path to mcp-datastore.yaml config file"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """mcp-datastore CLI."""
    global _config_path, _verbose
    _config_path = config
    _verbose = verbose


def _load_or_exit() -> DatastoreConfig:
    """Load config or exit with a readable message."""
    try:
        cfg = load_config(config_path=_config_path)
    except FileNotFoundError as e:
        console.print(f"[red]Config file not found:[/red] {e}")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Config validation failed:[/red] {e}")
        raise typer.Exit(1)
    if cfg is None:
        console.print("[yellow]No config file found.[/yellow]")
        console.print("Searched: ./mcp-datastore.yaml, ~/.mcp-datastore/config.yaml")
        raise typer.Exit(1)
    logging.basicConfig(
        level="DEBUG" if _verbose else cfg.logging.level.upper(),
        format=cfg.logging.format,
    )
    _log.debug("Resolved config: %s", mask_config(cfg.model_dump(mode="json")))
    return cfg


# --- Version ---


@app.command()
def version():
    """Show mcp-datastore version."""
    from importlib.metadata import PackageNotFoundError, version as pkg_version
    try:
        v = pkg_version("mcp-datastore")
    except PackageNotFoundError:
        v = "unknown"
    console.print(f"[bold]mcp-datastore[/bold] v{v}")


# --- Config commands ---


@config_app.command("show")
def config_show():
    """Display resolved configuration (secrets masked)."""
    cfg = _load_or_exit()
    data = mask_config(cfg.model_dump(mode="json", exclude={"models"}))
    for section, values in data.items():
        console.print(f"[bold]{section}:[/bold] {values}")
    console.print(f"[bold]models:[/bold] {', '.join(m.key for m in cfg.models) or 'none'}")


# --- Tool commands ---


@app.command()
def tools(
    model: Optional[str] = typer.Option(
        None, "--model", "-m", help="Only this model (namespace/PluralName)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Compile and print tool descriptors for configured models."""
    cfg = _load_or_exit()
    models = cfg.models
    if model:
        found = cfg.find_model(model)
        if found is None:
            console.print(f"[red]Model not configured:[/red] {model}")
            raise typer.Exit(1)
        models = [found]

    try:
        if json_output:
            descriptors = [t for m in models for t in compile_tools_for_model(m)]
            typer.echo(format_tool_table(descriptors, as_json=True))
            return
        for m in models:
            console.print(format_tool_table(compile_tools_for_model(m), title=m.key))
    except DatastoreError as e:
        console.print(f"[red]{format_error(e)}[/red]")
        raise typer.Exit(1)


@app.command()
def check(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Connect to the endpoint and verify every compiled tool is registered."""
    cfg = _load_or_exit()
    try:
        connection = cfg.to_connection_config()
        expected = [t.name for m in cfg.models for t in compile_tools_for_model(m)]
    except ValueError as e:
        console.print(f"[red]Config validation failed:[/red] {e}")
        raise typer.Exit(1)
    except DatastoreError as e:
        console.print(f"[red]{format_error(e)}[/red]")
        raise typer.Exit(1)

    async def _run() -> list[str]:
        async with MCPSessionManager(connection) as session:
            remote_tools = await session.list_remote_tools()
            return [tool.name for tool in remote_tools]

    try:
        remote = asyncio.run(_run())
    except DatastoreError as e:
        console.print(f"[red]{format_error(e)}[/red]")
        raise typer.Exit(1)

    output = format_tool_check(expected, remote, as_json=json_output)
    if json_output:
        typer.echo(output)
    else:
        console.print(output)
    if set(expected) - set(remote):
        raise typer.Exit(2)


if __name__ == "__main__":
    app()
