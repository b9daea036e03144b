"""CLI output formatters for Rich tables and JSON.

Provides human-readable Rich table output (default) and machine-parseable
JSON output (--json flag). All formatting goes through these functions
so the CLI commands stay clean.
"""

import json

from rich.console import Console
from rich.table import Table

from src.models.schema import ToolDescriptor

console = Console()


def _schema_summary(schema: dict) -> str:
    """One-line summary of a schema: its type and required fields."""
    if "oneOf" in schema:
        return " | ".join(_schema_summary(option) for option in schema["oneOf"])
    kind = schema.get("type", "any")
    required = schema.get("required") or []
    if required:
        return f"{kind} (required: {', '.join(required)})"
    return kind


def format_tool_table(
    tools: list[ToolDescriptor], title: str = "Tools", as_json: bool = False
) -> str:
    """Format tool descriptors as a Rich table or JSON.

    Args:
        tools: Compiled tool descriptors to display.
        title: Table title (usually the model key).
        as_json: If True, return the full descriptors as a JSON string.

    Returns:
        Formatted string output.
    """
    if as_json:
        return json.dumps([tool.to_dict() for tool in tools], indent=2, sort_keys=True)

    if not tools:
        return "No tools."

    table = Table(title=title, show_lines=True)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Description", style="white")
    table.add_column("Input")
    table.add_column("Output")

    for tool in tools:
        table.add_row(
            tool.name,
            tool.description,
            _schema_summary(tool.input_schema.to_json_schema()),
            _schema_summary(tool.output_schema.to_json_schema()),
        )

    with console.capture() as capture:
        console.print(table)
    return capture.get()


def format_tool_check(expected: list[str], remote: list[str], as_json: bool = False) -> str:
    """Format the comparison of compiled tool names against the endpoint's.

    Args:
        expected: Tool names compiled from configured models.
        remote: Tool names the endpoint lists.
        as_json: If True, return a JSON object instead of a Rich table.

    Returns:
        Formatted string output.
    """
    remote_names = set(remote)
    missing = [name for name in expected if name not in remote_names]

    if as_json:
        return json.dumps(
            {"expected": expected, "missing": missing, "remote_count": len(remote)},
            indent=2,
        )

    table = Table(title="Remote tool registry", show_lines=False)
    table.add_column("Tool", style="cyan", no_wrap=True)
    table.add_column("Status")
    for name in expected:
        status = "[red]missing[/red]" if name in missing else "[green]ok[/green]"
        table.add_row(name, status)

    with console.capture() as capture:
        console.print(table)
        if missing:
            console.print(f"[red]{len(missing)} of {len(expected)} tools missing[/red]")
        else:
            console.print(f"[green]All {len(expected)} tools registered[/green]")
    return capture.get()
