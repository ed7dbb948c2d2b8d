"""
CLI-specific formatting functions for human-readable output.

This module handles presentation formatting for the CLI:
- JSON and YAML documents
- Rich tables for export inventories and lookups
"""

import json
from typing import Any, Dict, List

import yaml
from rich.console import Console
from rich.table import Table


def format_output(data: Any, format_type: str) -> str:
    """Format data according to the specified format type."""
    if format_type == "yaml":
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    elif format_type == "table":
        return format_table_output(data)
    return json.dumps(data, indent=2, default=str)


def format_table_output(data: Any) -> str:
    """Format data as a table."""
    if isinstance(data, dict) and "resources" in data:
        return format_inventory_table(data["resources"])
    elif isinstance(data, dict):
        return _render(_key_value_table(_flatten(data)))
    # Fallback to JSON for unknown data structures
    return json.dumps(data, indent=2, default=str)


def format_inventory_table(resources: Dict[str, Dict[str, Dict[str, Any]]]) -> str:
    """Format an export inventory as one row per exported object."""
    if not any(resources.values()):
        return "No resources found."

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Type", style="cyan")
    table.add_column("Label", style="green")
    table.add_column("Name", style="blue")
    table.add_column("Attributes", style="yellow", justify="right")

    for type_name, objects in sorted(resources.items()):
        for label, attributes in sorted(objects.items()):
            table.add_row(type_name, label, str(attributes.get("name", "")), str(len(attributes)))
    return _render(table)


def _key_value_table(data: Dict[str, Any]) -> Table:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    for key, value in data.items():
        table.add_row(str(key), str(value))
    return table


def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict) and value:
            flat.update(_flatten(value, f"{name}."))
        else:
            flat[name] = value
    return flat


def _render(table: Table) -> str:
    console = Console(width=120, legacy_windows=False, force_terminal=False)
    with console.capture() as capture:
        console.print(table)
    return capture.get()


def format_diagnostics(diagnostics: List[Any]) -> List[str]:
    return [str(diagnostic) for diagnostic in diagnostics]
