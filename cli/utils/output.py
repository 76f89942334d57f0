"""Output formatting utilities for the CLI."""

import json
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any

import click


def _serialize_value(value: Any) -> Any:
    """Serialize a value to JSON-compatible format."""
    if isinstance(value, Path):
        return str(value)
    elif is_dataclass(value) and not isinstance(value, type):
        return {k: _serialize_value(v) for k, v in asdict(value).items()}
    elif isinstance(value, dict):
        return {k: _serialize_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [_serialize_value(item) for item in value]
    return value


def _format_value(value: Any) -> str:
    """Format a value for human-readable display."""
    if isinstance(value, Path):
        return str(value)
    elif isinstance(value, list):
        if len(value) <= 3:
            return ", ".join(str(v) for v in value)
        return f"{len(value)} items"
    elif value is None:
        return "-"
    return str(value)


def output_result(data: Any, as_json: bool = False) -> None:
    """Output a dict in the requested format.

    Args:
        data: Data to output (dict, list, dataclass, or string)
        as_json: If True, output as JSON; otherwise ``Key: value`` lines
    """
    if as_json:
        click.echo(json.dumps(_serialize_value(data), indent=2, default=str))
        return

    if is_dataclass(data) and not isinstance(data, type):
        data = asdict(data)
    if isinstance(data, dict):
        for key, value in data.items():
            display_key = key.replace("_", " ").title()
            click.echo(f"{display_key}: {_format_value(value)}")
    elif isinstance(data, list):
        for item in data:
            click.echo(_format_value(item))
    else:
        click.echo(str(data))


def output_success(message: str) -> None:
    click.echo(click.style(message, fg="green"))


def output_info(message: str) -> None:
    """Output an info message on stderr, keeping stdout clean for piping."""
    click.echo(message, err=True)
