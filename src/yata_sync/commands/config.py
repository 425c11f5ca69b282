"""Configuration management commands."""

import json

import typer

from yata_sync.services.config_service import get_config_service
from yata_sync.utils.typer_helpers import SuggestingGroup
from yata_sync.utils.ui.console import get_console
from yata_sync.utils.ui.formatters import format_output, format_success

from .decorators import command_wrapper
from .options import resolve_output

app = typer.Typer(cls=SuggestingGroup, help="Configuration management commands")
console = get_console()


def parse_value(value: str):
    """Interpret a command-line value as JSON where possible (numbers, null)."""
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


@app.command("view")
@command_wrapper
def view_config(
    output: str | None = typer.Option(None, "--output", "-o", help="Output format"),
) -> None:
    """View current configuration."""
    config_service = get_config_service()
    format_output(config_service.config.model_dump(), resolve_output(output))


@app.command("get")
@command_wrapper
def get_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., sync.deadline_seconds)"),
) -> None:
    """Get a configuration value."""
    console.print(get_config_service().get(key))


@app.command("set")
@command_wrapper
def set_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., logging.level)"),
    value: str = typer.Argument(..., help="Configuration value"),
) -> None:
    """Set a configuration value."""
    get_config_service().set(key, parse_value(value))
    format_success(f"Set {key} = {value}")


@app.command("reset")
@command_wrapper
def reset_config(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Reset configuration to defaults."""
    if not yes and not typer.confirm("Reset configuration to defaults?"):
        raise typer.Exit(0)
    get_config_service().reset_config()
    format_success("Configuration reset to defaults")
