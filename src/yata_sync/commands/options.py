"""Shared option handling for commands."""

import typer

from yata_sync.services.config_service import get_config_service
from yata_sync.utils.ui.formatters import OUTPUT_FORMATS


def resolve_output(output: str | None) -> str:
    """Return the requested output format, falling back to the configured one."""
    if output is None:
        return get_config_service().config.output.format
    if output not in OUTPUT_FORMATS:
        raise typer.BadParameter(
            f"must be one of: {', '.join(OUTPUT_FORMATS)}", param_hint="--output"
        )
    return output
