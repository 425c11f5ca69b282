"""Database management commands."""

import typer

from yata_sync.services.config_service import get_entity_store
from yata_sync.utils.exit_codes import ERROR_UNAVAILABLE
from yata_sync.utils.typer_helpers import SuggestingGroup
from yata_sync.utils.ui.console import get_console
from yata_sync.utils.ui.formatters import format_error, format_output, format_success

from .decorators import command_wrapper
from .options import resolve_output

app = typer.Typer(cls=SuggestingGroup, help="Database management commands")
console = get_console()


@app.command("init")
@command_wrapper
def init_db() -> None:
    """Create the database and apply pending migrations."""
    store = get_entity_store()
    applied = store.initialize()
    if applied:
        format_success(f"Applied {applied} migration(s) to {store.db_path}")
    else:
        format_success(f"Database is up to date: {store.db_path}")


@app.command("health")
@command_wrapper
def health(
    output: str | None = typer.Option(None, "--output", "-o", help="Output format"),
) -> None:
    """Check that the store is reachable."""
    report = get_entity_store().health()
    report["timestamp"] = report["timestamp"].isoformat()
    format_output(report, resolve_output(output))
    if report["status"] != "ok":
        raise typer.Exit(ERROR_UNAVAILABLE)


@app.command("status")
@command_wrapper
def status(
    output: str | None = typer.Option(None, "--output", "-o", help="Output format"),
) -> None:
    """Show applied migrations."""
    store = get_entity_store()
    history = store.migration_history()
    if not history:
        format_error("Database not initialized. Run 'yata db init'.")
        raise typer.Exit(ERROR_UNAVAILABLE)
    format_output(history, resolve_output(output))
