"""Main entry point for the yata CLI."""

import typer

from yata_sync import __version__
from yata_sync.commands import config, db, projects, sync, task_types, tasks, users
from yata_sync.services.config_service import get_entity_store
from yata_sync.utils.typer_helpers import SuggestingGroup
from yata_sync.utils.ui.console import get_console

app = typer.Typer(
    name="yata",
    cls=SuggestingGroup,
    help="Delta sync server for the Yata task manager",
    no_args_is_help=True,
)

console = get_console()


app.add_typer(db.app, name="db", help="Database management")
app.add_typer(users.app, name="users", help="User management")
app.add_typer(sync.app, name="sync", help="Client synchronization")
app.add_typer(tasks.app, name="tasks", help="Task management commands")
app.add_typer(projects.app, name="projects", help="Project management commands")
app.add_typer(task_types.app, name="types", help="Task type management commands")
app.add_typer(config.app, name="config", help="Configuration management")


@app.command()
def version() -> None:
    """Show version information and store health."""
    console.print(f"[bold]yata-sync[/bold] version [cyan]{__version__}[/cyan]")

    report = get_entity_store().health()
    if report["status"] == "ok":
        console.print(
            f"[green]✓ Store is healthy[/green] "
            f"(schema v{report['schema_version']}, {report['path']})"
        )
    else:
        console.print(f"[red]✗ Store unavailable: {report['error']}[/red]")


if __name__ == "__main__":
    app()
