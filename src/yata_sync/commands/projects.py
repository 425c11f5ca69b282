"""Project management commands."""

import typer

from yata_sync.services.project_service import get_project_service
from yata_sync.utils.typer_helpers import SuggestingGroup
from yata_sync.utils.ui.formatters import format_error, format_output, format_success

from .decorators import command_wrapper
from .options import resolve_output

app = typer.Typer(cls=SuggestingGroup, help="Project management commands")


@app.command("list")
@command_wrapper
def list_projects(
    user: str = typer.Option(..., "--user", "-u", envvar="YATA_USER", help="User ID"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output format"),
) -> None:
    """List projects."""
    projects = get_project_service().list_projects(user)
    format_output(
        [project.model_dump(mode="json") for project in projects],
        resolve_output(output),
    )


@app.command("get")
@command_wrapper
def get_project(
    project_id: str = typer.Argument(..., help="Project ID"),
    user: str = typer.Option(..., "--user", "-u", envvar="YATA_USER", help="User ID"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output format"),
) -> None:
    """Get project details."""
    project = get_project_service().get_project(user, project_id)
    format_output(project.model_dump(mode="json"), resolve_output(output))


@app.command("create")
@command_wrapper
def create_project(
    name: str = typer.Argument(..., help="Project name"),
    user: str = typer.Option(..., "--user", "-u", envvar="YATA_USER", help="User ID"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output format"),
) -> None:
    """Create a new project."""
    project = get_project_service().create_project(user, name)
    format_success(f"Project created: {project.id}")
    format_output(project.model_dump(mode="json"), resolve_output(output))


@app.command("delete")
@command_wrapper
def delete_project(
    project_id: str = typer.Argument(..., help="Project ID"),
    user: str = typer.Option(..., "--user", "-u", envvar="YATA_USER", help="User ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a project."""
    if not yes and not typer.confirm(
        f"Are you sure you want to delete project {project_id}?"
    ):
        format_error("Cancelled")
        raise typer.Exit(0)

    get_project_service().delete_project(user, project_id)
    format_success(f"Project deleted: {project_id}")
