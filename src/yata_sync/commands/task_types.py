"""Task type management commands."""

import typer

from yata_sync.services.task_type_service import get_task_type_service
from yata_sync.utils.typer_helpers import SuggestingGroup
from yata_sync.utils.ui.formatters import format_output, format_success

from .decorators import command_wrapper
from .options import resolve_output

app = typer.Typer(cls=SuggestingGroup, help="Task type management commands")


@app.command("list")
@command_wrapper
def list_task_types(
    user: str = typer.Option(..., "--user", "-u", envvar="YATA_USER", help="User ID"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output format"),
) -> None:
    """List task types."""
    task_types = get_task_type_service().list_task_types(user)
    format_output(
        [task_type.model_dump(mode="json") for task_type in task_types],
        resolve_output(output),
    )


@app.command("create")
@command_wrapper
def create_task_type(
    name: str = typer.Argument(..., help="Task type name"),
    icon: str = typer.Option(..., "--icon", help="Icon identifier or emoji"),
    user: str = typer.Option(..., "--user", "-u", envvar="YATA_USER", help="User ID"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output format"),
) -> None:
    """Create a new task type."""
    task_type = get_task_type_service().create_task_type(user, name, icon)
    format_success(f"Task type created: {task_type.id}")
    format_output(task_type.model_dump(mode="json"), resolve_output(output))


@app.command("delete")
@command_wrapper
def delete_task_type(
    type_id: str = typer.Argument(..., help="Task type ID"),
    user: str = typer.Option(..., "--user", "-u", envvar="YATA_USER", help="User ID"),
) -> None:
    """Delete a task type."""
    get_task_type_service().delete_task_type(user, type_id)
    format_success(f"Task type deleted: {type_id}")
