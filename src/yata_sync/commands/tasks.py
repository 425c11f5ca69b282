"""Task management commands."""

import typer

from yata_sync.models import TaskDraft, TaskPosition
from yata_sync.services.task_service import get_task_service
from yata_sync.utils.typer_helpers import SuggestingGroup
from yata_sync.utils.ui.formatters import (
    format_dict_table,
    format_error,
    format_output,
    format_success,
)

from .decorators import command_wrapper
from .options import resolve_output

app = typer.Typer(cls=SuggestingGroup, help="Task management commands")

LIST_COLUMNS = ["id", "title", "status", "section", "order", "project_id", "due_date"]


def parse_position(value: str) -> TaskPosition:
    """Parse ``ID:SECTION:ORDER`` into a TaskPosition."""
    task_id, sep, rest = value.partition(":")
    section, sep2, order = rest.rpartition(":")
    if not (sep and sep2 and task_id and section) or not order.lstrip("-").isdigit():
        raise typer.BadParameter(
            f"expected ID:SECTION:ORDER, got '{value}'", param_hint="POSITIONS"
        )
    return TaskPosition(id=task_id, section=section, order=int(order))


@app.command("list")
@command_wrapper
def list_tasks(
    user: str = typer.Option(..., "--user", "-u", envvar="YATA_USER", help="User ID"),
    project: str | None = typer.Option(None, "--project", help="Filter by project ID"),
    section: str | None = typer.Option(None, "--section", help="Filter by section"),
    status: str | None = typer.Option(None, "--status", help="Filter by status"),
    parent: str | None = typer.Option(None, "--parent", help="List subtasks of a task"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output format"),
) -> None:
    """List tasks."""
    tasks = get_task_service().list_tasks(
        user, project_id=project, section=section, status=status, parent_id=parent
    )
    result = [task.model_dump(mode="json") for task in tasks]
    output = resolve_output(output)
    if output == "table" and result:
        format_dict_table(result, LIST_COLUMNS)
    else:
        format_output(result, output)


@app.command("get")
@command_wrapper
def get_task(
    task_id: str = typer.Argument(..., help="Task ID"),
    user: str = typer.Option(..., "--user", "-u", envvar="YATA_USER", help="User ID"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output format"),
) -> None:
    """Get task details, including its project, type, parent and subtasks."""
    task = get_task_service().get_task(user, task_id)
    format_output(task.model_dump(mode="json"), resolve_output(output))


@app.command("create")
@command_wrapper
def create_task(
    title: str = typer.Argument(..., help="Task title"),
    user: str = typer.Option(..., "--user", "-u", envvar="YATA_USER", help="User ID"),
    content: str | None = typer.Option(None, "--content", help="Task notes"),
    section: str = typer.Option("Inbox", "--section", help="Section name"),
    project: str | None = typer.Option(None, "--project", help="Project ID"),
    task_type: str | None = typer.Option(None, "--type", help="Task type ID"),
    parent: str | None = typer.Option(None, "--parent", help="Parent task ID"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output format"),
) -> None:
    """Create a new task."""
    draft = TaskDraft(
        title=title,
        content=content,
        section=section,
        project_id=project,
        type_id=task_type,
        parent_id=parent,
    )
    task = get_task_service().create_task(user, draft)
    format_success(f"Task created: {task.id}")
    format_output(task.model_dump(mode="json"), resolve_output(output))


@app.command("delete")
@command_wrapper
def delete_task(
    task_id: str = typer.Argument(..., help="Task ID"),
    user: str = typer.Option(..., "--user", "-u", envvar="YATA_USER", help="User ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a task."""
    if not yes and not typer.confirm(f"Are you sure you want to delete task {task_id}?"):
        format_error("Cancelled")
        raise typer.Exit(0)

    get_task_service().delete_task(user, task_id)
    format_success(f"Task deleted: {task_id}")


@app.command("reorder")
@command_wrapper
def reorder_tasks(
    positions: list[str] = typer.Argument(
        ..., help="New positions as ID:SECTION:ORDER"
    ),
    user: str = typer.Option(..., "--user", "-u", envvar="YATA_USER", help="User ID"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output format"),
) -> None:
    """Move tasks to new sections and positions in one step.

    Examples:
        yata tasks reorder 3f2a...:Today:0 9b1c...:Today:1 -u 7f9c...
    """
    moves = [parse_position(value) for value in positions]
    tasks = get_task_service().reorder_tasks(user, moves)
    format_success(f"Reordered {len(tasks)} task(s)")
    output = resolve_output(output)
    if output != "table":
        format_output([task.model_dump(mode="json") for task in tasks], output)
