"""User management commands."""

import typer

from yata_sync.services.user_service import get_user_service
from yata_sync.utils.typer_helpers import SuggestingGroup
from yata_sync.utils.ui.formatters import format_output, format_success

from .decorators import command_wrapper
from .options import resolve_output

app = typer.Typer(cls=SuggestingGroup, help="User management commands")


@app.command("add")
@command_wrapper
def add_user(
    email: str = typer.Argument(..., help="User email address"),
    user_id: str | None = typer.Option(
        None, "--id", help="User ID issued by the auth layer (generated if omitted)"
    ),
    output: str | None = typer.Option(None, "--output", "-o", help="Output format"),
) -> None:
    """Register a user."""
    user = get_user_service().create_user(email, user_id=user_id)
    format_success(f"User created: {user.id}")
    format_output(user.model_dump(mode="json"), resolve_output(output))


@app.command("get")
@command_wrapper
def get_user(
    user_id: str = typer.Argument(..., help="User ID"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output format"),
) -> None:
    """Show a user."""
    user = get_user_service().get_user(user_id)
    format_output(user.model_dump(mode="json"), resolve_output(output))
