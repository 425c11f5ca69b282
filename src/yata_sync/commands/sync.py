"""Sync commands.

``yata sync run`` serves one sync round trip: it reads a request body as
sent by an offline client and prints the response body, so the engine can be
driven from scripts or sit behind any transport.
"""

import json
import sys
from pathlib import Path

import typer

from yata_sync.errors import YataError
from yata_sync.models import SyncRequest
from yata_sync.services.sync_service import get_sync_coordinator
from yata_sync.utils.exit_codes import exit_code_for
from yata_sync.utils.logger import get_logger
from yata_sync.utils.typer_helpers import SuggestingGroup

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Synchronize an offline client")


def _read_request(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.is_file():
        raise typer.BadParameter(f"file not found: {source}", param_hint="REQUEST_FILE")
    return path.read_text(encoding="utf-8")


@app.command("run")
@command_wrapper
def run_sync(
    request_file: str = typer.Argument(
        ..., help="JSON sync request file, or '-' to read stdin"
    ),
    user: str = typer.Option(
        ..., "--user", "-u", envvar="YATA_USER", help="Authenticated user ID"
    ),
) -> None:
    """Apply a client's changes and print the delta since its last pull.

    Examples:
        yata sync run request.json --user 7f9c...
        echo '{"lastPulledAt": null}' | yata sync run - -u 7f9c...
    """
    body = _read_request(request_file)
    try:
        request = SyncRequest.parse(body)
        response = get_sync_coordinator().handle(request, user)
    except YataError as e:
        get_logger("cli").error("sync run failed for user %s: %s", user, e)
        print(json.dumps(e.to_dict(), indent=2))
        raise typer.Exit(exit_code_for(e)) from e

    print(json.dumps(response.to_wire(), indent=2))
