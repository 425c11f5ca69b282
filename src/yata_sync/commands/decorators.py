"""Decorators for command functions."""

import functools
import time
import traceback
from collections.abc import Callable

import typer
from pydantic import ValidationError as PydanticValidationError

from yata_sync.errors import YataError
from yata_sync.utils.exit_codes import (
    ERROR_GENERAL,
    ERROR_INVALID_ARGS,
    exit_code_for,
    get_exit_code_name,
)
from yata_sync.utils.logger import get_logger
from yata_sync.utils.ui.formatters import format_error


def command_wrapper(func: Callable) -> Callable:
    """Wrap a command with timing logs and error-to-exit-code mapping."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger("cli")
        cmd = func.__name__
        start = time.monotonic()
        logger.info("command started: %s", cmd)
        try:
            result = func(*args, **kwargs)
            elapsed = time.monotonic() - start
            logger.info("command completed: %s (%.3fs)", cmd, elapsed)
            return result

        except YataError as e:
            elapsed = time.monotonic() - start
            code = exit_code_for(e)
            logger.error(
                "command failed: %s (%.3fs) - %s [%s]",
                cmd,
                elapsed,
                str(e),
                get_exit_code_name(code),
            )
            format_error(str(e))
            raise typer.Exit(code=code) from e

        except PydanticValidationError as e:
            logger.error("command failed: %s - invalid input: %s", cmd, e)
            for item in e.errors():
                field = ".".join(str(p) for p in item["loc"]) or "input"
                format_error(f"{field}: {item['msg']}")
            raise typer.Exit(code=ERROR_INVALID_ARGS) from e

        except (typer.Exit, typer.BadParameter):
            # Typer reports these itself (help, explicit exits, usage errors)
            raise

        except Exception as e:
            elapsed = time.monotonic() - start
            logger.error(
                "command failed: %s (%.3fs) - %s\n%s",
                cmd,
                elapsed,
                str(e),
                traceback.format_exc(),
            )
            format_error(f"An unexpected error occurred: {str(e)}")
            raise typer.Exit(code=ERROR_GENERAL) from e

    return wrapper
