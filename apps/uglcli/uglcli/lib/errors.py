"""Shared error handling for uglcli."""

import logging
import sys
from typing import NoReturn

import typer

from ugl.exceptions import UglError

log = logging.getLogger(__name__)


def exit_with_error(message: str, exit_code: int = 1) -> NoReturn:
    """Exit the program with an error message."""
    typer.secho(f"Error: {message}", err=True, fg=typer.colors.RED)
    sys.exit(exit_code)


def handle_error(error: Exception) -> NoReturn:
    """Report an error on stderr and exit non-zero."""
    if isinstance(error, UglError):
        log.debug("Provisioning failed", exc_info=error)
        exit_with_error(str(error), error.exit_code)
    else:
        # Unexpected error
        log.debug("Unexpected error", exc_info=error)
        typer.secho(f"Unexpected error: {error}", err=True, fg=typer.colors.RED)
        sys.exit(1)
