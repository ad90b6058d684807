"""Shared utilities for the CLI"""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

DEBUG_ENV = "UGL_DEBUG"

# stdout stays empty: everything goes to stderr
console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the ugl CLI.

    Log levels:
    - Normal: Only warnings/errors shown
    - Verbose (-v): INFO level - shows each check, creation and config step
    - Debug (UGL_DEBUG=1): DEBUG level - shows every git/ssh/http call
    """
    debug = bool(os.environ.get(DEBUG_ENV))
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=console,
        show_time=verbose or debug,
        show_path=debug,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    for name in ("ugl", "uglcli"):
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.handlers = [handler]
        logger.propagate = False
