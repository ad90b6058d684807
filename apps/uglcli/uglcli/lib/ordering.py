"""Recover the command-line order of the per-backend address flags.

Click groups repeated options per parameter, which loses the order in
which `--ssh`, `--github`, ... were interleaved. That order is the
priority of the remotes, so the raw arguments are scanned again.
"""

from __future__ import annotations

import logging

from typer.core import TyperCommand

log = logging.getLogger(__name__)

RAW_ARGS_KEY = "ugl.raw_args"

BACKEND_FLAGS: dict[str, str] = {
    "--ssh": "ssh",
    "-s": "ssh",
    "--github": "github",
    "-g": "github",
    "--gitlab": "gitlab",
    "-l": "gitlab",
    "--bitbucket": "bitbucket",
    "-b": "bitbucket",
    "--keybase": "keybase",
    "-k": "keybase",
}

# other options whose value must not be mistaken for a flag
VALUE_FLAGS = frozenset(
    {"--name", "-n", "--email", "-e", "--identity", "-i", "--socks", "--config"}
)


class OrderedCommand(TyperCommand):
    """Keeps the raw argument list in the context for ordered_addresses"""

    def parse_args(self, ctx, args):
        ctx.meta[RAW_ARGS_KEY] = list(args)
        return super().parse_args(ctx, args)


def scan_addresses(raw_args: list[str]) -> list[tuple[str, str]]:
    found: list[tuple[str, str]] = []
    args = iter(raw_args)
    for arg in args:
        if arg == "--":
            break
        if arg in BACKEND_FLAGS:
            value = next(args, None)
            if value is not None:
                found.append((BACKEND_FLAGS[arg], value))
        elif arg in VALUE_FLAGS:
            next(args, None)
        elif arg.startswith("--") and "=" in arg:
            flag, _, value = arg.partition("=")
            if flag in BACKEND_FLAGS:
                found.append((BACKEND_FLAGS[flag], value))
        elif not arg.startswith("--") and arg[:2] in BACKEND_FLAGS and len(arg) > 2:
            # -gowner/repo
            found.append((BACKEND_FLAGS[arg[:2]], arg[2:]))
    return found


def ordered_addresses(
    raw_args: list[str], parsed: dict[str, list[str] | None]
) -> list[tuple[str, str]]:
    """(backend, address) pairs in command-line order.

    `parsed` is what click collected per backend. If scanning the raw
    arguments does not yield exactly those values, fall back to grouping
    by backend in the order of `parsed`.
    """
    expected = [(tag, value) for tag, values in parsed.items() for value in values or []]
    found = scan_addresses(raw_args)
    if sorted(found) != sorted(expected):
        log.debug("Could not recover flag order from raw arguments, grouping by backend")
        return expected
    return found
