"""ugl CLI Main Entry Point

ugl - initialize a git repository and wire it to its remotes.

Every remote is given as a Uniform Git Location for one backend:

    [user@]host[:port]:path/name[%scope][@branch]

Usage:
    ugl PATH [BRANCH] [remote flags...]
    ugl ./proj -g alice/proj -l alice/proj@dev       # GitHub + GitLab
    ugl ./proj -s git@srv.example:repos/proj         # bare repo over ssh
    ugl ./proj -k alice/proj%myteam -t               # keybase team, via Tor
    ugl -V                                           # Show version
"""

from __future__ import annotations

import logging
import signal
from pathlib import Path
from typing import List, Optional

import typer

from ugl import Provisioner, UglConfig, build_context, resolve_config_path

from ._version import __version__
from .lib.errors import handle_error
from .lib.ordering import RAW_ARGS_KEY, OrderedCommand, ordered_addresses
from .lib.utils import setup_logging

log = logging.getLogger(__name__)

UGL_HELP = "Uniform Git Location: [user@]host[:port]:path/name[%scope][@branch]"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"ugl {__version__}", err=True)
        raise typer.Exit()


def _terminate(signum, frame) -> None:
    # unwinds the provisioning stack (keybase logout) like an error would
    raise SystemExit(1)


typer_app = typer.Typer(add_completion=False, rich_markup_mode=None)


@typer_app.command(cls=OrderedCommand)
def cli(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Directory of the local repository."),
    branch: Optional[str] = typer.Argument(
        None, help="Branch to create and track (default: config, else main)."
    ),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="git user.name"),
    email: Optional[str] = typer.Option(None, "--email", "-e", help="git user.email"),
    identity: Optional[List[Path]] = typer.Option(
        None, "--identity", "-i", help="SSH identity file (repeatable)."
    ),
    ssh: Optional[List[str]] = typer.Option(
        None, "--ssh", "-s", metavar="UGL", help=f"Bare repo over ssh. {UGL_HELP}"
    ),
    github: Optional[List[str]] = typer.Option(
        None, "--github", "-g", metavar="UGL", help="GitHub: user/repo[%public|%private]"
    ),
    gitlab: Optional[List[str]] = typer.Option(
        None, "--gitlab", "-l", metavar="UGL", help="GitLab: [git@host[:port]:]namespace/repo"
    ),
    bitbucket: Optional[List[str]] = typer.Option(
        None, "--bitbucket", "-b", metavar="UGL", help="Bitbucket: workspace/repo[%team]"
    ),
    keybase: Optional[List[str]] = typer.Option(
        None, "--keybase", "-k", metavar="UGL", help="Keybase: user/repo[%team]"
    ),
    tor: bool = typer.Option(False, "--tor", "-t", help="Route everything through Tor."),
    socks: Optional[str] = typer.Option(
        None, "--socks", metavar="HOST:PORT", help="Route everything through a SOCKS proxy."
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", help="Config file (default: ~/.config/ugl/config.yaml)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show progress."),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Initialize PATH as a git repository and configure every remote given.

    All addresses are parsed and checked before anything is created. With
    several remotes on the same branch an `all` remote pushes to each of
    them; `git pa` pushes everywhere in any case.
    """
    setup_logging(verbose)
    signal.signal(signal.SIGTERM, _terminate)

    addresses = ordered_addresses(
        ctx.meta.get(RAW_ARGS_KEY, []),
        {
            "ssh": ssh,
            "github": github,
            "gitlab": gitlab,
            "bitbucket": bitbucket,
            "keybase": keybase,
        },
    )

    try:
        settings = UglConfig.load(resolve_config_path(config))
        context = build_context(
            settings,
            path,
            branch=branch,
            name=name,
            email=email,
            keys=identity,
            tor=tor,
            socks=socks,
        )
        if not addresses:
            log.warning("No remotes given, only the local repository is set up")
        remotes = Provisioner(context).run(addresses)
    except Exception as e:
        # UglError prints its message; anything else as an unexpected error
        handle_error(e)

    for remote in remotes:
        log.info(f"{remote.label}: {remote.url}")


def app() -> None:
    """Entry point for the CLI."""
    typer_app()


if __name__ == "__main__":
    app()
