"""Keybase CLI wrapper and the scoped login session"""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
from collections.abc import Callable

from pydantic import BaseModel, Field

from ugl.exceptions import IdentityError, MissingToolError, TransportError

log = logging.getLogger(__name__)

KEYBASE_URL_PREFIX = "keybase://"


class KeybaseStatus(BaseModel):
    """Subset of `keybase status -j`"""

    model_config = {"extra": "ignore", "populate_by_name": True}

    username: str = Field(default="", alias="Username")
    logged_in: bool = Field(default=False, alias="LoggedIn")
    session_valid: bool = Field(default=False, alias="SessionIsValid")

    @property
    def active(self) -> bool:
        return self.logged_in and self.session_valid


class KeybaseTeam(BaseModel):
    model_config = {"extra": "ignore"}

    fq_name: str


class KeybaseMemberships(BaseModel):
    """Subset of `keybase team list-memberships -j`"""

    model_config = {"extra": "ignore"}

    teams: list[KeybaseTeam] | None = None

    @property
    def names(self) -> set[str]:
        return {t.fq_name for t in self.teams or []}


def parse_repo_urls(listing: str) -> set[str]:
    """Pick the keybase:// URLs out of `keybase git list` output"""
    return {token for token in listing.split() if token.startswith(KEYBASE_URL_PREFIX)}


class KeybaseCLI:
    """Calls the keybase binary; every failure is a TransportError"""

    def __init__(
        self,
        binary: str = "keybase",
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        self.binary = binary
        self._runner = runner

    def available(self) -> bool:
        return shutil.which(self.binary) is not None

    def require(self, spec: str | None = None) -> None:
        if not self.available():
            raise MissingToolError(self.binary, spec)

    def _run(self, *args: str, interactive: bool = False) -> str:
        cmd = [self.binary, *args]
        log.debug(f"Running: {' '.join(cmd)}")
        try:
            if interactive:
                # login prompts for a passphrase on the terminal
                result = self._runner(cmd)
            else:
                result = self._runner(cmd, capture_output=True, text=True)
        except OSError as e:
            raise TransportError(f"could not run {self.binary}: {e}")
        if result.returncode != 0:
            message = f"{' '.join(cmd)} failed ({result.returncode})"
            if result.stderr:
                message += f": {result.stderr.strip()}"
            raise TransportError(message)
        return result.stdout or ""

    def status(self) -> KeybaseStatus:
        out = self._run("status", "-j")
        try:
            return KeybaseStatus.model_validate(json.loads(out))
        except ValueError as e:
            raise TransportError(f"unexpected output from keybase status: {e}")

    def login(self, username: str) -> None:
        self._run("login", username, interactive=True)

    def logout(self) -> None:
        self._run("logout")

    def team_memberships(self) -> set[str]:
        out = self._run("team", "list-memberships", "-j")
        try:
            return KeybaseMemberships.model_validate(json.loads(out)).names
        except ValueError as e:
            raise TransportError(f"unexpected output from keybase team: {e}")

    def list_repos(self) -> set[str]:
        """keybase:// URLs of every repository the user can see"""
        return parse_repo_urls(self._run("git", "list"))

    def create_repo(self, name: str, team: str | None = None) -> None:
        args = ["git", "create", name]
        if team:
            args.extend(["--team", team])
        self._run(*args)


class KeybaseSession:
    """Context manager making `username` the active keybase user.

    Logs out on exit only if this session performed the login, so a
    session that was already active is left untouched. Another user being
    logged in is an IdentityError: the session is shared machine state.
    """

    def __init__(self, cli: KeybaseCLI, username: str, spec: str | None = None):
        self.cli = cli
        self.username = username
        self.spec = spec
        self.logged_in_here = False

    def __enter__(self) -> "KeybaseSession":
        status = self.cli.status()
        if status.active and status.username == self.username:
            log.info(f"Keybase session for {self.username} already active")
            return self
        if status.active:
            raise IdentityError(
                f"keybase is logged in as '{status.username}', not '{self.username}'",
                self.spec,
            )
        log.info(f"Logging in to keybase as {self.username}")
        self.cli.login(self.username)
        self.logged_in_here = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.logged_in_here:
            return
        log.info(f"Logging out of keybase ({self.username})")
        try:
            self.cli.logout()
        except TransportError as e:
            log.error(f"Keybase logout failed: {e}")
        self.logged_in_here = False
