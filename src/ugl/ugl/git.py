"""Local git command wrapper"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from ugl.exceptions import GitCommandError

log = logging.getLogger(__name__)


class Git:
    """Runs git in one working directory.

    Query helpers return None/False when git says no; anything that is
    supposed to change state raises GitCommandError on failure.
    """

    def __init__(self, cwd: Path):
        self.cwd = cwd

    def run(self, *args: str, check: bool = True) -> subprocess.CompletedProcess:
        log.debug(f"git {' '.join(args)} (in {self.cwd})")
        result = subprocess.run(
            ["git", *args],
            cwd=self.cwd,
            capture_output=True,
            text=True,
        )
        if check and result.returncode != 0:
            raise GitCommandError(list(args), result.stderr or result.stdout, result.returncode)
        return result

    def output(self, *args: str) -> str | None:
        result = self.run(*args, check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    # Repository

    def init(self) -> None:
        self.run("init", "--quiet")

    def toplevel(self) -> Path | None:
        """Top of the working tree containing cwd, if any"""
        top = self.output("rev-parse", "--show-toplevel")
        return Path(top) if top else None

    def has_commits(self) -> bool:
        return self.output("rev-parse", "--verify", "--quiet", "HEAD") is not None

    def current_branch(self) -> str | None:
        return self.output("symbolic-ref", "--quiet", "--short", "HEAD")

    def branch_exists(self, branch: str) -> bool:
        return (
            self.output("rev-parse", "--verify", "--quiet", f"refs/heads/{branch}")
            is not None
        )

    def set_head(self, branch: str) -> None:
        self.run("symbolic-ref", "HEAD", f"refs/heads/{branch}")

    def commit_empty(self, message: str) -> None:
        self.run("commit", "--allow-empty", "--quiet", "-m", message)

    def checkout(self, branch: str, create: bool = False) -> None:
        if create:
            self.run("checkout", "--quiet", "-b", branch)
        else:
            self.run("checkout", "--quiet", branch)

    # Config

    def config_get(self, key: str) -> str | None:
        return self.output("config", "--local", "--get", key)

    def config_get_all(self, key: str) -> list[str]:
        out = self.output("config", "--local", "--get-all", key)
        return out.splitlines() if out else []

    def config_set(self, key: str, value: str) -> None:
        self.run("config", "--local", key, value)

    def config_unset_all(self, key: str) -> None:
        # exit code 5: key was not set
        result = self.run("config", "--local", "--unset-all", key, check=False)
        if result.returncode not in (0, 5):
            raise GitCommandError(
                ["config", "--unset-all", key], result.stderr, result.returncode
            )

    # Remotes

    def remotes(self) -> list[str]:
        out = self.output("remote")
        return out.splitlines() if out else []

    def remote_url(self, name: str) -> str | None:
        return self.config_get(f"remote.{name}.url")

    def remote_add(self, name: str, url: str) -> None:
        self.run("remote", "add", name, url)

    def remote_remove(self, name: str) -> None:
        self.run("remote", "remove", name)

    def remote_add_push_url(self, name: str, url: str) -> None:
        self.run("remote", "set-url", "--add", "--push", name, url)
