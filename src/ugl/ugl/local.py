"""Local repository setup"""

from __future__ import annotations

import logging

from ugl.exceptions import ConflictError, NestedRepositoryError
from ugl.git import Git
from ugl.models import InvocationContext
from ugl.transport import SSHClient

log = logging.getLogger(__name__)

INITIAL_COMMIT_MESSAGE = "Initial commit"


class LocalRepoManager:
    """Makes the target path a git repository ready to receive remotes.

    Idempotent: an existing repository whose top level is the target is
    reused, its identity and transport settings rewritten.
    """

    def __init__(self, ctx: InvocationContext, ssh: SSHClient):
        self.ctx = ctx
        self.ssh = ssh

    def ensure(self) -> Git:
        path = self.ctx.path
        if path.exists() and not path.is_dir():
            raise ConflictError(f"{path} exists and is not a directory")
        if not path.exists():
            log.info(f"Creating directory {path}")
            path.mkdir(parents=True)

        git = Git(path)
        top = git.toplevel()
        if top is None:
            log.info(f"Initializing git repository in {path}")
            git.init()
        elif top.resolve() != path.resolve():
            raise NestedRepositoryError(str(path), str(top))
        else:
            log.info(f"Using existing git repository {path}")

        self.configure(git)
        self.ensure_branch(git)
        return git

    def configure(self, git: Git) -> None:
        """Identity, ssh command and proxy"""
        if self.ctx.name:
            git.config_set("user.name", self.ctx.name)
        if self.ctx.email:
            git.config_set("user.email", self.ctx.email)

        git.config_set("core.sshCommand", self.ssh.command_line())

        if self.ctx.proxy is not None:
            git.config_set("http.proxy", self.ctx.proxy.url)
            git.config_set("https.proxy", self.ctx.proxy.url)

    def ensure_branch(self, git: Git) -> None:
        branch = self.ctx.branch
        if not git.has_commits():
            # unborn HEAD: the first commit lands on the target branch
            git.set_head(branch)
            git.commit_empty(INITIAL_COMMIT_MESSAGE)
            log.info(f"Created initial commit on {branch}")
            return

        if git.current_branch() == branch:
            return
        if git.branch_exists(branch):
            log.info(f"Checking out {branch}")
            git.checkout(branch)
        else:
            log.info(f"Creating branch {branch}")
            git.checkout(branch, create=True)
