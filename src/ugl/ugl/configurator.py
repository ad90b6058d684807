"""Writes remotes, branch tracking and the push-all alias into git config"""

from __future__ import annotations

import logging

from ugl.exceptions import UglError
from ugl.git import Git
from ugl.models import RemoteDescriptor, RemoteSet

log = logging.getLogger(__name__)

ALL_REMOTE = "all"
PUSH_ALL_ALIAS = "pa"


def fetch_refspec(label: str) -> str:
    return f"+refs/heads/*:refs/remotes/{label}/*"


def push_all_alias(remotes: RemoteSet, target_branch: str) -> str:
    """Alias body for `git pa`.

    Aligned remotes share the `all` remote. Otherwise each remote gets an
    explicit push of the target branch to its own branch.
    """
    if remotes.aligned:
        return f"push {ALL_REMOTE}"
    clauses = [
        f"git push {r.label} {target_branch}:{r.remote_branch(target_branch)}"
        for r in remotes
    ]
    return "!" + " && ".join(clauses)


class RemoteConfigurator:
    def __init__(self, git: Git, target_branch: str):
        self.git = git
        self.target_branch = target_branch

    def configure(self, remotes: RemoteSet) -> None:
        if not remotes.frozen:
            raise UglError("remotes must be checked before they are configured")
        if not remotes:
            return

        for remote in remotes:
            if not remote.checked:
                raise UglError("remote was never checked", remote.spec)
            self.configure_remote(remote)

        if remotes.aligned:
            self.configure_all(remotes)
            self.set_upstream(ALL_REMOTE, self.target_branch)
        else:
            if self.git.remote_url(ALL_REMOTE) is not None:
                log.info(f"Remotes track different branches, removing {ALL_REMOTE}")
                self.git.remote_remove(ALL_REMOTE)
            first = remotes[0]
            self.set_upstream(first.label, first.remote_branch(self.target_branch))

        alias = push_all_alias(remotes, self.target_branch)
        self.git.config_set(f"alias.{PUSH_ALL_ALIAS}", alias)
        log.info(f"git {PUSH_ALL_ALIAS} = {alias}")

    def configure_remote(self, remote: RemoteDescriptor) -> None:
        current = self.git.remote_url(remote.label)
        if current is not None and current != remote.url:
            log.info(f"Remote {remote.label} moved from {current}, replacing it")
            self.git.remote_remove(remote.label)
            current = None

        if current is None:
            self.git.remote_add(remote.label, remote.url)
            log.info(f"Added remote {remote.label} -> {remote.url}")

        key = f"remote.{remote.label}.fetch"
        self.git.config_unset_all(key)
        self.git.config_set(key, fetch_refspec(remote.label))

    def configure_all(self, remotes: RemoteSet) -> None:
        """(Re)create the `all` remote pushing to every remote"""
        if self.git.remote_url(ALL_REMOTE) is not None:
            self.git.remote_remove(ALL_REMOTE)
        self.git.remote_add(ALL_REMOTE, remotes[0].url)
        for remote in remotes:
            self.git.remote_add_push_url(ALL_REMOTE, remote.url)
        log.info(f"Remote {ALL_REMOTE} pushes to {len(remotes)} remote(s)")

    def set_upstream(self, remote: str, remote_branch: str) -> None:
        self.git.config_set(f"branch.{self.target_branch}.remote", remote)
        self.git.config_set(
            f"branch.{self.target_branch}.merge", f"refs/heads/{remote_branch}"
        )
