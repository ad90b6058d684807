"""GitLab backend (gitlab.com or a self-hosted instance)"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from typing import ClassVar, Literal

from ugl.models import RemoteDescriptor

from .base import Backend, BackendCapabilities, register_backend

log = logging.getLogger(__name__)

GITLAB_HOST = "gitlab.com"
SSH_USER = "git"
WELCOME_MARKER = "Welcome to GitLab"


@register_backend
class GitLabBackend(Backend):
    """GitLab creates a project on first push, so create has nothing to do."""

    tag: ClassVar[Literal["gitlab"]]
    label_prefix = "gl"
    default_host = GITLAB_HOST
    capabilities = BackendCapabilities(scopes=frozenset({"private"}))

    def check(self, remote: RemoteDescriptor) -> RemoteDescriptor:
        self.reject_user(remote, allowed=SSH_USER)
        self.check_scope(remote)

        remote.host = remote.host or GITLAB_HOST
        remote.user = SSH_USER
        remote.url = self.scp_url(remote.user, remote.host, remote.port, remote.repo_path)
        remote.label = self.make_label(remote.path, remote, host=remote.host)

        self.check_page(f"https://{remote.host}/{remote.path}", remote, "GitLab namespace")
        self.check_ssh_banner(remote, WELCOME_MARKER)
        log.info(f"Checked {remote.spec} -> {remote.url}")
        return remote

    def create(self, remote: RemoteDescriptor, resources: ExitStack) -> None:
        log.info(f"{remote.url} will be created by GitLab on first push")
