"""GitHub backend"""

from __future__ import annotations

import logging
import os
import re
from contextlib import ExitStack
from typing import ClassVar, Literal

from ugl.exceptions import IdentityError, InvalidUserError, TransportError
from ugl.models import RemoteDescriptor

from .base import Backend, BackendCapabilities, register_backend

log = logging.getLogger(__name__)

GITHUB_HOST = "github.com"
GITHUB_WEB = "https://github.com"
GITHUB_API = "https://api.github.com"
TOKEN_ENV = "GITHUB_TOKEN"

AUTH_MARKER = "successfully authenticated"

# 1-39 chars, alphanumeric or single hyphens, no hyphen at either end
_HANDLE_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9]|-(?=[A-Za-z0-9])){0,38}$")


def is_valid_handle(handle: str) -> bool:
    return bool(_HANDLE_RE.match(handle))


@register_backend
class GitHubBackend(Backend):
    """github.com over SSH, repositories created with the REST API.

    Private repositories cannot be seen without credentials, so unless the
    address asks for a public repository that is already reachable,
    create always calls the API and treats "name already exists" as done.
    A namespace other than the token owner is created as an organization repo.
    """

    tag: ClassVar[Literal["github"]]
    label_prefix = "gh"
    default_host = GITHUB_HOST
    capabilities = BackendCapabilities(
        scopes=frozenset({"public", "private"}),
        supports_proxy=False,
    )

    def check(self, remote: RemoteDescriptor) -> RemoteDescriptor:
        self.reject_host(remote)
        if not is_valid_handle(remote.path):
            raise InvalidUserError(
                remote.path,
                remote.spec,
                reason=f"'{remote.path}' is not a valid GitHub user or organization name",
            )
        self.check_scope(remote)

        remote.host = GITHUB_HOST
        remote.user = "git"
        remote.url = f"git@{GITHUB_HOST}:{remote.path}/{remote.name}.git"
        remote.label = self.make_label(remote.path, remote)

        self.check_page(f"{GITHUB_WEB}/{remote.path}", remote, "GitHub user page")
        self.check_ssh_banner(remote, AUTH_MARKER)
        log.info(f"Checked {remote.spec} -> {remote.url}")
        return remote

    def create_endpoint(self, owner: str, token: str) -> str:
        """Repos of the token's own account go to /user, others to /orgs"""
        login = self.transports.http.get_json(f"{GITHUB_API}/user", token=token).get("login")
        if login and login.lower() == owner.lower():
            return f"{GITHUB_API}/user/repos"
        return f"{GITHUB_API}/orgs/{owner}/repos"

    def create(self, remote: RemoteDescriptor, resources: ExitStack) -> None:
        repo_page = f"{GITHUB_WEB}/{remote.path}/{remote.name}"
        if remote.scope == "public" and self.transports.http.status(repo_page) == 200:
            log.info(f"GitHub repository {remote.path}/{remote.name} already exists")
            return

        if self.ctx.proxy is not None:
            # GitHub flags accounts that use its API through anonymizing proxies
            raise TransportError(
                "refusing to call the GitHub API through a proxy; create "
                f"{remote.path}/{remote.name} by hand and re-run",
                remote.spec,
            )

        token = os.environ.get(TOKEN_ENV)
        if not token:
            raise IdentityError(
                f"{TOKEN_ENV} is not set, cannot create {remote.path}/{remote.name}",
                remote.spec,
            )

        response = self.transports.http.post_json(
            self.create_endpoint(remote.path, token),
            {"name": remote.name, "private": remote.scope != "public"},
            token=token,
        )
        if response.status_code == 201:
            log.info(f"Created GitHub repository {remote.path}/{remote.name}")
        elif response.status_code == 422 and "already exists" in response.text:
            log.info(f"GitHub repository {remote.path}/{remote.name} already exists")
        elif response.status_code in (401, 403, 404):
            raise IdentityError(
                f"GitHub refused to create {remote.path}/{remote.name} "
                f"(HTTP {response.status_code})",
                remote.spec,
            )
        else:
            raise TransportError(
                f"GitHub API answered HTTP {response.status_code}: {response.text.strip()}",
                remote.spec,
            )
