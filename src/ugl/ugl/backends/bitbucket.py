"""Bitbucket backend"""

from __future__ import annotations

import logging
import os
from contextlib import ExitStack
from typing import ClassVar, Literal

from ugl.exceptions import IdentityError, TransportError
from ugl.models import RemoteDescriptor

from .base import Backend, BackendCapabilities, register_backend

log = logging.getLogger(__name__)

BITBUCKET_HOST = "bitbucket.org"
SSH_USER = "git"
AUTH_MARKER = "authenticated"
USERNAME_ENV = "BITBUCKET_USERNAME"
PASSWORD_ENV = "BITBUCKET_APP_PASSWORD"

VISIBILITY_SCOPES = frozenset({"public", "private"})


def namespace_of(remote: RemoteDescriptor) -> str:
    """A team scope names the workspace; otherwise the path does"""
    if remote.scope and remote.scope not in VISIBILITY_SCOPES:
        return remote.scope
    return remote.path


@register_backend
class BitbucketBackend(Backend):
    tag: ClassVar[Literal["bitbucket"]]
    label_prefix = "bb"
    default_host = BITBUCKET_HOST
    capabilities = BackendCapabilities(scopes=VISIBILITY_SCOPES, team_scopes=True)

    def check(self, remote: RemoteDescriptor) -> RemoteDescriptor:
        self.reject_user(remote, allowed=SSH_USER)
        self.check_scope(remote)

        namespace = namespace_of(remote)
        if not namespace:
            raise IdentityError("no Bitbucket workspace or team given", remote.spec)

        remote.host = remote.host or BITBUCKET_HOST
        remote.user = SSH_USER
        remote.url = self.scp_url(
            remote.user, remote.host, remote.port, f"{namespace}/{remote.name}"
        )
        remote.label = self.make_label(namespace, remote, host=remote.host)

        self.check_page(f"https://{remote.host}/{namespace}", remote, "Bitbucket workspace")
        self.check_ssh_banner(remote, AUTH_MARKER)
        log.info(f"Checked {remote.spec} -> {remote.url}")
        return remote

    def create(self, remote: RemoteDescriptor, resources: ExitStack) -> None:
        namespace = namespace_of(remote)
        full_name = f"{namespace}/{remote.name}"
        if self.transports.http.status(f"https://{remote.host}/{full_name}") == 200:
            log.info(f"Bitbucket repository {full_name} already exists")
            return

        username = os.environ.get(USERNAME_ENV)
        password = os.environ.get(PASSWORD_ENV)
        if not username or not password:
            raise IdentityError(
                f"{USERNAME_ENV} and {PASSWORD_ENV} must be set to create {full_name}",
                remote.spec,
            )

        response = self.transports.http.post_json(
            f"https://api.{remote.host}/2.0/repositories/{full_name}",
            {"scm": "git", "is_private": remote.scope != "public"},
            auth=(username, password),
        )
        if response.status_code in (200, 201):
            log.info(f"Created Bitbucket repository {full_name}")
        elif response.status_code == 400 and "already exists" in response.text:
            log.info(f"Bitbucket repository {full_name} already exists")
        elif response.status_code in (401, 403):
            raise IdentityError(
                f"Bitbucket refused to create {full_name} (HTTP {response.status_code})",
                remote.spec,
            )
        else:
            raise TransportError(
                f"Bitbucket API answered HTTP {response.status_code}: {response.text.strip()}",
                remote.spec,
            )
