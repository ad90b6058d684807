"""Keybase backend: encrypted git repositories, personal or per team"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from typing import ClassVar, Literal

from ugl.exceptions import IdentityError, InvalidAddressError, InvalidScopeError
from ugl.models import RemoteDescriptor
from ugl.transport import KeybaseSession

from .base import Backend, BackendCapabilities, register_backend

log = logging.getLogger(__name__)

PRIVATE = "private"


def keybase_url(remote: RemoteDescriptor) -> str:
    if remote.scope == PRIVATE:
        return f"keybase://private/{remote.path}/{remote.name}"
    return f"keybase://team/{remote.scope}/{remote.name}"


@register_backend
class KeybaseBackend(Backend):
    """The path is the keybase user; a scope other than private is a team.

    Create logs in as that user for the rest of the invocation (logging
    out again afterwards) because the keybase CLI acts on the single
    active session of the machine.
    """

    tag: ClassVar[Literal["keybase"]]
    label_prefix = "kb"
    capabilities = BackendCapabilities(
        scopes=frozenset({PRIVATE}),
        team_scopes=True,
        requires_ssh_key=False,
        supports_proxy=False,
    )

    def check(self, remote: RemoteDescriptor) -> RemoteDescriptor:
        self.reject_host(remote)
        if remote.scope == "public":
            raise InvalidScopeError(remote.scope, self.tag, remote.spec)
        self.check_scope(remote)
        if not remote.path:
            raise InvalidAddressError(
                "keybase addresses need the keybase user as path (user/repo)",
                remote.spec,
            )
        self.transports.keybase.require(remote.spec)

        remote.scope = remote.scope or PRIVATE
        remote.url = keybase_url(remote)
        namespace = remote.path if remote.scope == PRIVATE else remote.scope
        remote.label = self.make_label(namespace, remote)
        log.info(f"Checked {remote.spec} -> {remote.url}")
        return remote

    def create(self, remote: RemoteDescriptor, resources: ExitStack) -> None:
        cli = self.transports.keybase
        resources.enter_context(KeybaseSession(cli, remote.path, remote.spec))

        team = None if remote.scope == PRIVATE else remote.scope
        if team is not None and team not in cli.team_memberships():
            raise IdentityError(
                f"keybase user {remote.path} is not a member of team {team}",
                remote.spec,
            )

        if remote.url in cli.list_repos():
            log.info(f"Keybase repository {remote.url} already exists")
            return

        cli.create_repo(remote.name, team=team)
        log.info(f"Created keybase repository {remote.url}")
