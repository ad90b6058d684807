"""Provisioning flow: parse, check, create, configure"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from contextlib import ExitStack

from ugl.address import AddressValidator, check_proxy, parse_address, validate_branch
from ugl.backends import Backend, create_backend
from ugl.configurator import RemoteConfigurator
from ugl.exceptions import UglError
from ugl.local import LocalRepoManager
from ugl.models import InvocationContext, RemoteDescriptor, RemoteSet
from ugl.transport import Transports, require_tool

log = logging.getLogger(__name__)


class Provisioner:
    """Runs one invocation, strictly in order.

    Every address is parsed, validated and checked before anything is
    touched, so a bad address late in the list cannot leave earlier
    remotes half provisioned. Creation only starts once the local
    repository exists. Resources acquired during creation (keybase
    login) are released when the run ends, however it ends.
    """

    def __init__(self, ctx: InvocationContext, transports: Transports | None = None):
        self.ctx = ctx
        self.transports = transports or Transports.from_context(ctx)
        self._backends: dict[str, Backend] = {}

    def backend(self, tag: str) -> Backend:
        if tag not in self._backends:
            self._backends[tag] = create_backend(tag, self.ctx, self.transports)
        return self._backends[tag]

    def run(self, addresses: Iterable[tuple[str, str]]) -> RemoteSet:
        """Provision every (backend, address) pair, in order"""
        self.preflight()
        remotes = self.check_all(addresses)
        git = LocalRepoManager(self.ctx, self.transports.ssh).ensure()

        with ExitStack() as resources:
            for remote in remotes:
                log.info(f"Creating {remote.label} ({remote.url})")
                self.backend(remote.backend).create(remote, resources)
            RemoteConfigurator(git, self.ctx.branch).configure(remotes)

        return remotes

    def preflight(self) -> None:
        """Local tools, target branch and proxy; checked once"""
        require_tool("git")
        require_tool("ssh")
        validate_branch(self.ctx.branch)
        if self.ctx.proxy is not None:
            require_tool("nc")
            check_proxy(self.ctx.proxy, self.transports.http, self.transports.probe)

    def parse_all(self, addresses: Iterable[tuple[str, str]]) -> RemoteSet:
        remotes = RemoteSet()
        validator = AddressValidator(self.transports.probe)
        for tag, address in addresses:
            remote = parse_address(tag, address, remotes.next_id)
            validator.validate(remote)
            remotes.add(remote)
        return remotes

    def check_all(self, addresses: Iterable[tuple[str, str]]) -> RemoteSet:
        """Parse, validate and check everything, then freeze the set"""
        remotes = self.parse_all(addresses)
        for remote in remotes:
            self.check(remote)
        if remotes.freeze(self.ctx.branch):
            log.info(f"{len(remotes)} remote(s) checked, aligned on {self.ctx.branch}")
        else:
            log.info(f"{len(remotes)} remote(s) checked, tracking different branches")
        return remotes

    def check(self, remote: RemoteDescriptor) -> RemoteDescriptor:
        backend = self.backend(remote.backend)
        caps = backend.capabilities
        if caps.requires_ssh_key and not self.ctx.keys:
            log.debug(f"No identity files given for {remote.spec}, using ssh defaults")
        if self.ctx.proxy is not None and not caps.supports_proxy:
            log.warning(f"{remote.backend} cannot be fully proxied ({remote.spec})")

        backend.check(remote)
        if not remote.checked:
            raise UglError(f"{backend.name} did not produce a URL", remote.spec)
        return remote
