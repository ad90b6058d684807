"""Base backend abstraction and registry"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import ExitStack
from typing import ClassVar, get_args, get_origin, get_type_hints

from pydantic import BaseModel

from ugl.exceptions import (
    IdentityError,
    InvalidAddressError,
    InvalidScopeError,
    InvalidUserError,
    UglError,
)
from ugl.models import DEFAULT_PORT, InvocationContext, RemoteDescriptor
from ugl.transport import Transports

log = logging.getLogger(__name__)


class BackendCapabilities(BaseModel):
    """What a backend supports"""

    model_config = {"frozen": True}

    # None: scopes are not supported at all, only "" is accepted
    scopes: frozenset[str] | None = None
    # any other non-empty scope names a team
    team_scopes: bool = False
    requires_ssh_key: bool = True
    supports_proxy: bool = True

    def accepts_scope(self, scope: str) -> bool:
        if not scope:
            return True
        if self.scopes is None:
            return False
        return scope in self.scopes or self.team_scopes


class Backend(ABC):
    """Base class for remote hosting backends.

    ``check`` finalizes the descriptor (url, label) and may only read
    remote state. ``create`` makes sure the remote repository exists and
    must be safe to run again.
    """

    tag: ClassVar[str]
    label_prefix: ClassVar[str]
    capabilities: ClassVar[BackendCapabilities] = BackendCapabilities()

    # Host implied when the address does not name one
    default_host: ClassVar[str] = ""

    def __init__(self, ctx: InvocationContext, transports: Transports):
        self.ctx = ctx
        self.transports = transports

    @abstractmethod
    def check(self, remote: RemoteDescriptor) -> RemoteDescriptor:
        pass

    @abstractmethod
    def create(self, remote: RemoteDescriptor, resources: ExitStack) -> None:
        pass

    @property
    def name(self) -> str:
        return self.__class__.__name__

    # Helpers shared by the implementations

    def check_scope(self, remote: RemoteDescriptor) -> None:
        if not self.capabilities.accepts_scope(remote.scope):
            raise InvalidScopeError(remote.scope, self.tag, remote.spec)

    def reject_user(self, remote: RemoteDescriptor, allowed: str = "") -> None:
        if remote.user and remote.user != allowed:
            raise InvalidUserError(
                remote.user,
                remote.spec,
                reason=f"{self.tag} addresses do not take a user name",
            )

    def reject_host(self, remote: RemoteDescriptor) -> None:
        if remote.host or remote.user or remote.port != DEFAULT_PORT:
            raise InvalidAddressError(
                f"{self.tag} addresses do not take a host, user or port", remote.spec
            )

    def make_label(self, namespace: str, remote: RemoteDescriptor, host: str = "") -> str:
        """<prefix>[_<host>]_<namespace>[/<name>]

        The repository name is left out when it matches the target
        directory, which is the common case.
        """
        parts = [self.label_prefix]
        if host and host != self.default_host:
            parts.append(host)
        parts.append(namespace)
        label = "_".join(parts)
        if remote.name != self.ctx.dir_name:
            label = f"{label}/{remote.name}"
        return label

    def scp_url(self, user: str, host: str, port: int, repo_path: str) -> str:
        """git URL for user@host, switching to ssh:// for another port"""
        if port == DEFAULT_PORT:
            return f"{user}@{host}:{repo_path}.git"
        return f"ssh://{user}@{host}:{port}/{repo_path.lstrip('/')}.git"

    def check_ssh_banner(self, remote: RemoteDescriptor, marker: str) -> None:
        """ssh -T into the provider and look for its greeting"""
        result = self.transports.ssh.run(remote.user, remote.host, remote.port)
        if marker.lower() not in result.output.lower():
            raise IdentityError(
                f"SSH authentication to {remote.host} failed: "
                f"{result.output.strip() or 'no output'}",
                remote.spec,
            )
        log.debug(f"SSH authentication to {remote.host} OK")

    def check_page(self, url: str, remote: RemoteDescriptor, what: str) -> None:
        status = self.transports.http.status(url)
        if status != 200:
            raise IdentityError(f"{what} {url} not found (HTTP {status})", remote.spec)


_BACKEND_REGISTRY: dict[str, type[Backend]] = {}


def _get_literal_value(annotation) -> str | None:
    """Extract the string value from a Literal type annotation"""
    if get_origin(annotation) is ClassVar:
        args = get_args(annotation)
        annotation = args[0] if args else None
    args = get_args(annotation)
    if args and isinstance(args[0], str):
        return args[0]
    return None


def register_backend(cls: type[Backend]) -> type[Backend]:
    """Decorator to register a backend (infers its tag from a Literal annotation)"""
    hints = get_type_hints(cls)
    tag = _get_literal_value(hints.get("tag"))
    if not tag:
        raise ValueError(f"{cls}.tag must be a Literal string")

    cls.tag = tag
    _BACKEND_REGISTRY[tag] = cls
    return cls


def backend_tags() -> list[str]:
    return list(_BACKEND_REGISTRY)


def get_backend_class(tag: str) -> type[Backend]:
    entry = _BACKEND_REGISTRY.get(tag)
    if entry is None:
        raise UglError(f"Unknown backend: {tag}")
    return entry


def get_capabilities(tag: str) -> BackendCapabilities:
    return get_backend_class(tag).capabilities


def create_backend(tag: str, ctx: InvocationContext, transports: Transports) -> Backend:
    """Create a backend instance for a tag"""
    return get_backend_class(tag)(ctx, transports)
