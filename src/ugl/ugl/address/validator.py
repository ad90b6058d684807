"""Backend-agnostic address checks.

Syntax checks are pure. The host check opens a TCP connection (through
the proxy when one is configured) and expects an SSH banner.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from ugl.exceptions import (
    InvalidBranchError,
    InvalidPortError,
    InvalidUserError,
    TransportError,
    UnreachableHostError,
    UnreachableProxyError,
)
from ugl.models import ProxyConfig, RemoteDescriptor

if TYPE_CHECKING:
    from ugl.transport import HttpClient, TcpProbe

log = logging.getLogger(__name__)

MAX_PORT = 65535

TOR_CHECK_URL = "https://check.torproject.org/api/ip"

_PORT_RE = re.compile(r"^[0-9]{1,5}$")
_USER_RE = re.compile(r"^[A-Za-z0-9._-]+$")
# ASCII control chars, space and the characters git forbids in ref names
_BAD_REF_CHARS_RE = re.compile(r"[\x00-\x20\x7f~^:?*\[\\]")


def validate_port(raw: str | int, spec: str | None = None) -> int:
    """Return the port as int; 1-5 digits, 1 <= port < 65535"""
    text = str(raw)
    if not _PORT_RE.match(text):
        raise InvalidPortError(text, spec)
    port = int(text)
    if not 1 <= port < MAX_PORT:
        raise InvalidPortError(text, spec)
    return port


def validate_user(user: str, spec: str | None = None) -> None:
    if user and not _USER_RE.match(user):
        raise InvalidUserError(user, spec)


def is_valid_branch(branch: str) -> bool:
    """git check-ref-format --allow-onelevel, applied to a branch name"""
    if not branch or branch == "@":
        return False
    if branch.startswith("-") or branch.endswith("/") or branch.endswith("."):
        return False
    if ".." in branch or "@{" in branch or "//" in branch:
        return False
    if _BAD_REF_CHARS_RE.search(branch):
        return False
    for component in branch.split("/"):
        if component.startswith(".") or component.endswith(".lock"):
            return False
    return True


def validate_branch(branch: str, spec: str | None = None) -> None:
    if branch and not is_valid_branch(branch):
        raise InvalidBranchError(branch, spec)


class AddressValidator:
    """Shared checks run on every address before its backend's check"""

    def __init__(self, probe: TcpProbe):
        self.probe = probe

    def validate(self, remote: RemoteDescriptor) -> RemoteDescriptor:
        # already checked while parsing, but descriptors can be built directly
        validate_port(remote.port, remote.spec)
        validate_user(remote.user, remote.spec)
        validate_branch(remote.branch, remote.spec)
        if remote.host:
            self.check_host(remote)
        return remote

    def check_host(self, remote: RemoteDescriptor) -> None:
        log.debug(f"Probing {remote.host}:{remote.port} for an SSH banner")
        try:
            banner = self.probe.read(remote.host, remote.port, 3)
        except TransportError as e:
            raise UnreachableHostError(
                remote.host, remote.port, remote.spec, reason=e.message
            )
        if banner != b"SSH":
            raise UnreachableHostError(
                remote.host, remote.port, remote.spec, reason=f"banner {banner!r}"
            )


def check_proxy(proxy: ProxyConfig, http: HttpClient, probe: TcpProbe) -> None:
    """Validate the proxy once per invocation.

    A Tor proxy must route through Tor according to the Tor Project's
    check API; any other SOCKS proxy must accept connections.
    """
    where = f"{proxy.host}:{proxy.port}"
    if proxy.kind == "tor":
        try:
            data = http.get_json(TOR_CHECK_URL)
        except TransportError as e:
            raise UnreachableProxyError(f"Tor proxy at {where} is not usable: {e}")
        if not data.get("IsTor"):
            raise UnreachableProxyError(f"traffic through {where} does not exit via Tor")
        log.info(f"Tor proxy at {where} is working")
        return

    try:
        probe.connect(proxy.host, proxy.port)
    except TransportError as e:
        raise UnreachableProxyError(f"SOCKS proxy at {where} is not reachable: {e}")
    log.info(f"SOCKS proxy at {where} is reachable")
