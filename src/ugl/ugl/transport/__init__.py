"""External collaborators: ssh, http, raw tcp and the keybase CLI"""

from __future__ import annotations

import shutil
from dataclasses import dataclass

from ugl.exceptions import MissingToolError
from ugl.models import InvocationContext

from .http import HttpClient
from .keybase import KeybaseCLI, KeybaseSession, KeybaseStatus
from .probe import TcpProbe
from .ssh import SSHClient, SSHResult


@dataclass
class Transports:
    """Everything a backend may talk to"""

    ssh: SSHClient
    http: HttpClient
    probe: TcpProbe
    keybase: KeybaseCLI

    @classmethod
    def from_context(cls, ctx: InvocationContext) -> "Transports":
        return cls(
            ssh=SSHClient(keys=ctx.keys, proxy=ctx.proxy),
            http=HttpClient(proxy=ctx.proxy),
            probe=TcpProbe(proxy=ctx.proxy),
            keybase=KeybaseCLI(),
        )


def require_tool(name: str) -> str:
    """Return the full path of a program or raise MissingToolError"""
    found = shutil.which(name)
    if found is None:
        raise MissingToolError(name)
    return found


__all__ = [
    "HttpClient",
    "KeybaseCLI",
    "KeybaseSession",
    "KeybaseStatus",
    "SSHClient",
    "SSHResult",
    "TcpProbe",
    "Transports",
    "require_tool",
]
