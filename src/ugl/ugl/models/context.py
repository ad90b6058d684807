"""Invocation context: the read-only configuration of one run"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

DEFAULT_BRANCH = "main"
DEFAULT_TOR_PORT = 9050


class ProxyConfig(BaseModel):
    """SOCKS proxy shared by every network call"""

    model_config = {"frozen": True}

    host: str = "127.0.0.1"
    port: int = DEFAULT_TOR_PORT
    kind: Literal["tor", "socks"] = "tor"

    @property
    def url(self) -> str:
        # socks5h so host names resolve on the proxy side
        return f"socks5h://{self.host}:{self.port}"

    @property
    def ssh_proxy_command(self) -> str:
        return f"nc -X 5 -x {self.host}:{self.port} %h %p"

    @classmethod
    def parse(cls, value: str, kind: Literal["tor", "socks"] = "socks") -> "ProxyConfig":
        """Parse HOST:PORT (or just PORT) into a proxy config"""
        host, sep, port = value.rpartition(":")
        if not sep:
            host, port = "127.0.0.1", value
        if not port.isdigit():
            raise ValueError(f"invalid proxy address '{value}'")
        return cls(host=host or "127.0.0.1", port=int(port), kind=kind)


class InvocationContext(BaseModel):
    """Everything the flags decided, fixed for the whole invocation"""

    model_config = {"frozen": True}

    path: Path
    branch: str = DEFAULT_BRANCH
    name: str | None = None
    email: str | None = None
    keys: tuple[Path, ...] = Field(default_factory=tuple)
    proxy: ProxyConfig | None = None

    @property
    def dir_name(self) -> str:
        """Base name of the target directory"""
        return self.path.resolve().name
