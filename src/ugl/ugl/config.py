"""User configuration file (~/.config/ugl/config.yaml)"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from ugl.exceptions import UglError
from ugl.models import DEFAULT_BRANCH, InvocationContext, ProxyConfig
from ugl.models.context import DEFAULT_TOR_PORT

log = logging.getLogger(__name__)

CONFIG_ENV = "UGL_CONFIG"


class UglConfig(BaseModel):
    """Defaults applied when the matching flag is not given"""

    model_config = {"extra": "forbid"}

    name: str | None = None
    email: str | None = None
    keys: list[str] = Field(default_factory=list)
    default_branch: str = DEFAULT_BRANCH
    tor_port: int = DEFAULT_TOR_PORT

    @classmethod
    def load(cls, path: Path | None) -> "UglConfig":
        """Load config from yaml file; a missing file means defaults"""
        if path is None or not path.exists():
            return cls()

        log.debug(f"Loading config from {path}")
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
            return cls.model_validate(data)
        except (yaml.YAMLError, ValueError) as e:
            raise UglError(f"invalid config file {path}: {e}")


def resolve_config_path(explicit: Path | None = None) -> Path:
    """
    Resolve the config file location.

    Priority:
    1. explicit path (--config)
    2. UGL_CONFIG environment variable
    3. $XDG_CONFIG_HOME/ugl/config.yaml (default ~/.config/ugl/config.yaml)
    """
    if explicit is not None:
        return explicit.expanduser()

    env_path = os.environ.get(CONFIG_ENV)
    if env_path:
        return Path(env_path).expanduser()

    base = os.environ.get("XDG_CONFIG_HOME") or "~/.config"
    return Path(base).expanduser() / "ugl" / "config.yaml"


def build_context(
    config: UglConfig,
    path: Path,
    branch: str | None = None,
    name: str | None = None,
    email: str | None = None,
    keys: list[Path] | None = None,
    tor: bool = False,
    socks: str | None = None,
) -> InvocationContext:
    """Merge flags over config defaults into the invocation context"""
    if tor and socks:
        raise UglError("--tor and --socks are mutually exclusive")

    proxy = None
    if tor:
        proxy = ProxyConfig(port=config.tor_port, kind="tor")
    elif socks:
        try:
            proxy = ProxyConfig.parse(socks, kind="socks")
        except ValueError as e:
            raise UglError(str(e))

    return InvocationContext(
        path=path.expanduser().absolute(),
        branch=branch or config.default_branch,
        name=name or config.name,
        email=email or config.email,
        keys=tuple(keys) if keys else tuple(Path(k).expanduser() for k in config.keys),
        proxy=proxy,
    )
