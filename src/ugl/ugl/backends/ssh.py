"""Plain SSH backend: a bare repository on any host we can log into"""

from __future__ import annotations

import logging
import shlex
from contextlib import ExitStack
from pathlib import Path
from typing import ClassVar, Literal

from jinja2 import Environment, FileSystemLoader

from ugl.exceptions import (
    IdentityError,
    InvalidAddressError,
    InvalidUserError,
    NotBareError,
    TransportError,
)
from ugl.models import DEFAULT_PORT, RemoteDescriptor

from .base import Backend, BackendCapabilities, register_backend

log = logging.getLogger(__name__)

NOT_BARE_EXIT_CODE = 3
EXISTS_MARKER = "UGL_EXISTS"
CREATED_MARKER = "UGL_CREATED"
NOT_BARE_MARKER = "UGL_NOT_BARE"

_TEMPLATES_DIR = Path(__file__).parent.parent / "templates"


def _template_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def shell_path(path: str) -> str:
    """Quote a remote path, keeping a leading ~/ expandable"""
    if path == "~":
        return '"$HOME"'
    if path.startswith("~/"):
        return '"$HOME"/' + shlex.quote(path[2:])
    return shlex.quote(path)


def render_ensure_bare_script(repo: str) -> str:
    """POSIX script: init a bare repo at `repo` unless one is already there"""
    tmpl = _template_env().get_template("ensure_bare.sh.j2")
    return tmpl.render(
        repo_expr=shell_path(repo),
        exists_marker=EXISTS_MARKER,
        created_marker=CREATED_MARKER,
        not_bare_marker=NOT_BARE_MARKER,
        not_bare_code=NOT_BARE_EXIT_CODE,
    )


@register_backend
class SSHBackend(Backend):
    """Bare repositories on an SSH host.

    Relative paths live under the remote user's home and use the scp-like
    URL. Another port needs the ssh:// URL, which only takes absolute
    paths, so that combination is refused.
    """

    tag: ClassVar[Literal["ssh"]]
    label_prefix = "ssh"
    capabilities = BackendCapabilities(scopes=None)

    def check(self, remote: RemoteDescriptor) -> RemoteDescriptor:
        if not remote.host:
            raise InvalidAddressError("ssh addresses need a host", remote.spec)
        if not remote.user:
            raise InvalidUserError(
                "", remote.spec, reason="ssh addresses need a user (user@host:...)"
            )
        self.check_scope(remote)

        absolute = remote.path.startswith("/")
        if remote.port != DEFAULT_PORT and not absolute:
            raise InvalidAddressError(
                f"port {remote.port} needs an absolute path (ssh:// URLs have no home-relative form)",
                remote.spec,
            )

        remote.url = self.scp_url(remote.user, remote.host, remote.port, remote.repo_path)
        remote.label = self.make_label(remote.host, remote)

        result = self.transports.ssh.run(remote.user, remote.host, remote.port, "true")
        if not result.ok:
            raise IdentityError(
                f"key-based SSH login as {remote.user}@{remote.host} failed: "
                f"{result.output.strip() or f'exit code {result.returncode}'}",
                remote.spec,
            )
        log.info(f"Checked {remote.spec} -> {remote.url}")
        return remote

    def create(self, remote: RemoteDescriptor, resources: ExitStack) -> None:
        repo = f"{remote.repo_path}.git"
        script = render_ensure_bare_script(repo)
        result = self.transports.ssh.run(
            remote.user, remote.host, remote.port, f"sh -c {shlex.quote(script)}"
        )

        if result.returncode == NOT_BARE_EXIT_CODE or NOT_BARE_MARKER in result.output:
            raise NotBareError(f"{remote.host}:{repo}", remote.spec)
        if not result.ok:
            raise TransportError(
                f"creating {repo} on {remote.host} failed: {result.output.strip()}",
                remote.spec,
            )

        if CREATED_MARKER in result.output:
            log.info(f"Created bare repository {remote.host}:{repo}")
        else:
            log.info(f"Bare repository {remote.host}:{repo} already exists")
