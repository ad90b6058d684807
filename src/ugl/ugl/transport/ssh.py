"""SSH transport: identity files, optional SOCKS wrapper, one-shot commands"""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import NamedTuple

from ugl.exceptions import TransportError
from ugl.models import DEFAULT_PORT, ProxyConfig

log = logging.getLogger(__name__)


class SSHResult(NamedTuple):
    """Exit code and combined stdout/stderr of an ssh invocation"""

    returncode: int
    output: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class SSHClient:
    """Runs ssh with the invocation's identity files and proxy.

    The same argument list, minus the non-interactive options, becomes
    git's ``core.sshCommand`` so later pushes use the same transport.
    """

    def __init__(
        self,
        keys: Sequence[Path] = (),
        proxy: ProxyConfig | None = None,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        self.keys = tuple(keys)
        self.proxy = proxy
        self._runner = runner

    def base_args(self) -> list[str]:
        args = ["ssh"]
        for key in self.keys:
            args.extend(["-i", str(Path(key).expanduser())])
        if self.keys:
            args.extend(["-o", "IdentitiesOnly=yes"])
        if self.proxy is not None:
            args.extend(["-o", f"ProxyCommand={self.proxy.ssh_proxy_command}"])
        return args

    def command_line(self) -> str:
        """Shell string for git's core.sshCommand"""
        return shlex.join(self.base_args())

    def _target_args(self, user: str, host: str, port: int) -> list[str]:
        args = ["-o", "BatchMode=yes"]
        if port != DEFAULT_PORT:
            args.extend(["-p", str(port)])
        args.append(f"{user}@{host}" if user else host)
        return args

    def run(
        self,
        user: str,
        host: str,
        port: int = DEFAULT_PORT,
        command: str | None = None,
    ) -> SSHResult:
        """Run a one-line remote command, or just open a session (-T).

        Returns the exit code and combined output; does not raise on a
        non-zero exit since providers answer `ssh -T` with code 1.

        Raises:
            TransportError: ssh could not be started at all
        """
        args = self.base_args()
        if command is None:
            args.append("-T")
        args.extend(self._target_args(user, host, port))
        if command is not None:
            args.append(command)

        log.debug(f"Running: {shlex.join(args)}")
        try:
            result = self._runner(
                args,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except OSError as e:
            raise TransportError(f"could not run ssh: {e}")
        log.debug(f"ssh exited with {result.returncode}")
        return SSHResult(result.returncode, result.stdout or "")
