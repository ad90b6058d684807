"""Raw TCP probe, optionally tunnelled through SOCKS4a"""

from __future__ import annotations

import logging
import socket

from socksio import socks4

from ugl.exceptions import TransportError
from ugl.models import ProxyConfig

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0


class TcpProbe:
    """Connects to host:port and reads the first bytes the server sends.

    With a proxy the host name is handed to the proxy unresolved
    (SOCKS4a), so .onion addresses work through Tor.
    """

    def __init__(self, proxy: ProxyConfig | None = None, timeout: float = DEFAULT_TIMEOUT):
        self.proxy = proxy
        self.timeout = timeout

    def connect(self, host: str, port: int) -> None:
        """Open and close a plain TCP connection"""
        try:
            with socket.create_connection((host, port), timeout=self.timeout):
                pass
        except OSError as e:
            raise TransportError(f"cannot connect to {host}:{port}: {e}")

    def read(self, host: str, port: int, nbytes: int) -> bytes:
        try:
            if self.proxy is None:
                with socket.create_connection((host, port), timeout=self.timeout) as sock:
                    return _recv_exactly(sock, nbytes)
            with socket.create_connection(
                (self.proxy.host, self.proxy.port), timeout=self.timeout
            ) as sock:
                _socks4a_connect(sock, host, port)
                return _recv_exactly(sock, nbytes)
        except OSError as e:
            raise TransportError(f"cannot read from {host}:{port}: {e}")


def _socks4a_connect(sock: socket.socket, host: str, port: int) -> None:
    conn = socks4.SOCKS4Connection(user_id=b"")
    conn.send(
        socks4.SOCKS4ARequest.from_address(socks4.SOCKS4Command.CONNECT, (host, port))
    )
    sock.sendall(conn.data_to_send())
    reply = conn.receive_data(_recv_exactly(sock, 8))
    if reply.reply_code != socks4.SOCKS4ReplyCode.REQUEST_GRANTED:
        raise TransportError(
            f"proxy refused connection to {host}:{port} ({reply.reply_code.name})"
        )
    log.debug(f"SOCKS4a tunnel to {host}:{port} established")


def _recv_exactly(sock: socket.socket, nbytes: int) -> bytes:
    data = b""
    while len(data) < nbytes:
        chunk = sock.recv(nbytes - len(data))
        if not chunk:
            break
        data += chunk
    return data
