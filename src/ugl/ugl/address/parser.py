"""Uniform Git Location parser

Grammar (every part optional except the name):

    [user@]host[:port]:path/name[%scope][@branch]

Each delimiter splits on its rightmost occurrence, in this order:

1. last ``:`` separates ``user@host[:port]`` from the rest
2. in the transport part, the last ``:`` introduces the port,
   the last ``@`` separates user from host
3. last ``@`` of the rest separates the branch
4. last ``/`` separates the namespace path from ``name[%scope]``
5. last ``%`` separates the scope; an empty scope means ``public``
6. ``.git`` is stripped from the name until none is left

Parsing is backend-agnostic; backends interpret the fields in their check.
"""

from __future__ import annotations

from typing import NamedTuple, get_args

from ugl.exceptions import ParseError
from ugl.models import DEFAULT_PORT, BackendTag, RemoteDescriptor

from .validator import validate_port

BACKEND_TAGS: tuple[str, ...] = get_args(BackendTag)

GIT_SUFFIX = ".git"


class AddressParts(NamedTuple):
    """Raw fields of an address, before any validation"""

    user: str
    host: str
    port: str
    path: str
    name: str
    scope: str
    branch: str


def strip_git_suffix(name: str) -> str:
    while name.endswith(GIT_SUFFIX):
        name = name[: -len(GIT_SUFFIX)]
    return name


def split_address(address: str) -> AddressParts:
    """Split an address into raw fields (pure string work)"""
    user = host = ""
    port = str(DEFAULT_PORT)

    if ":" in address:
        user_host_port, _, rest = address.rpartition(":")
        if ":" in user_host_port:
            user_host_port, _, port = user_host_port.rpartition(":")
        if "@" in user_host_port:
            user, _, host = user_host_port.rpartition("@")
        else:
            host = user_host_port
    else:
        rest = address

    branch = ""
    if "@" in rest:
        rest, _, branch = rest.rpartition("@")

    path, _, name_scope = rest.rpartition("/")

    scope = ""
    name = name_scope
    if "%" in name_scope:
        name, _, scope = name_scope.rpartition("%")
        scope = scope or "public"

    return AddressParts(
        user=user,
        host=host,
        port=port,
        path=path,
        name=strip_git_suffix(name),
        scope=scope,
        branch=branch,
    )


def join_address(
    *,
    name: str,
    path: str = "",
    user: str = "",
    host: str = "",
    port: int | str | None = None,
    scope: str = "",
    branch: str = "",
) -> str:
    """Inverse of split_address for well-formed fields"""
    address = f"{path}/{name}" if path else name
    if scope:
        address += f"%{scope}"
    if branch:
        address += f"@{branch}"
    if host or user or port is not None:
        transport = f"{user}@{host}" if user else host
        if port is not None:
            transport += f":{port}"
        address = f"{transport}:{address}"
    return address


def parse_address(backend: str, address: str, index: int = 0) -> RemoteDescriptor:
    """Parse one address into a descriptor with a provisional label.

    Args:
        backend: Backend tag the address was given for
        address: Raw address string
        index: Position the descriptor will take in its remote set

    Raises:
        ParseError: Unknown backend, empty address or missing name
        InvalidPortError: Port is not a valid integer port
    """
    if backend not in BACKEND_TAGS:
        raise ParseError(f"unknown backend '{backend}'", address)
    if not address or not address.strip():
        raise ParseError(f"empty {backend} address", address)
    if address != address.strip():
        raise ParseError("address must not contain surrounding whitespace", address)

    parts = split_address(address)
    if not parts.name:
        raise ParseError("missing repository name", address)

    return RemoteDescriptor(
        id=index,
        backend=backend,
        spec=address,
        host=parts.host,
        port=validate_port(parts.port, address),
        user=parts.user,
        path=parts.path,
        name=parts.name,
        scope=parts.scope,
        branch=parts.branch,
        label=f"upstream{index}",
    )
