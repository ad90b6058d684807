"""Models"""

from .context import DEFAULT_BRANCH, InvocationContext, ProxyConfig
from .descriptor import DEFAULT_PORT, BackendTag, RemoteDescriptor
from .remote_set import RemoteSet, is_aligned

__all__ = [
    "BackendTag",
    "DEFAULT_BRANCH",
    "DEFAULT_PORT",
    "InvocationContext",
    "ProxyConfig",
    "RemoteDescriptor",
    "RemoteSet",
    "is_aligned",
]
