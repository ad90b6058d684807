"""ugl - Uniform Git Locations: one address syntax for every git remote"""

__version__ = "0.1.0"

from ugl.address import parse_address
from ugl.backends import backend_tags, create_backend, get_capabilities
from ugl.config import UglConfig, build_context, resolve_config_path
from ugl.configurator import RemoteConfigurator, push_all_alias
from ugl.exceptions import UglError
from ugl.local import LocalRepoManager
from ugl.models import InvocationContext, ProxyConfig, RemoteDescriptor, RemoteSet
from ugl.provision import Provisioner

__all__ = [
    "InvocationContext",
    "LocalRepoManager",
    "Provisioner",
    "ProxyConfig",
    "RemoteConfigurator",
    "RemoteDescriptor",
    "RemoteSet",
    "UglConfig",
    "UglError",
    "backend_tags",
    "build_context",
    "create_backend",
    "get_capabilities",
    "parse_address",
    "push_all_alias",
    "resolve_config_path",
]
