"""Remote hosting backends"""

from .base import (
    Backend,
    BackendCapabilities,
    backend_tags,
    create_backend,
    get_backend_class,
    get_capabilities,
    register_backend,
)
from .bitbucket import BitbucketBackend
from .github import GitHubBackend
from .gitlab import GitLabBackend
from .keybase import KeybaseBackend
from .ssh import SSHBackend

__all__ = [
    "Backend",
    "BackendCapabilities",
    "BitbucketBackend",
    "GitHubBackend",
    "GitLabBackend",
    "KeybaseBackend",
    "SSHBackend",
    "backend_tags",
    "create_backend",
    "get_backend_class",
    "get_capabilities",
    "register_backend",
]
