"""Address parsing and validation"""

from .parser import (
    BACKEND_TAGS,
    AddressParts,
    join_address,
    parse_address,
    split_address,
    strip_git_suffix,
)
from .validator import (
    AddressValidator,
    check_proxy,
    is_valid_branch,
    validate_branch,
    validate_port,
    validate_user,
)

__all__ = [
    "BACKEND_TAGS",
    "AddressParts",
    "AddressValidator",
    "check_proxy",
    "is_valid_branch",
    "join_address",
    "parse_address",
    "split_address",
    "strip_git_suffix",
    "validate_branch",
    "validate_port",
    "validate_user",
]
