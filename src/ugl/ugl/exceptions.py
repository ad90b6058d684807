"""UGL Exceptions

Every failure is fatal for the whole invocation. Each error carries the raw
address it is about (when there is one) so the CLI can name the failing
remote in its single line of output.
"""

from __future__ import annotations


class UglError(Exception):
    """Base exception for all ugl errors."""

    def __init__(self, message: str, spec: str | None = None, exit_code: int = 1):
        self.message = message
        self.spec = spec
        self.exit_code = exit_code
        super().__init__(message)

    def __str__(self) -> str:
        if self.spec:
            return f"{self.spec}: {self.message}"
        return self.message


class ParseError(UglError):
    """Raised when an address does not follow the UGL grammar."""

    pass


class ValidationError(UglError):
    """Raised when a parsed address fails a syntax or reachability check."""

    pass


class InvalidPortError(ValidationError):
    def __init__(self, port: str, spec: str | None = None):
        self.port = port
        super().__init__(f"invalid port '{port}' (expected 1-65534)", spec)


class InvalidUserError(ValidationError):
    def __init__(self, user: str, spec: str | None = None, reason: str | None = None):
        self.user = user
        super().__init__(reason or f"invalid user name '{user}'", spec)


class InvalidBranchError(ValidationError):
    def __init__(self, branch: str, spec: str | None = None):
        self.branch = branch
        super().__init__(f"invalid branch name '{branch}'", spec)


class InvalidScopeError(ValidationError):
    def __init__(self, scope: str, backend: str, spec: str | None = None):
        self.scope = scope
        self.backend = backend
        super().__init__(f"scope '{scope}' is not supported by {backend}", spec)


class InvalidAddressError(ValidationError):
    """Raised when fields are individually valid but not together."""

    pass


class UnreachableHostError(ValidationError):
    def __init__(self, host: str, port: int, spec: str | None = None, reason: str = ""):
        self.host = host
        self.port = port
        detail = f" ({reason})" if reason else ""
        super().__init__(f"no SSH server reachable at {host}:{port}{detail}", spec)


class UnreachableProxyError(ValidationError):
    pass


class IdentityError(UglError):
    """Raised when a namespace, user or team is unknown or not authorized."""

    pass


class ConflictError(UglError):
    """Raised when existing state blocks provisioning."""

    pass


class NestedRepositoryError(ConflictError):
    def __init__(self, path: str, toplevel: str):
        self.path = path
        self.toplevel = toplevel
        super().__init__(f"{path} is inside the git repository at {toplevel}")


class NotBareError(ConflictError):
    def __init__(self, location: str, spec: str | None = None):
        self.location = location
        super().__init__(f"{location} exists and is not a bare repository", spec)


class TransportError(UglError):
    """Raised when an SSH, HTTP or CLI call itself fails."""

    pass


class MissingToolError(UglError):
    """Raised when a required external program is not installed."""

    def __init__(self, tool: str, spec: str | None = None):
        self.tool = tool
        super().__init__(f"required program '{tool}' was not found in PATH", spec)


class GitCommandError(UglError):
    """Raised when a local git command fails."""

    def __init__(self, args: list[str], output: str, returncode: int):
        self.args_list = args
        self.output = output
        self.returncode = returncode
        super().__init__(
            f"git {' '.join(args)} failed ({returncode}): {output.strip()}"
        )
