"""Remote descriptor model"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

BackendTag = Literal["ssh", "github", "gitlab", "bitbucket", "keybase"]

DEFAULT_PORT = 22


class RemoteDescriptor(BaseModel):
    """One remote, from raw address to final git URL.

    Created by the parser, enriched by validation and by its backend's
    check, then only read by create and configuration.
    """

    id: int
    backend: BackendTag
    spec: str

    # Transport identity (empty for provider-hosted backends)
    host: str = ""
    port: int = DEFAULT_PORT
    user: str = ""

    path: str = ""
    name: str
    scope: str = ""
    branch: str = ""

    label: str
    url: str = ""

    @property
    def checked(self) -> bool:
        """Whether a backend check has finalized url and label"""
        return bool(self.url)

    @property
    def repo_path(self) -> str:
        """path/name joined, without suffix"""
        return f"{self.path}/{self.name}" if self.path else self.name

    def remote_branch(self, target_branch: str) -> str:
        """Branch on the remote side; falls back to the local target branch"""
        return self.branch or target_branch
