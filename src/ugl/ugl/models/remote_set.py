"""Ordered set of remotes for one invocation"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from .descriptor import RemoteDescriptor

log = logging.getLogger(__name__)


class RemoteSet:
    """Remotes in command-line order.

    The first remote has priority: it owns branch tracking when the
    remotes are not aligned. The set is frozen once every check passed;
    alignment is only known from then on.
    """

    def __init__(self) -> None:
        self._remotes: list[RemoteDescriptor] = []
        self._aligned: bool | None = None

    def __iter__(self) -> Iterator[RemoteDescriptor]:
        return iter(self._remotes)

    def __len__(self) -> int:
        return len(self._remotes)

    def __getitem__(self, index: int) -> RemoteDescriptor:
        return self._remotes[index]

    @property
    def next_id(self) -> int:
        return len(self._remotes)

    @property
    def frozen(self) -> bool:
        return self._aligned is not None

    def add(self, remote: RemoteDescriptor) -> RemoteDescriptor:
        if self.frozen:
            raise RuntimeError("cannot add remotes after the set is frozen")
        if remote.id != self.next_id:
            raise ValueError(
                f"remote id {remote.id} does not match its position {self.next_id}"
            )
        self._remotes.append(remote)
        return remote

    @property
    def labels(self) -> list[str]:
        return [r.label for r in self._remotes]

    @property
    def aligned(self) -> bool:
        if self._aligned is None:
            raise RuntimeError("alignment is computed when the set is frozen")
        return self._aligned

    def freeze(self, target_branch: str) -> bool:
        """Make labels unique and compute alignment. Returns alignment."""
        self._dedupe_labels()
        self._aligned = is_aligned(self._remotes, target_branch)
        log.debug(f"Remote set frozen: {len(self)} remote(s), aligned={self._aligned}")
        return self._aligned

    def _dedupe_labels(self) -> None:
        seen: set[str] = set()
        for remote in self._remotes:
            if remote.label in seen:
                unique = f"{remote.label}_{remote.id}"
                log.warning(
                    f"Label '{remote.label}' already used, registering "
                    f"{remote.spec} as '{unique}'"
                )
                remote.label = unique
            seen.add(remote.label)


def is_aligned(remotes: list[RemoteDescriptor] | RemoteSet, target_branch: str) -> bool:
    """True unless some remote tracks a branch other than the target"""
    return all(not r.branch or r.branch == target_branch for r in remotes)
