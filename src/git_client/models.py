"""Data models returned by the git client."""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Remote:
    """A configured git remote.

    Attributes:
        name: Remote name (e.g. "origin", "upstream")
        url: Fetch URL of the remote
    """

    name: str
    url: str


@dataclass
class RepoStatus:
    """Subset of `git status` consumed by the sync engine.

    Attributes:
        branch: Currently checked out branch ("" when detached)
        conflicted: Paths with unmerged entries, relative to the repo root
        modified: Other paths with staged or unstaged changes
    """

    branch: str = ""
    conflicted: List[str] = field(default_factory=list)
    modified: List[str] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicted)
