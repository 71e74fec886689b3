"""Parsing of "owner/repo:branch" repository identifiers.

Fork and upstream repositories are configured as a single string. The colon
separates the branch from the owner/repo pair; the owner/repo part must
contain exactly one slash and the whole identifier exactly one colon.
Branch names may themselves contain slashes (e.g. "release/2.x").
"""

import re
from dataclasses import dataclass

from src.config.errors import InvalidRepoIdentifierError

IDENTIFIER_PATTERN = re.compile(r'^([^/:\s]+)/([^/:\s]+):([^:\s]+)$')


@dataclass(frozen=True)
class RepoRef:
    """A repository plus the branch that is synchronized.

    Attributes:
        owner: Account or organization owning the repository
        name: Repository name
        branch: Branch name

    Example:
        >>> ref = parse_repo_identifier("octo/widgets:main")
        >>> ref.full_name
        'octo/widgets'
        >>> str(ref)
        'octo/widgets:main'
    """

    owner: str
    name: str
    branch: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def identifier(self) -> str:
        return f"{self.full_name}:{self.branch}"

    def __str__(self) -> str:
        return self.identifier


def parse_repo_identifier(identifier: str) -> RepoRef:
    """Parse "owner/repo:branch" into a RepoRef.

    Raises:
        InvalidRepoIdentifierError: If the identifier does not match the format
    """
    if not isinstance(identifier, str):
        raise InvalidRepoIdentifierError(repr(identifier))

    match = IDENTIFIER_PATTERN.match(identifier)
    if not match:
        raise InvalidRepoIdentifierError(identifier)

    owner, name, branch = match.groups()
    return RepoRef(owner=owner, name=name, branch=branch)


def is_valid_repo_identifier(identifier: str) -> bool:
    return isinstance(identifier, str) and IDENTIFIER_PATTERN.match(identifier) is not None
