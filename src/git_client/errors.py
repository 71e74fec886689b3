"""Typed exception hierarchy for git client errors.

This module defines the base exception for the whole fork-sync tool and the
errors raised by the git command wrapper. All exceptions carry the context
needed to log a failure without re-running the command.
"""


class SyncError(Exception):
    """Base exception for all fork-sync errors.

    Use this to catch any application-level error from the sync tool.
    """
    pass


class GitRepositoryError(SyncError):
    """Raised when git repository operations fail.

    Attributes:
        repo_path: Path to git repository
        message: Error description
        git_output: Git command output (stderr, falling back to stdout)
    """

    def __init__(self, repo_path: str, message: str, git_output: str = ""):
        full_message = f"Git repository error at {repo_path}: {message}"
        if git_output:
            full_message += f" ({git_output.strip()})"
        super().__init__(full_message)
        self.repo_path = repo_path
        self.message = message
        self.git_output = git_output


class MergeConflictError(GitRepositoryError):
    """Raised when a merge stops because of content conflicts.

    The working copy is left in the merging state; the caller decides
    whether to resolve or abort.
    """

    def __init__(self, repo_path: str, ref: str, git_output: str = ""):
        super().__init__(
            repo_path=repo_path,
            message=f"Merge of {ref} stopped with CONFLICTS",
            git_output=git_output,
        )
        self.ref = ref
