"""Git command wrapper for fork working copies.

This module provides the GitClient class used by the sync engine to drive a
local working copy of a fork. Every operation shells out to the git binary
through subprocess with a bounded timeout, so a hung remote can never stall
a batch run. Failures are translated to GitRepositoryError (or the
MergeConflictError subclass when a merge stops on content conflicts).
"""

import logging
import os
import subprocess
from typing import List, Optional, Sequence, Union

from src.git_client.credentials import sanitize_credentials
from src.git_client.errors import GitRepositoryError, MergeConflictError
from src.git_client.models import Remote, RepoStatus

logger = logging.getLogger(__name__)

# Local git command timeout in seconds
GIT_TIMEOUT = 60

# Timeout for commands that talk to a remote (clone, fetch, push)
NETWORK_TIMEOUT = 600

# Porcelain v1 XY codes for unmerged paths
UNMERGED_CODES = {"DD", "AU", "UD", "UA", "DU", "AA", "UU"}

DEFAULT_USER_NAME = "fork-sync"
DEFAULT_USER_EMAIL = "fork-sync@localhost"

LoggerLike = Union[logging.Logger, logging.LoggerAdapter]


class GitClient:
    """Runs git commands against a single working copy.

    The client is bound to one directory for its whole lifetime. The
    directory does not need to exist until clone() is called.

    Example:
        >>> git = GitClient("/srv/repos/acme-octo-widgets")
        >>> if not git.exists():
        ...     git.clone("https://token@github.com/octo/widgets.git")
        >>> git.checkout("main")
        >>> git.merge_branches("upstream/main")
    """

    def __init__(
        self,
        repo_dir: str,
        logger: Optional[LoggerLike] = None,
        timeout: int = GIT_TIMEOUT,
        network_timeout: int = NETWORK_TIMEOUT,
        user_name: str = DEFAULT_USER_NAME,
        user_email: str = DEFAULT_USER_EMAIL,
    ):
        """Initialize git client.

        Args:
            repo_dir: Path to the working copy (made absolute)
            logger: Logger to report operations to (defaults to module logger)
            timeout: Timeout for local commands in seconds
            network_timeout: Timeout for clone/fetch/push in seconds
            user_name: Committer name used for merge and commit
            user_email: Committer email used for merge and commit
        """
        self.repo_dir = os.path.abspath(repo_dir)
        self.logger = logger or logging.getLogger(__name__)
        self.timeout = timeout
        self.network_timeout = network_timeout
        self.user_name = user_name
        self.user_email = user_email

    def _identity_args(self) -> List[str]:
        return [
            "-c", f"user.name={self.user_name}",
            "-c", f"user.email={self.user_email}",
        ]

    def _run(
        self,
        args: Sequence[str],
        timeout: Optional[int] = None,
        cwd: Optional[str] = None,
        check: bool = True,
        action: str = "",
    ) -> subprocess.CompletedProcess:
        """Run a git command.

        Args:
            args: Arguments after the `git` executable
            timeout: Timeout in seconds (defaults to the local timeout)
            cwd: Working directory (defaults to the repository)
            check: Raise GitRepositoryError on a non-zero exit code
            action: Short description used in error messages

        Returns:
            The completed process

        Raises:
            GitRepositoryError: On timeout, missing git binary, or failure when check=True
        """
        timeout = timeout or self.timeout
        command = ["git", *args]
        action = action or f"git {args[0]}"

        try:
            result = subprocess.run(
                command,
                cwd=cwd or self.repo_dir,
                capture_output=True,
                encoding='utf-8',
                errors='surrogateescape',
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            raise GitRepositoryError(
                repo_path=self.repo_dir,
                message=f"{action} timed out after {timeout} seconds",
            )
        except FileNotFoundError:
            raise GitRepositoryError(
                repo_path=self.repo_dir,
                message="Git command not found. Please install git.",
            )

        if check and result.returncode != 0:
            raise GitRepositoryError(
                repo_path=self.repo_dir,
                message=f"{action} failed",
                git_output=sanitize_credentials(result.stderr or result.stdout),
            )

        return result

    def exists(self) -> bool:
        """Check whether the directory is the top level of a git working copy.

        A directory nested inside some other repository does not count.
        """
        if not os.path.isdir(self.repo_dir):
            return False

        result = self._run(["rev-parse", "--show-toplevel"], check=False)
        if result.returncode != 0:
            return False

        toplevel = os.path.realpath(result.stdout.strip())
        return toplevel == os.path.realpath(self.repo_dir)

    def clone(self, url: str) -> None:
        """Clone a repository into the client's directory.

        Args:
            url: Remote URL (may carry a token)
        """
        parent_dir = os.path.dirname(self.repo_dir)
        try:
            os.makedirs(parent_dir, exist_ok=True)
        except OSError as e:
            raise GitRepositoryError(
                repo_path=self.repo_dir,
                message=f"Failed to create directory {parent_dir}: {e}",
            )

        self.logger.info(f"Cloning {sanitize_credentials(url)} into {self.repo_dir}")
        self._run(
            ["clone", url, self.repo_dir],
            cwd=parent_dir,
            timeout=self.network_timeout,
            action="git clone",
        )
        self.logger.info("Repository cloned successfully")

    def list_remotes(self) -> List[Remote]:
        """List configured remotes with their fetch URLs."""
        result = self._run(["remote", "-v"])

        remotes = []
        seen = set()
        for line in result.stdout.splitlines():
            parts = line.split()
            if len(parts) < 2 or parts[0] in seen:
                continue
            if len(parts) >= 3 and parts[2] != "(fetch)":
                continue
            seen.add(parts[0])
            remotes.append(Remote(name=parts[0], url=parts[1]))

        return remotes

    def add_remote(self, name: str, url: str) -> None:
        self._run(["remote", "add", name, url], action=f"git remote add {name}")
        self.logger.info(f"Added remote {name} -> {sanitize_credentials(url)}")

    def set_remote_url(self, name: str, url: str) -> None:
        self._run(["remote", "set-url", name, url], action=f"git remote set-url {name}")
        self.logger.debug(f"Set remote {name} -> {sanitize_credentials(url)}")

    def fetch(self, args: Sequence[str] = ()) -> None:
        """Fetch from remotes.

        Args:
            args: Extra fetch arguments, e.g. ["--all"] or ["upstream"]
        """
        self._run(["fetch", *args], timeout=self.network_timeout, action="git fetch")
        self.logger.info(f"Fetch completed {' '.join(args)}".rstrip())

    def checkout(self, branch: str) -> None:
        """Check out a branch, creating it when git does not know it.

        Git's own remote-tracking guess applies first, so a branch that only
        exists on origin is created tracking origin/<branch>.
        """
        result = self._run(["checkout", branch], check=False)
        if result.returncode == 0:
            self.logger.debug(f"Checked out branch: {branch}")
            return

        stderr = result.stderr or ""
        if "did not match any file(s) known to git" not in stderr:
            raise GitRepositoryError(
                repo_path=self.repo_dir,
                message=f"git checkout {branch} failed",
                git_output=sanitize_credentials(stderr),
            )

        self.logger.info(f"Branch {branch} does not exist, creating it")
        self._run(["checkout", "-b", branch], action=f"git checkout -b {branch}")

    def set_tracking_branch(self, remote_ref: str) -> None:
        """Bind the current branch to a remote-tracking reference."""
        self._run(
            ["branch", f"--set-upstream-to={remote_ref}"],
            action=f"git branch --set-upstream-to={remote_ref}",
        )

    def merge_branches(self, ref: str) -> None:
        """Merge a reference into the checked out branch.

        Raises:
            MergeConflictError: If the merge stopped on content conflicts
            GitRepositoryError: For any other merge failure
        """
        result = self._run(
            [*self._identity_args(), "merge", "--no-edit", ref],
            check=False,
        )
        if result.returncode == 0:
            self.logger.info(f"Merge completed: {ref}")
            return

        output = sanitize_credentials(f"{result.stdout}\n{result.stderr}".strip())
        if "CONFLICT (" in result.stdout or "Automatic merge failed" in output:
            raise MergeConflictError(repo_path=self.repo_dir, ref=ref, git_output=output)

        raise GitRepositoryError(
            repo_path=self.repo_dir,
            message=f"git merge {ref} failed",
            git_output=output,
        )

    def abort_merge(self) -> None:
        self._run(["merge", "--abort"], action="git merge --abort")
        self.logger.info("Merge aborted")

    def status(self) -> RepoStatus:
        """Read branch and changed paths from `git status --porcelain -z`."""
        result = self._run(["status", "--porcelain=v1", "-b", "-z"])

        status = RepoStatus()
        entries = result.stdout.split("\0")
        index = 0
        while index < len(entries):
            entry = entries[index]
            index += 1
            if not entry:
                continue

            if entry.startswith("## "):
                branch = entry[3:].split("...", 1)[0]
                status.branch = "" if branch.startswith("HEAD ") else branch
                continue

            code, path = entry[:2], entry[3:]
            if code[0] in ("R", "C"):
                # Rename and copy entries are followed by the source path
                index += 1

            if code in UNMERGED_CODES:
                status.conflicted.append(path)
            elif code != "??":
                status.modified.append(path)

        return status

    def stage_files(self, paths: Sequence[str]) -> None:
        if not paths:
            return
        self._run(["add", "--", *paths], action="git add")
        self.logger.debug(f"Staged files: {', '.join(paths)}")

    def commit(self, message: str) -> None:
        self._run(
            [*self._identity_args(), "commit", "-m", message],
            action="git commit",
        )
        self.logger.info(f"Committed changes: {message}")

    def push(self, remote: str, branch: str) -> None:
        self._run(
            ["push", remote, branch],
            timeout=self.network_timeout,
            action=f"git push {remote} {branch}",
        )
        self.logger.info(f"Pushed {branch} to {remote}")

    def list_new_commits(self, range_expr: str) -> str:
        """Return raw `git rev-list` output for a range such as `a..b`."""
        result = self._run(["rev-list", range_expr], action="git rev-list")
        return result.stdout

    def head_revision(self) -> str:
        result = self._run(["rev-parse", "HEAD"], action="git rev-parse HEAD")
        return result.stdout.strip()

    def hard_reset(self, revision: str) -> None:
        self._run(["reset", "--hard", revision], action=f"git reset --hard {revision}")
        self.logger.info(f"Reset working copy to {revision}")

    def read_file_at(self, revision: str, path: str) -> str:
        """Return the content of a file at a revision (e.g. HEAD, MERGE_HEAD)."""
        result = self._run(
            ["show", f"{revision}:{path}"],
            action=f"git show {revision}:{path}",
        )
        return result.stdout
