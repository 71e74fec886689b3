"""Git test utilities for unit and integration tests.

Unit tests mock subprocess.run and use completed() plus
get_git_command_calls() to build and inspect git invocations. Integration
tests build real local repositories: a bare "upstream", a bare "fork"
cloned from it, and scratch clones used to push commits to either side.

Usage:
    from tests.helpers.git_test_utils import create_upstream_and_fork

    upstream, fork = create_upstream_and_fork(tmp_path, {"README.md": "hello\n"})
"""

import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


def completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess:
    """Build a CompletedProcess as returned by a mocked subprocess.run."""
    return subprocess.CompletedProcess(args=["git"], returncode=returncode, stdout=stdout, stderr=stderr)


def get_git_command_calls(mock_run: Any, command: str) -> List[Any]:
    """Extract all calls to a specific git subcommand from a subprocess.run mock.

    Global options such as `-c user.name=...` before the subcommand are skipped.

    Example:
        >>> commit_calls = get_git_command_calls(mock_run, "commit")
        >>> assert len(commit_calls) == 1
    """
    matching_calls = []
    for call_args in mock_run.call_args_list:
        args, _ = call_args
        if not args:
            continue
        argv = list(args[0])[1:]
        while len(argv) >= 2 and argv[0] == "-c":
            argv = argv[2:]
        if argv and argv[0] == command:
            matching_calls.append(call_args)
    return matching_calls


def git(repo_path: Path, *args: str) -> str:
    """Run a git command in repo_path and return its stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=repo_path,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


def configure_identity(repo_path: Path) -> None:
    git(repo_path, "config", "user.name", "Test User")
    git(repo_path, "config", "user.email", "test@example.com")


def create_bare_repo(path: Path, branch: str = "main") -> Path:
    path.mkdir(parents=True, exist_ok=True)
    git(path, "init", "--bare", "--quiet")
    git(path, "symbolic-ref", "HEAD", f"refs/heads/{branch}")
    return path


def clone_repo(source: Path, dest: Path) -> Path:
    subprocess.run(
        ["git", "clone", "--quiet", str(source), str(dest)],
        check=True,
        capture_output=True,
        text=True,
    )
    configure_identity(dest)
    return dest


def commit_file(repo_path: Path, filename: str, content: str, message: str) -> str:
    """Write a file, commit it and return the commit SHA."""
    file_path = repo_path / filename
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(content, encoding="utf-8")
    git(repo_path, "add", filename)
    git(repo_path, "commit", "--quiet", "-m", message)
    return git(repo_path, "rev-parse", "HEAD")


def create_upstream_and_fork(
    root: Path,
    files: Dict[str, str],
    branch: str = "main",
) -> Tuple[Path, Path]:
    """Create a bare upstream seeded with files and a bare fork cloned from it.

    Returns:
        (upstream_bare_path, fork_bare_path)
    """
    upstream = create_bare_repo(root / "upstream.git", branch)

    seed = root / "seed"
    seed.mkdir(parents=True)
    git(seed, "init", "--quiet")
    git(seed, "symbolic-ref", "HEAD", f"refs/heads/{branch}")
    configure_identity(seed)
    for filename, content in files.items():
        commit_file(seed, filename, content, f"Add {filename}")
    git(seed, "push", "--quiet", str(upstream), branch)

    fork = root / "fork.git"
    subprocess.run(
        ["git", "clone", "--quiet", "--bare", str(upstream), str(fork)],
        check=True,
        capture_output=True,
        text=True,
    )
    return upstream, fork


def push_commit(
    bare_repo: Path,
    scratch_dir: Path,
    filename: str,
    content: str,
    message: str,
    branch: str = "main",
) -> str:
    """Commit a file change to a bare repository through a scratch clone."""
    if not scratch_dir.exists():
        clone_repo(bare_repo, scratch_dir)
    else:
        git(scratch_dir, "pull", "--quiet", "--no-rebase", "origin", branch)
    sha = commit_file(scratch_dir, filename, content, message)
    git(scratch_dir, "push", "--quiet", "origin", branch)
    return sha


def get_commit_sha(repo_path: Path, ref: str = "HEAD") -> str:
    return git(repo_path, "rev-parse", ref)


def get_file_at_commit(repo_path: Path, ref: str, filename: str) -> Optional[str]:
    """Return a file's content at ref, or None when it does not exist there."""
    result = subprocess.run(
        ["git", "show", f"{ref}:{filename}"],
        cwd=repo_path,
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        return None
    return result.stdout


def count_commits(repo_path: Path, ref: str = "HEAD") -> int:
    return int(git(repo_path, "rev-list", "--count", ref))
