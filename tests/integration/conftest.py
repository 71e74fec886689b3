"""Pytest configuration and fixtures for integration tests.

Provides a sync engine whose remotes point at local bare repositories
instead of the git host, plus a fake conflict resolver.
"""

import shutil
from pathlib import Path
from typing import List, Optional, Sequence

import pytest

from src.config.identifiers import RepoRef
from src.config.models import Account, AppConfig, LLMConfig, RepoPairConfig
from src.conflict_resolver.models import ResolutionResult
from src.sync_engine.engine import SyncEngine
from tests.helpers.git_test_utils import create_upstream_and_fork

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


class LocalRemotesEngine(SyncEngine):
    """SyncEngine whose origin and upstream are local bare repositories."""

    def __init__(self, config: AppConfig, upstream_path: Path, fork_path: Path, **kwargs):
        super().__init__(config, **kwargs)
        self.upstream_path = upstream_path
        self.fork_path = fork_path

    def _fork_url(self, account: Account, fork: RepoRef) -> str:
        return str(self.fork_path)

    def _upstream_url(self, upstream: RepoRef) -> str:
        return str(self.upstream_path)


class FakeResolver:
    """Writes fixed content into every conflicted file and stages it."""

    def __init__(self, content: Optional[str] = "resolved by test\n", error: Optional[str] = None):
        self.content = content
        self.error = error
        self.calls: List[List[str]] = []

    def resolve(self, git, conflicted_paths: Sequence[str], llm_config, log=None) -> ResolutionResult:
        paths = list(conflicted_paths)
        self.calls.append(paths)
        if self.error:
            return ResolutionResult(success=False, error=self.error)

        for path in paths:
            (Path(git.repo_dir) / path).write_text(self.content, encoding="utf-8")
        git.stage_files(paths)
        return ResolutionResult(success=True, resolved_files=paths)


@pytest.fixture
def remotes(tmp_path):
    """Bare upstream and fork repositories sharing one initial commit."""
    return create_upstream_and_fork(
        tmp_path / "remotes",
        {"README.md": "# Widgets\n", "src/app.txt": "line one\nline two\nline three\n"},
    )


@pytest.fixture
def sync_account() -> Account:
    return Account(
        name="acme",
        token="ghp_integration",
        repos=[RepoPairConfig(upstream="octo/widgets:main", fork="acme/widgets:main")],
    )


@pytest.fixture
def sync_config(tmp_path, sync_account) -> AppConfig:
    return AppConfig(
        accounts=[sync_account],
        llm=LLMConfig(api_key="sk-unused"),
        repos_base_dir=str(tmp_path / "repos"),
    )


@pytest.fixture
def make_engine(sync_config, remotes):
    upstream, fork = remotes

    def factory(resolver=None, tester=None) -> LocalRemotesEngine:
        return LocalRemotesEngine(
            sync_config,
            upstream_path=upstream,
            fork_path=fork,
            resolver=resolver or FakeResolver(),
            tester=tester,
        )

    return factory
