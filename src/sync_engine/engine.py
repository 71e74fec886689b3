"""Per-repository sync state machine.

SyncEngine.sync() takes one fork/upstream pair through:

    Init -> CheckDrift -> NoChange
                       -> Merging -> Merged
                                  -> ConflictDetected -> Resolved -> Merged
                                                      -> Unresolved -> RolledBack

Any unexpected failure ends in an error outcome. The engine never raises;
every path returns a SyncOutcome.
"""

import hashlib
import logging
import os
import re
from typing import Callable, List, Optional

from src.config.errors import InvalidRepoIdentifierError
from src.config.identifiers import RepoRef, parse_repo_identifier
from src.config.models import Account, AppConfig, RepoPairConfig
from src.conflict_resolver.models import ResolutionResult
from src.conflict_resolver.resolver import ConflictResolver
from src.git_client.credentials import (
    build_fork_url,
    build_upstream_url,
    sanitize_credentials,
)
from src.git_client.errors import GitRepositoryError, MergeConflictError, SyncError
from src.git_client.git_client import GitClient
from src.tester.errors import TestExecutionError
from src.tester.tester import ProjectTester
from .context_logger import RepoLogger
from .errors import (
    CleanMergeFailure,
    ConflictDiscoveryFailure,
    ConflictResolutionFailure,
    DriftCheckError,
    InitializationError,
    PushFailure,
    RollbackFailure,
)
from .models import SyncOutcome, SyncStatus, TestsStatus

logger = logging.getLogger(__name__)

ORIGIN_REMOTE = "origin"
UPSTREAM_REMOTE = "upstream"

INIT_FAILED_MESSAGE = "Failed to initialize repository"
NO_CHANGES_MESSAGE = "No upstream changes to sync"
MERGED_MESSAGE = "Successfully merged and pushed upstream changes"
UNRESOLVED_MESSAGE = "Merge aborted due to unresolvable conflicts"

UNSAFE_DIR_CHARS = re.compile(r'[^A-Za-z0-9_.-]')
DIR_DIGEST_LENGTH = 8


def working_dir_name(account: str, owner: str, name: str) -> str:
    """Directory name for one (account, owner, repo) working copy.

    The readable prefix is lossy, so a digest of the raw triple keeps
    distinct triples in distinct directories.

    Example:
        >>> working_dir_name("acme", "acme", "widgets")
        'acme-acme-widgets-e93bd792'
    """
    parts = [UNSAFE_DIR_CHARS.sub('_', part).lstrip('.') or '_' for part in (account, owner, name)]
    digest = hashlib.sha1('\0'.join((account, owner, name)).encode('utf-8')).hexdigest()[:DIR_DIGEST_LENGTH]
    return '-'.join(parts + [digest])


class SyncEngine:
    """Syncs one fork branch with its upstream branch.

    Example:
        >>> engine = SyncEngine(config)
        >>> outcome = engine.sync(account, RepoPairConfig(
        ...     upstream="octo/widgets:main", fork="acme/widgets:main"))
        >>> outcome.status
        <SyncStatus.SYNCED: 'synced'>
    """

    def __init__(
        self,
        config: AppConfig,
        resolver: Optional[ConflictResolver] = None,
        tester: Optional[ProjectTester] = None,
        git_factory: Callable[..., GitClient] = GitClient,
    ):
        """Initialize sync engine.

        Args:
            config: Application configuration
            resolver: Conflict resolver (LLM-backed ConflictResolver by default)
            tester: Post-merge test runner (ProjectTester with the configured command by default)
            git_factory: Builds a git client for a working directory
        """
        self.config = config
        self.resolver = resolver or ConflictResolver()
        self.tester = tester or ProjectTester(test_command=config.test_command)
        self._git_factory = git_factory

    def working_dir(self, account: Account, fork: RepoRef) -> str:
        base_dir = os.path.abspath(self.config.repos_base_dir)
        return os.path.join(base_dir, working_dir_name(account.name, fork.owner, fork.name))

    def _fork_url(self, account: Account, fork: RepoRef) -> str:
        return build_fork_url(fork.owner, fork.name, account.token, self.config.git_host)

    def _upstream_url(self, upstream: RepoRef) -> str:
        return build_upstream_url(upstream.owner, upstream.name, self.config.git_host)

    def sync(self, account: Account, pair: RepoPairConfig) -> SyncOutcome:
        """Run the full state machine for one repository pair.

        Args:
            account: Account owning the fork
            pair: Fork and upstream identifiers

        Returns:
            The terminal SyncOutcome
        """
        try:
            upstream = parse_repo_identifier(pair.upstream)
            fork = parse_repo_identifier(pair.fork)
        except InvalidRepoIdentifierError as e:
            logger.error(f"[{account.name}] {pair.fork}: {e}")
            return SyncOutcome(
                repository=pair.fork,
                account=account.name,
                success=False,
                status=SyncStatus.ERROR,
                error=str(e),
            )

        log = RepoLogger(logger, account.name, fork.full_name)
        log.info(f"Starting sync process ({upstream} -> {fork})")

        working_dir = self.working_dir(account, fork)
        git = self._git_factory(
            working_dir,
            logger=log,
            user_name=self.config.git_user_name,
            user_email=self.config.git_user_email,
        )

        try:
            outcome = self._run(git, account, upstream, fork, log)
        except SyncError as e:
            log.error(f"Sync process failed: {e}")
            outcome = self._failure(account, fork, e)
        except Exception as e:
            log.exception(f"Unexpected error during sync: {e}")
            outcome = self._failure(account, fork, e)

        if self.config.run_tests_after_merge and outcome.success and outcome.status is SyncStatus.SYNCED:
            outcome = outcome.with_tests_status(self._run_tests(working_dir, log))

        log.info(f"Sync finished with status {outcome.status.value}")
        return outcome

    def _run(
        self,
        git: GitClient,
        account: Account,
        upstream: RepoRef,
        fork: RepoRef,
        log: RepoLogger,
    ) -> SyncOutcome:
        if not self._initialize(git, account, upstream, fork, log):
            return self._outcome(
                account, fork,
                status=SyncStatus.ERROR,
                message=INIT_FAILED_MESSAGE,
                error=INIT_FAILED_MESSAGE,
            )

        if not self._has_upstream_changes(git, upstream, fork, log):
            log.info(NO_CHANGES_MESSAGE)
            return self._outcome(account, fork, status=SyncStatus.SKIPPED, message=NO_CHANGES_MESSAGE)

        return self._merge(git, account, upstream, fork, log)

    def _initialize(
        self,
        git: GitClient,
        account: Account,
        upstream: RepoRef,
        fork: RepoRef,
        log: RepoLogger,
    ) -> bool:
        """Clone or refresh the working copy and check out the fork branch.

        Returns:
            False when any required step failed (never raises)
        """
        try:
            fork_url = self._fork_url(account, fork)
            if not git.exists():
                log.info(f"Cloning repository {fork.full_name}")
                git.clone(fork_url)
            else:
                log.info("Repository already exists locally")
                git.set_remote_url(ORIGIN_REMOTE, fork_url)

            self._ensure_upstream_remote(git, upstream, log)

            log.info("Fetching from remotes")
            git.fetch(["--all"])
            git.checkout(fork.branch)
        except (GitRepositoryError, OSError) as e:
            error = InitializationError(fork.full_name, sanitize_credentials(str(e)))
            log.error(str(error))
            return False

        try:
            git.set_tracking_branch(f"{ORIGIN_REMOTE}/{fork.branch}")
        except GitRepositoryError as e:
            log.warning(f"Could not set tracking branch {ORIGIN_REMOTE}/{fork.branch}: {e}")

        return True

    def _ensure_upstream_remote(self, git: GitClient, upstream: RepoRef, log: RepoLogger) -> None:
        expected_url = self._upstream_url(upstream)
        remotes = {remote.name: remote.url for remote in git.list_remotes()}

        if UPSTREAM_REMOTE not in remotes:
            log.info("Adding upstream remote")
            git.add_remote(UPSTREAM_REMOTE, expected_url)
            return

        if remotes[UPSTREAM_REMOTE] != expected_url:
            log.info(f"Updating upstream remote URL to {expected_url}")
            try:
                git.set_remote_url(UPSTREAM_REMOTE, expected_url)
            except GitRepositoryError as e:
                log.warning(f"Could not update upstream remote URL: {e}")

    def _has_upstream_changes(
        self,
        git: GitClient,
        upstream: RepoRef,
        fork: RepoRef,
        log: RepoLogger,
    ) -> bool:
        """Check for upstream commits not yet reachable from the fork branch.

        Raises:
            DriftCheckError: If checkout, fetch or rev-list fails
        """
        try:
            git.checkout(fork.branch)
            git.fetch([UPSTREAM_REMOTE])
            log.info(f"Checking for changes in {UPSTREAM_REMOTE}/{upstream.branch}")
            rev_list = git.list_new_commits(f"{fork.branch}..{UPSTREAM_REMOTE}/{upstream.branch}")
        except GitRepositoryError as e:
            raise DriftCheckError(str(e))

        new_commits = rev_list.split()
        if new_commits:
            log.info(f"Found {len(new_commits)} new upstream commit(s)")
        return bool(new_commits)

    def _merge(
        self,
        git: GitClient,
        account: Account,
        upstream: RepoRef,
        fork: RepoRef,
        log: RepoLogger,
    ) -> SyncOutcome:
        """Merge upstream into the fork branch and push.

        Raises:
            CleanMergeFailure: If the merge failed for a non-conflict reason
            PushFailure: If the merged branch could not be pushed
            RollbackFailure: If a failed push could not be rewound
        """
        try:
            anchor = git.head_revision()
        except GitRepositoryError as e:
            raise CleanMergeFailure(f"could not record HEAD before merging: {e}")

        merge_ref = f"{UPSTREAM_REMOTE}/{upstream.branch}"
        log.info(f"Current HEAD: {anchor}, attempting merge of {merge_ref}")

        try:
            git.merge_branches(merge_ref)
        except MergeConflictError:
            return self._handle_conflicts(git, account, upstream, fork, anchor, log)
        except GitRepositoryError as e:
            raise CleanMergeFailure(str(e))

        log.info("Merge completed successfully without conflicts")
        self._push(git, fork, anchor, log)
        return self._outcome(account, fork, status=SyncStatus.SYNCED, message=MERGED_MESSAGE)

    def _handle_conflicts(
        self,
        git: GitClient,
        account: Account,
        upstream: RepoRef,
        fork: RepoRef,
        anchor: str,
        log: RepoLogger,
    ) -> SyncOutcome:
        log.info("Merge conflicts detected")

        try:
            return self._resolve_conflicts(git, account, upstream, fork, anchor, log)
        except Exception as e:
            log.exception(f"Unexpected error while handling conflicts: {e}")
            try:
                self._rollback(git, anchor, str(e), log)
            except RollbackFailure as rollback_error:
                log.error(str(rollback_error))
                return self._failure(account, fork, rollback_error, had_conflicts=True)
            return self._failure(account, fork, e, had_conflicts=True)

    def _resolve_conflicts(
        self,
        git: GitClient,
        account: Account,
        upstream: RepoRef,
        fork: RepoRef,
        anchor: str,
        log: RepoLogger,
    ) -> SyncOutcome:
        try:
            conflicted = self._conflicted_paths(git, anchor, log)
        except (ConflictDiscoveryFailure, RollbackFailure) as e:
            log.error(str(e))
            return self._failure(account, fork, e, had_conflicts=True)

        log.info(f"Attempting to resolve {len(conflicted)} conflicted file(s) using LLM")
        try:
            result = self.resolver.resolve(git, conflicted, self.config.llm, log)
        except Exception as e:
            log.exception(f"Conflict resolver raised: {e}")
            result = ResolutionResult(success=False, error=str(e))

        if not result.success:
            failure = ConflictResolutionFailure(result.error or "unknown resolver error")
            log.error(str(failure))
            try:
                self._rollback(git, anchor, str(failure), log)
            except RollbackFailure as e:
                log.error(str(e))
                return self._failure(
                    account, fork, e,
                    had_conflicts=True,
                    used_resolver=True,
                    message=UNRESOLVED_MESSAGE,
                )
            return self._failure(
                account, fork, failure,
                had_conflicts=True,
                used_resolver=True,
                message=UNRESOLVED_MESSAGE,
            )

        log.info("Conflicts resolved successfully by LLM")
        try:
            git.commit(self._resolution_commit_message(upstream))
        except GitRepositoryError as e:
            cause = f"Failed to commit resolved conflicts: {e}"
            log.error(cause)
            try:
                self._rollback(git, anchor, cause, log)
            except RollbackFailure as rollback_error:
                return self._failure(account, fork, rollback_error, had_conflicts=True, used_resolver=True)
            return self._failure(account, fork, cause, had_conflicts=True, used_resolver=True)

        try:
            self._push(git, fork, anchor, log)
        except (PushFailure, RollbackFailure) as e:
            return self._failure(account, fork, e, had_conflicts=True, used_resolver=True)

        return self._outcome(
            account, fork,
            status=SyncStatus.SYNCED,
            had_conflicts=True,
            used_resolver=True,
            message=f"Successfully resolved {len(conflicted)} conflicted file(s) and pushed changes",
        )

    def _conflicted_paths(self, git: GitClient, anchor: str, log: RepoLogger) -> List[str]:
        """List unmerged paths, rolling back when there are none.

        Raises:
            ConflictDiscoveryFailure: If status fails or lists no conflicted paths
            RollbackFailure: If the merge could not be undone afterwards
        """
        try:
            conflicted = git.status().conflicted
        except GitRepositoryError as e:
            failure = ConflictDiscoveryFailure(str(e))
        else:
            if conflicted:
                return conflicted
            failure = ConflictDiscoveryFailure()

        self._rollback(git, anchor, str(failure), log)
        raise failure

    def _rollback(self, git: GitClient, anchor: str, cause: str, log: RepoLogger) -> None:
        """Undo an in-progress merge: `merge --abort`, then `reset --hard <anchor>`.

        Raises:
            RollbackFailure: If both attempts failed
        """
        try:
            git.abort_merge()
            return
        except GitRepositoryError as e:
            log.warning(f"git merge --abort failed, resetting to {anchor}: {e}")

        try:
            git.hard_reset(anchor)
            log.info(f"Rolled back to original HEAD: {anchor}")
        except GitRepositoryError as e:
            raise RollbackFailure(anchor, cause, str(e))

    def _push(self, git: GitClient, fork: RepoRef, anchor: str, log: RepoLogger) -> None:
        """Push the fork branch, rewinding it to the anchor on failure.

        Raises:
            PushFailure: If the push failed and the branch was rewound
            RollbackFailure: If the push failed and the branch could not be rewound
        """
        try:
            git.push(ORIGIN_REMOTE, fork.branch)
        except GitRepositoryError as e:
            failure = PushFailure(fork.branch, str(e))
            log.error(str(failure))
            try:
                git.hard_reset(anchor)
            except GitRepositoryError as reset_error:
                raise RollbackFailure(anchor, str(failure), str(reset_error))
            log.info(f"Rewound {fork.branch} to {anchor}")
            raise failure

        log.info(f"Changes pushed to {ORIGIN_REMOTE}")

    def _run_tests(self, working_dir: str, log: RepoLogger) -> TestsStatus:
        log.info("Running post-merge tests")
        try:
            passed = self.tester.run(working_dir, log)
        except (TestExecutionError, OSError) as e:
            log.error(f"Error running tests: {e}")
            return TestsStatus.ERROR
        except Exception as e:
            log.exception(f"Unexpected error running tests: {e}")
            return TestsStatus.ERROR

        if passed:
            log.info("Post-merge tests passed")
            return TestsStatus.PASSED

        log.warning("Post-merge tests failed")
        return TestsStatus.FAILED

    @staticmethod
    def _resolution_commit_message(upstream: RepoRef) -> str:
        return (
            f"Merge {UPSTREAM_REMOTE}/{upstream.branch} from {upstream.full_name} "
            f"with automated conflict resolution"
        )

    @staticmethod
    def _outcome(account: Account, fork: RepoRef, status: SyncStatus, **kwargs) -> SyncOutcome:
        return SyncOutcome(
            repository=fork.full_name,
            account=account.name,
            success=status is not SyncStatus.ERROR,
            status=status,
            **kwargs
        )

    def _failure(
        self,
        account: Account,
        fork: RepoRef,
        error,
        message: Optional[str] = None,
        had_conflicts: bool = False,
        used_resolver: bool = False,
    ) -> SyncOutcome:
        return self._outcome(
            account, fork,
            status=SyncStatus.ERROR,
            error=sanitize_credentials(str(error)),
            message=message,
            had_conflicts=had_conflicts,
            used_resolver=used_resolver,
            requires_manual_intervention=isinstance(error, RollbackFailure),
        )
