"""LLM-assisted resolution of merge conflicts.

The resolver receives the paths git reports as unmerged, asks the language
model for the complete resolved content of each file, writes the answer
back and stages it. It never commits; the sync engine owns the merge
commit and the rollback when resolution fails.
"""

import logging
import os
import re
from typing import Callable, List, Optional, Sequence

from src.config.models import LLMConfig
from src.git_client.git_client import GitClient, LoggerLike
from src.git_client.errors import GitRepositoryError
from src.llm.errors import LLMError
from src.llm.llm_client import LLMClient
from .errors import ConflictResolutionError
from .models import ResolutionResult

logger = logging.getLogger(__name__)

# Pattern to detect unresolved merge conflict markers
CONFLICT_MARKER_PATTERN = re.compile(
    r'^<{7}(?:\s|$)|^={7}\s*$|^>{7}(?:\s|$)',
    re.MULTILINE
)

# One surrounding markdown code fence, optionally tagged with a language
CODE_FENCE_PATTERN = re.compile(r'\A```[^\n]*\n(.*?)\n?```\s*\Z', re.DOTALL)

UNAVAILABLE = "Unavailable"

MAX_RESPONSE_TOKENS = 4000

PROMPT_TEMPLATE = """The following file has merge conflicts: {path}

--- OURS (current branch) ---
{ours}
--- END OURS ---

--- THEIRS (branch being merged) ---
{theirs}
--- END THEIRS ---

--- CONFLICTED FILE CONTENT ---
{conflicted}
--- END CONFLICTED FILE CONTENT ---

Resolve the conflicts in the file content.
Integrate the changes from THEIRS into OURS, preserving the functionality of OURS
while incorporating the updates from THEIRS.
Output ONLY the fully resolved file content, without explanations or markdown formatting.
"""


def strip_code_fence(text: str) -> str:
    """Remove one markdown code fence wrapped around the whole text.

    Example:
        >>> strip_code_fence("```python\\nprint(1)\\n```")
        'print(1)'
    """
    match = CODE_FENCE_PATTERN.match(text.strip())
    if match:
        return match.group(1)
    return text


def has_conflict_markers(content: str) -> bool:
    return bool(CONFLICT_MARKER_PATTERN.search(content))


class ConflictResolver:
    """Resolves the conflicted files of an in-progress merge with an LLM.

    Example:
        >>> resolver = ConflictResolver()
        >>> result = resolver.resolve(git, ["src/app.js"], config.llm, repo_logger)
        >>> if not result.success:
        ...     git.abort_merge()
    """

    def __init__(self, client_factory: Callable[[LLMConfig], LLMClient] = LLMClient):
        """Initialize resolver.

        Args:
            client_factory: Builds the text-generation client from LLMConfig
        """
        self._client_factory = client_factory

    def resolve(
        self,
        git: GitClient,
        conflicted_paths: Sequence[str],
        llm_config: LLMConfig,
        log: Optional[LoggerLike] = None,
    ) -> ResolutionResult:
        """Resolve and stage every conflicted file.

        Files are processed in order and the run stops at the first failure.

        Args:
            git: Client bound to the working copy with the merge in progress
            conflicted_paths: Repository-relative paths of unmerged files
            llm_config: Settings for the text-generation client
            log: Repository-scoped logger (defaults to module logger)

        Returns:
            ResolutionResult with the files resolved so far
        """
        log = log or logger
        paths = list(conflicted_paths)

        if not paths:
            log.info("No conflicted files were passed to resolver")
            return ResolutionResult(success=True)

        log.info(f"Attempting to resolve conflicts in files: {', '.join(paths)}")

        try:
            client = self._client_factory(llm_config)
        except (LLMError, ValueError, TypeError) as e:
            log.error(f"Failed to initialize LLM client for conflict resolution: {e}")
            return ResolutionResult(
                success=False,
                error=f"LLM client initialization failed: {e}",
            )

        resolved: List[str] = []
        for path in paths:
            try:
                self._resolve_file(git, client, path, log)
            except (ConflictResolutionError, LLMError, GitRepositoryError, OSError) as e:
                log.error(f"Error resolving conflict in file {path}: {e}")
                return ResolutionResult(
                    success=False,
                    error=f"LLM failed to resolve all conflicts: {e}",
                    resolved_files=resolved,
                )
            resolved.append(path)

        log.info(f"Resolved {len(resolved)} conflicted file(s)")
        return ResolutionResult(success=True, resolved_files=resolved)

    def _resolve_file(self, git: GitClient, client: LLMClient, path: str, log: LoggerLike) -> None:
        """Resolve one file and stage it.

        Raises:
            ConflictResolutionError: If the path or the model answer is unusable
        """
        absolute_path = self._safe_path(git.repo_dir, path)
        log.info(f"Processing conflicted file: {path}")

        with open(absolute_path, 'r', encoding='utf-8') as f:
            conflicted = f.read()

        prompt = PROMPT_TEMPLATE.format(
            path=path,
            ours=self._read_side(git, "HEAD", path),
            theirs=self._read_side(git, "MERGE_HEAD", path),
            conflicted=conflicted,
        )

        log.info(f"Sending prompt to LLM for file: {path}")
        resolved = strip_code_fence(client.generate_text(prompt, max_tokens=MAX_RESPONSE_TOKENS))

        if not resolved.strip():
            raise ConflictResolutionError(path, "LLM did not return content")
        if has_conflict_markers(resolved):
            raise ConflictResolutionError(path, "LLM output still contains conflict markers")

        if conflicted.endswith('\n') and not resolved.endswith('\n'):
            resolved += '\n'

        with open(absolute_path, 'w', encoding='utf-8') as f:
            f.write(resolved)

        log.info(f"LLM provided resolution for {path}. Applying and adding to git")
        git.stage_files([path])

    @staticmethod
    def _read_side(git: GitClient, revision: str, path: str) -> str:
        try:
            return git.read_file_at(revision, path)
        except GitRepositoryError:
            return UNAVAILABLE

    @staticmethod
    def _safe_path(repo_dir: str, path: str) -> str:
        root = os.path.realpath(repo_dir)
        absolute_path = os.path.realpath(os.path.join(root, path))
        if os.path.isabs(path) or os.path.commonpath([root, absolute_path]) != root:
            raise ConflictResolutionError(path, "path escapes the repository root")
        return absolute_path
