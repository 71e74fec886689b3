"""Data models for automated conflict resolution."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class ResolutionResult:
    """Result of resolving all conflicted files of one merge.

    Attributes:
        success: True when every conflicted file was resolved and staged
        error: Failure description when success is False
        resolved_files: Paths resolved and staged before the run stopped

    Example:
        >>> ResolutionResult(success=False, error="LLM failed", resolved_files=["a.txt"])
    """
    success: bool
    error: Optional[str] = None
    resolved_files: List[str] = field(default_factory=list)
