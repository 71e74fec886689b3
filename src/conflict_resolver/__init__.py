"""Automated merge conflict resolution.

This package asks a language model for the resolved content of each
conflicted file of an in-progress merge and stages the result.
"""

from .errors import ConflictResolutionError
from .models import ResolutionResult
from .resolver import ConflictResolver, strip_code_fence, has_conflict_markers

__all__ = [
    'ConflictResolutionError',
    'ResolutionResult',
    'ConflictResolver',
    'strip_code_fence',
    'has_conflict_markers',
]
