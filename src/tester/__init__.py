"""Post-merge test runner."""

from .errors import TestExecutionError
from .tester import ProjectTester, TEST_TIMEOUT

__all__ = [
    'ProjectTester',
    'TestExecutionError',
    'TEST_TIMEOUT',
]
