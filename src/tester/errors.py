"""Exceptions raised by the post-merge test runner."""

from src.git_client.errors import SyncError


class TestExecutionError(SyncError):
    """Raised when the test command could not be executed at all.

    A failing test suite is not an error; it is reported as False by
    ProjectTester.run().
    """

    __test__ = False

    def __init__(self, working_dir: str, reason: str):
        super().__init__(f"Test execution failed in {working_dir}: {reason}")
        self.working_dir = working_dir
        self.reason = reason
