"""Runs a synchronized project's test suite.

Node projects are tested with `npm install && npm test` when their
package.json declares a test script. A configured test command replaces
that detection entirely.
"""

import json
import logging
import os
import subprocess
from typing import Optional

from src.git_client.git_client import LoggerLike
from .errors import TestExecutionError

logger = logging.getLogger(__name__)

# Test run timeout in seconds (includes dependency installation)
TEST_TIMEOUT = 1800

NPM_TEST_COMMAND = "npm install && npm test"

# Characters of test output kept in log records
OUTPUT_TAIL = 4000


class ProjectTester:
    """Runs tests in a working copy and reports pass/fail.

    Example:
        >>> tester = ProjectTester()
        >>> tester.run("/srv/repos/acme-octo-widgets")
        True
    """

    def __init__(self, test_command: Optional[str] = None, timeout: int = TEST_TIMEOUT):
        self.test_command = test_command
        self.timeout = timeout

    def run(self, working_dir: str, log: Optional[LoggerLike] = None) -> bool:
        """Run the project's tests.

        Args:
            working_dir: Working copy to test
            log: Repository-scoped logger (defaults to module logger)

        Returns:
            True if tests passed or the project declares none, False otherwise

        Raises:
            TestExecutionError: If the command timed out or no shell was available
        """
        log = log or logger
        log.info(f"Attempting to run tests in {working_dir}")

        command = self.test_command or self._detect_command(working_dir, log)
        if command is None:
            return True
        if command is False:
            return False

        log.info(f"Executing '{command}' in {working_dir}")
        try:
            result = subprocess.run(
                command,
                shell=True,
                cwd=working_dir,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise TestExecutionError(working_dir, f"timed out after {self.timeout} seconds")
        except OSError as e:
            raise TestExecutionError(working_dir, str(e))

        if result.returncode != 0:
            log.error(
                f"Tests failed in {working_dir} (exit code {result.returncode}):\n"
                f"{(result.stdout + result.stderr)[-OUTPUT_TAIL:]}"
            )
            return False

        log.info(f"Tests passed successfully in {working_dir}")
        log.debug(f"Test output:\n{result.stdout[-OUTPUT_TAIL:]}")
        return True

    @staticmethod
    def _detect_command(working_dir: str, log: LoggerLike):
        """Pick the test command from package.json.

        Returns:
            The command, None when no tests are declared, or False when
            package.json cannot be parsed
        """
        package_json_path = os.path.join(working_dir, 'package.json')
        if not os.path.isfile(package_json_path):
            log.info(f"No package.json found in {working_dir}. Skipping tests")
            return None

        try:
            with open(package_json_path, 'r', encoding='utf-8') as f:
                package_json = json.load(f)
        except (OSError, ValueError) as e:
            log.error(f"Failed to parse package.json in {working_dir}: {e}")
            return False

        scripts = package_json.get('scripts') if isinstance(package_json, dict) else None
        if not isinstance(scripts, dict) or not scripts.get('test'):
            log.info(f"No 'test' script found in package.json in {working_dir}. Skipping tests")
            return None

        return NPM_TEST_COMMAND
