"""Test helper modules for fork-sync testing.

This package provides utilities for unit and integration testing:
- git_test_utils: mocked git invocations and real local repository fixtures
"""
