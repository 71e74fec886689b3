"""Root pytest configuration for all tests.

Shared fixtures build a minimal valid configuration with one account and
one repository pair. Tests that need other shapes build their own.
"""

import pytest

from src.config.models import Account, AppConfig, LLMConfig, RepoPairConfig


@pytest.fixture
def llm_config() -> LLMConfig:
    return LLMConfig(api_key="sk-test-key")


@pytest.fixture
def repo_pair() -> RepoPairConfig:
    return RepoPairConfig(upstream="octo/widgets:main", fork="acme/widgets:develop")


@pytest.fixture
def account(repo_pair) -> Account:
    return Account(name="acme", token="ghp_secret123", repos=[repo_pair])


@pytest.fixture
def app_config(tmp_path, account, llm_config) -> AppConfig:
    return AppConfig(
        accounts=[account],
        llm=llm_config,
        repos_base_dir=str(tmp_path / "repos"),
    )
