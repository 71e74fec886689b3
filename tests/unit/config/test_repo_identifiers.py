"""Unit tests for config.identifiers module."""

import pytest

from src.config.errors import InvalidRepoIdentifierError
from src.config.identifiers import RepoRef, is_valid_repo_identifier, parse_repo_identifier


class TestParseRepoIdentifier:
    """Test cases for parse_repo_identifier function."""

    def test_parses_owner_name_branch(self):
        ref = parse_repo_identifier("octo/widgets:main")
        assert ref == RepoRef(owner="octo", name="widgets", branch="main")
        assert ref.full_name == "octo/widgets"
        assert str(ref) == "octo/widgets:main"

    def test_branch_may_contain_slashes(self):
        ref = parse_repo_identifier("octo/widgets:release/2.x")
        assert ref.branch == "release/2.x"
        assert ref.identifier == "octo/widgets:release/2.x"

    def test_names_with_dots_and_dashes(self):
        ref = parse_repo_identifier("my-org/my.repo_name:feature-1")
        assert ref.owner == "my-org"
        assert ref.name == "my.repo_name"

    @pytest.mark.parametrize("identifier", [
        "octo/widgets",
        "widgets:main",
        "octo/widgets/extra:main",
        "octo/widgets:main:dev",
        "octo/widgets:",
        "/widgets:main",
        "octo/:main",
        "octo/wid gets:main",
        "",
    ])
    def test_rejects_malformed_identifiers(self, identifier):
        with pytest.raises(InvalidRepoIdentifierError) as exc_info:
            parse_repo_identifier(identifier)
        assert "owner/repo:branch" in str(exc_info.value)
        assert exc_info.value.identifier == identifier

    def test_rejects_non_string(self):
        with pytest.raises(InvalidRepoIdentifierError):
            parse_repo_identifier(None)


class TestIsValidRepoIdentifier:
    """Test cases for is_valid_repo_identifier function."""

    def test_valid(self):
        assert is_valid_repo_identifier("acme/widgets:develop") is True

    def test_invalid(self):
        assert is_valid_repo_identifier("acme/widgets") is False
        assert is_valid_repo_identifier(42) is False
