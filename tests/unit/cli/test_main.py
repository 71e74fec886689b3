"""Unit tests for main CLI entry point (main.py).

Tests the Typer CLI application using CliRunner.
"""

from unittest.mock import patch

from typer.testing import CliRunner

from src.cli.main import app
from src.cli.models import ExitCode

runner = CliRunner()


class TestVersion:
    """Test cases for --version."""

    @patch('src.cli.main.SyncCommand')
    def test_version_flag(self, mock_sync_cmd):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "fork-sync version 0.1.0" in result.output
        mock_sync_cmd.assert_not_called()


class TestMainCommand:
    """Test cases for the main command options."""

    @patch('src.cli.main.configure_logging')
    @patch('src.cli.main.SyncCommand')
    def test_run_once_passes_selectors(self, mock_sync_cmd, mock_logging):
        mock_sync_cmd.return_value.run.return_value = ExitCode.SUCCESS

        result = runner.invoke(app, [
            "--config", "/etc/fork-sync.yaml",
            "--run-once",
            "--account", "acme",
            "--repository", "acme/widgets:main",
        ])

        assert result.exit_code == 0
        assert mock_sync_cmd.call_args[1]["config_path"] == "/etc/fork-sync.yaml"
        mock_sync_cmd.return_value.run.assert_called_once_with(
            run_once=True,
            account_selector="acme",
            repo_selector="acme/widgets:main",
        )

    @patch('src.cli.main.configure_logging')
    @patch('src.cli.main.SyncCommand')
    def test_defaults_start_scheduler(self, mock_sync_cmd, mock_logging):
        mock_sync_cmd.return_value.run.return_value = ExitCode.SUCCESS

        runner.invoke(app, [])

        assert mock_sync_cmd.call_args[1]["config_path"] == "./config.yaml"
        assert mock_sync_cmd.return_value.run.call_args[1]["run_once"] is False
        mock_logging.assert_called_once_with(0, None)

    @patch('src.cli.main.configure_logging')
    @patch('src.cli.main.SyncCommand')
    def test_exit_code_is_propagated(self, mock_sync_cmd, mock_logging):
        mock_sync_cmd.return_value.run.return_value = ExitCode.SYNC_FAILED

        result = runner.invoke(app, ["-r"])

        assert result.exit_code == 2

    @patch('src.cli.main.configure_logging')
    @patch('src.cli.main.SyncCommand')
    def test_verbosity_and_logdir(self, mock_sync_cmd, mock_logging, tmp_path):
        mock_sync_cmd.return_value.run.return_value = ExitCode.SUCCESS

        runner.invoke(app, ["-r", "-v", "2", "--logdir", str(tmp_path)])

        mock_logging.assert_called_once_with(2, str(tmp_path))
        output_handler = mock_sync_cmd.call_args[1]["output_handler"]
        assert output_handler.verbosity == 2

    def test_help(self):
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "--run-once" in result.output
