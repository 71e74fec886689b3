"""Unit tests for cli.logging_config module."""

import logging

import pytest

from src.cli.logging_config import APP_LOGGER, apply_log_options, configure_logging
from src.config.models import LogOptions


@pytest.fixture(autouse=True)
def restore_app_logger():
    app_logger = logging.getLogger(APP_LOGGER)
    level = app_logger.level
    handlers = list(app_logger.handlers)
    yield app_logger
    for handler in list(app_logger.handlers):
        if handler not in handlers:
            app_logger.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in app_logger.handlers:
            app_logger.addHandler(handler)
    app_logger.setLevel(level)


def handler_names(app_logger):
    return [h.get_name() for h in app_logger.handlers]


class TestConfigureLogging:
    """Test cases for configure_logging function."""

    @pytest.mark.parametrize("verbosity,level", [
        (0, logging.WARNING),
        (1, logging.INFO),
        (2, logging.DEBUG),
        (5, logging.DEBUG),
    ])
    def test_verbosity_levels(self, restore_app_logger, verbosity, level):
        configure_logging(verbosity)
        assert restore_app_logger.level == level
        assert handler_names(restore_app_logger) == ["console"]

    def test_logdir_adds_timestamped_file(self, restore_app_logger, tmp_path):
        configure_logging(1, str(tmp_path / "logs"))

        files = list((tmp_path / "logs").glob("fork-sync_*.log"))
        assert len(files) == 1
        assert len(restore_app_logger.handlers) == 2

    def test_reconfiguring_replaces_handlers(self, restore_app_logger):
        configure_logging(0)
        configure_logging(0)
        assert handler_names(restore_app_logger) == ["console"]


class TestApplyLogOptions:
    """Test cases for apply_log_options function."""

    def test_level_from_options(self, restore_app_logger):
        configure_logging(0)
        apply_log_options(LogOptions(level="debug"), verbosity=0)
        assert restore_app_logger.level == logging.DEBUG

    def test_explicit_verbosity_wins(self, restore_app_logger):
        configure_logging(1)
        apply_log_options(LogOptions(level="error"), verbosity=1)
        assert restore_app_logger.level == logging.INFO

    def test_console_can_be_disabled(self, restore_app_logger):
        configure_logging(0)
        apply_log_options(LogOptions(enable_console=False), verbosity=0)
        assert "console" not in handler_names(restore_app_logger)

    def test_output_file_records_start_with_date(self, restore_app_logger, tmp_path):
        log_file = tmp_path / "fork-sync.log"
        configure_logging(0)
        apply_log_options(LogOptions(level="info", output_file=str(log_file)), verbosity=0)
        apply_log_options(LogOptions(level="info", output_file=str(log_file)), verbosity=0)

        logging.getLogger("src.cli.test").info("hello file")
        for handler in restore_app_logger.handlers:
            handler.flush()

        lines = log_file.read_text().splitlines()
        assert lines[-1].endswith("hello file")
        assert lines[-1][:4].isdigit() and lines[-1][4] == "-"
        assert sum(1 for h in restore_app_logger.handlers if getattr(h, "baseFilename", None)) == 1
