"""Logging setup for the fork-sync command.

Only the 'src' namespace logger is configured; the root logger and
third-party libraries are left unchanged.
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from src.config.models import LogOptions

logger = logging.getLogger(__name__)

APP_LOGGER = "src"

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_FORMAT = "%(asctime)s [%(levelname)8s] %(message)s"
# Lines must start with the date so the daily report can pick today's records
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

VERBOSITY_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def verbosity_to_level(verbosity: int) -> int:
    return VERBOSITY_LEVELS.get(verbosity, logging.DEBUG if verbosity > 1 else logging.WARNING)


def configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure console logging (and a timestamped file in logdir).

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files
    """
    level = verbosity_to_level(verbosity)

    app_logger = logging.getLogger(APP_LOGGER)
    app_logger.setLevel(level)
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    console_handler.set_name("console")
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        _add_file_handler(app_logger, str(log_path / f"fork-sync_{timestamp}.log"), level)


def apply_log_options(options: LogOptions, verbosity: int) -> None:
    """Apply the configuration file's log options.

    An explicit --verbosity wins over log_options.level.

    Args:
        options: log_options from the configuration
        verbosity: Verbosity given on the command line
    """
    app_logger = logging.getLogger(APP_LOGGER)
    level = verbosity_to_level(verbosity) if verbosity > 0 else logging.getLevelName(options.level.upper())
    app_logger.setLevel(level)

    for handler in list(app_logger.handlers):
        if handler.get_name() == "console":
            if options.enable_console:
                handler.setLevel(level)
            else:
                app_logger.removeHandler(handler)

    if options.output_file:
        output_file = os.path.abspath(options.output_file)
        existing = {getattr(h, "baseFilename", None) for h in app_logger.handlers}
        if output_file not in existing:
            _add_file_handler(app_logger, output_file, level)


def _add_file_handler(app_logger: logging.Logger, log_file: str, level: int) -> None:
    directory = os.path.dirname(log_file)
    if directory:
        os.makedirs(directory, exist_ok=True)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    app_logger.addHandler(file_handler)
    logger.info(f"Logging to file: {log_file}")
