"""Define logging configuration shared by the gait trajectory optimization packages."""

import logging
import os

# Environment variable overriding the default console log level
LOG_LEVEL_ENV_KEY = "GAIT_TRAJOPT_LOG_LEVEL"


class CustomFormatter(logging.Formatter):
    """Custom formatter to add hardcoded colors based on log levels."""

    # Define log level colors (ANSI escape codes)
    COLORS = {
        logging.DEBUG: "\033[36m",  # Cyan
        logging.WARNING: "\033[33m",  # Yellow
        logging.ERROR: "\033[31m",  # Red
        logging.CRITICAL: "\033[35;1m",  # Bright Magenta
    }
    RESET = "\033[0m"  # Reset color

    def format(self, record):
        # Color a copy so file handlers sharing the record stay plain
        record = logging.makeLogRecord(record.__dict__)
        levelname_color = self.COLORS.get(record.levelno, "")
        record.msg = f"{levelname_color}{record.msg}{self.RESET}"
        return super().format(record)


def _default_level() -> int:
    """Resolve the default log level from the environment, falling back to WARNING."""
    level = logging.getLevelName(os.environ.get(LOG_LEVEL_ENV_KEY, "WARNING").upper())
    return level if isinstance(level, int) else logging.WARNING


def create_logger(name, level=None, log_file=None):
    """
    Create a custom logger with hardcoded colored output for each log level.

    Args:
        name (str): Name of the logger, typically `__name__`.
        level (int, optional): Logging level, defaults to the GAIT_TRAJOPT_LOG_LEVEL environment value.
        log_file (str, optional): File to log messages (in addition to console).

    Returns:
        logging.Logger: Configured logger instance.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level if level is not None else _default_level())
    logger.propagate = False

    # Modules may be re-imported (e.g. by test collection), only attach handlers once
    if logger.handlers:
        return logger

    # Define custom log format
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Create console handler with colored output
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(CustomFormatter(log_format))
    logger.addHandler(console_handler)

    # Create file handler (if log_file is provided)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(log_format))  # No colors for file
        logger.addHandler(file_handler)

    return logger
