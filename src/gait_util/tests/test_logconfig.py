"""Test the logger creation."""

import logging

from gait_util.logconfig import LOG_LEVEL_ENV_KEY, CustomFormatter, create_logger


def test_handlers_attached_once():
    """Test that creating a logger twice does not duplicate its handlers."""
    logger = create_logger("gait_trajopt.tests.handlers")
    create_logger("gait_trajopt.tests.handlers")
    assert len(logger.handlers) == 1
    assert not logger.propagate


def test_level_from_environment(monkeypatch):
    """Test that the default level is read from the environment."""
    monkeypatch.setenv(LOG_LEVEL_ENV_KEY, "debug")
    assert create_logger("gait_trajopt.tests.env_level").level == logging.DEBUG

    monkeypatch.setenv(LOG_LEVEL_ENV_KEY, "not_a_level")
    assert create_logger("gait_trajopt.tests.env_fallback").level == logging.WARNING


def test_file_handler_is_plain(tmp_path):
    """Test that the file output carries no color codes."""
    log_file = tmp_path / "trajopt.log"
    logger = create_logger("gait_trajopt.tests.file", level=logging.INFO, log_file=str(log_file))
    logger.warning("foothold out of range")
    for handler in logger.handlers:
        handler.flush()

    content = log_file.read_text()
    assert "foothold out of range" in content
    assert "\033[" not in content


def test_formatter_colors_message():
    """Test that the console formatter wraps the message in color codes."""
    record = logging.makeLogRecord({"msg": "rebuild", "levelno": logging.WARNING, "levelname": "WARNING"})
    formatted = CustomFormatter("%(message)s").format(record)
    assert formatted == f"{CustomFormatter.COLORS[logging.WARNING]}rebuild{CustomFormatter.RESET}"
    assert record.msg == "rebuild"
