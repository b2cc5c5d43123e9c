"""
Unit tests for config/logging_config.py
"""
import logging

from config.logging_config import NOISY_LOGGERS, ROOT_LOGGER_NAME, get_logger, setup_logger


def test_module_loggers_are_children_of_pipeline():
    logger = get_logger("core.translator")
    assert logger.name == "pipeline.core.translator"
    assert logger.propagate
    assert logger.parent.name in ("pipeline", "pipeline.core")


def test_root_configured_once():
    root = setup_logger()
    handlers = list(root.handlers)
    assert setup_logger() is root
    assert root.handlers == handlers
    assert any(isinstance(h, logging.StreamHandler) for h in handlers)


def test_get_logger_without_name():
    assert get_logger().name == ROOT_LOGGER_NAME
    assert get_logger(ROOT_LOGGER_NAME) is get_logger()


def test_noisy_libraries_quieted():
    setup_logger()
    for name in NOISY_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING
