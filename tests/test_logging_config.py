"""
Tests for logging setup helpers.
"""
import logging

import pytest

from pylongleaf.logging_config import PACKAGE_LOGGER, get_logger, log_growth_summary, setup_logging


@pytest.fixture
def restore_package_logger():
    """Restore the package logger's level and handlers after a test."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    level, handlers = logger.level, list(logger.handlers)
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)


def test_get_logger_is_namespaced():
    logger = get_logger('pylongleaf.simulation')
    assert logger.name == 'pylongleaf.simulation'
    assert logger.parent is logging.getLogger(PACKAGE_LOGGER)


def test_setup_logging_replaces_handlers(restore_package_logger, tmp_path):
    log_file = tmp_path / 'run.log'
    setup_logging(logging.DEBUG, use_rich=False, log_file=str(log_file))
    setup_logging(logging.DEBUG, use_rich=False, log_file=str(log_file))

    handlers = [h for h in restore_package_logger.handlers
                if not isinstance(h, logging.NullHandler)]
    assert len(handlers) == 2
    assert restore_package_logger.level == logging.DEBUG


def test_setup_logging_with_rich(restore_package_logger):
    from rich.logging import RichHandler

    setup_logging(logging.INFO)
    assert any(isinstance(h, RichHandler) for h in restore_package_logger.handlers)


def test_growth_summary(plot_example_parameters, caplog):
    logger = get_logger('pylongleaf.test')
    with caplog.at_level(logging.DEBUG, logger='pylongleaf'):
        log_growth_summary(logger, plot_example_parameters.initial_state)
    assert "N=1200.0 trees/ha" in caplog.text
    assert "(thinned)" not in caplog.text
