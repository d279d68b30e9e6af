"""Pytest configuration and shared fixtures for Fluo tests."""

from __future__ import annotations

import logging

import pytest


def pytest_configure(config):
    """Register all project markers to avoid warnings when ini isn't loaded."""
    markers = [
        ("unit", "marks tests as unit tests"),
        ("config", "marks tests as configuration tests"),
        ("cli", "marks tests as CLI tests"),
        ("utils", "marks tests as utility tests"),
    ]
    for name, desc in markers:
        config.addinivalue_line("markers", f"{name}: {desc}")


@pytest.fixture(autouse=True)
def cleanup_logging():
    """Clean up logging handlers after each test to prevent closed file errors."""
    yield
    # Clean up all handlers to prevent "I/O operation on closed file" errors
    for logger_name in list(logging.Logger.manager.loggerDict.keys()):
        logger = logging.getLogger(logger_name)
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

    # setup_logging stops propagation; restore it so caplog sees fluo records
    fluo_logger = logging.getLogger("fluo")
    fluo_logger.propagate = True
    fluo_logger.setLevel(logging.NOTSET)

    # Also clean up root logger
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)


@pytest.fixture
def client_config():
    """Configuration with every client property set."""
    from fluo.config import FluoConfiguration

    config = FluoConfiguration()
    config.set_application_name("app1")
    config.set_accumulo_user("user")
    config.set_accumulo_password("secret")
    config.set_accumulo_instance("instance")
    return config
