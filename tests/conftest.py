"""Pytest configuration and shared fixtures for postsync tests."""

import logging

import pytest

from postsync.io.logging_setup import ROOT_LOGGER


@pytest.fixture(autouse=True)
def _detach_log_handlers():
    """configure() detaches the postsync logger from root; undo it so caplog sees records."""
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True


@pytest.fixture
def log_env(tmp_path, monkeypatch):
    """Point log output at a temp dir and clear level overrides."""
    monkeypatch.setenv("POSTSYNC_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("POSTSYNC_LOG_FILE", raising=False)
    monkeypatch.delenv("POSTSYNC_LOG_LEVEL", raising=False)
    return tmp_path / "logs"
