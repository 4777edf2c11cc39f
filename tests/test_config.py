"""
test_config.py
~~~~~~~~~~~~~~

Unit tests for package constants and logging setup.
"""

import logging
import os
import sys

import numpy as np
import pytest

# Add repository root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from nnmatrix import config, configure_logging


@pytest.fixture
def restore_package_logger():
    """Put the nnmatrix logger level back after the test."""
    package_logger = logging.getLogger('nnmatrix')
    previous = package_logger.level
    yield package_logger
    package_logger.setLevel(previous)


@pytest.mark.unit
class TestConstants:
    """Test the storage and wire format constants."""

    def test_formats_agree(self):
        """Test that storage and wire types are both 4-byte floats."""
        assert np.dtype(config.DTYPE).itemsize == config.FLOAT_SIZE
        assert np.dtype(config.WIRE_DTYPE).itemsize == config.FLOAT_SIZE
        assert np.dtype(config.WIRE_DTYPE).byteorder == '>'


@pytest.mark.unit
class TestResolveLogLevel:
    """Test turning level names into logging levels."""

    def test_name(self):
        """Test that level names are case-insensitive."""
        assert config.resolve_log_level('debug') == logging.DEBUG
        assert config.resolve_log_level('WARNING') == logging.WARNING

    def test_number_passes_through(self):
        """Test that numeric levels are returned unchanged."""
        assert config.resolve_log_level(15) == 15

    def test_unknown_name_falls_back(self):
        """Test that unknown names fall back to INFO."""
        assert config.resolve_log_level('LOUD') == logging.INFO
        assert config.resolve_log_level('basicConfig') == logging.INFO

    def test_environment_variable(self, monkeypatch):
        """Test that NNMATRIX_LOG_LEVEL is used when no level is given."""
        monkeypatch.setenv(config.LOG_LEVEL_ENV, 'error')
        assert config.resolve_log_level() == logging.ERROR

    def test_default(self, monkeypatch):
        """Test the INFO default without argument or environment."""
        monkeypatch.delenv(config.LOG_LEVEL_ENV, raising=False)
        assert config.resolve_log_level() == logging.INFO


@pytest.mark.unit
class TestConfigureLogging:
    """Test configure_logging."""

    def test_sets_package_level(self, restore_package_logger):
        """Test that the package logger takes the requested level."""
        configure_logging('WARNING')
        assert restore_package_logger.level == logging.WARNING

    def test_uses_environment(self, monkeypatch, restore_package_logger):
        """Test that the environment variable is honored."""
        monkeypatch.setenv(config.LOG_LEVEL_ENV, 'DEBUG')
        configure_logging()
        assert restore_package_logger.level == logging.DEBUG

    def test_package_is_silent_by_default(self):
        """Test that importing the package installs a NullHandler."""
        handlers = logging.getLogger('nnmatrix').handlers
        assert any(isinstance(h, logging.NullHandler) for h in handlers)
