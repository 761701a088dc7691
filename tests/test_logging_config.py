"""Tests for logging_config.py utility functions."""

import os
import sys
import logging
from unittest.mock import patch

from listing_images.core.logging_config import (
    get_logger,
    logger,
    set_debug_logging,
    setup_logger,
)


class TestSetupLogger:
    """Tests for setup_logger function."""

    def test_setup_logger_default_parameters(self):
        """Test setup_logger with default parameters."""
        test_logger = setup_logger()
        assert test_logger.name == "listing-images"
        assert len(test_logger.handlers) == 1
        assert not test_logger.propagate

    def test_setup_logger_custom_level_by_parameter(self):
        """Test setup_logger with custom level via parameter."""
        test_logger = setup_logger(name="test-param-level", level="DEBUG")
        assert test_logger.level == logging.DEBUG

    def test_setup_logger_custom_level_by_env_var(self):
        """Test setup_logger with custom level via environment variable."""
        with patch.dict(os.environ, {"LOG_LEVEL": "WARNING"}):
            os.environ.pop("LISTING_IMAGES_LOG_LEVEL", None)
            test_logger = setup_logger(name="test-env-level")
            assert test_logger.level == logging.WARNING

    def test_setup_logger_invalid_level_defaults_to_info(self):
        """Test setup_logger with invalid level defaults to INFO."""
        test_logger = setup_logger(name="test-invalid-level", level="INVALID_LEVEL")
        assert test_logger.level == logging.INFO

    def test_setup_logger_structured_format(self):
        """Test setup_logger with structured format."""
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("LOG_FORMAT", None)
            os.environ.pop("LISTING_IMAGES_LOG_FORMAT", None)
            test_logger = setup_logger(name="test-structured", format_type="structured")
        format_string = test_logger.handlers[0].formatter._fmt
        assert "%(filename)s" in format_string
        assert "%(funcName)s" in format_string

    def test_setup_logger_env_format_override(self):
        """Test setup_logger format override via environment variable."""
        with patch.dict(os.environ, {"LOG_FORMAT": "simple"}):
            test_logger = setup_logger(name="test-env-format", format_type="structured")
        format_string = test_logger.handlers[0].formatter._fmt
        assert "%(filename)s" not in format_string

    def test_setup_logger_no_duplicate_handlers(self):
        """Test that setup_logger doesn't add duplicate handlers."""
        first = setup_logger(name="test-no-duplicates")
        second = setup_logger(name="test-no-duplicates")
        assert first is second
        assert len(first.handlers) == 1

    def test_setup_logger_handler_uses_stderr(self):
        """Log lines stay off stdout, which carries command output."""
        test_logger = setup_logger(name="test-stderr")
        assert test_logger.handlers[0].stream is sys.stderr

    def test_setup_logger_prefixed_env_var_wins(self):
        """The package-specific variable takes precedence over LOG_LEVEL."""
        env = {"LISTING_IMAGES_LOG_LEVEL": "ERROR", "LOG_LEVEL": "DEBUG"}
        with patch.dict(os.environ, env):
            test_logger = setup_logger(name="test-prefixed-env")
        assert test_logger.level == logging.ERROR

    def test_setup_logger_unknown_format_is_simple(self):
        """An unknown format name falls back to the simple format."""
        with patch.dict(os.environ, {"LOG_FORMAT": "fancy"}):
            os.environ.pop("LISTING_IMAGES_LOG_FORMAT", None)
            test_logger = setup_logger(name="test-unknown-format")
        assert "%(filename)s" not in test_logger.handlers[0].formatter._fmt


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger_is_namespaced(self):
        assert get_logger("processor").name == "listing-images.processor"

    def test_get_logger_keeps_full_names(self):
        assert get_logger("listing-images.export").name == "listing-images.export"
        assert get_logger().name == "listing-images"

    def test_module_logger(self):
        assert logger.name == "listing-images"


def test_set_debug_logging():
    test_logger = setup_logger(name="test-debug-switch", level="INFO")
    root_level = logging.getLogger().level
    try:
        set_debug_logging(test_logger)
        assert test_logger.level == logging.DEBUG
        assert logging.getLogger().level == logging.DEBUG
    finally:
        logging.getLogger().setLevel(root_level)
