"""
Tests for logging setup.
"""

import logging
import logging.handlers
import os
import tempfile
import unittest

from obmatcher.utils.logger import setup_logging


class TestSetupLogging(unittest.TestCase):
    """Test cases for setup_logging."""

    def setUp(self):
        """Set up test fixtures."""
        self.root_logger = logging.getLogger()
        self.saved_handlers = list(self.root_logger.handlers)
        self.saved_level = self.root_logger.level
        self.temp_dir = tempfile.TemporaryDirectory()

    def tearDown(self):
        """Restore the root logger."""
        for handler in self.root_logger.handlers:
            handler.close()
        self.root_logger.handlers[:] = self.saved_handlers
        self.root_logger.setLevel(self.saved_level)
        self.temp_dir.cleanup()

    def test_console_and_rotating_file(self):
        """Test that a log file and its directory are created."""
        log_file = os.path.join(self.temp_dir.name, "logs", "matcher.log")

        setup_logging(level="debug", log_file=log_file)

        self.assertEqual(self.root_logger.level, logging.DEBUG)
        handler_types = [type(h) for h in self.root_logger.handlers]
        self.assertIn(logging.StreamHandler, handler_types)
        self.assertIn(logging.handlers.RotatingFileHandler, handler_types)
        self.assertTrue(os.path.exists(log_file))

    def test_unknown_level_falls_back_to_info(self):
        """Test the INFO fallback for an unknown level name."""
        setup_logging(level="chatty")

        self.assertEqual(self.root_logger.level, logging.INFO)
        self.assertEqual(len(self.root_logger.handlers), 1)

    def test_client_loggers_pinned_to_warning(self):
        """Test that RPC and HTTP client loggers are quietened."""
        setup_logging(level="DEBUG")

        for name in ("py_near", "aiohttp", "werkzeug"):
            self.assertEqual(logging.getLogger(name).level, logging.WARNING, name)


if __name__ == '__main__':
    unittest.main()
