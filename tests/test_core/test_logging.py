"""Tests for logging module."""

import unittest
from content_auditor.core.logging import Log, LOG


class TestLog(unittest.TestCase):
    """Test logging system."""

    def test_logger_creation(self):
        """Test logger instance creation."""
        logger = Log("test")
        self.assertIsNotNone(logger)
        self.assertEqual(logger.name, "test")

    def test_singleton_per_name(self):
        """Verify singleton behavior per logger name."""
        logger1 = Log("test1")
        logger2 = Log("test1")
        logger3 = Log("test2")

        self.assertIs(logger1, logger2)
        self.assertIsNot(logger1, logger3)

    def test_module_logger(self):
        self.assertIs(LOG, Log("content_auditor"))

    def test_logging_methods(self):
        """Test logging methods don't raise exceptions."""
        logger = Log("test")

        logger.d("Debug message")
        logger.i("Info message")
        logger.w("Warning message")
        logger.e("Error message")
        logger.c("Critical message")

    def test_context_prefix(self):
        """Context pairs prefix messages until cleared."""
        logger = Log("test")
        logger.ctx(package="pkg.zip", pass_="index")
        self.assertEqual(logger._context_str(), "[package=pkg.zip, pass_=index] ")
        logger.clear()
        self.assertEqual(logger._context_str(), "")

    def test_verbose_toggle(self):
        logger = Log("test")
        logger.set_verbose(True)
        self.assertEqual(logger._console.level, 10)
        logger.set_verbose(False)
        self.assertEqual(logger._console.level, 30)


if __name__ == "__main__":
    unittest.main()
