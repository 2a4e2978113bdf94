# tests/test_logging_config.py

"""Tests for the per-run logging configuration."""

import logging
import tempfile
import unittest
from pathlib import Path

from pebblescan.config.logging_config import setup_logging


class TestLoggingConfig(unittest.TestCase):
    """Verify logging setup behaviour."""

    def setUp(self) -> None:
        """Clean up the pebblescan logger and use a temp log dir."""
        self.app_logger = logging.getLogger("pebblescan")
        self._clear_handlers()
        self.addCleanup(self._clear_handlers)
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.log_dir = Path(self._tmp.name) / "logs"

    def _clear_handlers(self) -> None:
        for handler in list(self.app_logger.handlers):
            handler.close()
            self.app_logger.removeHandler(handler)

    def _stream_handlers(self) -> list[logging.Handler]:
        return [
            h
            for h in self.app_logger.handlers
            if isinstance(h, logging.StreamHandler)
            and not isinstance(h, logging.FileHandler)
        ]

    def test_setup_creates_log_file(self) -> None:
        log_path = setup_logging(log_dir=self.log_dir)
        self.assertTrue(log_path.exists())
        self.assertEqual(log_path.parent, self.log_dir)

    def test_log_file_naming_convention(self) -> None:
        """Log file name matches run_YYYYMMDD_HHMMSS.log format."""
        log_path = setup_logging(log_dir=self.log_dir)
        self.assertRegex(log_path.name, r"^run_\d{8}_\d{6}\.log$")

    def test_file_handler_level_debug(self) -> None:
        setup_logging(log_dir=self.log_dir)
        file_handlers = [
            h
            for h in self.app_logger.handlers
            if isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(len(file_handlers), 1)
        self.assertEqual(file_handlers[0].level, logging.DEBUG)

    def test_console_handler_level_warning(self) -> None:
        setup_logging(log_dir=self.log_dir)
        self.assertEqual(self._stream_handlers()[0].level, logging.WARNING)

    def test_verbose_console_level_info(self) -> None:
        setup_logging(verbose=True, log_dir=self.log_dir)
        self.assertEqual(self._stream_handlers()[0].level, logging.INFO)

    def test_repeated_calls_no_duplicate_handlers(self) -> None:
        setup_logging(log_dir=self.log_dir)
        count_before = len(self.app_logger.handlers)
        setup_logging(log_dir=self.log_dir)
        self.assertEqual(len(self.app_logger.handlers), count_before)

    def test_app_logger_level_is_debug(self) -> None:
        setup_logging(log_dir=self.log_dir)
        self.assertEqual(self.app_logger.level, logging.DEBUG)

    def test_child_loggers_reach_file(self) -> None:
        log_path = setup_logging(log_dir=self.log_dir)
        logging.getLogger("pebblescan.extractors").debug("price resolved")
        for handler in self.app_logger.handlers:
            handler.flush()
        self.assertIn("price resolved", log_path.read_text(encoding="utf-8"))


if __name__ == "__main__":
    unittest.main()
