"""Tests for structured logging setup."""

import logging
import unittest

from turunan_pkg.evaluator import evaluate
from turunan_pkg.logging_config import (
    StructuredFormatter,
    get_logger,
    safe_log,
    setup_logging,
)
from turunan_pkg.types import INVALID


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.lines = []

    def emit(self, record):
        self.lines.append(self.format(record))


class TestStructuredFormatter(unittest.TestCase):
    """Test the log line layout."""

    def _record(self, **extra):
        record = logging.LogRecord(
            "turunan.sampler", logging.WARNING, __file__, 1, "Sampled %d", (3,), None
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_plain_message(self):
        line = StructuredFormatter().format(self._record())
        self.assertIn("[WARNING] turunan.sampler: Sampled 3", line)

    def test_context_fields_appended(self):
        line = StructuredFormatter().format(
            self._record(expression="1/x", domain=(-1.0, 1.0))
        )
        self.assertTrue(line.endswith("expression='1/x' domain=(-1.0, 1.0)"))


class TestSetupLogging(unittest.TestCase):
    """Test logger configuration."""

    def tearDown(self):
        setup_logging("WARNING")

    def test_repeated_setup_keeps_one_handler(self):
        setup_logging("INFO")
        logger = setup_logging("DEBUG")
        self.assertEqual(len(logger.handlers), 1)
        self.assertEqual(logger.level, logging.DEBUG)

    def test_unknown_level_falls_back(self):
        logger = setup_logging("chatty")
        self.assertEqual(logger.level, logging.WARNING)

    def test_module_loggers_are_children(self):
        self.assertEqual(get_logger("session").name, "turunan.session")

    def test_evaluation_failure_logs_context(self):
        logger = setup_logging("DEBUG")
        handler = _ListHandler()
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        self.assertIs(evaluate("1/x", 0), INVALID)
        self.assertTrue(
            any("expression='1/x' x=0" in line for line in handler.lines),
            handler.lines,
        )

    def test_safe_log_survives_broken_handler(self):
        class Broken(logging.Handler):
            def emit(self, record):
                raise RuntimeError("disk full")

            def handleError(self, record):
                raise RuntimeError("still broken")

        logger = setup_logging("DEBUG")
        logger.addHandler(Broken())
        safe_log("evaluator", "warning", "value %s", 1)


if __name__ == "__main__":
    unittest.main()
