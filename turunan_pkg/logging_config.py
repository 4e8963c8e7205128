"""Structured logging configuration for Turunan.

Log lines look like ``timestamp [LEVEL] turunan.module: message`` followed by
any ``key=value`` context passed through ``extra``, for example::

    logger.debug("Sampled", extra={"expression": "1/x", "domain": (-1, 1)})
"""

import logging
import sys
from datetime import datetime
from typing import Optional

# Record attributes printed after the message when a call supplies them
CONTEXT_FIELDS = ("expression", "derivative", "domain", "x")


class StructuredFormatter(logging.Formatter):
    """Formatter that outputs timestamp, level, logger, message and context fields."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).isoformat()
        message = f"{timestamp} [{record.levelname}] {record.name}: {record.getMessage()}"
        context = " ".join(
            f"{key}={getattr(record, key)!r}"
            for key in CONTEXT_FIELDS
            if hasattr(record, key)
        )
        if context:
            message = f"{message} {context}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


def setup_logging(
    level: str = "WARNING", log_file: Optional[str] = None
) -> logging.Logger:
    """Attach stderr (and optionally file) handlers to the ``turunan`` logger.

    Calling it again replaces the handlers, so the CLI and tests can switch
    levels without duplicating output.

    Args:
        level: Logging level name; unknown names fall back to WARNING
        log_file: Optional file path that receives the same entries

    Returns:
        The configured ``turunan`` logger
    """
    logger = logging.getLogger("turunan")
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
    return logger


def get_logger(name: str = "turunan") -> logging.Logger:
    """Logger for a package module, e.g. ``get_logger("sampler")``."""
    return logging.getLogger(f"turunan.{name}")


def safe_log(
    module_name: str, level: str, message: str, *args, exc_info: bool = False, **kwargs
) -> None:
    """Log a message without ever letting a logging failure escape.

    Used from code paths that promise never to raise, such as the evaluator
    adapter. ``kwargs`` go to the logger, so ``extra={"x": 0.5}`` works.
    """
    try:
        logger = get_logger(module_name)
        log_func = getattr(logger, level.lower(), logger.info)
        log_func(message, *args, exc_info=exc_info, **kwargs)
    except Exception:
        # A broken handler must not turn into an evaluation failure
        pass
