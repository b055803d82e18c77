"""
Structured logging configuration for logtrust.

Library modules only call logging.getLogger(__name__); handlers are installed
by setup_logging(), which the CLI calls once at startup.

Environment Variables:
    LOGTRUST_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR) - default: WARNING
    LOGTRUST_LOG_FORMAT: Log format (json, text) - default: text

Usage:
    from logtrust.logging_config import setup_logging, get_logger

    setup_logging()
    logger = get_logger(__name__, trace_id="sha256:ab12...")
    logger.info("Validating %d records", len(records))
"""

import logging
import os
import sys
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class TraceIDFilter(logging.Filter):
    """
    Logging filter that adds trace_id to all log records.

    Ensures every record has a trace_id field, even if not set via LoggerAdapter.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "trace_id"):
            record.trace_id = "N/A"  # type: ignore
        return True


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """
    Configure root logger on stderr.

    Args:
        level: Log level name (default: LOGTRUST_LOG_LEVEL or WARNING)
        fmt: "json" or "text" (default: LOGTRUST_LOG_FORMAT or text)
    """
    log_level = (level or os.getenv("LOGTRUST_LOG_LEVEL", "WARNING")).upper()
    log_format = (fmt or os.getenv("LOGTRUST_LOG_FORMAT", "text")).lower()
    resolved = _LEVELS.get(log_level, logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # stderr keeps --json command output on stdout clean
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(resolved)
    handler.addFilter(TraceIDFilter())

    if log_format == "json":
        formatter: logging.Formatter = JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s %(trace_id)s",
            rename_fields={
                "asctime": "timestamp",
                "name": "logger",
                "levelname": "level",
            },
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s [trace_id=%(trace_id)s]",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def get_logger(name: str, trace_id: Optional[str] = None) -> logging.LoggerAdapter:
    """
    Get a logger with optional trace_id for correlation.

    Args:
        name: Logger name (typically __name__)
        trace_id: Correlation id (typically a root identifier or package digest)
    """
    logger = logging.getLogger(name)
    return logging.LoggerAdapter(logger, {"trace_id": trace_id or "N/A"})
