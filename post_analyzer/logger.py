"""Enhanced logging utilities for post-analyzer."""

import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Any, Optional

# Context variable to store the submission ID across awaits
session_id_var: ContextVar[Optional[str]] = ContextVar("session_id", default=None)


class ContextLogger:
    """Logger wrapper that adds structured data to log records."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def _format_extra_data(self, extra_data: Optional[dict[str, Any]]) -> str:
        """Format extra data as key=value pairs."""
        if not extra_data:
            return ""
        parts = [f"{k}={v}" for k, v in extra_data.items()]
        return " [" + ", ".join(parts) + "]"

    def _log(self, level: int, msg: str, extra_data: Optional[dict[str, Any]] = None, **kwargs):
        """Log with extra data formatted as plain text."""
        session_id = session_id_var.get()
        if session_id:
            extra_data = dict(extra_data or {})
            extra_data["session_id"] = session_id

        formatted_msg = msg + self._format_extra_data(extra_data)
        self.logger.log(level, formatted_msg, **kwargs)

    def debug(self, msg: str, extra_data: Optional[dict[str, Any]] = None, **kwargs):
        """Log debug message with extra data."""
        self._log(logging.DEBUG, msg, extra_data, **kwargs)

    def info(self, msg: str, extra_data: Optional[dict[str, Any]] = None, **kwargs):
        """Log info message with extra data."""
        self._log(logging.INFO, msg, extra_data, **kwargs)

    def warning(self, msg: str, extra_data: Optional[dict[str, Any]] = None, **kwargs):
        """Log warning message with extra data."""
        self._log(logging.WARNING, msg, extra_data, **kwargs)

    def error(self, msg: str, extra_data: Optional[dict[str, Any]] = None, **kwargs):
        """Log error message with extra data."""
        self._log(logging.ERROR, msg, extra_data, **kwargs)


def setup_logging(log_level: str = "INFO"):
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # stdout belongs to the CLI output
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)


def get_logger(name: str) -> ContextLogger:
    """Get a context-aware logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        ContextLogger instance
    """
    return ContextLogger(logging.getLogger(name))


def set_session_id(session_id: Optional[str] = None) -> str:
    """Set the submission ID for the current context.

    Args:
        session_id: Optional ID. If not provided, a short random one is generated.

    Returns:
        The ID that was set
    """
    if session_id is None:
        session_id = uuid.uuid4().hex[:12]
    session_id_var.set(session_id)
    return session_id


class Timer:
    """Context manager for timing operations."""

    def __init__(self, name: str):
        self.name = name
        self.start_time: Optional[float] = None
        self.elapsed_ms: Optional[int] = None

    def __enter__(self) -> "Timer":
        self.start_time = time.time()
        return self

    def __exit__(self, *args):
        if self.start_time:
            self.elapsed_ms = int((time.time() - self.start_time) * 1000)

    def get_elapsed_ms(self) -> int:
        """Get elapsed time in milliseconds."""
        if self.elapsed_ms is not None:
            return self.elapsed_ms
        if self.start_time is not None:
            return int((time.time() - self.start_time) * 1000)
        return 0
