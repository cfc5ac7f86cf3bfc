"""Structured logging utilities for patgrep.

This module configures structlog for the library and the CLI. Log output goes
to stderr: stdout is reserved for match output.
"""

import logging
import sys
import time
from contextvars import ContextVar
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

# Context variable for scan tracking
scan_id_var: ContextVar[Optional[str]] = ContextVar("scan_id", default=None)

VALID_LOG_LEVELS: frozenset[str] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def add_scan_id(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add scan_id to log context if one is set and the event has none."""
    scan_id = scan_id_var.get()
    if scan_id:
        event_dict.setdefault("scan_id", scan_id)
    return event_dict


def add_timestamp(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add a UNIX timestamp to log entries."""
    event_dict["timestamp"] = time.time()
    return event_dict


class _StderrHandler(logging.StreamHandler):
    """StreamHandler bound to whatever sys.stderr is at emit time."""

    @property  # type: ignore[override]
    def stream(self) -> Any:
        return sys.stderr

    @stream.setter
    def stream(self, value: Any) -> None:
        pass


_stdlib_handler = _StderrHandler()
_stdlib_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))


def _stderr_logger_factory(*args: Any) -> structlog.PrintLogger:
    # Resolved per logger so a replaced sys.stderr is honoured.
    return structlog.PrintLogger(sys.stderr)


def configure_logging(
    log_level: str = "WARNING",
    json_output: bool = False,
) -> None:
    """Configure structured logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON lines. If False, use console format.
    """
    level = getattr(logging, log_level.upper())

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_scan_id,
        add_timestamp,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=_stderr_logger_factory,
        cache_logger_on_first_use=False,
    )

    # Scanner internals log through the stdlib; keep them on the same level.
    stdlib_logger = logging.getLogger("patgrep")
    stdlib_logger.setLevel(level)
    if _stdlib_handler not in stdlib_logger.handlers:
        stdlib_logger.addHandler(_stdlib_handler)


def get_logger(name: str = "patgrep") -> Any:
    """Get a configured logger instance.

    Args:
        name: Logger name (typically module name)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


class PerformanceLogger:
    """Context manager for tracking operation performance."""

    def __init__(self, operation: str, logger: Optional[Any] = None, warn_ms: float = 1000.0):
        """Initialize performance logger.

        Args:
            operation: Name of the operation being timed
            logger: Logger instance to use (creates new if None)
            warn_ms: Durations above this are logged at WARNING instead of DEBUG
        """
        self.operation = operation
        self.logger = logger or get_logger()
        self.warn_ms = warn_ms
        self.start_time: float = 0
        self.end_time: float = 0

    def __enter__(self) -> "PerformanceLogger":
        """Start timing."""
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Stop timing and log performance."""
        self.end_time = time.perf_counter()
        duration_ms = (self.end_time - self.start_time) * 1000

        if exc_type is not None:
            self.logger.error(
                f"{self.operation} failed",
                operation=self.operation,
                duration_ms=duration_ms,
                error=str(exc_val),
            )
        else:
            log_method = self.logger.warning if duration_ms > self.warn_ms else self.logger.debug
            log_method(
                f"{self.operation} completed",
                operation=self.operation,
                duration_ms=duration_ms,
            )

    @property
    def duration_ms(self) -> float:
        """Get duration in milliseconds."""
        if self.end_time == 0:
            return (time.perf_counter() - self.start_time) * 1000
        return (self.end_time - self.start_time) * 1000


def set_scan_id(scan_id: str) -> None:
    """Set scan ID in context for all subsequent logs."""
    scan_id_var.set(scan_id)


def clear_scan_id() -> None:
    """Clear scan ID from context."""
    scan_id_var.set(None)


# Initialize logging with quiet defaults; the CLI reconfigures from config.
configure_logging()
