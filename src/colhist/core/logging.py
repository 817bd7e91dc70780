"""Structured logging infrastructure.

This module provides logging that works for:
- Local CLI use (rich console output on stderr)
- Scripted/batch use (JSON structured logs)

Usage:
    from colhist.core.logging import get_logger, configure_logging

    # Configure at startup
    configure_logging(log_level="INFO", log_format="console")

    # Get logger in any module
    logger = get_logger(__name__)

    # Log with structured context
    logger.info("histogram_built", num_bins=10, values=1000)

    # Use context managers for automatic context propagation
    with log_context(input="data.csv"):
        logger.info("rows_collected", rows=1000)
"""

from __future__ import annotations

import logging
import sys
from collections import Counter
from collections.abc import MutableMapping
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, cast
from uuid import uuid4

import structlog
from structlog.typing import FilteringBoundLogger

# Context variables for correlation
_run_context: ContextVar[dict[str, Any] | None] = ContextVar("run_context", default=None)


@dataclass
class RunMetrics:
    """Metrics collected during a histogram run."""

    run_id: str = field(default_factory=lambda: uuid4().hex[:12])
    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    end_time: datetime | None = None

    # Counters
    rows_read: int = 0
    rows_binned: int = 0
    rows_skipped: int = 0
    skipped_by_kind: Counter[str] = field(default_factory=Counter)

    # Sub-operation timings (seconds)
    timings: dict[str, float] = field(default_factory=dict)

    @property
    def duration_seconds(self) -> float:
        """Get duration in seconds."""
        if self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return (datetime.now(UTC) - self.start_time).total_seconds()

    def record_timing(self, operation: str, seconds: float) -> None:
        """Record timing for a sub-operation."""
        self.timings[operation] = self.timings.get(operation, 0.0) + seconds

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "run_id": self.run_id,
            "duration_seconds": self.duration_seconds,
            "rows_read": self.rows_read,
            "rows_binned": self.rows_binned,
            "rows_skipped": self.rows_skipped,
            "skipped_by_kind": dict(self.skipped_by_kind),
            "timings": self.timings,
        }


# Metrics storage (per-run)
_current_metrics: ContextVar[RunMetrics | None] = ContextVar("current_metrics", default=None)


def start_run_metrics() -> RunMetrics:
    """Start collecting metrics for a run."""
    metrics = RunMetrics()
    _current_metrics.set(metrics)
    return metrics


def end_run_metrics() -> RunMetrics | None:
    """End run metrics collection."""
    metrics = _current_metrics.get()
    if metrics:
        metrics.end_time = datetime.now(UTC)
        _current_metrics.set(None)
    return metrics


def _add_run_context(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Processor to add run context to log events."""
    context = _run_context.get()
    if context:
        event_dict.update(context)
    return event_dict


def _add_metrics_context(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Processor to add current metrics context."""
    metrics = _current_metrics.get()
    if metrics:
        event_dict["_run_id"] = metrics.run_id
    return event_dict


def configure_logging(
    log_level: str = "WARNING",
    log_format: str = "console",
    show_timestamps: bool = True,
    color: bool = True,
) -> None:
    """Configure structured logging for the application.

    Logs always go to stderr; stdout carries histogram output.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Output format ("console" for interactive use, "json" for scripting)
        show_timestamps: Whether to show timestamps
        color: Whether to use colors in console mode
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        _add_run_context,
        _add_metrics_context,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if show_timestamps:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso", utc=True))

    if log_format == "json":
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(
                colors=color,
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, log_level.upper())),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    # Also configure stdlib logging for libraries (numexpr reports thread setup here)
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


def get_logger(name: str | None = None) -> FilteringBoundLogger:
    """Get a structured logger.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Bound structlog logger
    """
    return cast(FilteringBoundLogger, structlog.get_logger(name))


class LogContext:
    """Context manager for adding context to logs within a scope."""

    def __init__(self, **context: Any):
        """Initialize with context key-value pairs."""
        self.context = context
        self.token: Any = None

    def __enter__(self) -> LogContext:
        """Enter context, adding values to log context."""
        current = _run_context.get() or {}
        new_context = {**current, **self.context}
        self.token = _run_context.set(new_context)
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context, restoring previous values."""
        if self.token:
            _run_context.reset(self.token)


def log_context(**context: Any) -> LogContext:
    """Create a context manager for scoped logging context.

    Usage:
        with log_context(input="data.csv", column=2):
            logger.info("processing")  # Will include input and column
    """
    return LogContext(**context)


# Convenience functions for metrics tracking
def record_row_read() -> None:
    """Increment the rows-read counter in current run metrics."""
    metrics = _current_metrics.get()
    if metrics:
        metrics.rows_read += 1


def record_row_binned() -> None:
    """Increment the rows-binned counter in current run metrics."""
    metrics = _current_metrics.get()
    if metrics:
        metrics.rows_binned += 1


def record_row_skipped(kind: str) -> None:
    """Record a skipped row and its error kind in current run metrics."""
    metrics = _current_metrics.get()
    if metrics:
        metrics.rows_skipped += 1
        metrics.skipped_by_kind[kind] += 1


def record_operation_timing(operation: str, seconds: float) -> None:
    """Record timing for a sub-operation in current run metrics."""
    metrics = _current_metrics.get()
    if metrics:
        metrics.record_timing(operation, seconds)


# Initialize with default configuration
configure_logging()
