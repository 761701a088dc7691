"""Structured log context and per-image timing metrics."""

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class LogContext:
    """Context carried through a batch so its log lines can be correlated."""

    correlation_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    operation: str = ""
    component: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def with_operation(self, operation: str) -> "LogContext":
        """Create new context with operation set."""
        return LogContext(
            correlation_id=self.correlation_id,
            operation=operation,
            component=self.component,
            metadata=self.metadata.copy(),
        )

    def with_metadata(self, **kwargs) -> "LogContext":
        """Create new context with additional metadata."""
        return LogContext(
            correlation_id=self.correlation_id,
            operation=self.operation,
            component=self.component,
            metadata={**self.metadata, **kwargs},
        )


def format_message(message: str, context: Optional[LogContext] = None, **kwargs) -> str:
    """Render ``[operation] [correlation] message (k=v, ...)``."""
    if context is not None:
        message = f"[{context.correlation_id}] {message}"
        if context.operation:
            message = f"[{context.operation}] {message}"
        kwargs = {**context.metadata, **kwargs}
    if kwargs:
        details = ", ".join(f"{k}={v}" for k, v in kwargs.items())
        message = f"{message} ({details})"
    return message


class StructuredLogger:
    """Logger accepting a LogContext and keyword details on every call."""

    def __init__(self, name: str, level: int = logging.INFO):
        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)

        if not self._logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(
                logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            )
            self._logger.addHandler(handler)

    def debug(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._logger.debug(format_message(message, context, **kwargs))

    def info(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._logger.info(format_message(message, context, **kwargs))

    def warning(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._logger.warning(format_message(message, context, **kwargs))

    def error(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._logger.error(format_message(message, context, **kwargs))


@dataclass
class PerformanceMetrics:
    """Timing of one operation on one image."""

    operation: str
    start_time: float
    end_time: float
    success: bool
    error_message: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    @property
    def duration_ms(self) -> float:
        return self.duration * 1000


class MetricsCollector:
    """Thread-safe collector; workers of every strategy record into it."""

    def __init__(self):
        self._metrics: List[PerformanceMetrics] = []
        self._lock = threading.Lock()

    def record_metric(self, metric: PerformanceMetrics):
        with self._lock:
            self._metrics.append(metric)

    def record(
        self,
        operation: str,
        start_time: float,
        success: bool,
        error_message: Optional[str] = None,
        **metadata,
    ) -> PerformanceMetrics:
        """Record a metric that ends now."""
        metric = PerformanceMetrics(
            operation=operation,
            start_time=start_time,
            end_time=time.time(),
            success=success,
            error_message=error_message,
            metadata=metadata,
        )
        self.record_metric(metric)
        return metric

    def get_metrics(self, operation: Optional[str] = None) -> List[PerformanceMetrics]:
        """Get recorded metrics, optionally filtered by operation."""
        with self._lock:
            if operation:
                return [m for m in self._metrics if m.operation == operation]
            return self._metrics.copy()

    def get_summary(self, operation: Optional[str] = None) -> Dict[str, Any]:
        """
        Summary statistics for the recorded metrics.

        ``bytes_saved`` totals the ``bytes_saved`` metadata of successful
        operations. Returns ``{}`` when nothing was recorded.
        """
        metrics = self.get_metrics(operation)

        if not metrics:
            return {}

        durations = [m.duration for m in metrics]
        successful = [m for m in metrics if m.success]

        return {
            "total_operations": len(metrics),
            "successful_operations": len(successful),
            "failed_operations": len(metrics) - len(successful),
            "success_rate": len(successful) / len(metrics),
            "avg_duration": sum(durations) / len(durations),
            "min_duration": min(durations),
            "max_duration": max(durations),
            "total_duration": sum(durations),
            "bytes_saved": sum(m.metadata.get("bytes_saved", 0) for m in successful),
        }

    def clear_metrics(self):
        with self._lock:
            self._metrics.clear()
