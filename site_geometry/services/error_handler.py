"""Error recording for operator-facing geometry errors."""

import functools
import traceback
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from enum import Enum

from ..exceptions import GeometryError
from ..logging_config import get_logger


class ErrorSeverity(Enum):
    """Error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ErrorRecord:
    """Record of an error occurrence."""
    component_name: str
    error: Exception
    severity: ErrorSeverity
    timestamp: datetime = field(default_factory=datetime.now)
    traceback_str: str = ""

    @property
    def error_type(self) -> str:
        return type(self.error).__name__

    @property
    def recoverable(self) -> bool:
        return isinstance(self.error, GeometryError)

    @property
    def operator_message(self) -> str:
        """Message suitable for showing to the operator."""
        if isinstance(self.error, GeometryError):
            return str(self.error)
        return "Unexpected error, please try again"


class ErrorHandler:
    """Collects errors raised by the engine components.

    Geometry errors are recoverable by construction, so the handler only keeps
    a bounded history and per-component counts; nothing is retried.
    """

    def __init__(self, max_error_history: int = 500):
        self.logger = get_logger("error_handler")
        self.max_error_history = max_error_history
        self.error_records: List[ErrorRecord] = []
        self.component_error_counts: Dict[str, int] = {}

    def register_component(self, component_name: str) -> None:
        """Register a component so it shows up in summaries with zero errors."""
        self.component_error_counts.setdefault(component_name, 0)
        self.logger.debug(f"Component registered: {component_name}")

    def handle_error(self, component_name: str, error: Exception,
                     severity: ErrorSeverity = ErrorSeverity.MEDIUM) -> ErrorRecord:
        """Record an error from a component and return the record."""
        error_record = ErrorRecord(
            component_name=component_name,
            error=error,
            severity=severity,
            traceback_str="" if isinstance(error, GeometryError) else traceback.format_exc()
        )

        self.error_records.append(error_record)
        if len(self.error_records) > self.max_error_history:
            del self.error_records[:len(self.error_records) - self.max_error_history]

        self.component_error_counts[component_name] = self.component_error_counts.get(component_name, 0) + 1

        if error_record.recoverable:
            self.logger.warning(f"{component_name} rejected input: {error} ({error_record.error_type})")
        else:
            self.logger.error(f"Error in {component_name}: {error} (Severity: {severity.value})")

        return error_record

    def get_recent_errors(self, limit: int = 10) -> List[ErrorRecord]:
        return self.error_records[-limit:]

    def get_error_stats(self) -> Dict[str, Any]:
        """Get error statistics."""
        return {
            "total_errors": len(self.error_records),
            "component_error_counts": dict(self.component_error_counts),
        }

    def reset_error_counts(self, component_name: Optional[str] = None) -> None:
        """Reset error counts for a component or all components."""
        if component_name:
            if component_name in self.component_error_counts:
                self.component_error_counts[component_name] = 0
        else:
            for component in self.component_error_counts:
                self.component_error_counts[component] = 0

    def clear_error_history(self) -> None:
        self.error_records.clear()
        self.reset_error_counts()

    def get_error_summary(self, hours: int = 24) -> Dict[str, Any]:
        """Get summary of errors in the last N hours."""
        cutoff_time = datetime.now() - timedelta(hours=hours)
        recent_errors = [e for e in self.error_records if e.timestamp >= cutoff_time]

        component_counts: Dict[str, int] = {}
        type_counts: Dict[str, int] = {}
        severity_counts = {severity.value: 0 for severity in ErrorSeverity}

        for error in recent_errors:
            component_counts[error.component_name] = component_counts.get(error.component_name, 0) + 1
            type_counts[error.error_type] = type_counts.get(error.error_type, 0) + 1
            severity_counts[error.severity.value] += 1

        return {
            "total_errors": len(recent_errors),
            "component_counts": component_counts,
            "error_type_counts": type_counts,
            "severity_counts": severity_counts,
            "time_period_hours": hours
        }


# Create global error handler instance
global_error_handler = ErrorHandler()


def with_error_handling(component_name: str, severity: ErrorSeverity = ErrorSeverity.MEDIUM,
                        error_handler: Optional[ErrorHandler] = None):
    """Decorator that records errors raised by the wrapped call, then re-raises them."""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                handler = error_handler or global_error_handler
                handler.handle_error(component_name, e, severity)
                raise
        return wrapper
    return decorator
