"""Error bookkeeping for the SFTP deployment tool.

Every failure that crosses a component boundary is recorded here with its
category, severity and remote/local path context before it propagates.
"""

import json
import logging
import traceback
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, Any, Optional, List


class ErrorCategory(Enum):
    """Categories of errors that can occur in the system."""
    CONFIGURATION = "configuration"
    SFTP_CONNECTION = "sftp_connection"
    SFTP_DIRECTORY = "sftp_directory"
    SFTP_FILE_OPERATION = "sftp_file_operation"
    SFTP_PERMISSION = "sftp_permission"
    LOCAL_FILESYSTEM = "local_filesystem"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    CRITICAL = "critical"  # Transfer cannot start
    HIGH = "high"          # Transfer of a file or subtree aborted
    MEDIUM = "medium"      # Recoverable, e.g. a connection attempt that will be retried


_LOG_LEVELS = {
    ErrorSeverity.CRITICAL: logging.CRITICAL,
    ErrorSeverity.HIGH: logging.ERROR,
    ErrorSeverity.MEDIUM: logging.WARNING,
}


@dataclass
class ErrorContext:
    """One recorded failure."""
    timestamp: datetime = field(default_factory=datetime.now)
    category: ErrorCategory = ErrorCategory.UNKNOWN
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    component: str = ""
    operation: str = ""
    error_message: str = ""
    exception_type: str = ""
    stack_trace: str = ""
    additional_data: Dict[str, Any] = field(default_factory=dict)


class ErrorHandler:
    """Logs failures once, keeps a bounded history and optionally appends them to a JSONL file."""

    def __init__(self, storage_path: Optional[str] = None, history_limit: int = 1000):
        """Initialize the error handler.

        Args:
            storage_path: Directory for the JSONL error log; nothing is written when None
            history_limit: Number of recent errors kept in memory
        """
        self.logger = logging.getLogger(__name__)
        self.history_limit = history_limit
        self.error_history: List[ErrorContext] = []

        self.error_log_file = None
        if storage_path:
            Path(storage_path).mkdir(parents=True, exist_ok=True)
            self.error_log_file = Path(storage_path) / "error_context.jsonl"

    def handle_error(self,
                    error: BaseException,
                    category: ErrorCategory,
                    severity: ErrorSeverity,
                    component: str,
                    operation: str,
                    additional_data: Optional[Dict[str, Any]] = None) -> ErrorContext:
        """Record an error.

        Args:
            error: The exception that occurred
            category: Category of the error
            severity: Severity level of the error
            component: Component where the error occurred
            operation: Operation being performed when error occurred
            additional_data: Paths and other values worth keeping with the error

        Returns:
            ErrorContext object with error details
        """
        context = ErrorContext(
            category=category,
            severity=severity,
            component=component,
            operation=operation,
            error_message=str(error),
            exception_type=type(error).__name__,
            stack_trace="".join(traceback.format_exception(type(error), error, error.__traceback__)),
            additional_data=additional_data or {}
        )

        self._log_error(context)
        self._store_error_context(context)

        self.error_history.append(context)
        del self.error_history[:-self.history_limit]

        return context

    def _log_error(self, context: ErrorContext):
        message = (f"[{context.category.value.upper()}] {context.component}.{context.operation}: "
                   f"{context.error_message}")
        if context.additional_data:
            message += f" | Context: {context.additional_data}"

        self.logger.log(_LOG_LEVELS[context.severity], message)
        self.logger.debug(f"Stack trace for {context.component}.{context.operation}:\n{context.stack_trace}")

    def _store_error_context(self, context: ErrorContext):
        if self.error_log_file is None:
            return
        record = {
            "timestamp": context.timestamp.isoformat(),
            "category": context.category.value,
            "severity": context.severity.value,
            "component": context.component,
            "operation": context.operation,
            "error_message": context.error_message,
            "exception_type": context.exception_type,
            "additional_data": {k: str(v) for k, v in context.additional_data.items()}
        }
        try:
            with open(self.error_log_file, 'a', encoding='utf-8') as f:
                f.write(json.dumps(record) + '\n')
        except OSError as e:
            self.logger.warning(f"Failed to store error context: {e}")

    def count_by(self, attribute: str) -> Counter:
        """Count recorded errors by ``category`` or ``severity``."""
        return Counter(getattr(e, attribute).value for e in self.error_history)

    def generate_error_report(self) -> str:
        """Summarise the recorded errors; empty when there are none."""
        if not self.error_history:
            return ""

        lines = [f"Total Errors: {len(self.error_history)}", "By severity:"]
        lines += [f"- {name.upper()}: {count}" for name, count in self.count_by("severity").items()]
        lines.append("By category:")
        lines += [f"- {name.upper()}: {count}" for name, count in self.count_by("category").items()]
        return "\n".join(lines)


# Global error handler instance
_global_error_handler: Optional[ErrorHandler] = None


def get_error_handler(storage_path: Optional[str] = None) -> ErrorHandler:
    """Get the global error handler instance.

    Args:
        storage_path: Path to store error logs (only used on first call)

    Returns:
        Global ErrorHandler instance
    """
    global _global_error_handler

    if _global_error_handler is None:
        _global_error_handler = ErrorHandler(storage_path)

    return _global_error_handler


def reset_error_handler() -> None:
    """Drop the global error handler so the next call creates a fresh one."""
    global _global_error_handler
    _global_error_handler = None


def handle_error(error: BaseException,
                category: ErrorCategory,
                severity: ErrorSeverity,
                component: str,
                operation: str,
                additional_data: Optional[Dict[str, Any]] = None) -> ErrorContext:
    """Record an error with the global error handler."""
    return get_error_handler().handle_error(
        error=error,
        category=category,
        severity=severity,
        component=component,
        operation=operation,
        additional_data=additional_data
    )
