# Utilities module

from .error_handler import ErrorHandler, ErrorCategory, ErrorSeverity, handle_error, get_error_handler
from .logging_config import LoggingManager, setup_logging
from .progress import ProgressMonitor, PROGRESS_THRESHOLD_BYTES, should_track_progress

__all__ = [
    'ErrorHandler', 'ErrorCategory', 'ErrorSeverity', 'handle_error', 'get_error_handler',
    'LoggingManager', 'setup_logging',
    'ProgressMonitor', 'PROGRESS_THRESHOLD_BYTES', 'should_track_progress'
]
