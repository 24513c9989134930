"""
Resilience Patterns for the Export Compression Pipeline
=======================================================

Error taxonomy for the batch stage. Only structural errors cross the
batch boundary; per-file errors are captured as outcomes.
"""

import time
import traceback
from typing import Any, Dict, Optional


class CompressionPipelineError(Exception):
    """Base class for errors raised by the compression pipeline"""


class NonRetryableError(CompressionPipelineError):
    """Base class for non-retryable errors"""

    def __init__(self, message: str, cause: Optional[Exception] = None,
                 error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        """
        Initialize a non-retryable error.

        Args:
            message: Error description
            cause: Original exception that caused this error
            error_code: Specific error code for categorization
            details: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.error_code = error_code
        self.details = details or {}
        self.timestamp = time.time()
        self.traceback = traceback.format_exc() if cause else None

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(message={self.message!r}, "
                f"cause={self.cause!r}, error_code={self.error_code!r}, "
                f"details={self.details!r})")

    def log_context(self) -> Dict[str, Any]:
        """Get error context for structured logging"""
        return {
            'error_type': type(self).__name__,
            'error_code': self.error_code,
            'message': self.message,
            'timestamp': self.timestamp,
            'details': self.details,
            'cause': str(self.cause) if self.cause else None
        }


class StructuralError(NonRetryableError):
    """The batch directory is missing or is not a directory"""

    def __init__(self, directory: str, reason: Optional[str] = None,
                 cause: Optional[Exception] = None):
        super().__init__(
            reason or f"Directory does not exist: {directory}",
            cause=cause,
            error_code="STRUCTURAL",
            details={'directory': str(directory)}
        )
        self.directory = directory


class OutputConflictError(NonRetryableError):
    """The destination path holds something that is not a gzip file"""

    def __init__(self, output_path: str):
        super().__init__(
            f"Refusing to overwrite non-gzip file: {output_path}",
            error_code="OUTPUT_CONFLICT",
            details={'output_path': str(output_path)}
        )
        self.output_path = output_path


def describe_error(error: BaseException) -> str:
    """One-line message for an error captured into an outcome"""
    if isinstance(error, OSError) and error.strerror:
        target = error.filename
        if target is not None:
            return f"{error.strerror}: {target}"
        return error.strerror
    message = str(error)
    return message or type(error).__name__
