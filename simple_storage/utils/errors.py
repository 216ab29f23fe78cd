"""Centralized error handling for SimpleStorage."""

from enum import Enum
from typing import Any, Dict, Optional

from simple_storage.utils.logging import get_logger

_logger = None


def _get_logger():
    """Get logger with lazy initialisation."""
    global _logger
    if _logger is None:
        _logger = get_logger(__name__)
    return _logger


## Error Categories


class ErrorCategory(Enum):
    """Categories of errors for better handling."""

    DATABASE = "database"
    VALIDATION = "validation"
    FILE_SYSTEM = "file_system"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


## Custom Exceptions


class StorageError(Exception):
    """Base exception for all SimpleStorage errors."""

    category = ErrorCategory.UNKNOWN
    user_message = "An error occurred"

    def __init__(
        self, message: str | None = None, details: Dict[str, Any] | None = None
    ):
        """Initialise StorageError with optional message and details."""
        self.message = message or self.user_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error details to a dictionary."""
        return {
            "error_type": self.__class__.__name__,
            "category": self.category.value,
            "message": self.message,
            "details": self.details,
        }


## Database Errors


class DatabaseError(StorageError):
    """Base exception for database-related errors."""

    category = ErrorCategory.DATABASE
    user_message = "A database error occurred"


class StorageUnavailableError(DatabaseError):
    """The backing store could not be opened (disk, permission, corruption)."""

    user_message = "The storage file could not be opened"


class DataIntegrityError(DatabaseError):
    """Stored data violates a schema invariant.

    Raised when a primary-key lookup yields more than one row, or when a
    stored value is not a ``{"value": ...}`` wrapper.
    """

    user_message = "Stored data is corrupted"


class QueryFailureError(DatabaseError):
    """Exception for queries that errored or were aborted."""

    user_message = "A storage query failed"


class InvalidTableError(DatabaseError):
    """Exception for unusable table names."""

    user_message = "Invalid table name"


## Validation Errors


class ValidationError(StorageError):
    """Base exception for validation-related errors."""

    category = ErrorCategory.VALIDATION
    user_message = "Invalid input"


class InvalidKeyError(ValidationError):
    """Exception for keys that are not strings."""

    user_message = "Keys must be strings"


class InvalidValueError(ValidationError):
    """Exception for values that cannot be serialised to JSON."""

    user_message = "Value is not JSON-serialisable"


## File System Errors


class FileSystemError(StorageError):
    """Base exception for file system-related errors."""

    category = ErrorCategory.FILE_SYSTEM
    user_message = "A file system error occurred"


## Configuration Errors


class ConfigurationError(StorageError):
    """Base exception for configuration-related errors."""

    category = ErrorCategory.CONFIGURATION
    user_message = "A configuration error occurred"


class MissingConfigError(ConfigurationError):
    """Exception for missing configuration settings."""

    user_message = "Missing configuration settings"


class InvalidConfigError(ConfigurationError):
    """Exception for invalid configuration settings."""

    user_message = "Invalid configuration settings"


## Error Handler


class ErrorHandler:
    """Centralized error handling and logging."""

    @staticmethod
    def handle(
        error: Exception, context: str = "", log_traceback: bool = True
    ) -> Dict[str, Any]:
        """Log an error and return a serialisable description of it."""
        if isinstance(error, StorageError):
            _get_logger().error(f"{context}: {error.message}", extra={"context": error.details})
            if log_traceback:
                _get_logger().exception(error)
            return error.to_dict()
        else:
            _get_logger().error(f"{context}: {str(error)}")
            if log_traceback:
                _get_logger().exception(error)
            return {
                "error_type": "UnknownError",
                "category": ErrorCategory.UNKNOWN.value,
                "message": str(error),
                "details": {"context": context},
            }


def format_error_message(error: Optional[BaseException]) -> str:
    """Format an error message for display."""
    if isinstance(error, StorageError):
        return error.message
    else:
        return "An unexpected error occurred - check logs for details."
