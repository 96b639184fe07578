"""
Podnorm Custom Exceptions
=========================

Exception hierarchy for the feed normalizer with error codes, context
information, and user-friendly messages.
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for categorizing exceptions."""

    # Configuration errors (C001-C099)
    CONFIG_INVALID = "C001"
    CONFIG_MISSING = "C002"

    # Feed input errors (F001-F099)
    FEED_NOT_FOUND = "F001"
    FEED_HEADER_INVALID = "F002"
    FEED_PARSE_ERROR = "F003"
    FEED_READ_ERROR = "F005"

    # Output errors (O001-O099)
    OUTPUT_WRITE_FAILED = "O001"
    OUTPUT_SERIALIZATION = "O002"
    OUTPUT_DIRECTORY = "O003"

    # System errors (S001-S099)
    SYSTEM_PERMISSION_DENIED = "S002"
    SYSTEM_MEMORY_ERROR = "S004"


class PodnormError(Exception):
    """Base exception for all podnorm errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        context: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        recoverable: bool = False,
    ):
        """Initialize podnorm error.

        Args:
            message: Technical error message for logging
            error_code: Categorized error code
            context: Additional context information
            user_message: User-friendly error message
            recoverable: Whether the error is recoverable
        """
        super().__init__(message)
        self.error_code = error_code
        self.context = context or {}
        self.user_message = user_message or message
        self.recoverable = recoverable

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code.value if self.error_code else None,
            "error_message": str(self),
            "user_message": self.user_message,
            "context": self.context,
            "recoverable": self.recoverable,
        }

    def __str__(self) -> str:
        """String representation with error code."""
        if self.error_code:
            return f"[{self.error_code.value}] {super().__str__()}"
        return super().__str__()


class ConfigurationError(PodnormError):
    """Configuration-related errors."""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        if config_key:
            context["config_key"] = config_key

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.CONFIG_INVALID),
            context=context,
            user_message=kwargs.get("user_message", f"Configuration error: {message}"),
            **{
                k: v
                for k, v in kwargs.items()
                if k not in ["context", "error_code", "user_message"]
            },
        )


class FeedError(PodnormError):
    """Errors tied to one feed document or feed file."""

    def __init__(self, message: str, source: Optional[str] = None, **kwargs):
        """Initialize feed error.

        Args:
            message: Error message
            source: File name or URL of the feed that caused the error
            **kwargs: Additional arguments for PodnormError
        """
        context = kwargs.get("context", {})
        if source:
            context["source"] = source

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.FEED_READ_ERROR),
            context=context,
            user_message=kwargs.get("user_message", "Feed could not be processed"),
            recoverable=kwargs.get("recoverable", True),
            **{
                k: v
                for k, v in kwargs.items()
                if k not in ["context", "error_code", "user_message", "recoverable"]
            },
        )


class FeedParseError(FeedError):
    """Malformed XML inside a feed document."""

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        if line is not None:
            context["line"] = line
        if column is not None:
            context["column"] = column
        self.line = line
        self.column = column

        kwargs.setdefault("error_code", ErrorCode.FEED_PARSE_ERROR)
        kwargs.setdefault("user_message", "Feed document is not well-formed XML")
        super().__init__(message, context=context, **kwargs)


class FeedHeaderError(FeedError):
    """Missing or malformed header block in front of a feed document."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.FEED_HEADER_INVALID)
        kwargs.setdefault("user_message", "Feed file header is invalid")
        kwargs.setdefault("recoverable", False)
        super().__init__(message, **kwargs)


class OutputError(PodnormError):
    """Record serialization and persistence errors."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        if path:
            context["path"] = path

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.OUTPUT_WRITE_FAILED),
            context=context,
            user_message=kwargs.get("user_message", "Failed to write output record"),
            recoverable=kwargs.get("recoverable", False),
            **{
                k: v
                for k, v in kwargs.items()
                if k not in ["context", "error_code", "user_message", "recoverable"]
            },
        )


def handle_exception(
    exception: Exception,
    logger,
    operation: str,
    context: Optional[Dict[str, Any]] = None,
) -> PodnormError:
    """Convert generic exceptions to podnorm exceptions with proper logging.

    Args:
        exception: Original exception
        logger: Logger instance for error logging
        operation: Operation that was being performed
        context: Additional context information

    Returns:
        Podnorm exception with proper categorization
    """
    context = context or {}
    context["operation"] = operation
    context["original_exception_type"] = type(exception).__name__

    if isinstance(exception, PodnormError):
        logger.error(f"Operation '{operation}' failed", extra=exception.to_dict())
        return exception

    elif isinstance(exception, FileNotFoundError):
        error = FeedError(
            message=f"File not found during {operation}: {str(exception)}",
            error_code=ErrorCode.FEED_NOT_FOUND,
            context=context,
            user_message="Feed file missing",
            recoverable=False,
        )

    elif isinstance(exception, PermissionError):
        error = PodnormError(
            message=f"Permission denied during {operation}: {str(exception)}",
            error_code=ErrorCode.SYSTEM_PERMISSION_DENIED,
            context=context,
            user_message="Access denied",
            recoverable=False,
        )

    elif isinstance(exception, UnicodeDecodeError):
        error = FeedHeaderError(
            message=f"Undecodable header during {operation}: {str(exception)}",
            context=context,
        )

    elif isinstance(exception, MemoryError):
        error = PodnormError(
            message=f"Memory exhausted during {operation}: {str(exception)}",
            error_code=ErrorCode.SYSTEM_MEMORY_ERROR,
            context=context,
            user_message="System resources exhausted",
            recoverable=True,
        )

    elif isinstance(exception, OSError):
        error = OutputError(
            message=f"I/O failure during {operation}: {str(exception)}",
            context=context,
        )

    else:
        error = PodnormError(
            message=f"Unexpected error during {operation}: {str(exception)}",
            context=context,
            user_message="An unexpected error occurred",
            recoverable=True,
        )

    logger.error(f"Operation '{operation}' failed", extra=error.to_dict())
    return error

