"""
Exception hierarchy for the conversion pipeline.

Every error raised while converting a file derives from ConversionError and
carries a ``recoverable`` flag. The retry layer reads that flag to decide
whether another attempt is worth making.
"""

from typing import Optional, Dict, Any


class ConversionError(Exception):
    """Root of every error raised while converting a template.

    Attributes:
        message: What went wrong, without the class name
        context: Extra facts for the log (path, status code, ...)
        recoverable: True when a later attempt could succeed
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None,
                 recoverable: bool = False):
        super().__init__(message)
        self.message = message
        self.context = dict(context) if context else {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} [{details}]"


# --- Translation service errors ---

class ServiceError(ConversionError):
    """The translation service call failed. Retried by default."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None,
                 recoverable: bool = True):
        super().__init__(message, context, recoverable)


class ServiceConnectionError(ServiceError):
    """Timeout or transport failure before an answer arrived."""


class ServiceRateLimitError(ServiceError):
    """The service answered 429.

    Attributes:
        retry_after: Seconds from the Retry-After header, if it was numeric
    """

    def __init__(self, message: str, retry_after: Optional[float] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context)
        self.retry_after = retry_after
        if retry_after is not None:
            self.context['retry_after'] = retry_after


class ServiceAuthenticationError(ServiceError):
    """The API key was rejected. Another attempt cannot fix this."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context, recoverable=False)


class ServiceResponseError(ServiceError):
    """The answer was empty, blocked or not valid JSON."""


# --- File errors ---

class FileOperationError(ConversionError):
    """Base exception for filesystem errors."""
    pass


class FileReadError(FileOperationError):
    """Raised when reading an input file fails."""
    pass


class FileWriteError(FileOperationError):
    """Raised when writing the output or removing the original fails."""
    pass


# --- Configuration errors ---

class ConfigurationError(ConversionError):
    """A setting is missing or malformed; the run cannot start."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context, recoverable=False)


# Errors that will fail the same way on every attempt
_TERMINAL_OS_ERRORS = (
    FileNotFoundError,
    PermissionError,
    IsADirectoryError,
    NotADirectoryError,
)


def classify_error(error: BaseException) -> bool:
    """
    Decide whether an error is worth retrying.

    Args:
        error: Exception raised during one conversion attempt

    Returns:
        True if another attempt may succeed
    """
    if isinstance(error, ConversionError):
        return error.recoverable
    if isinstance(error, UnicodeDecodeError):
        return False
    if isinstance(error, _TERMINAL_OS_ERRORS):
        return False
    return True


def describe_error(error: BaseException) -> str:
    """Short reason string for an error, falling back to its type name."""
    if isinstance(error, ConversionError):
        return error.message
    text = str(error)
    return text if text else type(error).__name__
