"""
Defines custom exceptions for the application and the permanent/temporary
classification that callers consult before retrying an operation.
"""


class AudiobaitError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(AudiobaitError):
    """Raised for issues related to configuration loading or validation."""


class OperationError(AudiobaitError):
    """
    Raised by every network-facing operation. As well as a message, it records
    whether the failure is permanent. Operations failing with a temporary
    error may be retried unchanged.
    """

    def __init__(self, message: str, permanent: bool = True):
        super().__init__(message)
        self.message = message
        self.permanent = permanent

    def __str__(self) -> str:
        return self.message


class AuthenticationError(OperationError):
    """Raised when device registration or authentication fails."""

    def __init__(self, message: str):
        super().__init__(message, permanent=True)


class NotAuthenticatedError(OperationError):
    """Raised when an authenticated call is attempted without a session token."""

    def __init__(self, message: str = "session has no access token"):
        super().__init__(message, permanent=True)


class DecodeError(OperationError):
    """Raised when a server response body cannot be decoded."""

    def __init__(self, message: str):
        super().__init__(message, permanent=True)


class StorageError(OperationError):
    """Raised when fetched content cannot be written to local storage."""

    def __init__(self, message: str):
        super().__init__(message, permanent=True)


def temporary_error(error: BaseException) -> OperationError:
    """Wraps any failure as a temporary (retryable) OperationError."""
    return OperationError(str(error) or type(error).__name__, permanent=False)


def is_permanent_error(error: BaseException | None) -> bool:
    """
    Examines the supplied error and returns True if it is permanent.

    Errors that were never classified are considered permanent.
    """
    if error is None:
        return False
    if isinstance(error, OperationError):
        return error.permanent
    return True


def is_http_success(status: int) -> bool:
    return 200 <= status < 300


def is_http_client_error(status: int) -> bool:
    return 400 <= status < 500
