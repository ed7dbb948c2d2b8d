"""Exceptions raised by the retrying runner."""

from typing import Optional


class RetryError(Exception):
    """Base exception for retrying runner failures."""

    def __init__(self, message: str, attempts: int = 0, last_error: Optional[BaseException] = None):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class FatalOperationError(RetryError):
    """The operation reported a non-retryable error."""

    def __init__(self, error: BaseException, attempts: int):
        super().__init__(str(error), attempts=attempts, last_error=error)


class RetryTimeoutError(RetryError):
    """The deadline passed while the operation kept reporting retryable errors."""

    def __init__(self, timeout: float, last_error: Optional[BaseException], attempts: int):
        super().__init__(
            f"timeout after {timeout:g}s waiting for operation to succeed: {last_error}",
            attempts=attempts,
            last_error=last_error,
        )
        self.timeout = timeout


class OperationCancelledError(RetryError):
    """The caller's context was cancelled before the operation succeeded."""

    def __init__(self, reason: str, attempts: int, last_error: Optional[BaseException] = None):
        message = f"operation cancelled: {reason}"
        if last_error is not None:
            message = f"{message} (last error: {last_error})"
        super().__init__(message, attempts=attempts, last_error=last_error)
        self.reason = reason


class RetryConfigurationError(RetryError):
    """Invalid runner arguments."""
    pass
