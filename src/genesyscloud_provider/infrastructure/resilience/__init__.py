"""Infrastructure resilience package - retrying runner and consistency checks."""

from .consistency import ConsistencyCheck, ConsistencyError, check_consistency
from .context import OperationContext
from .exceptions import (
    FatalOperationError,
    OperationCancelledError,
    RetryConfigurationError,
    RetryError,
    RetryTimeoutError,
)
from .outcome import DONE, Done, Fatal, Outcome, Retryable, non_retryable_error, retryable_error
from .runner import (
    DEFAULT_BACKOFF,
    DELETE_TIMEOUT,
    LOOKUP_TIMEOUT,
    with_retries,
    with_retries_for_read,
)

__all__: list[str] = [
    # Runner
    "with_retries",
    "with_retries_for_read",
    "DEFAULT_BACKOFF",
    "LOOKUP_TIMEOUT",
    "DELETE_TIMEOUT",
    # Outcomes
    "Outcome",
    "Done",
    "DONE",
    "Retryable",
    "Fatal",
    "retryable_error",
    "non_retryable_error",
    # Cancellation
    "OperationContext",
    # Consistency
    "ConsistencyCheck",
    "ConsistencyError",
    "check_consistency",
    # Exceptions
    "RetryError",
    "FatalOperationError",
    "RetryTimeoutError",
    "OperationCancelledError",
    "RetryConfigurationError",
]
