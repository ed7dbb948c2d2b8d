"""
Retrying operation runner.

An operation is a zero-argument callable returning an Outcome: Done (or None),
Retryable(error) or Fatal(error). The runner calls it until it is done, fails
fatally, the deadline passes or the caller's context is cancelled. Attempts
are spaced by a fixed backoff; the operation is never invoked after the
deadline. Exceptions raised by the operation propagate unchanged.
"""

import time
from typing import Callable, Optional

from genesyscloud_provider.domain.resource.diagnostics import Diagnostics
from genesyscloud_provider.domain.resource.resource_data import ResourceData
from genesyscloud_provider.infrastructure.logging.logger import get_logger
from genesyscloud_provider.infrastructure.resilience.context import OperationContext
from genesyscloud_provider.infrastructure.resilience.exceptions import (
    FatalOperationError,
    OperationCancelledError,
    RetryConfigurationError,
    RetryTimeoutError,
)
from genesyscloud_provider.infrastructure.resilience.outcome import Done, Fatal, Outcome, Retryable

logger = get_logger(__name__)

DEFAULT_BACKOFF = 1.0
LOOKUP_TIMEOUT = 15.0
DELETE_TIMEOUT = 30.0

Operation = Callable[[], Optional[Outcome]]


def with_retries(ctx: Optional[OperationContext], timeout: float, operation: Operation,
                 backoff: float = DEFAULT_BACKOFF,
                 clock: Callable[[], float] = time.monotonic) -> None:
    """
    Run an operation until it succeeds, fails fatally or the deadline passes.

    Args:
        ctx: Caller's cancellation context, None for a background context
        timeout: Seconds from now until the deadline
        operation: Zero-argument callable returning an Outcome
        backoff: Fixed sleep between attempts in seconds, must be positive
        clock: Monotonic clock

    Raises:
        FatalOperationError: The operation returned Fatal
        RetryTimeoutError: The deadline passed with only Retryable outcomes
        OperationCancelledError: The context was cancelled
        RetryConfigurationError: Invalid timeout or backoff
    """
    if backoff <= 0:
        raise RetryConfigurationError(f"backoff must be positive, got {backoff}")
    if timeout < 0:
        raise RetryConfigurationError(f"timeout must be non-negative, got {timeout}")

    ctx = ctx or OperationContext.background()
    deadline = clock() + timeout
    attempts = 0
    last_error: Optional[BaseException] = None

    while True:
        if ctx.cancelled:
            raise OperationCancelledError(ctx.reason or "context canceled", attempts, last_error)
        if attempts and clock() >= deadline:
            logger.warning("Giving up after %s attempts in %ss: %s", attempts, timeout, last_error)
            raise RetryTimeoutError(timeout, last_error, attempts) from last_error

        attempts += 1
        outcome = operation()

        if outcome is None or isinstance(outcome, Done):
            return

        if isinstance(outcome, Fatal):
            logger.debug("Attempt %s failed with non-retryable error: %s", attempts, outcome.error)
            raise FatalOperationError(outcome.error, attempts) from outcome.error

        if not isinstance(outcome, Retryable):
            raise TypeError(f"operation returned {outcome!r}, expected an Outcome")

        last_error = outcome.error
        remaining = deadline - clock()
        logger.debug("Attempt %s not done yet, retrying: %s", attempts, last_error)
        if remaining > 0 and ctx.wait(min(backoff, remaining)):
            raise OperationCancelledError(ctx.reason or "context canceled", attempts, last_error)


def with_retries_for_read(ctx: Optional[OperationContext], d: ResourceData, operation: Operation,
                          timeout: Optional[float] = None,
                          backoff: float = DEFAULT_BACKOFF) -> Diagnostics:
    """
    Run a read operation with the resource's read timeout.

    A resource that is still not found when the deadline passes no longer
    exists remotely: its identifier is cleared so the engine drops it from
    state, and a warning diagnostic is returned.

    Raises:
        RetryError: For every other failure
    """
    try:
        with_retries(ctx, d.timeout("read") if timeout is None else timeout, operation, backoff=backoff)
    except RetryTimeoutError as e:
        if getattr(e.last_error, "status_code", None) != 404:
            raise
        resource_id = d.id
        logger.warning("%s %s not found, removing from state", d.resource_type, resource_id)
        d.set_id("")
        return Diagnostics.warning(
            f"{d.resource_type} {resource_id} not found, removed from state", str(e.last_error)
        )
    return Diagnostics()
