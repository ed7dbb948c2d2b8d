"""Outcome of one attempt inside the retrying runner."""

from dataclasses import dataclass
from typing import Union


class Outcome:
    """Base class for attempt outcomes."""


@dataclass(frozen=True)
class Done(Outcome):
    """Success, stop polling."""


@dataclass(frozen=True)
class Retryable(Outcome):
    """Transient failure, poll again until the deadline."""

    error: BaseException


@dataclass(frozen=True)
class Fatal(Outcome):
    """Unrecoverable failure, stop immediately."""

    error: BaseException


DONE = Done()


def _as_exception(error: Union[BaseException, str]) -> BaseException:
    return error if isinstance(error, BaseException) else Exception(error)


def retryable_error(error: Union[BaseException, str]) -> Retryable:
    return Retryable(_as_exception(error))


def non_retryable_error(error: Union[BaseException, str]) -> Fatal:
    return Fatal(_as_exception(error))
