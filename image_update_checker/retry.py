"""
Bounded, immediate retries for registry calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Tuple, Type, TypeVar

from .errors import (
    RegistryConnectionError,
    RegistryNotFoundError,
    RegistryServerError,
    RegistryTimeoutError,
    RegistryTooManyRequestsError,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3

TRANSIENT_ERRORS: Tuple[Type[Exception], ...] = (
    RegistryTimeoutError,
    RegistryConnectionError,
    RegistryServerError,
    RegistryTooManyRequestsError,
    RegistryNotFoundError,
)


def is_transient(error: Exception) -> bool:
    return isinstance(error, TRANSIENT_ERRORS)


@dataclass(frozen=True)
class RetryOutcome(Generic[T]):
    """Either the call's value or the error that survived every attempt."""

    value: Optional[T] = None
    error: Optional[Exception] = None
    attempts: int = 0

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def exhausted(self) -> bool:
        return self.error is not None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value


def with_retries(
    operation: Callable[[], T],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    retryable: Callable[[Exception], bool] = is_transient,
) -> RetryOutcome[T]:
    """Run ``operation`` up to ``max_attempts`` times.

    Errors ``retryable`` rejects propagate immediately. A retryable error on
    the last attempt is returned in the outcome rather than raised, so the
    caller decides how to classify it.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return RetryOutcome(value=operation(), attempts=attempt)
        except Exception as e:
            if not retryable(e):
                raise
            if attempt >= max_attempts:
                logger.debug("Giving up after %d attempts: %s", attempt, e)
                return RetryOutcome(error=e, attempts=attempt)
            logger.debug("Attempt %d/%d failed, retrying: %s", attempt, max_attempts, e)
