"""Utilities for applying delays and retry backoff to outbound calls."""
from __future__ import annotations

import itertools
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
    wait_fixed,
)

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

RetryCallback = Callable[[int, Optional[BaseException]], None]


@dataclass
class DelayPolicy:
    """Simple policy describing artificial delay behaviour between request bursts."""

    delay_seconds: float = 0.0

    def pause(self, sleep: Callable[[float], None] = time.sleep) -> None:
        if self.delay_seconds > 0:
            sleep(self.delay_seconds)


@dataclass
class BackoffPolicy:
    """Number of attempts and the wait between them.

    ``multiplier`` of 1.0 gives a fixed interval; larger values grow the wait
    geometrically from ``base_delay``.
    """

    attempts: int = 5
    base_delay: float = 1.0
    multiplier: float = 1.0
    max_delay: float = 30.0

    def delay_for(self, attempt: int) -> float:
        """Wait applied after the given (1-based) failed attempt."""

        delay = self.base_delay * (self.multiplier ** max(attempt - 1, 0))
        return max(0.0, min(delay, self.max_delay))

    def wait_strategy(self):
        """Equivalent tenacity wait for :meth:`delay_for`."""

        if self.multiplier > 1:
            return wait_exponential(
                multiplier=max(0.0, self.base_delay),
                exp_base=self.multiplier,
                max=max(0.0, self.max_delay),
            )
        return wait_fixed(max(0.0, min(self.base_delay, self.max_delay)))


def retry_with_backoff(
    operation: Callable[[int], T],
    policy: Optional[BackoffPolicy] = None,
    *,
    is_success: Callable[[T], bool] = bool,
    on_retry: Optional[RetryCallback] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Optional[T]:
    """Call ``operation(attempt)`` until it yields a successful result.

    Exceptions count as failed attempts. Returns the first successful result,
    otherwise the last non-exception result (``None`` if every attempt raised).
    """

    policy = policy or BackoffPolicy()
    attempts = max(1, policy.attempts)
    counter = itertools.count(1)
    last_result: Optional[T] = None

    def call() -> T:
        nonlocal last_result
        result = operation(next(counter))
        last_result = result
        return result

    def before_sleep(state: RetryCallState) -> None:
        error = state.outcome.exception() if state.outcome.failed else None
        if error is not None:
            LOGGER.debug("Attempt %s/%s raised %s", state.attempt_number, attempts, error)
        if on_retry is not None:
            on_retry(state.attempt_number, error)

    def give_up(state: RetryCallState) -> Optional[T]:
        if state.outcome.failed:
            LOGGER.debug("Attempt %s/%s raised %s", state.attempt_number, attempts, state.outcome.exception())
        return last_result

    retrying = Retrying(
        stop=stop_after_attempt(attempts),
        wait=policy.wait_strategy(),
        retry=retry_if_exception_type(Exception) | retry_if_result(lambda result: not is_success(result)),
        before_sleep=before_sleep,
        sleep=sleep,
        retry_error_callback=give_up,
    )
    return retrying(call)
