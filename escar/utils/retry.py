# Copyright 2026 Firefly Software Solutions Inc
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Bounded retry with fixed backoff for directory and membership calls.

Every external call made while a node establishes its identity goes
through a RetryExecutor. The policy is deliberately simple:

- A fixed number of attempts (15 by default)
- A fixed delay between attempts (100ms by default, not exponential)
- Cancellation aborts immediately without sleeping
- Non-retryable errors (configuration, lifecycle) abort immediately
- The first failure is logged with its traceback, later ones in one line

Each attempt is folded into an AttemptResult tagged with an AttemptStatus
and the executor branches on that tag.

Example:
    >>> executor = RetryExecutor(max_attempts=5, backoff_delay=0.2)
    >>> records = executor.call(lambda: directory.list_all("escar"))
"""

from __future__ import annotations

import asyncio
import time
from concurrent.futures import CancelledError
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

from escar.exceptions import OperationCancelledError
from escar.utils.logger import logger

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 15
DEFAULT_BACKOFF_DELAY = 0.1

CANCELLATION_ERRORS = (OperationCancelledError, CancelledError, asyncio.CancelledError)


class AttemptStatus(str, Enum):
    """Outcome of a single attempt."""
    SUCCESS = "success"
    RETRYABLE = "retryable"
    FATAL = "fatal"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class AttemptResult(Generic[T]):
    """The outcome of one attempt, as seen by the per-attempt hook.

    Attributes:
        attempt: 1-based attempt number
        status: How the attempt ended
        value: Return value on success
        error: The raised exception on failure
    """
    attempt: int
    status: AttemptStatus
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.status is AttemptStatus.SUCCESS


def classify_error(error: BaseException) -> AttemptStatus:
    """Map an exception raised by an attempt to its status tag."""
    if isinstance(error, CANCELLATION_ERRORS):
        return AttemptStatus.CANCELLED
    if not isinstance(error, Exception):
        # KeyboardInterrupt, SystemExit and friends
        return AttemptStatus.FATAL
    if not getattr(error, "retryable", True):
        return AttemptStatus.FATAL
    return AttemptStatus.RETRYABLE


class RetryExecutor:
    """
    Runs a zero-argument operation until it succeeds or the budget is spent.

    An executor keeps no state between calls apart from its policy, but it
    is not meant to be shared between threads; give each call site its own.

    Attributes:
        max_attempts: Total attempts before a retryable failure is terminal
        backoff_delay: Seconds to sleep between attempts
        on_attempt: Optional hook called with the AttemptResult of every
            attempt, including the one that ends the call; errors it
            raises are logged and never change the outcome

    Example:
        >>> executor = RetryExecutor()
        >>> instance = executor.call(register_self)
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff_delay: float = DEFAULT_BACKOFF_DELAY,
        on_attempt: Optional[Callable[[AttemptResult], None]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        """
        Initialize the executor.

        Args:
            max_attempts: Maximum number of attempts, at least 1
            backoff_delay: Fixed delay between attempts in seconds
            on_attempt: Per-attempt observability hook
            sleep: Blocking sleep function, time.sleep by default

        Raises:
            ValueError: If max_attempts < 1 or backoff_delay < 0
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if backoff_delay < 0:
            raise ValueError("backoff_delay must not be negative")

        self.max_attempts = max_attempts
        self.backoff_delay = backoff_delay
        self.on_attempt = on_attempt
        self._sleep = sleep or time.sleep

    def _attempt(self, operation: Callable[[], T], attempt: int) -> AttemptResult[T]:
        try:
            value = operation()
        except BaseException as e:
            return AttemptResult(attempt=attempt, status=classify_error(e), error=e)
        return AttemptResult(attempt=attempt, status=AttemptStatus.SUCCESS, value=value)

    def _notify(self, result: AttemptResult) -> None:
        # The hook never replaces the outcome of the attempt
        if self.on_attempt is None:
            return
        try:
            self.on_attempt(result)
        except Exception as e:
            logger.warning(f"on_attempt hook failed: {e}", exc_info=True)

    def call(self, operation: Callable[[], T]) -> T:
        """
        Execute an operation with retries.

        Args:
            operation: Callable taking no arguments

        Returns:
            The operation's return value

        Raises:
            Exception: The last error once the budget is exhausted, or the
                first cancellation or non-retryable error
        """
        failures = 0
        attempt = 0

        while True:
            attempt += 1
            result = self._attempt(operation, attempt)
            try:
                if result.status is AttemptStatus.SUCCESS:
                    if failures:
                        logger.info(f"Call succeeded after {failures} retries")
                    return result.value

                if result.status is AttemptStatus.CANCELLED:
                    logger.info(f"Call cancelled on attempt {attempt}")
                    raise result.error

                if result.status is AttemptStatus.FATAL:
                    logger.error(f"Non-retryable error: {result.error}")
                    raise result.error

                failures += 1
                if failures >= self.max_attempts:
                    logger.error(
                        f"Giving up after {failures} attempts. "
                        f"Last error: {result.error}"
                    )
                    raise result.error

                logger.error(
                    f"Retry #{failures} for: {result.error}",
                    exc_info=result.error if failures == 1 else None,
                )
            finally:
                self._notify(result)

            self._sleep(self.backoff_delay)
