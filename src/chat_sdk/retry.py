"""
Retry Policy

A RetryPolicy wraps any outcome-producing coroutine factory and re-issues it
while the outcome is a network failure that the policy considers retryable.
Protocol and unexpected failures are never retried, whatever the policy says;
interpreting server error codes (rate limiting, auth) is left to the caller.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from .config import ClientConfig
from .outcome import NetworkFailure, Outcome

logger = logging.getLogger(__name__)


def _always(failure: NetworkFailure) -> bool:
    return True


@dataclass(frozen=True)
class RetryPolicy:
    """
    How many times, and how far apart, to re-issue a request.

    Attributes:
        max_attempts: Total number of attempts, including the first
        backoff: Delay before the first retry in seconds
        multiplier: Factor applied to the delay after each retry
        max_backoff: Upper bound for a single delay in seconds
        retry_on: Predicate selecting which network failures to retry
    """

    max_attempts: int = 1
    backoff: float = 1.0
    multiplier: float = 2.0
    max_backoff: float = 30.0
    retry_on: Callable[[NetworkFailure], bool] = _always

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.backoff < 0 or self.max_backoff < 0:
            raise ValueError("backoff delays must not be negative")

    @classmethod
    def from_config(cls, config: ClientConfig) -> "RetryPolicy":
        """Build the default policy from client configuration."""
        return cls(max_attempts=config.max_attempts, backoff=config.retry_backoff)

    def delay_for(self, retry_number: int) -> float:
        """
        Delay before the given retry.

        Args:
            retry_number: 1 for the first retry, 2 for the second, ...

        Returns:
            Delay in seconds
        """
        delay = self.backoff * (self.multiplier ** (retry_number - 1))
        return min(delay, self.max_backoff)

    def should_retry(self, outcome: Outcome, attempt: int) -> bool:
        """Whether the outcome of attempt number `attempt` warrants another one."""
        if attempt >= self.max_attempts:
            return False
        if not isinstance(outcome, NetworkFailure):
            return False
        return self.retry_on(outcome)

    async def execute(
        self,
        attempt_once: Callable[[], Awaitable[Outcome]],
        description: str = "request",
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ) -> Outcome:
        """
        Run `attempt_once` until it settles or the policy gives up.

        Args:
            attempt_once: Zero-argument factory issuing one fresh request
            description: Label used in log lines
            sleep: Awaitable delay function (defaults to asyncio.sleep)

        Returns:
            The outcome of the last attempt
        """
        sleep = sleep or asyncio.sleep
        attempt = 1
        outcome = await attempt_once()
        while self.should_retry(outcome, attempt):
            delay = self.delay_for(attempt)
            logger.warning(
                f"{description}: network failure ({outcome.cause}), "
                f"retry {attempt}/{self.max_attempts - 1} in {delay:.2f}s"
            )
            await sleep(delay)
            attempt += 1
            outcome = await attempt_once()
        return outcome


NO_RETRY = RetryPolicy()
