"""
Asynchronous Remote Operation

This module provides AsyncOperation, the single place where the result of a
transport call is classified. Every remote operation (login flow discovery,
registration, password and token login, initial room sync) goes through it,
so they all share the same outcome and retry semantics.

Architecture:
    - `request` is the retryable call: a zero-argument coroutine factory that
      issues the exact same request each time it is called
    - `transform` turns the decoded success payload into the endpoint result
    - an optional RetryPolicy decides whether a network failure is re-issued
    - an optional ApiCallback is notified exactly once per run()

Usage:
    operation = AsyncOperation(
        "fetch room preview",
        lambda: transport.request("GET", path),
        transform=RoomResponse.from_dict,
    )
    outcome = await operation.run()
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, TypeVar

from .errors import NetworkError, ProtocolError
from .outcome import (
    ApiCallback,
    NetworkFailure,
    Outcome,
    ProtocolFailure,
    Success,
    UnexpectedFailure,
    dispatch,
)
from .retry import NO_RETRY, RetryPolicy

logger = logging.getLogger(__name__)

R = TypeVar("R")

RequestFactory = Callable[[], Awaitable[Dict[str, Any]]]


def _identity(payload: Any) -> Any:
    return payload


class AsyncOperation(Generic[R]):
    """
    One remote operation with its retry action and endpoint transform.

    The operation never retries on its own: retries only happen through the
    RetryPolicy supplied by the caller, and only for network failures.

    Attributes:
        description: Label used in log lines
        request: The retryable call
        retry_policy: Policy applied to network failures
    """

    def __init__(
        self,
        description: str,
        request: RequestFactory,
        transform: Callable[[Dict[str, Any]], R] = _identity,
        callback: Optional[ApiCallback[R]] = None,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        """
        Initialize the operation.

        Args:
            description: Label used in log lines
            request: Zero-argument factory issuing the request
            transform: Converts the success payload into the result
            callback: Optional callback notified once per run()
            retry_policy: Policy for network failures (default: no retry)
            sleep: Awaitable delay used between retries (for testing)
        """
        self.description = description
        self.request = request
        self.retry_policy = retry_policy or NO_RETRY
        self._transform = transform
        self._callback = callback
        self._sleep = sleep

    async def run(self) -> Outcome[R]:
        """
        Issue the request and settle it into exactly one outcome.

        Returns:
            Success, NetworkFailure, ProtocolFailure or UnexpectedFailure
        """
        logger.info(f"{self.description}: sending request")
        outcome = await self.retry_policy.execute(
            self._attempt, self.description, self._sleep
        )
        if self._callback is not None:
            dispatch(outcome, self._callback)
        return outcome

    async def _attempt(self) -> Outcome[R]:
        """Issue the request once and classify what happened."""
        try:
            payload = await self.request()
        except NetworkError as e:
            logger.error(f"{self.description}: network error: {e}")
            return NetworkFailure(e)
        except ProtocolError as e:
            logger.error(
                f"{self.description}: server error {e.errcode}: {e.error}"
            )
            return ProtocolFailure.from_error(e)
        except Exception as e:
            logger.error(f"{self.description}: unexpected error: {e}")
            return UnexpectedFailure(e)

        try:
            result = self._transform(payload)
        except Exception as e:
            logger.error(f"{self.description}: could not decode response: {e}")
            return UnexpectedFailure(e)

        logger.info(f"{self.description}: succeeded")
        return Success(result)
