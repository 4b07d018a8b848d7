"""Bounded retry helper for remote calls."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

_logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed number of attempts separated by a fixed delay."""

    max_attempts: int = 3
    backoff_seconds: float = 1.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.backoff_seconds < 0:
            raise ValueError("backoff_seconds must not be negative")


async def attempt_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Sleep = asyncio.sleep,
    description: str = "operation",
) -> T:
    """Run an operation, retrying matching failures until attempts run out.

    The last failure is re-raised unchanged once the policy is exhausted.
    Exceptions outside ``retry_on`` propagate immediately.
    """
    attempt = 1
    while True:
        try:
            return await operation()
        except retry_on as exc:
            if attempt >= policy.max_attempts:
                _logger.error(
                    "%s failed after %s attempts: %s", description, attempt, exc
                )
                raise
            _logger.warning(
                "%s failed (attempt %s/%s): %s",
                description,
                attempt,
                policy.max_attempts,
                exc,
            )
            attempt += 1
            if policy.backoff_seconds:
                await sleep(policy.backoff_seconds)
