"""Retry policy shared by the store fetch and the viewer's remote fetch."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Literal, TypeVar

logger = logging.getLogger(__name__)
T = TypeVar("T")

Backoff = Literal["fixed", "linear"]
Sleep = Callable[[float], Awaitable[Any]]


class RetryExhaustedError(Exception):
    """Raised when every attempt allowed by a RetryPolicy has failed."""

    def __init__(self, message: str, last_exception: BaseException, attempts: int):
        super().__init__(message)
        self.last_exception = last_exception
        self.attempts = attempts


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with a fixed or linearly growing delay.

    ``delay_for(n)`` is the wait after the n-th failed attempt: ``delay``
    for fixed backoff, ``delay * n`` for linear backoff.
    """

    max_attempts: int = 3
    delay_seconds: float = 1.0
    backoff: Backoff = "fixed"
    sleep: Sleep = field(default=asyncio.sleep, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1: {self.max_attempts}")
        if self.delay_seconds < 0:
            raise ValueError(f"delay_seconds cannot be negative: {self.delay_seconds}")
        if self.backoff not in ("fixed", "linear"):
            raise ValueError(f"Unsupported backoff strategy '{self.backoff}'.")

    def delay_for(self, attempt: int) -> float:
        """Return the wait after the given 1-based failed attempt."""
        if attempt < 1:
            raise ValueError(f"attempt must be 1-based: {attempt}")
        if self.backoff == "linear":
            return self.delay_seconds * attempt
        return self.delay_seconds

    def allows(self, attempt: int) -> bool:
        """Whether another attempt may follow the given 1-based attempt."""
        return attempt < self.max_attempts

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        retry_on: type[BaseException] | tuple[type[BaseException], ...] = Exception,
        name: str | None = None,
    ) -> T:
        """Await ``operation`` until it succeeds or the attempt budget is spent.

        Exceptions not matching ``retry_on`` propagate immediately.
        """
        label = name or getattr(operation, "__name__", "operation")
        last_exception: BaseException | None = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                result = await operation()
            except retry_on as exc:
                last_exception = exc
                remaining = self.max_attempts - attempt
                logger.warning(
                    "%s failed on attempt %s/%s (%s retries left): %s",
                    label,
                    attempt,
                    self.max_attempts,
                    remaining,
                    exc,
                )
                if remaining:
                    await self.sleep(self.delay_for(attempt))
                continue

            if attempt > 1:
                logger.info("%s succeeded on attempt %s", label, attempt)
            return result

        assert last_exception is not None
        raise RetryExhaustedError(
            f"{label} failed after {self.max_attempts} attempts",
            last_exception=last_exception,
            attempts=self.max_attempts,
        ) from last_exception


__all__ = ["Backoff", "RetryExhaustedError", "RetryPolicy"]
