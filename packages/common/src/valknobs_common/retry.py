"""Retry primitives with configurable backoff.

The async validation coordinator retries a whole validation body while it
keeps *returning* failures, so besides exception-driven retries the executor
supports result-driven retries (``retry_on_result``) and reports how many
attempts were used.

Example:
    ```python
    from valknobs_common.retry import RetryExecutor, RetryConfig, BackoffStrategy

    config = RetryConfig(
        max_attempts=5,
        initial_delay=0.5,
        backoff_strategy=BackoffStrategy.EXPONENTIAL,
        retry_on_result=lambda result: not result.success,
    )
    outcome = await RetryExecutor(config).run(check_username, "jo")
    outcome.value, outcome.attempts
    ```
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class BackoffStrategy(Enum):
    """Backoff strategies for retries."""

    FIXED = "fixed"
    """Fixed delay between retries."""

    LINEAR = "linear"
    """Delay increases linearly with each attempt."""

    EXPONENTIAL = "exponential"
    """Delay multiplies by backoff_multiplier with each attempt."""

    JITTER = "jitter"
    """Exponential backoff with random jitter applied."""


@dataclass
class RetryConfig:
    """Configuration for retry behavior.

    Delays are in seconds.

    Attributes:
        max_attempts: Maximum number of execution attempts (including the first).
        initial_delay: Base delay before the first retry.
        max_delay: Upper bound on any single delay.
        backoff_strategy: Algorithm for computing delay between retries.
        backoff_multiplier: Multiplier for exponential and jitter strategies.
        jitter_range: Fractional jitter range for the JITTER strategy (0.1 = +/-10%).
        retry_on_exceptions: If set, only retry when the exception is an instance of one of
            these types. Other exceptions propagate immediately.
        retry_on_result: If set, called with each returned value. Return True to retry.
        on_retry: Hook called before each retry sleep with (attempt_number, reason), where
            reason is the exception raised or the value that triggered the retry.
    """

    max_attempts: int = 3
    initial_delay: float = 0.1
    max_delay: float = 10.0
    backoff_strategy: BackoffStrategy = BackoffStrategy.EXPONENTIAL
    backoff_multiplier: float = 2.0
    jitter_range: float = 0.1

    retry_on_exceptions: list[type] | None = None
    retry_on_result: Callable[[Any], bool] | None = None

    on_retry: Callable[[int, Any], None] | None = None

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.initial_delay < 0 or self.max_delay < 0:
            raise ValueError("retry delays cannot be negative")


@dataclass
class RetryOutcome:
    """What a retried call produced.

    Attributes:
        value: Return value of the last attempt.
        attempts: Number of attempts made.
        exhausted: True when the last attempt still asked for a retry
            (``retry_on_result`` matched) but no attempts were left.
    """

    value: Any
    attempts: int
    exhausted: bool = False


class RetryExecutor:
    """Executes a callable with retry logic and configurable backoff.

    Sync callables are invoked directly; async callables are awaited.
    """

    def __init__(
        self,
        config: RetryConfig,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.config = config
        self._sleep = sleep

    def calculate_delay(self, attempt: int) -> float:
        """Delay before the retry that follows ``attempt`` (1-based), capped at max_delay."""
        cfg = self.config

        if cfg.backoff_strategy == BackoffStrategy.FIXED:
            delay = cfg.initial_delay
        elif cfg.backoff_strategy == BackoffStrategy.LINEAR:
            delay = cfg.initial_delay * attempt
        elif cfg.backoff_strategy == BackoffStrategy.JITTER:
            base_delay = cfg.initial_delay * (cfg.backoff_multiplier ** (attempt - 1))
            delay = base_delay * (1 + random.uniform(-cfg.jitter_range, cfg.jitter_range))
        else:
            delay = cfg.initial_delay * (cfg.backoff_multiplier ** (attempt - 1))

        return min(delay, cfg.max_delay)

    async def run(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> RetryOutcome:
        """Execute ``func`` until it succeeds or attempts run out.

        Returns:
            RetryOutcome for the last attempt.

        Raises:
            Exception: The exception from the final failed attempt, or any
                non-retryable exception immediately.
        """
        cfg = self.config

        for attempt in range(1, cfg.max_attempts + 1):
            try:
                result = func(*args, **kwargs)
                if inspect.isawaitable(result):
                    result = await result
            except Exception as e:
                if cfg.retry_on_exceptions and not any(
                    isinstance(e, exc_type) for exc_type in cfg.retry_on_exceptions
                ):
                    raise
                if attempt >= cfg.max_attempts:
                    raise
                await self._backoff(attempt, e)
                continue

            if cfg.retry_on_result is not None and cfg.retry_on_result(result):
                if attempt >= cfg.max_attempts:
                    return RetryOutcome(result, attempt, exhausted=True)
                await self._backoff(attempt, result)
                continue

            return RetryOutcome(result, attempt)

        # max_attempts >= 1 guarantees a return or raise inside the loop
        raise RuntimeError("retry loop exited without an outcome")  # pragma: no cover

    async def execute(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Execute ``func`` with retries and return its last value."""
        outcome = await self.run(func, *args, **kwargs)
        return outcome.value

    async def _backoff(self, attempt: int, reason: Any) -> None:
        delay = self.calculate_delay(attempt)
        if self.config.on_retry:
            self.config.on_retry(attempt, reason)
        logger.debug(
            "Retrying (attempt %d/%d), delay=%.3fs",
            attempt, self.config.max_attempts, delay,
        )
        await self._sleep(delay)


__all__ = ["BackoffStrategy", "RetryConfig", "RetryExecutor", "RetryOutcome"]
