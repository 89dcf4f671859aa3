"""Async validation coordinator.

``AsyncValidator`` runs async rules (remote lookups, database checks) and
wraps them with three optional meta strategies:

- ``debounce(seconds)``: waits until calls stop arriving for ``seconds``;
  superseded callers receive the result of the call that survived
- ``retry(config)``: re-runs the whole body while it returns a failure,
  with exponential backoff between attempts
- ``timeout(seconds)``: reports ``async.timeout`` when the (retried) body
  takes longer than ``seconds``

A coordinator keeps at most one validation in flight: starting a new one
cancels the token of the previous one, whose caller then gets
``async.cancelled``. Cancellation is cooperative. Work that lost a timeout
or cancellation race is not interrupted; it keeps running in the
background and its result is dropped. Rules that want to stop early read
``context.signal``, which is cancelled as soon as the call has settled.

Because of that per-instance state, one coordinator should serve one
input (a form field, say), not many unrelated concurrent calls.

Example:
    ```python
    async def username_free(value, context):
        taken = await users.exists(value)
        return not taken

    check = (
        async_validator(username_free)
        .debounce(0.3)
        .timeout(5)
        .retry(3)
    )
    result = await check.validate_async("jo")
    ```
"""

from __future__ import annotations

import asyncio
import dataclasses
import inspect
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional, Union, cast

from valknobs_common.exceptions import SchemaError
from valknobs_common.retry import RetryConfig, RetryExecutor

from ..core.cancellation import CancellationToken
from ..core.pipeline import forward_value, reject_awaitable
from ..core.strategy import Strategy, StrategyKind
from ..core.validator import Validator
from ..messages import translate
from ..results import (
    UNDEFINED,
    ValidationContext,
    ValidationResult,
    create_error,
)

if TYPE_CHECKING:
    from ..config import ValidatorSettings

logger = logging.getLogger(__name__)

AsyncValidationFn = Callable[
    [Any, ValidationContext],
    Union[ValidationResult, bool, Awaitable[Union[ValidationResult, bool]]],
]


def _error_result(code: str, message: str, context: ValidationContext,
                  metadata: dict[str, Any] | None = None) -> ValidationResult:
    return ValidationResult.fail(
        [create_error(code, message, context.path, context.field, metadata)]
    )


def _cancelled(context: ValidationContext) -> ValidationResult:
    return _error_result(
        "async.cancelled", translate("async.cancelled", locale=context.locale), context
    )


class AsyncStrategy(Strategy):
    """Runs ``fn(value, context)``, awaiting it when it returns an awaitable.

    ``fn`` may return a ``ValidationResult`` or a plain truth value; a falsy
    value fails with ``async.failed``.
    """

    kind = StrategyKind.ASYNC

    def __init__(self, fn: AsyncValidationFn, name: str | None = None):
        self.fn = fn
        self.name = name or getattr(fn, "__name__", "async")

    def _finish(self, outcome: Any, value: Any, context: ValidationContext) -> ValidationResult:
        if isinstance(outcome, ValidationResult):
            return outcome
        if not outcome:
            return self.failure("async.failed", context)
        return self.success(value)

    def validate(self, value: Any, context: ValidationContext) -> ValidationResult:
        outcome = self.fn(value, context)
        if inspect.isawaitable(outcome):
            return reject_awaitable(outcome, context)
        return self._finish(outcome, value, context)

    async def validate_async(self, value: Any, context: ValidationContext) -> ValidationResult:
        outcome = self.fn(value, context)
        if inspect.isawaitable(outcome):
            outcome = await outcome
        return self._finish(outcome, value, context)


class MetaStrategy(Strategy):
    """Coordinator setting; passes values through if run as an ordinary rule."""

    def validate(self, value: Any, context: ValidationContext) -> ValidationResult:
        return self.success(value)


class DebounceStrategy(MetaStrategy):
    name = "debounce"
    kind = StrategyKind.DEBOUNCE

    def __init__(self, seconds: float):
        if seconds < 0:
            raise SchemaError("debounce cannot be negative", context={"seconds": seconds})
        self.seconds = seconds


class TimeoutStrategy(MetaStrategy):
    name = "timeout"
    kind = StrategyKind.TIMEOUT

    def __init__(self, seconds: float, message: str | None = None):
        if seconds <= 0:
            raise SchemaError("timeout must be positive", context={"seconds": seconds})
        self.seconds = seconds
        self.custom_message = message


class RetryStrategy(MetaStrategy):
    name = "retry"
    kind = StrategyKind.RETRY

    def __init__(self, config: RetryConfig):
        self.config = config


class CoordinatorState(Enum):
    """Lifecycle of the most recent call to a coordinator."""

    IDLE = "idle"
    DEBOUNCING = "debouncing"
    VALIDATING = "validating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class AsyncValidator(Validator):
    """Validator for async rules with debounce, timeout, retry and cancellation.

    Fluent methods return a new coordinator that shares the strategies but
    none of the in-flight state.
    """

    type_name = "async"

    def __init__(self, strategies: list[Strategy] | None = None):
        self._strategies: list[Strategy] = list(strategies or [])
        self._state = CoordinatorState.IDLE
        self._token: CancellationToken | None = None
        self._pending: asyncio.Future[ValidationResult] | None = None
        self._debounce_handle: asyncio.TimerHandle | None = None
        self._waiters: list[tuple[asyncio.Future[ValidationResult], ValidationContext]] = []
        self._background: set[asyncio.Future[Any]] = set()

    @classmethod
    def from_settings(
        cls, settings: ValidatorSettings, fn: AsyncValidationFn | None = None
    ) -> AsyncValidator:
        """Coordinator with the debounce, timeout and retry of ``settings``."""
        validator = cls()
        if fn is not None:
            validator = validator.use(fn)
        if settings.debounce:
            validator = validator.debounce(settings.debounce)
        if settings.timeout:
            validator = validator.timeout(settings.timeout)
        if settings.retry_max_attempts > 1:
            validator = validator.retry(settings.retry_config())
        return validator

    @property
    def strategies(self) -> tuple[Strategy, ...]:
        return tuple(self._strategies)

    @property
    def state(self) -> CoordinatorState:
        return self._state

    @property
    def is_async(self) -> bool:
        return True

    def _find(self, kind: StrategyKind) -> Strategy | None:
        for item in self._strategies:
            if item.kind is kind:
                return item
        return None

    def _add(self, strategy: Strategy) -> AsyncValidator:
        return type(self)([*self._strategies, strategy])

    # Fluent API

    def use(self, rule: AsyncValidationFn | Strategy | Validator,
            name: str | None = None) -> AsyncValidator:
        """Add a rule: an async function, a strategy or another validator."""
        if isinstance(rule, Strategy):
            return self._add(rule)
        if isinstance(rule, Validator):
            return self._add(AsyncStrategy(rule.validate_async, name or rule.type_name))
        return self._add(AsyncStrategy(rule, name))

    def debounce(self, seconds: float) -> AsyncValidator:
        return self._add(DebounceStrategy(seconds))

    def timeout(self, seconds: float, message: str | None = None) -> AsyncValidator:
        return self._add(TimeoutStrategy(seconds, message))

    def retry(self, config: RetryConfig | int) -> AsyncValidator:
        """Retry the body while it fails, up to ``max_attempts`` runs in total."""
        if isinstance(config, int):
            try:
                config = RetryConfig(max_attempts=config)
            except ValueError as e:
                raise SchemaError(str(e), context={"max_attempts": config}) from e
        return self._add(RetryStrategy(config))

    # Validation

    def validate(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        """Always fails with ``common.asyncRequired``; use :meth:`validate_async`."""
        return reject_awaitable(None, self._context(value, context))

    async def validate_async(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        ctx = self._context(value, context)
        debounce = cast(Optional[DebounceStrategy], self._find(StrategyKind.DEBOUNCE))
        if debounce is None:
            return await self._execute(value, ctx)

        loop = asyncio.get_running_loop()
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            logger.debug("Debounced call superseded at %s", ctx.path)
        waiter: asyncio.Future[ValidationResult] = loop.create_future()
        self._waiters.append((waiter, ctx))
        self._state = CoordinatorState.DEBOUNCING
        self._debounce_handle = loop.call_later(
            debounce.seconds, self._fire, value, ctx
        )
        return await waiter

    def _fire(self, value: Any, context: ValidationContext) -> None:
        self._debounce_handle = None
        waiters, self._waiters = self._waiters, []
        task = asyncio.ensure_future(self._execute(value, context))
        self._keep(task)

        def settle(done: asyncio.Future[ValidationResult]) -> None:
            for waiter, ctx in waiters:
                if waiter.done():
                    continue
                if done.cancelled():
                    waiter.set_result(_cancelled(ctx))
                    continue
                error = done.exception()
                if error is not None:
                    waiter.set_exception(error)
                else:
                    waiter.set_result(done.result())

        task.add_done_callback(settle)

    def _keep(self, future: asyncio.Future[Any]) -> None:
        """Hold a reference to work nobody awaits until it finishes."""
        self._background.add(future)
        future.add_done_callback(self._background.discard)

    async def _execute(self, value: Any, context: ValidationContext) -> ValidationResult:
        if self._token is not None:
            logger.debug("Superseding the in-flight validation at %s", context.path)
            self._token.cancel()
        token = CancellationToken()
        self._token = token
        self._state = CoordinatorState.VALIDATING
        ctx = context.with_signal(token)

        body = asyncio.ensure_future(self._run_with_retry(value, ctx))
        self._pending = body
        try:
            result = await self._race(body, token, ctx)
        finally:
            superseded = token.cancelled
            # Rules still watching the signal after a timeout can stop now
            token.cancel()
            if self._token is token:
                self._token = None
                self._pending = None
        # A cancelled or superseded call leaves the state to whoever replaced it
        if not superseded and self._debounce_handle is None:
            self._state = (
                CoordinatorState.SUCCEEDED if result.success else CoordinatorState.FAILED
            )
        return result

    async def _race(
        self,
        body: asyncio.Future[ValidationResult],
        token: CancellationToken,
        context: ValidationContext,
    ) -> ValidationResult:
        timeout = cast(Optional[TimeoutStrategy], self._find(StrategyKind.TIMEOUT))
        seconds = timeout.seconds if timeout is not None else None
        cancelled = asyncio.ensure_future(token.wait())
        try:
            done, _ = await asyncio.wait(
                {body, cancelled}, timeout=seconds, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            cancelled.cancel()
            if not body.done():
                self._keep(body)

        # Cancellation wins even when the body finished in the same step
        if token.cancelled:
            logger.debug("Validation cancelled at %s", context.path)
            return _cancelled(context)
        if body in done or timeout is None:
            return await body
        logger.debug("Validation timed out after %.3fs at %s", seconds, context.path)
        return timeout.failure("async.timeout", context, {"seconds": seconds})

    async def _run_with_retry(self, value: Any, context: ValidationContext) -> ValidationResult:
        retry = cast(Optional[RetryStrategy], self._find(StrategyKind.RETRY))
        if retry is None:
            return await self._run_body(value, context)

        signal = context.signal
        config = dataclasses.replace(
            retry.config,
            retry_on_result=lambda result: not result.success
            and not (signal is not None and signal.cancelled),
        )
        outcome = await RetryExecutor(config).run(self._run_body, value, context)
        result: ValidationResult = outcome.value
        if result.success or not outcome.exhausted:
            return result

        logger.debug("Validation failed after %d attempts at %s", outcome.attempts, context.path)
        metadata = {"attempts": outcome.attempts}
        first = result.first_error
        message = (
            first.message
            if first is not None
            else translate("async.retry.failed", metadata, context.locale)
        )
        return _error_result("async.retry.failed", message, context, metadata)

    async def _run_body(self, value: Any, context: ValidationContext) -> ValidationResult:
        """Every rule in order, threading the value like a pipeline."""
        current = value
        try:
            for item in self._strategies:
                if item.kind.is_meta:
                    continue
                result = await item.validate_async(current, context)
                if not result.success:
                    return result
                current = forward_value(result, current)
        except Exception as e:
            logger.debug("Async rule raised at %s: %s", context.path, e)
            message = str(e) or translate("async.failed", locale=context.locale)
            return _error_result("async.failed", message, context)
        return ValidationResult.ok(current)

    # Control

    def cancel(self) -> None:
        """Abort the pending validation; waiting callers get ``async.cancelled``."""
        cancelled = False
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None
            cancelled = True
        waiters, self._waiters = self._waiters, []
        for waiter, ctx in waiters:
            if not waiter.done():
                waiter.set_result(_cancelled(ctx))
        if self._token is not None:
            self._token.cancel()
            self._token = None
            self._pending = None
            cancelled = True
        if cancelled:
            logger.debug("Async validator cancelled")
            self._state = CoordinatorState.CANCELLED

    def is_pending(self) -> bool:
        """True while a call is debouncing or validating."""
        return self._debounce_handle is not None or self._pending is not None

    async def wait_for_completion(self) -> None:
        """Wait until the current call (and its debounced callers) are settled."""
        futures = [waiter for waiter, _ in self._waiters]
        if self._pending is not None:
            futures.append(self._pending)
        futures = [future for future in futures if not future.done()]
        if futures:
            await asyncio.wait(futures)

    def describe(self) -> dict[str, Any]:
        return {"type": self.type_name, "strategies": [s.name for s in self._strategies]}

    def __repr__(self) -> str:
        names = ", ".join(s.name for s in self._strategies)
        return f"AsyncValidator([{names}])"


def async_validator(fn: AsyncValidationFn | None = None) -> AsyncValidator:
    """Create a coordinator, optionally with a first async rule."""
    validator = AsyncValidator()
    return validator.use(fn) if fn is not None else validator
