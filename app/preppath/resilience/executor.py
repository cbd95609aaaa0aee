"""Retry executor for async operations.

Runs a caller-supplied coroutine function, re-invoking it on failure until it
succeeds or the retry budget is exhausted, and publishes a RetryState
snapshot after every transition.

Usage:
    executor = RetryExecutor(RetryConfig(max_retries=2, retry_delay_ms=500))
    executor.subscribe(lambda state: render_banner(state))

    feedback = await executor.run(lambda: feedback_service.generate(answers))

Concurrency:
    One logical run per executor at a time. Starting a second run while one
    is in flight raises RetryInProgressError. reset() abandons the in-flight
    run: it stops publishing state and raises RetryAbortedError at its next
    decision point instead of re-invoking the operation. Cancelling the
    caller's task during a run publishes the initial state before the
    cancellation propagates.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, TypeVar

from preppath.logging import get_module_logger
from preppath.operations import OperationResult, handle_api_error
from preppath.resilience.config import RetryConfig
from preppath.resilience.errors import RetryAbortedError, RetryInProgressError
from preppath.resilience.models import INITIAL_RETRY_STATE, RetryState
from preppath.resilience.observable import Listener, StatePublisher

logger = get_module_logger()

T = TypeVar("T")
Operation = Callable[[], Awaitable[T]]
Sleep = Callable[[float], Awaitable[Any]]


async def _invoke(callback: Optional[Callable[..., Any]], *args: Any) -> None:
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class RetryExecutor:
    """Retry-with-backoff executor publishing observable RetryState.

    Attributes:
        config: RetryConfig controlling budget, delays and callbacks
        name: Operation name used in log context
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        *,
        name: str = "operation",
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialize the executor.

        Args:
            config: Optional RetryConfig. If not provided, uses defaults.
            name: Operation name bound into log events
            sleep: Coroutine function used for inter-attempt delays (seconds)
        """
        self.config = config or RetryConfig()
        self.name = name
        self._sleep = sleep
        self._publisher: StatePublisher[RetryState] = StatePublisher(
            INITIAL_RETRY_STATE, name=f"retry_executor:{name}"
        )
        self._generation = 0
        self._active_generation: Optional[int] = None
        self.log = logger.bind(operation=name)

    @property
    def state(self) -> RetryState:
        return self._publisher.state

    @property
    def in_flight(self) -> bool:
        return self._active_generation is not None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Subscribe to RetryState changes. Returns an unsubscribe callable."""
        return self._publisher.subscribe(listener)

    async def run(self, operation: Operation, *, max_retries: Optional[int] = None) -> T:
        """Run ``operation`` under the retry policy.

        Args:
            operation: Zero-argument coroutine function to execute
            max_retries: Optional budget override for this call only

        Returns:
            The operation's result

        Raises:
            RetryInProgressError: If another run is in flight
            RetryAbortedError: If reset() was called while this run was active
            Exception: The operation's error from the final permitted attempt
        """
        effective_max_retries = (
            self.config.max_retries if max_retries is None else max_retries
        )
        if effective_max_retries < 0:
            raise ValueError("max_retries must be at least 0")

        if self._active_generation is not None:
            raise RetryInProgressError(
                f"Retry executor '{self.name}' already has an operation in flight"
            )
        generation = self._generation
        self._active_generation = generation

        try:
            return await self._attempt_loop(operation, generation, effective_max_retries)
        except asyncio.CancelledError:
            if self._generation == generation:
                self._publisher.publish(INITIAL_RETRY_STATE)
            raise
        finally:
            if self._active_generation == generation:
                self._active_generation = None

    async def retry_manually(self, operation: Operation) -> T:
        """Start a fresh retry sequence after the budget was exhausted.

        Resets retry_count, can_retry and last_error, then delegates to run().
        """
        if self._active_generation is not None:
            raise RetryInProgressError(
                f"Retry executor '{self.name}' already has an operation in flight"
            )
        self.log.info("retry_manual_requested")
        self._publisher.publish(
            self.state.evolve(retry_count=0, can_retry=True, last_error=None)
        )
        return await self.run(operation)

    async def run_as_result(
        self,
        operation: Operation,
        error_code: str,
        *,
        max_retries: Optional[int] = None,
    ) -> OperationResult:
        """Run ``operation`` and return an OperationResult instead of raising.

        The terminal operation error becomes an error result carrying
        ``error_code``. Errors raised by the executor itself still propagate.
        """
        try:
            result = await self.run(operation, max_retries=max_retries)
        except (RetryInProgressError, RetryAbortedError):
            raise
        except Exception as e:
            return handle_api_error(e, error_code)
        return OperationResult.success(data=result)

    def reset(self) -> None:
        """Force RetryState back to defaults and abandon any in-flight run."""
        self._generation += 1
        self._active_generation = None
        self._publisher.publish(INITIAL_RETRY_STATE)

    def record_error(self, error: Exception) -> None:
        """Record a failure detected outside run().

        Updates last_error and recomputes can_retry from the current
        retry_count against the configured budget.
        """
        state = self.state
        self._publisher.publish(
            state.evolve(
                last_error=error,
                can_retry=state.retry_count < self.config.max_retries,
            )
        )

    def _publish_if_current(self, generation: int, **changes: Any) -> None:
        if generation != self._generation:
            return
        self._publisher.publish(self.state.evolve(**changes))

    async def _attempt_loop(
        self, operation: Operation, generation: int, max_retries: int
    ) -> T:
        backoff = self.config.backoff
        attempt = 0

        while True:
            self._publish_if_current(
                generation,
                is_retrying=attempt > 0,
                retry_count=attempt,
                last_error=None,
            )

            try:
                result = await operation()
            except Exception as e:
                if generation != self._generation:
                    raise RetryAbortedError(
                        f"Retry sequence for '{self.name}' was reset"
                    ) from e

                self._publish_if_current(
                    generation, last_error=e, retry_count=attempt, is_retrying=False
                )

                if attempt >= max_retries:
                    self._publish_if_current(generation, can_retry=False)
                    self.log.warning(
                        "retry_budget_exhausted",
                        attempts=attempt + 1,
                        max_retries=max_retries,
                        error=str(e),
                    )
                    await _invoke(self.config.on_max_retries_reached)
                    raise

                next_attempt = attempt + 1
                delay_ms = backoff.delay_for(next_attempt)
                self.log.info(
                    "retry_scheduled",
                    attempt=next_attempt,
                    max_retries=max_retries,
                    delay_ms=delay_ms,
                    error=str(e),
                )
                await _invoke(self.config.on_retry, next_attempt)
                self._publish_if_current(generation, is_retrying=True)

                await self._sleep(delay_ms / 1000)

                if generation != self._generation:
                    self.log.info("retry_sequence_abandoned", attempt=next_attempt)
                    raise RetryAbortedError(
                        f"Retry sequence for '{self.name}' was reset"
                    ) from e

                attempt = next_attempt
                continue

            if generation == self._generation:
                if attempt > 0:
                    self.log.info("retry_succeeded", attempts=attempt + 1)
                self._publisher.publish(INITIAL_RETRY_STATE)
            return result
