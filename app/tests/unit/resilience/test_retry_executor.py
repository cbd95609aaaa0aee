"""Unit tests for the retry executor."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from preppath.operations import OperationStatus
from preppath.resilience import (
    INITIAL_RETRY_STATE,
    RetryAbortedError,
    RetryExecutor,
    RetryInProgressError,
    RetryState,
)
from tests.factories.resilience import (
    FlakyOperation,
    GatedSleep,
    RecordingSleep,
    make_errors,
    settle,
)


@pytest.mark.unit
class TestRetryExecutorSuccess:
    """Runs that eventually succeed."""

    @pytest.mark.asyncio
    async def test_first_attempt_success_has_no_delay(
        self, executor_factory, recording_sleep, on_retry
    ):
        executor = executor_factory(on_retry=on_retry)
        operation = FlakyOperation([], result={"questions": 5})

        result = await executor.run(operation)

        assert result == {"questions": 5}
        assert operation.calls == 1
        assert recording_sleep.calls == []
        on_retry.assert_not_called()
        assert executor.state == INITIAL_RETRY_STATE

    @pytest.mark.asyncio
    async def test_succeeds_on_third_attempt_with_exponential_backoff(
        self, executor_factory, recording_sleep, on_retry
    ):
        """Two failures then success suspend for 100ms and 200ms."""
        executor = executor_factory(
            max_retries=2, retry_delay_ms=100, on_retry=on_retry
        )
        operation = FlakyOperation(make_errors(2), result="feedback")

        result = await executor.run(operation)

        assert result == "feedback"
        assert operation.calls == 3
        assert recording_sleep.calls == [0.1, 0.2]
        assert sum(recording_sleep.calls) == pytest.approx(0.3)
        assert [c.args for c in on_retry.call_args_list] == [(1,), (2,)]
        assert executor.state.retry_count == 0
        assert executor.state.last_error is None
        assert executor.state == INITIAL_RETRY_STATE

    @pytest.mark.asyncio
    async def test_constant_backoff(self, executor_factory, recording_sleep):
        executor = executor_factory(
            max_retries=3, retry_delay_ms=500, exponential_backoff=False
        )

        await executor.run(FlakyOperation(make_errors(3)))

        assert recording_sleep.calls == [0.5, 0.5, 0.5]

    @pytest.mark.asyncio
    async def test_success_after_earlier_exhaustion_resets_state(
        self, executor_factory
    ):
        executor = executor_factory(max_retries=0)
        with pytest.raises(RuntimeError):
            await executor.run(FlakyOperation(make_errors(1)))
        assert executor.state.can_retry is False

        await executor.run(FlakyOperation([]))

        assert executor.state == INITIAL_RETRY_STATE


@pytest.mark.unit
class TestRetryExecutorExhaustion:
    """Runs that fail on every permitted attempt."""

    @pytest.mark.asyncio
    async def test_raises_final_error_after_budget(
        self, executor_factory, recording_sleep, on_retry, on_max_retries_reached
    ):
        errors = make_errors(4)
        executor = executor_factory(
            on_retry=on_retry, on_max_retries_reached=on_max_retries_reached
        )
        operation = FlakyOperation(list(errors))

        with pytest.raises(RuntimeError) as exc_info:
            await executor.run(operation)

        assert exc_info.value is errors[-1]
        assert operation.calls == 4
        assert recording_sleep.calls == [1.0, 2.0, 4.0]
        assert [c.args for c in on_retry.call_args_list] == [(1,), (2,), (3,)]
        on_max_retries_reached.assert_called_once_with()
        assert executor.state == RetryState(
            is_retrying=False,
            retry_count=3,
            last_error=errors[-1],
            can_retry=False,
        )

    @pytest.mark.asyncio
    async def test_zero_retries_fails_immediately(
        self, executor_factory, recording_sleep, on_retry, on_max_retries_reached
    ):
        """max_retries=0 means one attempt and immediate propagation."""
        error = ValueError("invalid answer payload")
        executor = executor_factory(
            max_retries=0,
            on_retry=on_retry,
            on_max_retries_reached=on_max_retries_reached,
        )
        operation = FlakyOperation([error])

        with pytest.raises(ValueError) as exc_info:
            await executor.run(operation)

        assert exc_info.value is error
        assert operation.calls == 1
        assert recording_sleep.calls == []
        on_retry.assert_not_called()
        on_max_retries_reached.assert_called_once_with()
        assert executor.state.can_retry is False
        assert executor.state.last_error is error
        assert executor.state.retry_count == 0

    @pytest.mark.asyncio
    async def test_per_call_override_applies_to_that_call_only(
        self, executor_factory, on_max_retries_reached
    ):
        executor = executor_factory(
            max_retries=3, on_max_retries_reached=on_max_retries_reached
        )

        overridden = FlakyOperation(make_errors(10))
        with pytest.raises(RuntimeError):
            await executor.run(overridden, max_retries=1)
        assert overridden.calls == 2

        default = FlakyOperation(make_errors(10))
        with pytest.raises(RuntimeError):
            await executor.run(default)
        assert default.calls == 4
        assert on_max_retries_reached.call_count == 2

    @pytest.mark.asyncio
    async def test_per_call_override_rejects_negative_budget(self, executor_factory):
        executor = executor_factory()

        with pytest.raises(ValueError, match="max_retries must be at least 0"):
            await executor.run(FlakyOperation([]), max_retries=-1)

        assert executor.in_flight is False

    @pytest.mark.asyncio
    async def test_base_exceptions_are_not_retried(self, executor_factory, on_retry):
        executor = executor_factory(on_retry=on_retry)
        operation = FlakyOperation([asyncio.CancelledError()])

        with pytest.raises(asyncio.CancelledError):
            await executor.run(operation)

        assert operation.calls == 1
        on_retry.assert_not_called()
        assert executor.in_flight is False


@pytest.mark.unit
class TestRetryExecutorCallbacks:
    """Callback ordering and async callbacks."""

    @pytest.mark.asyncio
    async def test_on_retry_fires_before_each_delay(self, executor_factory):
        events = []
        sleep = RecordingSleep(events)
        executor = executor_factory(
            sleep=sleep,
            max_retries=2,
            retry_delay_ms=100,
            on_retry=lambda attempt: events.append(f"retry:{attempt}"),
        )

        with pytest.raises(RuntimeError):
            await executor.run(FlakyOperation(make_errors(3)))

        assert events == ["retry:1", "sleep:0.1", "retry:2", "sleep:0.2"]

    @pytest.mark.asyncio
    async def test_async_callbacks_are_awaited(self, executor_factory):
        on_retry = AsyncMock()
        on_max_retries_reached = AsyncMock()
        executor = executor_factory(
            max_retries=1,
            on_retry=on_retry,
            on_max_retries_reached=on_max_retries_reached,
        )

        with pytest.raises(RuntimeError):
            await executor.run(FlakyOperation(make_errors(2)))

        on_retry.assert_awaited_once_with(1)
        on_max_retries_reached.assert_awaited_once_with()

    @pytest.mark.asyncio
    async def test_is_retrying_set_during_delay(self, executor_factory):
        observed = []
        executor = None

        async def sleep(seconds):
            observed.append(executor.state.is_retrying)

        executor = executor_factory(sleep=sleep, max_retries=2)

        await executor.run(FlakyOperation(make_errors(2)))

        assert observed == [True, True]

    @pytest.mark.asyncio
    async def test_subscribers_see_each_transition(self, executor_factory):
        errors = make_errors(1)
        executor = executor_factory(max_retries=1)
        states = []
        executor.subscribe(states.append)

        await executor.run(FlakyOperation(list(errors)))

        assert states == [
            RetryState(False, 0, errors[0], True),
            RetryState(True, 0, errors[0], True),
            RetryState(True, 1, None, True),
            INITIAL_RETRY_STATE,
        ]

    @pytest.mark.asyncio
    async def test_unsubscribe_stops_notifications(self, executor_factory):
        executor = executor_factory(max_retries=1)
        listener = MagicMock()
        unsubscribe = executor.subscribe(listener)
        unsubscribe()

        await executor.run(FlakyOperation(make_errors(1)))

        listener.assert_not_called()

    @pytest.mark.asyncio
    async def test_failing_subscriber_does_not_break_run(self, executor_factory):
        executor = executor_factory(max_retries=1)
        executor.subscribe(MagicMock(side_effect=RuntimeError("render failed")))

        result = await executor.run(FlakyOperation(make_errors(1), result="done"))

        assert result == "done"


@pytest.mark.unit
class TestRetryExecutorManualControl:
    """retry_manually, reset and record_error."""

    @pytest.mark.asyncio
    async def test_retry_manually_after_exhaustion(self, executor_factory):
        executor = executor_factory(max_retries=1)
        with pytest.raises(RuntimeError):
            await executor.run(FlakyOperation(make_errors(2)))
        assert executor.state.can_retry is False
        assert executor.state.retry_count == 1

        states = []
        executor.subscribe(states.append)
        result = await executor.retry_manually(FlakyOperation([], result="saved"))

        assert result == "saved"
        assert states[0] == RetryState(False, 0, None, True)
        assert executor.state == INITIAL_RETRY_STATE

    @pytest.mark.asyncio
    async def test_retry_manually_runs_full_budget_again(
        self, executor_factory, on_max_retries_reached
    ):
        executor = executor_factory(
            max_retries=2, on_max_retries_reached=on_max_retries_reached
        )
        with pytest.raises(RuntimeError):
            await executor.run(FlakyOperation(make_errors(3)))

        operation = FlakyOperation(make_errors(3))
        with pytest.raises(RuntimeError):
            await executor.retry_manually(operation)

        assert operation.calls == 3
        assert on_max_retries_reached.call_count == 2

    def test_reset_restores_defaults(self, executor_factory):
        executor = executor_factory()
        executor.record_error(RuntimeError("lost"))

        executor.reset()

        assert executor.state == RetryState(
            is_retrying=False, retry_count=0, last_error=None, can_retry=True
        )

    def test_record_error_keeps_can_retry_within_budget(self, executor_factory):
        executor = executor_factory(max_retries=3)
        error = ValueError("empty answer")

        executor.record_error(error)

        assert executor.state.last_error is error
        assert executor.state.can_retry is True
        assert executor.state.retry_count == 0

    @pytest.mark.asyncio
    async def test_record_error_after_exhaustion_disallows_retry(
        self, executor_factory
    ):
        executor = executor_factory(max_retries=2)
        with pytest.raises(RuntimeError):
            await executor.run(FlakyOperation(make_errors(3)))

        error = ValueError("validation")
        executor.record_error(error)

        assert executor.state.last_error is error
        assert executor.state.can_retry is False


@pytest.mark.unit
class TestRetryExecutorConcurrency:
    """Overlapping runs and reset() during an in-flight run."""

    @pytest.mark.asyncio
    async def test_overlapping_run_is_rejected(self, executor_factory):
        executor = executor_factory()
        release = asyncio.Event()

        async def slow_operation():
            await release.wait()
            return "first"

        first = asyncio.create_task(executor.run(slow_operation))
        await settle()

        assert executor.in_flight is True
        with pytest.raises(RetryInProgressError):
            await executor.run(FlakyOperation([]))
        with pytest.raises(RetryInProgressError):
            await executor.retry_manually(FlakyOperation([]))

        release.set()
        assert await first == "first"
        assert executor.in_flight is False

    @pytest.mark.asyncio
    async def test_reset_during_delay_aborts_reattempt(self, executor_factory):
        sleep = GatedSleep()
        executor = executor_factory(sleep=sleep)
        error = RuntimeError("gemini unavailable")
        operation = FlakyOperation([error])

        task = asyncio.create_task(executor.run(operation))
        await settle()
        assert sleep.pending == 1
        assert executor.state.is_retrying is True

        executor.reset()
        assert executor.state == INITIAL_RETRY_STATE
        sleep.release()

        with pytest.raises(RetryAbortedError) as exc_info:
            await task

        assert exc_info.value.__cause__ is error
        assert operation.calls == 1
        assert executor.state == INITIAL_RETRY_STATE

    @pytest.mark.asyncio
    async def test_new_run_allowed_after_reset(self, executor_factory):
        sleep = GatedSleep()
        executor = executor_factory(sleep=sleep, max_retries=1)

        stale = asyncio.create_task(executor.run(FlakyOperation(make_errors(1))))
        await settle()
        executor.reset()

        fresh_executor_result = await executor.run(FlakyOperation([], result="new"))
        assert fresh_executor_result == "new"

        sleep.release()
        with pytest.raises(RetryAbortedError):
            await stale
        assert executor.in_flight is False
        assert executor.state == INITIAL_RETRY_STATE

    @pytest.mark.asyncio
    async def test_reset_during_attempt_aborts_on_failure(self, executor_factory):
        executor = executor_factory()
        release = asyncio.Event()
        error = RuntimeError("write failed")

        async def failing_operation():
            await release.wait()
            raise error

        task = asyncio.create_task(executor.run(failing_operation))
        await settle()
        executor.reset()
        release.set()

        with pytest.raises(RetryAbortedError) as exc_info:
            await task

        assert exc_info.value.__cause__ is error
        assert executor.state == INITIAL_RETRY_STATE

    @pytest.mark.asyncio
    async def test_cancelling_caller_during_delay_restores_defaults(
        self, executor_factory, on_retry
    ):
        sleep = GatedSleep()
        executor = executor_factory(sleep=sleep, on_retry=on_retry)
        operation = FlakyOperation(make_errors(1))

        task = asyncio.create_task(executor.run(operation))
        await settle()
        assert executor.state.is_retrying is True

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert executor.state == INITIAL_RETRY_STATE
        assert executor.in_flight is False
        assert operation.calls == 1
        on_retry.assert_called_once_with(1)

        assert await executor.run(FlakyOperation([], result="again")) == "again"

    @pytest.mark.asyncio
    async def test_cancelling_stale_run_keeps_newer_state(self, executor_factory):
        sleep = GatedSleep()
        executor = executor_factory(sleep=sleep)

        stale = asyncio.create_task(executor.run(FlakyOperation(make_errors(1))))
        await settle()
        executor.reset()
        executor.record_error(RuntimeError("recorded after reset"))
        recorded = executor.state

        stale.cancel()
        with pytest.raises(asyncio.CancelledError):
            await stale

        assert executor.state == recorded


@pytest.mark.unit
class TestRunAsResult:
    """run_as_result converts terminal failures into OperationResult."""

    @pytest.mark.asyncio
    async def test_success_result(self, executor_factory):
        executor = executor_factory()

        result = await executor.run_as_result(
            FlakyOperation([], result={"id": "roadmap-1"}), "ROADMAP_FAILED"
        )

        assert result.is_success
        assert result.data == {"id": "roadmap-1"}

    @pytest.mark.asyncio
    async def test_terminal_failure_becomes_error_result(self, executor_factory):
        executor = executor_factory(max_retries=1)
        operation = FlakyOperation(
            [ConnectionError("reset"), ConnectionError("refused")]
        )

        result = await executor.run_as_result(operation, "FEEDBACK_FAILED")

        assert not result.is_success
        assert result.status == OperationStatus.TRANSIENT_ERROR
        assert result.error_code == "FEEDBACK_FAILED"
        assert result.message == "refused"
        assert executor.state.can_retry is False

    @pytest.mark.asyncio
    async def test_in_progress_error_still_raises(self, executor_factory):
        executor = executor_factory()
        release = asyncio.Event()

        async def slow_operation():
            await release.wait()

        first = asyncio.create_task(executor.run(slow_operation))
        await settle()

        with pytest.raises(RetryInProgressError):
            await executor.run_as_result(FlakyOperation([]), "BUSY")

        release.set()
        await first


@pytest.mark.unit
def test_default_executor_uses_default_config():
    executor = RetryExecutor()

    assert executor.config.max_retries == 3
    assert executor.state == INITIAL_RETRY_STATE
    assert executor.in_flight is False
