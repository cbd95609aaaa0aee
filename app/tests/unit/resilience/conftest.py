"""Shared fixtures for retry executor tests."""

from unittest.mock import MagicMock

import pytest

from preppath.resilience import RetryConfig, RetryExecutor


@pytest.fixture
def retry_config_factory():
    """Factory for creating RetryConfig instances."""

    def _factory(
        max_retries: int = 3,
        retry_delay_ms: float = 1000,
        exponential_backoff: bool = True,
        on_retry=None,
        on_max_retries_reached=None,
    ) -> RetryConfig:
        return RetryConfig(
            max_retries=max_retries,
            retry_delay_ms=retry_delay_ms,
            exponential_backoff=exponential_backoff,
            on_retry=on_retry,
            on_max_retries_reached=on_max_retries_reached,
        )

    return _factory


@pytest.fixture
def on_retry():
    return MagicMock(name="on_retry")


@pytest.fixture
def on_max_retries_reached():
    return MagicMock(name="on_max_retries_reached")


@pytest.fixture
def executor_factory(retry_config_factory, recording_sleep):
    """Factory for executors wired to the recording sleep."""

    def _factory(sleep=None, **config_kwargs) -> RetryExecutor:
        return RetryExecutor(
            retry_config_factory(**config_kwargs),
            name="test_operation",
            sleep=sleep or recording_sleep,
        )

    return _factory
