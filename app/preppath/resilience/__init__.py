"""Resilience patterns for calls to external services.

Architecture:
- BackoffPolicy / compute_delay: pure attempt -> delay mapping
- RetryConfig: executor budget, delays and callbacks
- RetryState: observable executor state snapshot
- RetryExecutor: retry-with-backoff runner for async operations

Usage:
    from preppath.resilience import RetryConfig, RetryExecutor

    executor = RetryExecutor(RetryConfig(max_retries=2, retry_delay_ms=100))
    roadmap = await executor.run(lambda: roadmap_service.generate(profile))
"""

from preppath.resilience.backoff import BackoffPolicy, compute_delay
from preppath.resilience.config import RetryConfig
from preppath.resilience.errors import (
    ResilienceError,
    RetryAbortedError,
    RetryInProgressError,
)
from preppath.resilience.executor import RetryExecutor
from preppath.resilience.models import INITIAL_RETRY_STATE, RetryState
from preppath.resilience.observable import StatePublisher

__all__ = [
    # Backoff
    "BackoffPolicy",
    "compute_delay",
    # Configuration
    "RetryConfig",
    # Models
    "RetryState",
    "INITIAL_RETRY_STATE",
    # Executor
    "RetryExecutor",
    "StatePublisher",
    # Errors
    "ResilienceError",
    "RetryAbortedError",
    "RetryInProgressError",
]
