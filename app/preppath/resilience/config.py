"""Retry executor configuration."""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from preppath.configuration import RetrySettings
from preppath.resilience.backoff import BackoffPolicy

OnRetry = Callable[[int], Union[None, Awaitable[None]]]
OnMaxRetriesReached = Callable[[], Union[None, Awaitable[None]]]


@dataclass
class RetryConfig:
    """Configuration for a RetryExecutor.

    Attributes:
        max_retries: Re-attempts allowed after the first failure. 0 means a
            single attempt with no retries.
        retry_delay_ms: Base delay between attempts (milliseconds)
        exponential_backoff: Double the delay for each successive retry
        on_retry: Called with the 1-based number of the upcoming retry,
            before its delay starts. May be a coroutine function.
        on_max_retries_reached: Called once when the final permitted
            attempt fails. May be a coroutine function.

    Example:
        config = RetryConfig(
            max_retries=2,
            retry_delay_ms=500,
            on_retry=lambda attempt: print(f"retrying ({attempt})"),
        )
    """

    max_retries: int = 3
    retry_delay_ms: float = 1000
    exponential_backoff: bool = True
    on_retry: Optional[OnRetry] = None
    on_max_retries_reached: Optional[OnMaxRetriesReached] = None

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_retries < 0:
            raise ValueError("max_retries must be at least 0")
        if self.retry_delay_ms <= 0:
            raise ValueError("retry_delay_ms must be greater than 0")

    @property
    def backoff(self) -> BackoffPolicy:
        return BackoffPolicy(
            base_delay_ms=self.retry_delay_ms,
            exponential=self.exponential_backoff,
        )

    @classmethod
    def from_settings(cls, settings: RetrySettings, **overrides: Any) -> "RetryConfig":
        """Build a config from RetrySettings, with keyword overrides.

        Example:
            from preppath.configuration import settings

            config = RetryConfig.from_settings(settings.retry, on_retry=notify)
        """
        values = {
            "max_retries": settings.max_retries,
            "retry_delay_ms": settings.retry_delay_ms,
            "exponential_backoff": settings.exponential_backoff,
        }
        values.update(overrides)
        return cls(**values)
