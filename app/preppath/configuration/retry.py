"""Retry executor settings."""

from pydantic import Field

from preppath.configuration.base import ResilienceSettingsBase


class RetrySettings(ResilienceSettingsBase):
    """Default configuration for retry executors.

    Consumers wrapping database or generative-AI calls build a
    ``RetryConfig`` from these values unless they pass their own.

    Environment Variables:
        RETRY_MAX_RETRIES: Re-attempts after the first failure (default: 3)
        RETRY_DELAY_MS: Base delay between attempts (default: 1000ms)
        RETRY_EXPONENTIAL_BACKOFF: Double the delay on each retry (default: True)

    Exponential Backoff:
        Delay calculation: base_delay * 2 ^ (attempt - 1)

        Example with defaults (base=1000ms):
            Attempt 1: 1000ms
            Attempt 2: 2000ms
            Attempt 3: 4000ms
    """

    max_retries: int = Field(
        default=3,
        alias="RETRY_MAX_RETRIES",
        ge=0,
        description="Maximum re-attempts before a failure is terminal",
    )
    retry_delay_ms: float = Field(
        default=1000,
        alias="RETRY_DELAY_MS",
        gt=0,
        description="Base delay between attempts (milliseconds)",
    )
    exponential_backoff: bool = Field(
        default=True,
        alias="RETRY_EXPONENTIAL_BACKOFF",
        description="Double the delay for each successive retry",
    )
