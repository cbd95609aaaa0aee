"""Backoff policy for retry delays.

Delay calculation:
    exponential=False: base_delay
    exponential=True:  base_delay * 2 ^ (attempt - 1)

Example with base_delay=1000ms:
    Attempt 1: 1000ms
    Attempt 2: 2000ms
    Attempt 3: 4000ms
"""

from dataclasses import dataclass


def compute_delay(attempt: int, base_delay_ms: float, exponential: bool = True) -> float:
    """Compute the delay before a 1-based retry attempt.

    Args:
        attempt: 1-based number of the upcoming retry
        base_delay_ms: Delay for the first retry (milliseconds)
        exponential: Double the delay for each successive retry

    Returns:
        Delay in milliseconds

    Raises:
        ValueError: If attempt is less than 1
    """
    if attempt < 1:
        raise ValueError("attempt must be at least 1")
    if not exponential:
        return base_delay_ms
    return base_delay_ms * 2 ** (attempt - 1)


@dataclass(frozen=True)
class BackoffPolicy:
    """Delay strategy bound to a base delay and growth mode.

    Attributes:
        base_delay_ms: Delay for the first retry (milliseconds)
        exponential: Double the delay for each successive retry
    """

    base_delay_ms: float = 1000
    exponential: bool = True

    def __post_init__(self) -> None:
        if self.base_delay_ms <= 0:
            raise ValueError("base_delay_ms must be greater than 0")

    def delay_for(self, attempt: int) -> float:
        """Delay in milliseconds before retry ``attempt`` (1-based)."""
        return compute_delay(attempt, self.base_delay_ms, self.exponential)
