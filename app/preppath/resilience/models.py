"""Retry executor state model."""

from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class RetryState:
    """Observable state of a RetryExecutor.

    Fields:
        is_retrying: True while a delay-then-reattempt is in flight
        retry_count: Attempts already made (0 = first attempt not yet failed)
        last_error: Most recent failure, cleared on success or attempt start
        can_retry: False once the final permitted attempt has failed
    """

    is_retrying: bool = False
    retry_count: int = 0
    last_error: Optional[Exception] = None
    can_retry: bool = True

    def evolve(self, **changes) -> "RetryState":
        return replace(self, **changes)


INITIAL_RETRY_STATE = RetryState()
