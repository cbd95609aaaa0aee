"""Exceptions raised by the resilience layer itself.

Errors raised by wrapped operations are never wrapped in these types on the
normal path; they are re-raised unchanged once retries are exhausted.
"""


class ResilienceError(Exception):
    """Base class for resilience layer errors."""

    pass


class RetryInProgressError(ResilienceError):
    """Raised when a run is started while another is in flight on the same executor."""

    pass


class RetryAbortedError(ResilienceError):
    """Raised when reset() invalidated an in-flight retry sequence.

    The error that caused the last attempt to fail, if any, is available as
    ``__cause__``.
    """

    pass
