"""Operation status enumeration.

Status codes for operation results, used to classify outcomes of calls to
external services for appropriate error handling and retries.
"""

from enum import Enum


class OperationStatus(Enum):
    """Status codes for operation results.

    Attributes:
        SUCCESS: Operation completed successfully
        TRANSIENT_ERROR: Retryable error (network, timeout, service unavailable)
        PERMANENT_ERROR: Non-retryable error (validation, bad input)
    """

    SUCCESS = "success"
    TRANSIENT_ERROR = "transient_error"
    PERMANENT_ERROR = "permanent_error"
