"""Error classifiers for wrapped operations.

Converts exceptions raised by database and generative-AI calls into
standardized OperationResult objects.

Usage:
    from preppath.operations import handle_api_error

    try:
        questions = await generate_questions(role)
    except Exception as exc:
        return handle_api_error(exc, "QUESTION_GENERATION_FAILED")
"""

import asyncio
from typing import Any, Dict, Union

import httpx

from preppath.operations.result import OperationResult
from preppath.operations.status import OperationStatus

TRANSIENT_EXCEPTIONS = (
    httpx.TransportError,
    asyncio.TimeoutError,
    TimeoutError,
    ConnectionError,
)


def classify_error(exc: BaseException) -> OperationStatus:
    """Classify an exception as a transient or permanent failure.

    Status Mapping:
    - Transport errors, timeouts, connection errors -> TRANSIENT_ERROR
    - httpx 429 and 5xx responses -> TRANSIENT_ERROR
    - Anything else -> PERMANENT_ERROR

    Args:
        exc: Exception raised by the wrapped operation

    Returns:
        OperationStatus for the failure
    """
    if isinstance(exc, TRANSIENT_EXCEPTIONS):
        return OperationStatus.TRANSIENT_ERROR

    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code
        if status_code == 429 or status_code >= 500:
            return OperationStatus.TRANSIENT_ERROR

    return OperationStatus.PERMANENT_ERROR


def handle_api_error(error: Union[BaseException, Any], code: str) -> OperationResult:
    """Build the error result returned to the UI for a failed call.

    Non-exception values are stringified, so callers can pass whatever a
    failed promise-style API handed them.

    Args:
        error: Exception (or arbitrary value) describing the failure
        code: Machine error code shown to the UI

    Returns:
        OperationResult carrying ``code`` and the error message
    """
    if (
        isinstance(error, BaseException)
        and classify_error(error) == OperationStatus.TRANSIENT_ERROR
    ):
        return OperationResult.transient_error(str(error), error_code=code)
    return OperationResult.permanent_error(str(error), error_code=code)


def is_success(result: Union[OperationResult, Dict[str, Any]]) -> bool:
    """Check whether a result (or its rendered envelope) is a success."""
    if isinstance(result, OperationResult):
        return result.is_success
    return bool(result.get("success"))
