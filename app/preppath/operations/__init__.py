"""Operation result types, status enums and error classifiers."""

from preppath.operations.classifiers import (
    classify_error,
    handle_api_error,
    is_success,
)
from preppath.operations.result import OperationResult
from preppath.operations.status import OperationStatus

__all__ = [
    "OperationResult",
    "OperationStatus",
    "classify_error",
    "handle_api_error",
    "is_success",
]
