"""Exception handling module."""

from finscope.core.exceptions.base import (
    AggregationFailedError,
    FinscopeError,
    InputValidationError,
    InvalidStatusTransitionError,
    SourceUnavailableError,
    StorageError,
)
from finscope.core.exceptions.codes import ErrorCode

__all__ = [
    "FinscopeError",
    "SourceUnavailableError",
    "AggregationFailedError",
    "InputValidationError",
    "InvalidStatusTransitionError",
    "StorageError",
    "ErrorCode",
]
