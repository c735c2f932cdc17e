"""Standardised error codes shared across finscope."""

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes attached to every FinscopeError."""

    GENERAL_ERROR = "GENERAL_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # sources
    SOURCE_UNAVAILABLE = "SOURCE_UNAVAILABLE"
    SOURCE_TIMEOUT = "SOURCE_TIMEOUT"
    SOURCE_HTTP_STATUS = "SOURCE_HTTP_STATUS"
    SOURCE_MALFORMED_PAYLOAD = "SOURCE_MALFORMED_PAYLOAD"
    SOURCE_MISSING_API_KEY = "SOURCE_MISSING_API_KEY"
    SOURCE_SKIPPED = "SOURCE_SKIPPED"
    AGGREGATION_FAILED = "AGGREGATION_FAILED"

    # state
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    INPUT_VALIDATION = "INPUT_VALIDATION"

    # storage
    STORAGE_ERROR = "STORAGE_ERROR"


__all__ = ["ErrorCode"]
