"""finscope core exception classes."""

from __future__ import annotations

from typing import Any

from finscope.core.exceptions.codes import ErrorCode


class FinscopeError(Exception):
    """Base class for every finscope error."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.GENERAL_ERROR,
        details: dict[str, Any] | None = None,
    ):
        """Initialise the error.

        Args:
            message: human readable message
            error_code: standardised error code
            details: extra structured context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = dict(details or {})

    def to_payload(self) -> dict[str, Any]:
        """Return a serializable payload representing the error."""

        return {
            "code": self.error_code.value,
            "message": self.message,
            "details": dict(self.details),
        }


class SourceUnavailableError(FinscopeError):
    """A price source could not deliver a usable payload."""

    _REASON_CODES = {
        "timeout": ErrorCode.SOURCE_TIMEOUT,
        "http_status": ErrorCode.SOURCE_HTTP_STATUS,
        "malformed_payload": ErrorCode.SOURCE_MALFORMED_PAYLOAD,
        "missing_api_key": ErrorCode.SOURCE_MISSING_API_KEY,
        "skipped": ErrorCode.SOURCE_SKIPPED,
    }

    def __init__(
        self,
        message: str,
        source_name: str,
        reason: str = "network",
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = dict(details or {})
        super_details["source"] = source_name
        super_details["reason"] = reason
        if status_code is not None:
            super_details["status_code"] = status_code
        error_code = self._REASON_CODES.get(reason, ErrorCode.SOURCE_UNAVAILABLE)
        super().__init__(message, error_code, super_details)
        self.source_name = source_name
        self.reason = reason
        self.status_code = status_code


class AggregationFailedError(FinscopeError):
    """The primary source failed, so the cycle produced no new asset list."""

    def __init__(
        self,
        message: str,
        cause: SourceUnavailableError | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = dict(details or {})
        if cause is not None:
            super_details["cause"] = cause.to_payload()
        super().__init__(message, ErrorCode.AGGREGATION_FAILED, super_details)
        self.cause = cause


class InputValidationError(FinscopeError):
    """User input was rejected before any state was touched."""

    def __init__(
        self,
        message: str,
        field: str,
        value: Any = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = dict(details or {})
        super_details["field"] = field
        super_details["value"] = value
        super().__init__(message, ErrorCode.INPUT_VALIDATION, super_details)
        self.field = field
        self.value = value


class InvalidStatusTransitionError(FinscopeError):
    """A source status was asked to move along an edge the lifecycle forbids."""

    def __init__(self, source_name: str, current: str, target: str):
        super().__init__(
            f"Source {source_name} cannot move from {current} to {target}",
            ErrorCode.INVALID_STATUS_TRANSITION,
            {"source": source_name, "current": current, "target": target},
        )
        self.source_name = source_name
        self.current = current
        self.target = target


class StorageError(FinscopeError):
    """Persistence gateway failure."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        backend: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = dict(details or {})
        if key is not None:
            super_details["key"] = key
        if backend:
            super_details["backend"] = backend
        super().__init__(message, ErrorCode.STORAGE_ERROR, super_details)
        self.key = key
