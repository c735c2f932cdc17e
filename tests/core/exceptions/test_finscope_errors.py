"""Tests for the finscope error taxonomy."""

import pytest

from finscope.core.exceptions import (
    AggregationFailedError,
    ErrorCode,
    FinscopeError,
    InputValidationError,
    SourceUnavailableError,
    StorageError,
)


def test_base_error_payload() -> None:
    error = FinscopeError("boom", details={"k": "v"})

    assert error.to_payload() == {"code": "GENERAL_ERROR", "message": "boom", "details": {"k": "v"}}
    assert str(error) == "boom"


@pytest.mark.parametrize(
    ("reason", "code"),
    [
        ("network", ErrorCode.SOURCE_UNAVAILABLE),
        ("timeout", ErrorCode.SOURCE_TIMEOUT),
        ("http_status", ErrorCode.SOURCE_HTTP_STATUS),
        ("malformed_payload", ErrorCode.SOURCE_MALFORMED_PAYLOAD),
        ("missing_api_key", ErrorCode.SOURCE_MISSING_API_KEY),
        ("skipped", ErrorCode.SOURCE_SKIPPED),
    ],
)
def test_source_error_codes(reason: str, code: ErrorCode) -> None:
    error = SourceUnavailableError("failed", "binance", reason=reason)

    assert error.error_code == code
    assert error.details["source"] == "binance"
    assert error.details["reason"] == reason


def test_source_error_status_code_in_details() -> None:
    error = SourceUnavailableError("HTTP 503", "coingecko", reason="http_status", status_code=503)

    assert error.status_code == 503
    assert error.details["status_code"] == 503


def test_aggregation_error_carries_cause() -> None:
    cause = SourceUnavailableError("HTTP 503", "coingecko", reason="http_status", status_code=503)

    error = AggregationFailedError("primary failed", cause=cause)

    assert error.cause is cause
    assert error.error_code == ErrorCode.AGGREGATION_FAILED
    assert error.to_payload()["details"]["cause"]["code"] == "SOURCE_HTTP_STATUS"


def test_input_and_storage_errors() -> None:
    input_error = InputValidationError("bad amount", field="amount", value="abc")
    storage_error = StorageError("disk full", key="ledger", backend="duckdb")

    assert input_error.details == {"field": "amount", "value": "abc"}
    assert storage_error.details == {"key": "ledger", "backend": "duckdb"}
    assert isinstance(storage_error, FinscopeError)


def test_caller_details_are_not_mutated() -> None:
    shared = {"attempt": 1}

    errors = [
        FinscopeError("boom", details=shared),
        SourceUnavailableError("down", "binance", status_code=503, details=shared),
        AggregationFailedError("failed", cause=SourceUnavailableError("down", "coingecko"), details=shared),
        InputValidationError("bad amount", field="amount", value="abc", details=shared),
        StorageError("disk full", key="ledger", backend="duckdb", details=shared),
    ]

    assert shared == {"attempt": 1}
    for error in errors:
        assert error.details["attempt"] == 1
        assert error.details is not shared
    assert "source" not in errors[3].details
