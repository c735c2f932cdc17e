"""Tests for AggregateView derived properties."""

from datetime import datetime, timezone

import pytest

from finscope.core.exceptions import AggregationFailedError, ErrorCode, SourceUnavailableError
from finscope.core.models import AggregateView, SourceRole, SourceStatus

T0 = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def _statuses(primary_ok: bool = True, supplemental_ok: bool = True) -> dict[str, SourceStatus]:
    error = SourceUnavailableError("down", "x")
    primary = SourceStatus(source="coingecko", role=SourceRole.PRIMARY).begin()
    supplemental = SourceStatus(source="binance").begin()
    return {
        "coingecko": primary.succeed(T0) if primary_ok else primary.fail(error, T0),
        "binance": supplemental.succeed(T0) if supplemental_ok else supplemental.fail(error, T0),
    }


class TestFilteredAssets:
    def test_empty_query_returns_everything(self, asset_factory):
        view = AggregateView(assets=(asset_factory("bitcoin", "BTC"), asset_factory("ethereum", "ETH")))

        assert len(view.filtered_assets) == 2

    def test_matches_name_or_symbol_case_insensitively(self, asset_factory):
        view = AggregateView(
            assets=(asset_factory("bitcoin", "BTC"), asset_factory("ethereum", "ETH")),
            query="  eTh ",
        )

        assert [asset.id for asset in view.filtered_assets] == ["ethereum"]

    def test_query_by_name_fragment(self, asset_factory):
        view = AggregateView(assets=(asset_factory("bitcoin", "BTC"), asset_factory("ethereum", "ETH")), query="coin")

        assert [asset.id for asset in view.filtered_assets] == ["bitcoin"]


class TestHealth:
    def test_unknown_before_first_cycle(self):
        view = AggregateView(source_statuses={"coingecko": SourceStatus(source="coingecko", role=SourceRole.PRIMARY)})

        assert view.health == "unknown"

    def test_unknown_while_refreshing(self):
        assert AggregateView(source_statuses=_statuses(), refreshing=True).health == "unknown"

    @pytest.mark.parametrize(
        ("primary_ok", "supplemental_ok", "expected"),
        [
            (True, True, "healthy"),
            (True, False, "degraded"),
            (False, False, "unhealthy"),
        ],
    )
    def test_health_levels(self, primary_ok, supplemental_ok, expected):
        view = AggregateView(source_statuses=_statuses(primary_ok, supplemental_ok))

        assert view.health == expected

    def test_primary_status_lookup(self):
        view = AggregateView(source_statuses=_statuses())

        assert view.primary_status.source == "coingecko"


def test_find_returns_matching_asset(asset_factory):
    view = AggregateView(assets=(asset_factory("bitcoin", "BTC"),))

    assert view.find("bitcoin").symbol == "BTC"
    assert view.find("dogecoin") is None


def test_raise_for_error():
    failure = AggregationFailedError("Primary source coingecko failed", cause=SourceUnavailableError("503", "coingecko"))
    view = AggregateView(error=failure.to_payload())

    with pytest.raises(AggregationFailedError) as exc_info:
        view.raise_for_error()

    assert exc_info.value.message == "Primary source coingecko failed"
    assert exc_info.value.details["code"] == ErrorCode.AGGREGATION_FAILED.value
    AggregateView().raise_for_error()
