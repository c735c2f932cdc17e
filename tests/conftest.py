"""Pytest configuration and shared fixtures for the finscope test suite."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import pytest
from prometheus_client import CollectorRegistry

from finscope.core.data.providers.base import FetchResult, PrimarySource, QuoteMatcher, SupplementalSource
from finscope.core.exceptions import SourceUnavailableError
from finscope.core.http_adapter import HttpClient, HttpConfig
from finscope.core.models import Asset, PricePoint
from finscope.core.monitoring import MetricsCollector

FIXED_NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line options for controlling integration tests."""

    parser.addoption(
        "--finscope-run-integration",
        action="store_true",
        default=False,
        help="Run finscope integration tests that call the real price APIs.",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless explicitly requested."""

    if config.getoption("--finscope-run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="integration tests require --finscope-run-integration")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


def make_asset(asset_id: str = "bitcoin", symbol: str = "BTC", price: str | None = "50000", **kwargs: Any) -> Asset:
    """Build an asset with a seven day history ending on FIXED_NOW."""
    base = Decimal(price) if price is not None else Decimal("1")
    history = tuple(
        PricePoint(date=FIXED_NOW.date().replace(day=FIXED_NOW.day - 6 + i), price=base - 6 + i)
        for i in range(7)
    )
    return Asset(
        id=asset_id,
        name=kwargs.pop("name", asset_id.capitalize()),
        symbol=symbol,
        price=Decimal(price) if price is not None else None,
        history=history,
        **kwargs,
    )


def _stub_http() -> HttpClient:
    return HttpClient(HttpConfig(base_url="https://stub.invalid"))


class StubPrimary(PrimarySource):
    """Primary source returning canned assets, or a canned failure."""

    def __init__(self, assets: list[Asset] | None = None, fail: bool = False, name: str = "coingecko"):
        super().__init__(name, _stub_http(), "/coins/markets")
        self.assets = assets if assets is not None else [make_asset()]
        self.fail = fail
        self.calls = 0
        self.gate: asyncio.Event | None = None

    async def fetch(self) -> FetchResult:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            error = SourceUnavailableError(f"{self.name} returned HTTP 503", self.name, reason="http_status", status_code=503)
            return FetchResult(source=self.name, error=error, elapsed=0.01)
        return FetchResult(source=self.name, payload=list(self.assets), elapsed=0.01)

    def parse_listing(self, raw: Any) -> list[Asset]:
        return list(raw)


class StubSupplemental(SupplementalSource):
    """Supplemental source returning canned quotes, a failure, an exception, or hanging for ``delay`` seconds."""

    def __init__(
        self,
        name: str,
        quotes: dict[str, str] | None = None,
        fail: bool = False,
        delay: float = 0.0,
        reason: str = "network",
        raises: Exception | None = None,
    ):
        super().__init__(name, _stub_http(), "/")
        self.quotes = {symbol: Decimal(price) for symbol, price in (quotes or {}).items()}
        self.fail = fail
        self.delay = delay
        self.reason = reason
        self.raises = raises
        self.calls = 0

    async def fetch(self) -> FetchResult:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.raises is not None:
            raise self.raises
        if self.fail:
            error = SourceUnavailableError(f"{self.name} is down", self.name, reason=self.reason)
            return FetchResult(source=self.name, error=error, elapsed=0.01)
        return FetchResult(source=self.name, payload=QuoteMatcher(self.quotes), elapsed=0.01)

    def build_matcher(self, raw: Any) -> QuoteMatcher:
        return QuoteMatcher(raw)


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def metrics(registry: CollectorRegistry) -> MetricsCollector:
    return MetricsCollector(registry=registry)


@pytest.fixture
def asset_factory():
    return make_asset


@pytest.fixture
def primary_factory():
    return StubPrimary


@pytest.fixture
def supplemental_factory():
    return StubSupplemental


@pytest.fixture
def coingecko_payload() -> list[dict[str, Any]]:
    """Two markets in the shape returned by ``/coins/markets?sparkline=true``."""
    return [
        {
            "id": "bitcoin",
            "symbol": "btc",
            "name": "Bitcoin",
            "current_price": 50000,
            "price_change_percentage_24h": 2.5,
            "market_cap": 980000000000,
            "total_volume": 35000000000,
            "circulating_supply": 19600000.0,
            "sparkline_in_7d": {"price": [48000 + 100 * i for i in range(168)]},
        },
        {
            "id": "ethereum",
            "symbol": "eth",
            "name": "Ethereum",
            "current_price": 3000.5,
            "price_change_percentage_24h": -1.25,
            "market_cap": 360000000000,
            "total_volume": 15000000000,
            "circulating_supply": 120000000.0,
            "sparkline_in_7d": {"price": [2900, 2950, 3000]},
        },
    ]
