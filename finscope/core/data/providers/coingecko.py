"""CoinGecko market listing, the primary source."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from loguru import logger

from finscope.core.data.providers.base import PrimarySource, to_decimal
from finscope.core.http_adapter import HttpClient
from finscope.core.models import HISTORY_DAYS, Asset, PricePoint


def sample_daily(points: list[Decimal], days: int = HISTORY_DAYS) -> list[Decimal]:
    """Reduce a sparkline to exactly ``days`` points, oldest first.

    Longer series are sampled evenly with both ends kept; shorter ones are
    left-padded with their oldest value.
    """
    if not points:
        return []
    if len(points) < days:
        return [points[0]] * (days - len(points)) + list(points)
    last = len(points) - 1
    return [points[round(i * last / (days - 1))] for i in range(days)]


class CoinGeckoSource(PrimarySource):
    """``/coins/markets`` listing ranked by market cap with a 7 day sparkline."""

    def __init__(
        self,
        http: HttpClient,
        listing_size: int = 100,
        clock: Callable[[], datetime] | None = None,
        name: str = "coingecko",
    ):
        super().__init__(
            name,
            http,
            "/coins/markets",
            params={
                "vs_currency": "usd",
                "order": "market_cap_desc",
                "per_page": listing_size,
                "page": 1,
                "sparkline": "true",
                "price_change_percentage": "24h",
            },
        )
        self.listing_size = listing_size
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def parse_listing(self, raw: Any) -> list[Asset]:
        if not isinstance(raw, list):
            raise TypeError(f"expected a list of markets, got {type(raw).__name__}")

        today = self._clock().date()
        dates = [today - timedelta(days=HISTORY_DAYS - 1 - i) for i in range(HISTORY_DAYS)]
        assets: list[Asset] = []
        for record in raw[: self.listing_size]:
            asset = self._parse_record(record, dates)
            if asset is not None:
                assets.append(asset)
        return assets

    def _parse_record(self, record: Any, dates: list) -> Asset | None:
        if not isinstance(record, dict):
            logger.bind(source=self.name).warning(f"Skipping non-object market record: {record!r}")
            return None
        asset_id = record.get("id")
        symbol = record.get("symbol")
        if not asset_id or not symbol:
            logger.bind(source=self.name).warning(f"Skipping market record without id or symbol: {record!r}")
            return None

        price = to_decimal(record.get("current_price"))
        sparkline = (record.get("sparkline_in_7d") or {}).get("price") or []
        points = [p for p in (to_decimal(value) for value in sparkline) if p is not None]
        if not points and price is not None:
            points = [price]
        daily = sample_daily(points)
        if not daily:
            logger.bind(source=self.name).warning(f"Skipping {asset_id}: no price and no sparkline")
            return None

        return Asset(
            id=str(asset_id),
            name=str(record.get("name") or symbol),
            symbol=str(symbol),
            price=price,
            change_24h=to_decimal(record.get("price_change_percentage_24h")),
            market_cap=to_decimal(record.get("market_cap")),
            volume=to_decimal(record.get("total_volume")),
            circulating_supply=to_decimal(record.get("circulating_supply")),
            history=tuple(PricePoint(date=day, price=value) for day, value in zip(dates, daily)),
        )


__all__ = ["CoinGeckoSource", "sample_daily"]
