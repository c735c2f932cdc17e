"""Binance ticker price for one trading pair."""

from __future__ import annotations

from typing import Any

from finscope.core.data.providers.base import QuoteMatcher, SupplementalSource, to_decimal
from finscope.core.http_adapter import HttpClient


class BinanceSource(SupplementalSource):
    """``/ticker/price?symbol=BTCUSDT``: ``{"symbol": ..., "price": "<decimal string>"}``."""

    def __init__(
        self,
        http: HttpClient,
        base_asset: str = "BTC",
        quote_asset: str = "USDT",
        name: str = "binance",
    ):
        self.base_asset = base_asset.upper()
        self.pair = f"{self.base_asset}{quote_asset.upper()}"
        super().__init__(name, http, "/ticker/price", params={"symbol": self.pair})

    def build_matcher(self, raw: Any) -> QuoteMatcher:
        if not isinstance(raw, dict):
            raise TypeError(f"expected a ticker object, got {type(raw).__name__}")
        pair = raw.get("symbol")
        if pair is not None and str(pair).upper() != self.pair:
            raise ValueError(f"ticker is for {pair}, expected {self.pair}")
        price = to_decimal(raw["price"])
        if price is None:
            raise ValueError(f"price is not numeric: {raw['price']!r}")
        return QuoteMatcher({self.base_asset: price})


__all__ = ["BinanceSource"]
