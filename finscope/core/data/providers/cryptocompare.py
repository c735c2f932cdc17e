"""CryptoCompare single-symbol price quote."""

from __future__ import annotations

from typing import Any

from finscope.core.data.providers.base import QuoteMatcher, SupplementalSource, to_decimal
from finscope.core.http_adapter import HttpClient


class CryptoCompareSource(SupplementalSource):
    """``/price?fsym=BTC&tsyms=USD,EUR``: currency code -> price of one symbol."""

    def __init__(
        self,
        http: HttpClient,
        symbol: str = "BTC",
        currencies: str = "USD,EUR",
        name: str = "cryptocompare",
    ):
        super().__init__(name, http, "/price", params={"fsym": symbol.upper(), "tsyms": currencies})
        self.symbol = symbol.upper()

    def build_matcher(self, raw: Any) -> QuoteMatcher:
        if not isinstance(raw, dict):
            raise TypeError(f"expected an object, got {type(raw).__name__}")
        if raw.get("Response") == "Error":
            raise ValueError(raw.get("Message", "provider reported an error"))
        usd = to_decimal(raw["USD"])
        if usd is None:
            raise ValueError(f"USD price is not numeric: {raw['USD']!r}")
        return QuoteMatcher({self.symbol: usd})


__all__ = ["CryptoCompareSource"]
