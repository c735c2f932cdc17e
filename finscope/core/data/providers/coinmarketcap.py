"""CoinMarketCap listings, gated by an API key."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from finscope.core.data.providers.base import QuoteMatcher, SupplementalSource, to_decimal
from finscope.core.exceptions import SourceUnavailableError
from finscope.core.http_adapter import HttpClient

API_KEY_HEADER = "X-CMC_PRO_API_KEY"


class CoinMarketCapSource(SupplementalSource):
    """``/cryptocurrency/listings/latest`` keyed by symbol.

    Without an API key the source fails every cycle without touching the network.
    """

    def __init__(self, http: HttpClient, api_key: str | None = None, name: str = "coinmarketcap"):
        super().__init__(name, http, "/cryptocurrency/listings/latest")
        self.api_key = api_key

    async def _request(self) -> Any:
        if not self.api_key:
            raise SourceUnavailableError(
                f"{self.name} requires an API key", self.name, reason="missing_api_key"
            )
        return await self.http.get_json(self.endpoint, headers={API_KEY_HEADER: self.api_key})

    def build_matcher(self, raw: Any) -> QuoteMatcher:
        listings = raw["data"]
        if not isinstance(listings, list):
            raise TypeError(f"expected a data list, got {type(listings).__name__}")
        quotes: dict[str, Decimal] = {}
        for entry in listings:
            if not isinstance(entry, dict) or not entry.get("symbol"):
                continue
            symbol = str(entry["symbol"]).upper()
            price = to_decimal(((entry.get("quote") or {}).get("USD") or {}).get("price"))
            # listings are ranked, keep the first entry for a shared ticker
            if price is not None and symbol not in quotes:
                quotes[symbol] = price
        return QuoteMatcher(quotes)


__all__ = ["CoinMarketCapSource", "API_KEY_HEADER"]
