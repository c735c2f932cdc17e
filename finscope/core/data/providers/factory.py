"""Builds the default set of price sources from configuration."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

import httpx

from finscope.core.config import SourcesConfig
from finscope.core.data.providers.base import PrimarySource, SupplementalSource
from finscope.core.data.providers.binance import BinanceSource
from finscope.core.data.providers.coingecko import CoinGeckoSource
from finscope.core.data.providers.coinmarketcap import CoinMarketCapSource
from finscope.core.data.providers.cryptocompare import CryptoCompareSource
from finscope.core.http_adapter import HttpClient, HttpConfig


@dataclass
class SourceSet:
    """The primary source plus the supplemental sources, in display order."""

    primary: PrimarySource
    supplementals: list[SupplementalSource] = field(default_factory=list)

    @property
    def all(self) -> list:
        return [self.primary, *self.supplementals]

    async def close(self) -> None:
        for source in self.all:
            await source.close()


def create_default_sources(
    config: SourcesConfig | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    clock: Callable[[], datetime] | None = None,
) -> SourceSet:
    """Create CoinGecko (primary), CryptoCompare, Binance and CoinMarketCap clients."""
    config = config or SourcesConfig()

    def client(base_url: str) -> HttpClient:
        http_config = HttpConfig(base_url=base_url, timeout=config.http_timeout, user_agent=config.user_agent)
        return HttpClient(http_config, transport=transport)

    return SourceSet(
        primary=CoinGeckoSource(client(config.coingecko_url), listing_size=config.listing_size, clock=clock),
        supplementals=[
            CryptoCompareSource(
                client(config.cryptocompare_url),
                symbol=config.reference_symbol,
                currencies=config.cryptocompare_currencies,
            ),
            BinanceSource(
                client(config.binance_url),
                base_asset=config.reference_symbol,
                quote_asset=config.binance_quote_asset,
            ),
            CoinMarketCapSource(client(config.coinmarketcap_url), api_key=config.coinmarketcap_api_key),
        ],
    )


__all__ = ["SourceSet", "create_default_sources"]
