"""Price source clients."""

from finscope.core.data.providers.base import (
    FetchResult,
    PriceSourceClient,
    PrimarySource,
    QuoteMatcher,
    SupplementalSource,
    to_decimal,
)
from finscope.core.data.providers.binance import BinanceSource
from finscope.core.data.providers.coingecko import CoinGeckoSource, sample_daily
from finscope.core.data.providers.coinmarketcap import CoinMarketCapSource
from finscope.core.data.providers.cryptocompare import CryptoCompareSource
from finscope.core.data.providers.factory import SourceSet, create_default_sources

__all__ = [
    "FetchResult",
    "PriceSourceClient",
    "PrimarySource",
    "SupplementalSource",
    "QuoteMatcher",
    "to_decimal",
    "CoinGeckoSource",
    "CryptoCompareSource",
    "BinanceSource",
    "CoinMarketCapSource",
    "sample_daily",
    "SourceSet",
    "create_default_sources",
]
