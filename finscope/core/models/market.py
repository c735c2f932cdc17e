"""Market data models."""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

HISTORY_DAYS = 7


class PricePoint(BaseModel):
    """One daily entry of an asset's trend history."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    price: Decimal


class Asset(BaseModel):
    """One tradable instrument as currently known, merged across sources."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str
    symbol: str = Field(min_length=1)
    price: Decimal | None = None
    change_24h: Decimal | None = None
    market_cap: Decimal | None = None
    volume: Decimal | None = None
    circulating_supply: Decimal | None = None
    history: tuple[PricePoint, ...] = ()
    # source name -> quoted price; a source without a match has no key at all
    supplemental_quotes: dict[str, Decimal] = Field(default_factory=dict)

    @field_validator("symbol")
    @classmethod
    def _upper_symbol(cls, value: str) -> str:
        return value.upper()

    def quote(self, source: str) -> Decimal | None:
        """Return the price reported by ``source`` or None when it had no match."""
        return self.supplemental_quotes.get(source)


__all__ = ["Asset", "PricePoint", "HISTORY_DAYS"]
