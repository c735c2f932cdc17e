"""Portfolio position models."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class AssetSnapshot(BaseModel):
    """Identity of an asset as it was when a position was opened."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    symbol: str


class Holding(BaseModel):
    """A recorded position; every field is frozen at acquisition."""

    model_config = ConfigDict(frozen=True)

    asset: AssetSnapshot
    quantity: Decimal
    acquisition_price: Decimal | None = None
    acquired_at: datetime


__all__ = ["AssetSnapshot", "Holding"]
