"""Portfolio valuation.

Holdings are immutable facts; every derived figure is recomputed from live
prices on demand and never stored. Any figure that cannot be computed is None
and renders as ``"n/a"``.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Union

from loguru import logger

from finscope.core.models import AggregateView, Asset, AssetSnapshot, Holding

NOT_AVAILABLE = "n/a"

PriceLookup = Union[Mapping[str, Decimal], Callable[[str], Union[Decimal, None]]]


# leading numeric prefix, so "2 BTC" reads as 2
_NUMERIC_PREFIX = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")

MAX_QUANTITY = Decimal("1e15")


def _parse_quantity(quantity_input: Any) -> Decimal | None:
    if isinstance(quantity_input, bool) or quantity_input is None:
        return None
    match = _NUMERIC_PREFIX.match(str(quantity_input))
    if match is None:
        return None
    try:
        quantity = Decimal(match.group(0).strip())
    except (InvalidOperation, ValueError):
        return None
    if quantity < 0 or quantity > MAX_QUANTITY:
        return None
    return quantity


def parse_quantity(quantity_input: Any) -> Decimal:
    """Parse user input as a non-negative decimal; anything unusable becomes 0."""
    quantity = _parse_quantity(quantity_input)
    return Decimal("0") if quantity is None else quantity


def format_amount(value: Decimal | None, places: int = 2) -> str:
    if value is None:
        return NOT_AVAILABLE
    return f"{value:,.{places}f}"


def format_percent(value: Decimal | None, places: int = 2) -> str:
    if value is None:
        return NOT_AVAILABLE
    return f"{value:+.{places}f}%"


@dataclass(frozen=True)
class Valuation:
    """Derived figures of one holding at one moment."""

    holding: Holding
    current_price: Decimal | None
    current_value: Decimal | None
    purchase_value: Decimal | None
    profit_loss: Decimal | None
    profit_loss_percent: Decimal | None

    @property
    def is_complete(self) -> bool:
        return self.profit_loss_percent is not None

    def display(self) -> dict[str, str]:
        """Presentation-ready strings, ``"n/a"`` wherever a figure is unknown."""
        return {
            "current_value": format_amount(self.current_value),
            "purchase_value": format_amount(self.purchase_value),
            "profit_loss": format_amount(self.profit_loss),
            "profit_loss_percent": format_percent(self.profit_loss_percent),
        }


def _lookup(price_lookup: PriceLookup, asset_id: str) -> Decimal | None:
    if callable(price_lookup):
        return price_lookup(asset_id)
    return price_lookup.get(asset_id)


def _guarded(compute: Callable[[], Decimal], *operands: Decimal | None) -> Decimal | None:
    """Run ``compute`` unless an operand is unknown; overflow also yields None."""
    if any(operand is None for operand in operands):
        return None
    try:
        return compute()
    except ArithmeticError as e:
        logger.warning(f"Valuation figure not available: {e!r}")
        return None


def valuate(holding: Holding, price_lookup: PriceLookup) -> Valuation:
    """Value ``holding`` against the live price of its asset.

    ``price_lookup`` maps asset id to current price; an asset that is no longer
    listed, or has no price, yields an unknown current value rather than zero.
    """
    current_price = _lookup(price_lookup, holding.asset.id)
    current_value = _guarded(lambda: current_price * holding.quantity, current_price)
    purchase_value = _guarded(lambda: holding.acquisition_price * holding.quantity, holding.acquisition_price)
    profit_loss = _guarded(lambda: current_value - purchase_value, current_value, purchase_value)

    profit_loss_percent = None
    if profit_loss is not None and purchase_value:
        profit_loss_percent = _guarded(lambda: profit_loss / purchase_value * 100)

    return Valuation(
        holding=holding,
        current_price=current_price,
        current_value=current_value,
        purchase_value=purchase_value,
        profit_loss=profit_loss,
        profit_loss_percent=profit_loss_percent,
    )


def prices_from_view(view: AggregateView) -> dict[str, Decimal]:
    """Asset id -> live price for every listed asset that has one."""
    return {asset.id: asset.price for asset in view.assets if asset.price is not None}


@dataclass(frozen=True)
class PortfolioSummary:
    """Valuations of every holding plus totals over the figures that are known."""

    valuations: tuple[Valuation, ...]
    total_value: Decimal
    total_cost: Decimal
    total_profit_loss: Decimal
    profit_loss_percent: Decimal | None
    unvalued: int

    @property
    def is_empty(self) -> bool:
        return not self.valuations


def summarize(valuations: Iterable[Valuation]) -> PortfolioSummary:
    valuations = tuple(valuations)
    complete = [v for v in valuations if v.profit_loss is not None]
    total_cost = sum((v.purchase_value for v in complete), Decimal("0"))
    total_profit_loss = sum((v.profit_loss for v in complete), Decimal("0"))
    return PortfolioSummary(
        valuations=valuations,
        total_value=sum((v.current_value for v in valuations if v.current_value is not None), Decimal("0")),
        total_cost=total_cost,
        total_profit_loss=total_profit_loss,
        profit_loss_percent=total_profit_loss / total_cost * 100 if total_cost else None,
        unvalued=len(valuations) - len(complete),
    )


class PortfolioValuator:
    """Keeps the list of holdings; valuation itself is delegated to ``valuate``."""

    def __init__(self, clock: Callable[[], datetime] | None = None):
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._holdings: tuple[Holding, ...] = ()

    @property
    def holdings(self) -> tuple[Holding, ...]:
        return self._holdings

    def add_holding(self, asset: Asset, quantity_input: Any, acquired_at: datetime | None = None) -> Holding:
        """Record a position at the asset's current price.

        Only the leading number of the input counts ("2 BTC" is 2). Unparseable,
        negative or implausibly large quantities are recorded as 0.
        """
        quantity = _parse_quantity(quantity_input)
        if quantity is None:
            logger.warning(f"Invalid quantity {quantity_input!r} for {asset.symbol}, recording 0")
            quantity = Decimal("0")
        if asset.price is None:
            logger.warning(f"{asset.symbol} has no current price, acquisition price unknown")

        holding = Holding(
            asset=AssetSnapshot(id=asset.id, name=asset.name, symbol=asset.symbol),
            quantity=quantity,
            acquisition_price=asset.price,
            acquired_at=acquired_at or self._clock(),
        )
        self._holdings = (*self._holdings, holding)
        logger.info(f"Added holding {quantity} {asset.symbol} at {format_amount(asset.price)}")
        return holding

    def clear(self) -> None:
        """Destroy every holding."""
        self._holdings = ()

    def restore(self, holdings: Iterable[Holding]) -> None:
        self._holdings = tuple(holdings)

    def valuate_all(self, view: AggregateView) -> PortfolioSummary:
        prices = prices_from_view(view)
        return summarize(valuate(holding, prices) for holding in self._holdings)


__all__ = [
    "NOT_AVAILABLE",
    "PortfolioSummary",
    "PortfolioValuator",
    "Valuation",
    "format_amount",
    "format_percent",
    "parse_quantity",
    "prices_from_view",
    "summarize",
    "valuate",
]
