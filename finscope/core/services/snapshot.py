"""Save and restore dashboard state through a persistence gateway."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from finscope.core.data.storage import PersistenceGateway
from finscope.core.exceptions import StorageError
from finscope.core.models import AggregateView, Holding, Transaction
from finscope.core.services.ledger import TransactionLedger

MARKET_STATE_KEY = "market_state"
LEDGER_KEY = "ledger"


class DashboardSnapshot(BaseModel):
    """Persisted market view together with the portfolio holdings."""

    view: AggregateView
    holdings: tuple[Holding, ...] = ()
    saved_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class LedgerSnapshot(BaseModel):
    transactions: tuple[Transaction, ...] = ()


def save_snapshot(
    gateway: PersistenceGateway,
    view: AggregateView,
    holdings: Iterable[Holding],
    saved_at: datetime | None = None,
) -> DashboardSnapshot:
    snapshot = DashboardSnapshot(view=view, holdings=tuple(holdings))
    if saved_at is not None:
        snapshot = snapshot.model_copy(update={"saved_at": saved_at})
    gateway.set(MARKET_STATE_KEY, snapshot.model_dump(mode="json"))
    logger.debug(f"Saved {len(snapshot.holdings)} holdings and {len(view.assets)} assets")
    return snapshot


def load_snapshot(gateway: PersistenceGateway) -> DashboardSnapshot | None:
    """Return the last saved snapshot, or None if nothing was saved."""
    payload = gateway.get(MARKET_STATE_KEY)
    if payload is None:
        return None
    try:
        return DashboardSnapshot.model_validate(payload)
    except ValidationError as e:
        raise StorageError(f"Stored market state is unreadable: {e}", key=MARKET_STATE_KEY) from e


def save_ledger(gateway: PersistenceGateway, ledger: TransactionLedger) -> None:
    gateway.set(LEDGER_KEY, LedgerSnapshot(transactions=ledger.transactions).model_dump(mode="json"))
    logger.debug(f"Saved {len(ledger.transactions)} transactions")


def load_ledger(
    gateway: PersistenceGateway,
    clock: Callable[[], datetime] | None = None,
) -> TransactionLedger | None:
    payload = gateway.get(LEDGER_KEY)
    if payload is None:
        return None
    try:
        snapshot = LedgerSnapshot.model_validate(payload)
    except ValidationError as e:
        raise StorageError(f"Stored ledger is unreadable: {e}", key=LEDGER_KEY) from e
    return TransactionLedger(snapshot.transactions, clock=clock)


__all__ = [
    "DashboardSnapshot",
    "LedgerSnapshot",
    "MARKET_STATE_KEY",
    "LEDGER_KEY",
    "save_snapshot",
    "load_snapshot",
    "save_ledger",
    "load_ledger",
]
