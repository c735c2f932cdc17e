"""Dashboard facade - wires sources, aggregation, portfolio, ledger and storage."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from loguru import logger

from finscope.core.config import ConfigManager, FinscopeConfig
from finscope.core.data.providers import SourceSet, create_default_sources
from finscope.core.data.storage import PersistenceGateway, create_store
from finscope.core.exceptions import InputValidationError
from finscope.core.models import AggregateView, Holding, Transaction
from finscope.core.monitoring import MetricsCollector
from finscope.core.services import (
    MarketDataAggregator,
    PortfolioSummary,
    PortfolioValuator,
    TransactionLedger,
    load_ledger,
    load_snapshot,
    save_ledger,
    save_snapshot,
)


class Dashboard:
    """Single-user finance dashboard: crypto market view, portfolio and bank ledger."""

    def __init__(
        self,
        config: FinscopeConfig | None = None,
        *,
        sources: SourceSet | None = None,
        store: PersistenceGateway | None = None,
        metrics: MetricsCollector | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.config = config or ConfigManager().get_config()
        self.sources = sources or create_default_sources(self.config.sources, clock=clock)
        self.aggregator = MarketDataAggregator(
            self.sources.primary,
            self.sources.supplementals,
            supplemental_timeout=self.config.sources.supplemental_timeout,
            clock=clock,
            metrics=metrics,
        )
        self.portfolio_valuator = PortfolioValuator(clock=clock)
        self.ledger = TransactionLedger(clock=clock)
        self._clock = clock
        self._store = store

    @property
    def store(self) -> PersistenceGateway:
        if self._store is None:
            self._store = create_store(self.config.storage)
        return self._store

    @property
    def view(self) -> AggregateView:
        return self.aggregator.view

    async def refresh(self) -> AggregateView:
        return await self.aggregator.refresh()

    async def retry(self) -> AggregateView:
        return await self.aggregator.retry()

    def select(self, asset_id: str | None) -> AggregateView:
        return self.aggregator.select(asset_id)

    def set_query(self, text: str) -> AggregateView:
        return self.aggregator.set_query(text)

    def add_holding(self, quantity_input: Any, asset_id: str | None = None) -> Holding:
        """Add a position in ``asset_id``, or in the selected asset when no id is given."""
        view = self.aggregator.view
        asset = view.find(asset_id) if asset_id else view.selected
        if asset is None:
            raise InputValidationError("No asset selected for the new holding", field="asset", value=asset_id)
        return self.portfolio_valuator.add_holding(asset, quantity_input)

    def clear_portfolio(self) -> None:
        self.portfolio_valuator.clear()

    def portfolio(self) -> PortfolioSummary:
        """Value every holding against the latest asset prices."""
        return self.portfolio_valuator.valuate_all(self.aggregator.view)

    def add_transaction(self, amount_input: Any, description: str = "", **kwargs: Any) -> Transaction:
        return self.ledger.add(amount_input, description, **kwargs)

    def save(self) -> None:
        """Persist the market view, the holdings and the ledger."""
        save_snapshot(self.store, self.aggregator.view, self.portfolio_valuator.holdings)
        save_ledger(self.store, self.ledger)

    def load(self) -> bool:
        """Restore previously saved state; returns whether anything was found."""
        found = False
        snapshot = load_snapshot(self.store)
        if snapshot is not None:
            self.aggregator.restore(snapshot.view)
            self.portfolio_valuator.restore(snapshot.holdings)
            found = True
        ledger = load_ledger(self.store, clock=self._clock)
        if ledger is not None:
            self.ledger = ledger
            found = True
        logger.debug(f"Loaded saved state: {found}")
        return found

    async def aclose(self) -> None:
        await self.aggregator.close()
        if self._store is not None:
            self._store.close()

    async def __aenter__(self) -> "Dashboard":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


__all__ = ["Dashboard"]
