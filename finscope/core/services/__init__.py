"""Services module."""

from finscope.core.services.aggregator import MarketDataAggregator, merge_quotes, reselect
from finscope.core.services.ledger import TimeRange, TransactionLedger
from finscope.core.services.snapshot import (
    DashboardSnapshot,
    load_ledger,
    load_snapshot,
    save_ledger,
    save_snapshot,
)
from finscope.core.services.valuation import (
    NOT_AVAILABLE,
    PortfolioSummary,
    PortfolioValuator,
    Valuation,
    valuate,
)

__all__ = [
    "MarketDataAggregator",
    "merge_quotes",
    "reselect",
    "TransactionLedger",
    "TimeRange",
    "DashboardSnapshot",
    "save_snapshot",
    "load_snapshot",
    "save_ledger",
    "load_ledger",
    "NOT_AVAILABLE",
    "PortfolioSummary",
    "PortfolioValuator",
    "Valuation",
    "valuate",
]
