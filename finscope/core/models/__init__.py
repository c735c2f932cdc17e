"""Data models module."""

from finscope.core.models.ledger import (
    Category,
    CategoryTotals,
    LedgerSummary,
    MonthlyTotals,
    Transaction,
    TransactionType,
)
from finscope.core.models.market import HISTORY_DAYS, Asset, PricePoint
from finscope.core.models.portfolio import AssetSnapshot, Holding
from finscope.core.models.status import SourceRole, SourceState, SourceStatus
from finscope.core.models.view import AggregateView

__all__ = [
    "Asset",
    "PricePoint",
    "HISTORY_DAYS",
    "SourceRole",
    "SourceState",
    "SourceStatus",
    "AggregateView",
    "AssetSnapshot",
    "Holding",
    "Category",
    "CategoryTotals",
    "LedgerSummary",
    "MonthlyTotals",
    "Transaction",
    "TransactionType",
]
