"""Manually entered bank transactions and their aggregates."""

from __future__ import annotations

import calendar
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any
from uuid import uuid4

from loguru import logger

from finscope.core.exceptions import InputValidationError
from finscope.core.models import (
    Category,
    CategoryTotals,
    LedgerSummary,
    MonthlyTotals,
    Transaction,
    TransactionType,
)


MAX_AMOUNT = Decimal("1e15")


class TimeRange(str, Enum):
    """Periods the transaction list and analytics can be restricted to."""

    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def range_start(time_range: TimeRange | str, now: datetime) -> datetime | None:
    """Inclusive lower bound of ``time_range`` relative to ``now``; None means unbounded."""
    time_range = TimeRange(time_range)
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if time_range is TimeRange.WEEK:
        return midnight - timedelta(days=7)
    if time_range is TimeRange.MONTH:
        return midnight.replace(day=1)
    if time_range is TimeRange.YEAR:
        return midnight.replace(month=1, day=1)
    return None


def parse_amount(amount_input: Any) -> Decimal:
    """Parse a transaction amount; it must be a finite number greater than zero
    and no larger than ``MAX_AMOUNT``.
    """
    try:
        amount = Decimal(str(amount_input).strip())
    except (InvalidOperation, ValueError):
        raise InputValidationError(f"Amount {amount_input!r} is not a number", field="amount", value=amount_input)
    if isinstance(amount_input, bool) or not amount.is_finite() or amount <= 0:
        raise InputValidationError(f"Amount must be a positive number, got {amount_input!r}", field="amount", value=amount_input)
    if amount > MAX_AMOUNT:
        raise InputValidationError(f"Amount {amount_input!r} exceeds {MAX_AMOUNT:,f}", field="amount", value=amount_input)
    return amount


class TransactionLedger:
    """In-memory list of transactions, newest first."""

    def __init__(
        self,
        transactions: Iterable[Transaction] = (),
        clock: Callable[[], datetime] | None = None,
    ):
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._transactions: tuple[Transaction, ...] = tuple(transactions)

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return self._transactions

    def _now(self, now: datetime | None = None) -> datetime:
        return _as_utc(now or self._clock())

    def add(
        self,
        amount_input: Any,
        description: str = "",
        type: TransactionType | str = TransactionType.EXPENSE,
        category: Category | str = Category.OTHER,
        occurred_at: datetime | None = None,
    ) -> Transaction:
        """Validate and prepend a transaction; invalid input leaves the ledger untouched."""
        amount = parse_amount(amount_input)
        try:
            transaction_type = TransactionType(type)
        except ValueError:
            raise InputValidationError(f"Unknown transaction type {type!r}", field="type", value=type)
        try:
            transaction_category = Category(category)
        except ValueError:
            raise InputValidationError(f"Unknown category {category!r}", field="category", value=category)

        transaction = Transaction(
            id=uuid4().hex,
            amount=amount,
            description=(description or "").strip(),
            type=transaction_type,
            category=transaction_category,
            occurred_at=_as_utc(occurred_at) if occurred_at else self._now(),
        )
        self._transactions = (transaction, *self._transactions)
        logger.info(f"Recorded {transaction_type.value} of {amount} in {transaction_category.value}")
        return transaction

    def delete(self, transaction_id: str) -> bool:
        remaining = tuple(t for t in self._transactions if t.id != transaction_id)
        if len(remaining) == len(self._transactions):
            return False
        self._transactions = remaining
        logger.info(f"Deleted transaction {transaction_id}")
        return True

    def clear(self) -> None:
        self._transactions = ()
        logger.info("Cleared all transactions")

    def filter_by_range(self, time_range: TimeRange | str = TimeRange.MONTH, now: datetime | None = None) -> list[Transaction]:
        start = range_start(time_range, self._now(now))
        if start is None:
            return list(self._transactions)
        return [t for t in self._transactions if t.occurred_at >= start]

    def summary(self, transactions: Iterable[Transaction] | None = None) -> LedgerSummary:
        """Balance, totals and per-category totals; every category is present."""
        categories = {category: CategoryTotals() for category in Category}
        income = Decimal("0")
        expenses = Decimal("0")
        for transaction in self._transactions if transactions is None else transactions:
            totals = categories[transaction.category]
            if transaction.type is TransactionType.INCOME:
                income += transaction.amount
                totals.income += transaction.amount
            else:
                expenses += transaction.amount
                totals.expenses += transaction.amount
        return LedgerSummary(balance=income - expenses, income=income, expenses=expenses, categories=categories)

    def expense_breakdown(self, time_range: TimeRange | str = TimeRange.MONTH, now: datetime | None = None) -> dict[Category, Decimal]:
        """Expenses per category within the range, omitting categories with nothing spent."""
        summary = self.summary(self.filter_by_range(time_range, now))
        return {category: totals.expenses for category, totals in summary.categories.items() if totals.expenses > 0}

    def monthly_trend(self, now: datetime | None = None, months: int = 6) -> list[MonthlyTotals]:
        """Income and expenses per calendar month for the last ``months`` months, oldest first."""
        now = self._now(now)
        trend: list[MonthlyTotals] = []
        for offset in range(months - 1, -1, -1):
            year, month = now.year, now.month - offset
            while month <= 0:
                month += 12
                year -= 1
            start = datetime(year, month, 1, tzinfo=now.tzinfo)
            end = datetime(year + (month == 12), month % 12 + 1, 1, tzinfo=now.tzinfo)
            bucket = MonthlyTotals(label=calendar.month_abbr[month], year=year, month=month)
            for transaction in self._transactions:
                if start <= transaction.occurred_at < end:
                    if transaction.type is TransactionType.INCOME:
                        bucket.income += transaction.amount
                    else:
                        bucket.expenses += transaction.amount
            trend.append(bucket)
        return trend


__all__ = ["TransactionLedger", "TimeRange", "parse_amount", "range_start"]
