"""Bank transaction ledger models."""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TransactionType(str, Enum):
    """Direction of a ledger entry."""

    INCOME = "income"
    EXPENSE = "expense"


class Category(str, Enum):
    """Spending and income categories."""

    SALARY = "salary"
    HOUSING = "housing"
    FOOD = "food"
    TRANSPORT = "transport"
    UTILITIES = "utilities"
    ENTERTAINMENT = "entertainment"
    OTHER = "other"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class Transaction(BaseModel):
    """A manually entered income or expense record."""

    model_config = ConfigDict(frozen=True)

    id: str
    amount: Decimal = Field(gt=0)
    description: str = ""
    type: TransactionType
    category: Category = Category.OTHER
    occurred_at: datetime

    @field_validator("occurred_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


class CategoryTotals(BaseModel):
    """Income and expense totals of one category."""

    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")


class LedgerSummary(BaseModel):
    """Balance and totals over a set of transactions."""

    balance: Decimal = Decimal("0")
    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")
    categories: dict[Category, CategoryTotals] = Field(default_factory=dict)


class MonthlyTotals(BaseModel):
    """Income and expenses of one calendar month."""

    label: str
    year: int
    month: int
    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")


__all__ = [
    "TransactionType",
    "Category",
    "Transaction",
    "CategoryTotals",
    "LedgerSummary",
    "MonthlyTotals",
]
