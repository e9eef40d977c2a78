"""Budget and expense models, plus the aggregated views computed over them."""

import datetime as dt
import uuid
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from backend.app.models.common import Amount, ExpenseCategory, WireModel


class UserRef(WireModel):
    """Populated user document."""

    id: str | None = Field(None, alias="_id")
    username: str | None = None
    name: str | None = None
    email: str | None = None


class Expense(WireModel):
    """Single ledger entry."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, alias="_id")
    category: ExpenseCategory = ExpenseCategory.other
    # Stored rows are not validated upstream; unreadable amounts load as None
    amount: Amount | None = None
    description: str | None = Field(None, alias="name")
    day_number: int | None = Field(None, alias="dayNumber")
    timestamp: dt.datetime | None = Field(None, alias="date")
    paid_by: str | UserRef | None = Field(None, alias="paidBy")
    split_among: list[str | UserRef] = Field(default_factory=list, alias="splitAmong")
    notes: str | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def drop_unreadable_amount(cls, v: Any) -> Any:
        """Load non-numeric or non-finite amounts as None."""
        if v is None or isinstance(v, bool):
            return None
        try:
            value = Decimal(str(v).strip())
        except InvalidOperation:
            return None
        return value if value.is_finite() else None

    @property
    def counted_amount(self) -> Decimal:
        """Amount that counts toward spend; missing or negative rows count as 0."""
        if self.amount is None or self.amount < 0:
            return Decimal(0)
        return self.amount


class Budget(WireModel):
    """Trip budget: ceiling, currency, and the expense ledger."""

    total: Amount = Decimal(0)
    currency: str = "USD"
    expenses: list[Expense] = Field(default_factory=list)

    @field_validator("total", mode="before")
    @classmethod
    def default_missing_total(cls, v: Any) -> Any:
        """A budget stored without a ceiling has a ceiling of 0."""
        return Decimal(0) if v is None else v


class ExpenseDraft(BaseModel):
    """Unvalidated expense input as typed by a user.

    ``amount`` is deliberately loose; the aggregator parses and rejects it.
    """

    category: ExpenseCategory = ExpenseCategory.other
    amount: Any = None
    description: str | None = None
    day_number: int | None = None
    notes: str | None = None
    paid_by: str | None = None


class BudgetStatus(str, Enum):
    """Discrete spend status against the ceiling."""

    nominal = "nominal"
    warning = "warning"
    over_budget = "over_budget"


class CategoryBreakdown(BaseModel):
    """Spend within one category."""

    category: ExpenseCategory
    label: str
    total: Amount
    share_percent: float
    count: int


class DayBreakdown(BaseModel):
    """Expenses attached to one day position."""

    day_number: int
    date: dt.date | None = None
    expenses: list[Expense]
    total: Amount


class BudgetSummary(BaseModel):
    """All aggregated budget figures for one itinerary."""

    total: Amount
    currency: str
    total_spent: Amount
    remaining: Amount
    usage_percent: float
    status: BudgetStatus
    by_category: list[CategoryBreakdown]
    by_day: list[DayBreakdown]
    unassigned: list[Expense] = Field(default_factory=list)
