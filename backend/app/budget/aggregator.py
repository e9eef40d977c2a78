"""Budget aggregation and expense ledger operations.

Every function here is pure: inputs are never mutated, ledger operations
return a new Budget. Amounts are Decimal so ``remaining + total_spent``
always equals ``total`` exactly.
"""

import math
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from backend.app.config import Settings, get_settings
from backend.app.errors import ExpenseValidationError
from backend.app.models.budget import (
    Budget,
    BudgetStatus,
    BudgetSummary,
    CategoryBreakdown,
    DayBreakdown,
    Expense,
    ExpenseDraft,
)
from backend.app.models.common import ExpenseCategory
from backend.app.models.itinerary import Day

CENTS = Decimal("0.01")
ZERO = Decimal(0)
HUNDRED = Decimal(100)


def total_spent(budget: Budget) -> Decimal:
    """Sum of all expense amounts, regardless of day."""
    return sum((e.counted_amount for e in budget.expenses), ZERO)


def remaining(budget: Budget) -> Decimal:
    """Ceiling minus spend; negative when over budget."""
    return Decimal(budget.total) - total_spent(budget)


def _usage(budget: Budget) -> Decimal:
    total = Decimal(budget.total)
    if total <= 0:
        return ZERO
    return total_spent(budget) / total * HUNDRED


def usage_percent(budget: Budget) -> float:
    """Spend as a percentage of the ceiling; 0 when there is no ceiling."""
    return float(_usage(budget))


def budget_status(budget: Budget, settings: Settings | None = None) -> BudgetStatus:
    """Classify spend against the ceiling.

    Above the over threshold (100%) is over budget, from the warning
    threshold (80%) up to it is a warning, anything lower is nominal.
    """
    settings = settings or get_settings()
    usage = _usage(budget)

    if usage > settings.budget_over_percent:
        return BudgetStatus.over_budget
    if usage >= settings.budget_warning_percent:
        return BudgetStatus.warning
    return BudgetStatus.nominal


def by_category(budget: Budget) -> list[CategoryBreakdown]:
    """Spend per category in fixed category order, omitting empty categories."""
    total = Decimal(budget.total)
    breakdown: list[CategoryBreakdown] = []

    for category in ExpenseCategory:
        matching = [e for e in budget.expenses if e.category == category]
        category_total = sum((e.counted_amount for e in matching), ZERO)
        if category_total == 0:
            continue
        share = float(category_total / total * HUNDRED) if total > 0 else 0.0
        breakdown.append(
            CategoryBreakdown(
                category=category,
                label=category.label,
                total=category_total,
                share_percent=share,
                count=len(matching),
            )
        )

    return breakdown


def _effective_day(expense: Expense) -> int:
    # Expenses with no day context count against day 1
    return expense.day_number if expense.day_number is not None else 1


def by_day(budget: Budget, days: Sequence[Day]) -> list[DayBreakdown]:
    """Expenses grouped by day position; empty days appear with zero."""
    breakdown: list[DayBreakdown] = []

    for index, day in enumerate(days):
        day_number = index + 1
        matching = [e for e in budget.expenses if _effective_day(e) == day_number]
        breakdown.append(
            DayBreakdown(
                day_number=day_number,
                date=day.date,
                expenses=matching,
                total=sum((e.counted_amount for e in matching), ZERO),
            )
        )

    return breakdown


def unassigned_expenses(budget: Budget, days: Sequence[Day]) -> list[Expense]:
    """Expenses whose day number points past the itinerary's days."""
    return [e for e in budget.expenses if not 1 <= _effective_day(e) <= len(days)]


def summarize_budget(
    budget: Budget, days: Sequence[Day], settings: Settings | None = None
) -> BudgetSummary:
    """Compute every aggregate for a budget in one pass.

    Args:
        budget: Budget with its expense ledger
        days: Itinerary days, used for the per-day breakdown
        settings: Optional settings override for status thresholds

    Returns:
        BudgetSummary with totals, status, and breakdowns
    """
    spent = total_spent(budget)
    return BudgetSummary(
        total=Decimal(budget.total),
        currency=budget.currency,
        total_spent=spent,
        remaining=Decimal(budget.total) - spent,
        usage_percent=usage_percent(budget),
        status=budget_status(budget, settings),
        by_category=by_category(budget),
        by_day=by_day(budget, days),
        unassigned=unassigned_expenses(budget, days),
    )


def parse_amount(raw: Any) -> Decimal:
    """Parse a user-entered amount, rejecting anything that is not a positive number.

    Raises:
        ExpenseValidationError: If the amount is missing, non-numeric,
            non-finite, or not greater than zero
    """
    if raw is None or isinstance(raw, bool):
        raise ExpenseValidationError("amount is required")

    if isinstance(raw, float) and not math.isfinite(raw):
        raise ExpenseValidationError(f"amount must be a finite number, got {raw!r}")

    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError) as e:
        raise ExpenseValidationError(f"amount must be a number, got {raw!r}") from e

    if not amount.is_finite():
        raise ExpenseValidationError(f"amount must be a finite number, got {raw!r}")
    if amount <= 0:
        raise ExpenseValidationError(f"amount must be greater than zero, got {raw!r}")

    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def _resolve_day_number(
    requested: int | None, days: Sequence[Day], active_day_number: int | None
) -> int:
    day_number = requested if requested is not None else active_day_number
    if day_number is None:
        day_number = 1

    if days and not 1 <= day_number <= len(days):
        raise ExpenseValidationError(
            f"day {day_number} does not exist (itinerary has {len(days)} days)"
        )
    if day_number < 1:
        raise ExpenseValidationError(f"day number must be 1 or greater, got {day_number}")

    return day_number


def build_expense(
    draft: ExpenseDraft,
    days: Sequence[Day] = (),
    active_day_number: int | None = None,
    now: datetime | None = None,
) -> Expense:
    """Validate a draft and turn it into a ledger entry.

    Args:
        draft: User input
        days: Itinerary days; when present the day number must reference one
        active_day_number: 1-based number of the day the user is working in
        now: Timestamp to stamp on the expense

    Raises:
        ExpenseValidationError: If the draft is invalid
    """
    amount = parse_amount(draft.amount)
    day_number = _resolve_day_number(draft.day_number, days, active_day_number)
    description = (draft.description or "").strip() or draft.category.label

    return Expense(
        category=draft.category,
        amount=amount,
        description=description,
        day_number=day_number,
        timestamp=now or datetime.now(timezone.utc),
        paid_by=draft.paid_by,
        notes=draft.notes,
    )


def add_expense(
    budget: Budget,
    draft: ExpenseDraft,
    days: Sequence[Day] = (),
    active_day_number: int | None = None,
) -> tuple[Budget, Expense]:
    """Return a new budget with the drafted expense appended.

    Raises:
        ExpenseValidationError: If the draft is invalid; ``budget`` is untouched
    """
    expense = build_expense(draft, days, active_day_number)
    updated = budget.model_copy(update={"expenses": [*budget.expenses, expense]})
    return updated, expense


def remove_expense(budget: Budget, expense_id: str) -> Budget:
    """Return a new budget without the given expense; unknown ids are a no-op."""
    kept = [e for e in budget.expenses if e.id != expense_id]
    if len(kept) == len(budget.expenses):
        return budget
    return budget.model_copy(update={"expenses": kept})


def update_expense(
    budget: Budget,
    expense_id: str,
    changes: Mapping[str, Any],
    days: Sequence[Day] = (),
) -> Budget:
    """Return a new budget with one expense revalidated and replaced.

    ``changes`` uses ExpenseDraft field names. Unknown ids are a no-op.

    Raises:
        ExpenseValidationError: If the changed expense is invalid
    """
    for index, current in enumerate(budget.expenses):
        if current.id != expense_id:
            continue

        draft = ExpenseDraft.model_validate(
            {
                "category": current.category,
                "amount": current.amount,
                "description": current.description,
                "day_number": current.day_number,
                "notes": current.notes,
                **changes,
            }
        )
        rebuilt = build_expense(draft, days, now=current.timestamp)
        replacement = current.model_copy(
            update={
                "category": rebuilt.category,
                "amount": rebuilt.amount,
                "description": rebuilt.description,
                "day_number": rebuilt.day_number,
                "notes": rebuilt.notes,
            }
        )

        expenses = list(budget.expenses)
        expenses[index] = replacement
        return budget.model_copy(update={"expenses": expenses})

    return budget
