"""Budget endpoints - POST /budget/summary, POST /budget/expenses."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from backend.app.api.auth import get_current_session
from backend.app.budget.aggregator import add_expense, summarize_budget
from backend.app.models.budget import Budget, BudgetSummary, Expense, ExpenseDraft
from backend.app.models.itinerary import Day, Itinerary
from backend.app.permissions.resolver import Action, require, resolve_role
from backend.app.session import SessionContext

router = APIRouter(prefix="/budget", tags=["budget"])


class BudgetSummaryRequest(BaseModel):
    """Request body for POST /budget/summary."""

    budget: Budget
    days: list[Day] = Field(default_factory=list)


class AddExpenseRequest(BaseModel):
    """Request body for POST /budget/expenses."""

    itinerary: Itinerary
    draft: ExpenseDraft
    active_day_number: int | None = Field(None, ge=1)


class AddExpenseResponse(BaseModel):
    """Response for POST /budget/expenses."""

    budget: Budget
    expense: Expense


@router.post("/summary", response_model=BudgetSummary)
async def budget_summary(request: BudgetSummaryRequest) -> BudgetSummary:
    """Totals, status, and per-category and per-day breakdowns."""
    return summarize_budget(request.budget, request.days)


@router.post("/expenses", response_model=AddExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    request: AddExpenseRequest,
    session: Annotated[SessionContext | None, Depends(get_current_session)],
) -> AddExpenseResponse:
    """Validate a draft and return the budget with the expense appended.

    Raises:
        PermissionDeniedError: If the caller may not modify the itinerary (403)
        ExpenseValidationError: If the draft is invalid (422)
    """
    itinerary = request.itinerary
    role = resolve_role(session.user_id if session else None, itinerary)
    require(role, Action.modify)

    budget, expense = add_expense(
        itinerary.budget or Budget(),
        request.draft,
        itinerary.days,
        request.active_day_number,
    )
    return AddExpenseResponse(budget=budget, expense=expense)
