"""Client workspace: the single in-memory itinerary snapshot and its edits.

Loads are applied only if they are still the latest request. Expense, day
and stop edits are applied to the snapshot immediately, in call order, then saved
fire-and-forget with ``PUT /itineraries/:id``. Save failures become notices;
the optimistic edit stays (last write wins, nothing is rolled back).
"""

import asyncio
import datetime as dt
import logging
from collections.abc import Coroutine, Mapping
from dataclasses import dataclass
from typing import Any

from backend.app.budget.aggregator import (
    add_expense,
    remove_expense,
    summarize_budget,
    update_expense,
)
from backend.app.client.api import ItineraryApiClient
from backend.app.config import Settings, get_settings
from backend.app.errors import InputValidationError, PermissionDeniedError, RemoteServiceError
from backend.app.itinerary.days import (
    add_stop,
    append_day,
    generate_days,
    move_stop,
    remove_stop,
)
from backend.app.itinerary.map_projector import project_map
from backend.app.models.budget import Budget, BudgetSummary, Expense, ExpenseDraft
from backend.app.models.common import Permission
from backend.app.models.itinerary import Collaborator, Day, Itinerary
from backend.app.models.map import MapProjection
from backend.app.models.stops import StopBase
from backend.app.permissions.resolver import Action, Role, require, resolve_role
from backend.app.session import SessionContext
from backend.app.utils.metrics import PrometheusEngineMetrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notice:
    """Transient message for the user."""

    level: str
    message: str


class ItineraryWorkspace:
    """Holds one itinerary and gates, applies and persists edits to it."""

    def __init__(
        self,
        api: ItineraryApiClient,
        session: SessionContext | None = None,
        settings: Settings | None = None,
        metrics: PrometheusEngineMetrics | None = None,
    ) -> None:
        self.api = api
        self.session = session
        self.settings = settings or get_settings()
        self.metrics = metrics or PrometheusEngineMetrics()
        self.pending = False
        self.notices: list[Notice] = []
        # 0-based index of the day the user is working in
        self.active_day = 0
        self._itinerary: Itinerary | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._load_generation = 0
        self._closed = False

    # Read-only views

    @property
    def itinerary(self) -> Itinerary | None:
        """Copy of the current snapshot; editing it does not touch the workspace."""
        return self._itinerary.model_copy(deep=True) if self._itinerary else None

    @property
    def role(self) -> Role:
        """Current user's role on the loaded itinerary."""
        if self._itinerary is None:
            return Role.none
        user_id = self.session.user_id if self.session else None
        return resolve_role(user_id, self._itinerary)

    def map_projection(self) -> MapProjection:
        """Map markers, route and bounds for the snapshot."""
        days = self._itinerary.days if self._itinerary else []
        return project_map(days=days, active_day=self.active_day, settings=self.settings)

    def budget_summary(self) -> BudgetSummary | None:
        """Budget aggregates, or None when the itinerary has no budget."""
        if self._itinerary is None or self._itinerary.budget is None:
            return None
        return summarize_budget(self._itinerary.budget, self._itinerary.days, self.settings)

    def notify(self, level: str, message: str) -> None:
        """Queue a notice unless the workspace was closed."""
        if not self._closed:
            self.notices.append(Notice(level=level, message=message))

    # Loading

    async def load(self, itinerary_id: str) -> Itinerary | None:
        """Fetch an itinerary and make it the snapshot.

        On failure the last-known-good snapshot is kept and a notice is
        queued. A load superseded by a newer one is discarded.
        """
        self._load_generation += 1
        generation = self._load_generation
        self.pending = True

        try:
            itinerary = await self.api.get_itinerary(itinerary_id)
        except RemoteServiceError as e:
            if self._is_stale(generation):
                return None
            self.pending = False
            self.notify("error", f"Failed to load itinerary: {e}")
            return None

        if self._is_stale(generation):
            return None
        self.pending = False
        self._itinerary = itinerary
        self.active_day = 0
        return self.itinerary

    def _is_stale(self, generation: int) -> bool:
        return self._closed or generation != self._load_generation

    # Gate

    def _gate(self, action: Action) -> Itinerary | None:
        if self._itinerary is None:
            self.notify("error", "No itinerary loaded")
            return None
        try:
            require(self.role, action)
        except PermissionDeniedError as e:
            logger.info(
                "Blocked action",
                extra={"structured": {"role": e.role, "action": e.action}},
            )
            self.notify("error", "You do not have permission to do that")
            return None
        return self._itinerary

    # Expenses

    def _active_day_number(self, itinerary: Itinerary) -> int | None:
        if not itinerary.days:
            return None
        return min(self.active_day, len(itinerary.days) - 1) + 1

    async def add_expense(self, draft: ExpenseDraft) -> Expense | None:
        """Append an expense optimistically and save in the background."""
        itinerary = self._gate(Action.modify)
        if itinerary is None:
            return None

        try:
            budget, expense = add_expense(
                itinerary.budget or Budget(),
                draft,
                itinerary.days,
                self._active_day_number(itinerary),
            )
        except InputValidationError as e:
            self.notify("error", str(e))
            return None

        self._apply_budget(itinerary, budget, "add_expense")
        self.notify("success", "Expense added")
        return expense

    async def remove_expense(self, expense_id: str) -> bool:
        """Drop an expense optimistically; unknown ids change nothing."""
        itinerary = self._gate(Action.modify)
        if itinerary is None or itinerary.budget is None:
            return False

        budget = remove_expense(itinerary.budget, expense_id)
        if budget is itinerary.budget:
            return False

        self._apply_budget(itinerary, budget, "remove_expense")
        self.notify("success", "Expense removed")
        return True

    async def update_expense(self, expense_id: str, changes: Mapping[str, Any]) -> bool:
        """Revalidate and replace an expense optimistically."""
        itinerary = self._gate(Action.modify)
        if itinerary is None or itinerary.budget is None:
            return False

        try:
            budget = update_expense(itinerary.budget, expense_id, changes, itinerary.days)
        except InputValidationError as e:
            self.notify("error", str(e))
            return False
        if budget is itinerary.budget:
            return False

        self._apply_budget(itinerary, budget, "update_expense")
        return True

    def _apply_budget(self, itinerary: Itinerary, budget: Budget, operation: str) -> None:
        self._itinerary = itinerary.model_copy(update={"budget": budget})
        payload = {"budget": budget.model_dump(mode="json", by_alias=True, exclude_none=True)}
        self._persist(itinerary.id, payload, operation)

    # Days

    async def set_date_range(self, start: dt.date, end: dt.date) -> bool:
        """Regenerate days for a new date range, keeping days whose date survives."""
        itinerary = self._gate(Action.modify)
        if itinerary is None:
            return False

        try:
            days = generate_days(
                start, end, max_days=self.settings.max_trip_days, existing=itinerary.days
            )
        except InputValidationError as e:
            self.notify("error", str(e))
            return False

        self._itinerary = itinerary.model_copy(
            update={"start_date": start, "end_date": end, "days": days}
        )
        self.active_day = min(self.active_day, len(days) - 1)
        self._persist(
            itinerary.id,
            {
                "startDate": start.isoformat(),
                "endDate": end.isoformat(),
                "days": [d.model_dump(mode="json", by_alias=True, exclude_none=True) for d in days],
            },
            "set_date_range",
        )
        return True

    async def add_day(self) -> bool:
        """Append an empty day after the last one."""
        itinerary = self._gate(Action.modify)
        if itinerary is None:
            return False

        self._apply_days(itinerary, append_day(itinerary.days), "add_day")
        return True

    def select_day(self, index: int) -> None:
        """Make a day active; out-of-range indexes are ignored."""
        if self._itinerary and 0 <= index < len(self._itinerary.days):
            self.active_day = index

    def _apply_days(self, itinerary: Itinerary, days: list[Day], operation: str) -> None:
        self._itinerary = itinerary.model_copy(update={"days": days})
        self._persist(
            itinerary.id,
            {"days": [d.model_dump(mode="json", by_alias=True, exclude_none=True) for d in days]},
            operation,
        )

    # Stops

    async def add_stop(self, day_index: int, stop: StopBase) -> bool:
        """Append a stop to a day; it becomes that day's last stop."""
        itinerary = self._gate(Action.modify)
        if itinerary is None:
            return False

        try:
            days = add_stop(itinerary.days, day_index, stop)
        except InputValidationError as e:
            self.notify("error", str(e))
            return False

        self._apply_days(itinerary, days, "add_stop")
        return True

    async def remove_stop(self, day_index: int, stop_index: int) -> bool:
        """Remove a stop from a day and renumber the rest."""
        itinerary = self._gate(Action.modify)
        if itinerary is None:
            return False

        try:
            days = remove_stop(itinerary.days, day_index, stop_index)
        except InputValidationError as e:
            self.notify("error", str(e))
            return False

        self._apply_days(itinerary, days, "remove_stop")
        return True

    async def move_stop(self, day_index: int, from_index: int, to_index: int) -> bool:
        """Reorder a stop within its day."""
        itinerary = self._gate(Action.modify)
        if itinerary is None:
            return False

        try:
            days = move_stop(itinerary.days, day_index, from_index, to_index)
        except InputValidationError as e:
            self.notify("error", str(e))
            return False

        self._apply_days(itinerary, days, "move_stop")
        return True

    # Owner-only actions

    async def add_collaborator(
        self, user_id: str, permission: Permission = Permission.view
    ) -> bool:
        """Grant a user access; awaited, applied only on success."""
        itinerary = self._gate(Action.add_collaborator)
        if itinerary is None or itinerary.id is None:
            return False

        try:
            await self.api.add_collaborator(itinerary.id, user_id, permission.value)
        except RemoteServiceError as e:
            self.notify("error", f"Failed to add collaborator: {e}")
            return False

        if self._closed or self._itinerary is None:
            return True
        others = [c for c in self._itinerary.collaborators if c.user_id != user_id]
        added = Collaborator(user=user_id, permission=permission)
        self._itinerary = self._itinerary.model_copy(update={"collaborators": [*others, added]})
        self.notify("success", "Collaborator added")
        return True

    async def remove_collaborator(self, user_id: str) -> bool:
        """Remove a collaborator; awaited, applied only on success."""
        itinerary = self._gate(Action.remove_collaborator)
        if itinerary is None or itinerary.id is None:
            return False

        try:
            await self.api.remove_collaborator(itinerary.id, user_id)
        except RemoteServiceError as e:
            self.notify("error", f"Failed to remove collaborator: {e}")
            return False

        if self._closed or self._itinerary is None:
            return True
        kept = [c for c in self._itinerary.collaborators if c.user_id != user_id]
        self._itinerary = self._itinerary.model_copy(update={"collaborators": kept})
        self.notify("success", "Collaborator removed")
        return True

    async def delete_itinerary(self) -> bool:
        """Delete the itinerary; the snapshot is cleared on success."""
        itinerary = self._gate(Action.delete_itinerary)
        if itinerary is None or itinerary.id is None:
            return False

        try:
            await self.api.delete_itinerary(itinerary.id)
        except RemoteServiceError as e:
            self.notify("error", f"Failed to delete itinerary: {e}")
            return False

        if not self._closed:
            self._itinerary = None
            self.notify("success", "Itinerary deleted")
        return True

    # Persistence

    def _persist(
        self, itinerary_id: str | None, changes: dict[str, Any], operation: str
    ) -> None:
        if itinerary_id is None:
            return
        self._spawn(self._save(itinerary_id, changes, operation))

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _save(self, itinerary_id: str, changes: dict[str, Any], operation: str) -> None:
        try:
            await self.api.update_itinerary(itinerary_id, changes)
        except RemoteServiceError as e:
            self.metrics.inc_persistence_failure(operation)
            logger.warning(
                "Failed to save itinerary",
                extra={
                    "structured": {
                        "itinerary_id": itinerary_id,
                        "operation": operation,
                        "status_code": e.status_code,
                    }
                },
            )
            self.notify("error", "Failed to save changes")

    async def flush(self) -> None:
        """Wait for in-flight saves to settle."""
        while True:
            pending = [t for t in self._tasks if not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def close(self) -> None:
        """Stop applying results; in-flight requests finish unobserved."""
        self._closed = True
