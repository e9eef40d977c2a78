"""Exception types for the itinerary engine.

Input validation and permission errors are raised before any network call.
Remote errors wrap transport-level failures from the external itinerary API.
Data-shape problems (unresolvable coordinates, missing day context) never
raise; consumers degrade instead.
"""


class ItineraryEngineError(Exception):
    """Base class for engine errors."""

    pass


class InputValidationError(ItineraryEngineError):
    """User input rejected locally before mutation or network access."""

    pass


class ExpenseValidationError(InputValidationError):
    """Expense draft failed validation (amount, day number)."""

    pass


class DateRangeError(InputValidationError):
    """Trip date range is inverted or longer than allowed."""

    pass


class PermissionDeniedError(ItineraryEngineError):
    """Current user's role does not allow the attempted action."""

    def __init__(self, role: str, action: str) -> None:
        super().__init__(f"role '{role}' may not perform '{action}'")
        self.role = role
        self.action = action


class RemoteServiceError(ItineraryEngineError):
    """External API call failed (network error or non-2xx status)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
