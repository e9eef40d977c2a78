"""Day sequence helpers: date-range generation, numbering and per-day stop edits."""

import logging
from collections.abc import Iterator, Sequence
from datetime import date, timedelta

from backend.app.errors import DateRangeError, InputValidationError
from backend.app.models.itinerary import Day
from backend.app.models.stops import StopBase

logger = logging.getLogger(__name__)


def generate_days(
    start: date,
    end: date,
    *,
    max_days: int | None = None,
    existing: Sequence[Day] | None = None,
) -> list[Day]:
    """Build one Day per calendar date from start to end inclusive.

    Days from ``existing`` whose date still falls inside the range are kept
    with their stops; every other date gets an empty Day.

    Args:
        start: First trip date
        end: Last trip date (inclusive)
        max_days: Upper bound on trip length, if any
        existing: Current days of the itinerary

    Returns:
        Days in date order, numbered by position

    Raises:
        DateRangeError: If end precedes start or the range is too long
    """
    if end < start:
        raise DateRangeError(f"end date {end} is before start date {start}")

    count = (end - start).days + 1
    if max_days is not None and count > max_days:
        raise DateRangeError(f"trip spans {count} days, maximum is {max_days}")

    kept = {day.date: day for day in existing or [] if day.date is not None}

    days: list[Day] = []
    for offset in range(count):
        current = start + timedelta(days=offset)
        previous = kept.get(current)
        if previous is not None:
            day = previous.model_copy(update={"day_number": offset + 1}, deep=True)
        else:
            day = Day(day_number=offset + 1, date=current, title=f"Day {offset + 1}")
        days.append(day)

    dropped = len(kept) - sum(1 for d in days if d.date in kept)
    if dropped:
        logger.info("Date range change dropped %d day(s) outside %s..%s", dropped, start, end)

    return days


def append_day(days: Sequence[Day], day: Day | None = None) -> list[Day]:
    """Return a new day list with one day added at the end.

    Without an explicit day, the new one is dated the day after the last
    dated day (or left undated).
    """
    number = len(days) + 1
    if day is None:
        last_date = next((d.date for d in reversed(days) if d.date is not None), None)
        next_date = last_date + timedelta(days=1) if last_date else None
        day = Day(date=next_date, title=f"Day {number}")
    return [*days, day.model_copy(update={"day_number": number})]


def numbered_days(days: Sequence[Day]) -> Iterator[tuple[int, Day]]:
    """Yield (day_number, day); day numbers are 1-based positions."""
    for index, day in enumerate(days):
        yield index + 1, day


def _renumbered(stops: Sequence[StopBase]) -> list[StopBase]:
    return [stop.model_copy(update={"order": i + 1}) for i, stop in enumerate(stops)]


def _day_at(days: Sequence[Day], day_index: int) -> Day:
    if not 0 <= day_index < len(days):
        raise InputValidationError(f"day {day_index + 1} does not exist")
    return days[day_index]


def _with_stops(days: Sequence[Day], day_index: int, stops: list[StopBase]) -> list[Day]:
    updated = list(days)
    updated[day_index] = days[day_index].model_copy(update={"stops": stops})
    return updated


def add_stop(days: Sequence[Day], day_index: int, stop: StopBase) -> list[Day]:
    """Return a new day list with ``stop`` appended to one day as its last stop.

    Raises:
        InputValidationError: If ``day_index`` is out of range
    """
    day = _day_at(days, day_index)
    added = stop.model_copy(update={"order": len(day.stops) + 1})
    return _with_stops(days, day_index, [*day.stops, added])


def remove_stop(days: Sequence[Day], day_index: int, stop_index: int) -> list[Day]:
    """Return a new day list without one stop; remaining stops are renumbered 1..N.

    Raises:
        InputValidationError: If either index is out of range
    """
    day = _day_at(days, day_index)
    if not 0 <= stop_index < len(day.stops):
        raise InputValidationError(f"stop {stop_index + 1} does not exist on day {day_index + 1}")
    kept = [s for i, s in enumerate(day.stops) if i != stop_index]
    return _with_stops(days, day_index, _renumbered(kept))


def move_stop(days: Sequence[Day], day_index: int, from_index: int, to_index: int) -> list[Day]:
    """Return a new day list with one stop moved within its day, renumbered 1..N.

    Raises:
        InputValidationError: If any index is out of range
    """
    day = _day_at(days, day_index)
    count = len(day.stops)
    if not (0 <= from_index < count and 0 <= to_index < count):
        raise InputValidationError(f"cannot move stop {from_index + 1} to {to_index + 1}")
    stops = list(day.stops)
    stops.insert(to_index, stops.pop(from_index))
    return _with_stops(days, day_index, _renumbered(stops))
