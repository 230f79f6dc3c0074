"""Calendar helpers built on resolved trip start dates."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Set, Tuple

from .date_resolver import resolve_start_dates


def _as_date(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value


def covered_dates(start_date: date, trip_days: int) -> List[date]:
    """Return the calendar days a trip starting on ``start_date`` occupies."""

    start = _as_date(start_date)
    return [start + timedelta(days=offset) for offset in range(max(trip_days, 1))]


def date_ranges_overlap(first_start: date, first_end: date, second_start: date, second_end: date) -> bool:
    return not (first_end < second_start or first_start > second_end)


def trip_date_span(expression: str, year: int, trip_days: int) -> Optional[Tuple[date, date]]:
    """Return the first start date and the last covered date, if any."""

    starts = resolve_start_dates(expression, year, trip_days)
    if not starts:
        return None
    return starts[0], covered_dates(starts[-1], trip_days)[-1]


def conflicts_with_days_off(
    expression: str,
    year: int,
    trip_days: int,
    days_off: Iterable[date],
) -> bool:
    """Return ``True`` when any occurrence of the trip covers a requested day off."""

    wanted_off: Set[date] = {_as_date(day) for day in days_off}
    if not wanted_off:
        return False
    for start in resolve_start_dates(expression, year, trip_days):
        if wanted_off.intersection(covered_dates(start, trip_days)):
            return True
    return False
