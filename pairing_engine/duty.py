"""Duty start/end instants for one occurrence of a trip."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional, Sequence, Union

import pytz

from . import config
from .schemas import DutyPeriod, FlightLeg, PairingDataError

TimezoneLike = Union[str, tzinfo, None]


def _buffer(value: Optional[timedelta], default_minutes: int, label: str) -> timedelta:
    buffer = value if value is not None else timedelta(minutes=default_minutes)
    if buffer < timedelta(0):
        raise PairingDataError(f"{label} buffer cannot be negative: {buffer}")
    return buffer


def parse_clock(value: str) -> time:
    """Parse an ``HHMM`` clock string as printed on a flight leg."""

    text = (value or "").strip()
    if len(text) != 4 or not text.isdigit():
        raise PairingDataError(f"Invalid HHMM clock value: {value!r}")
    hours, minutes = int(text[:2]), int(text[2:])
    if hours > 23 or minutes > 59:
        raise PairingDataError(f"Clock value out of range: {value!r}")
    return time(hours, minutes)


def _resolve_tz(tz: TimezoneLike) -> Optional[tzinfo]:
    if tz is None:
        tz = config.BASE_TZ_NAME
    if tz is None:
        return None
    if isinstance(tz, str):
        try:
            return pytz.timezone(tz)
        except pytz.UnknownTimeZoneError as exc:
            raise PairingDataError(f"Unknown timezone: {tz!r}") from exc
    return tz


def _leg_instant(start_date: date, leg: FlightLeg, clock: str, tz: Optional[tzinfo]) -> datetime:
    naive = datetime.combine(start_date + timedelta(days=leg.day_offset), parse_clock(clock))
    if tz is None:
        return naive
    localize = getattr(tz, "localize", None)
    if localize is not None:
        return localize(naive)
    return naive.replace(tzinfo=tz)


def _shift(instant: datetime, delta: timedelta, tz: Optional[tzinfo]) -> datetime:
    shifted = instant + delta
    normalize = getattr(tz, "normalize", None)
    if normalize is not None:
        return normalize(shifted)
    return shifted


def _validate_legs(legs: Sequence[FlightLeg], trip_days: Optional[int]) -> None:
    if not legs:
        raise PairingDataError("Cannot compute a duty period without flight legs")
    if trip_days is not None and trip_days < 1:
        raise PairingDataError(f"trip_days must be at least 1, got {trip_days}")
    for leg in legs:
        offset = leg.day_offset
        if trip_days is not None and offset > trip_days - 1:
            raise PairingDataError(
                f"Leg {leg.flight_number} on day {leg.day} exceeds a {trip_days}-day trip"
            )


def compute_duty_period(
    start_date: date,
    legs: Sequence[FlightLeg],
    *,
    trip_days: Optional[int] = None,
    tz: TimezoneLike = None,
    report_buffer: Optional[timedelta] = None,
    release_buffer: Optional[timedelta] = None,
) -> DutyPeriod:
    """Return the duty start and end instants for a trip starting on ``start_date``.

    Duty starts one hour before the first leg's departure and ends thirty
    minutes after the last leg's arrival, each on the calendar day given by the
    leg's day letter. Instants are naive local clock times unless ``tz`` (or
    ``PAIRING_BASE_TZ``) names a timezone.
    """

    if isinstance(start_date, datetime):
        start_date = start_date.date()
    _validate_legs(legs, trip_days)
    zone = _resolve_tz(tz)

    first, last = legs[0], legs[-1]
    departure = _leg_instant(start_date, first, first.departure_time, zone)
    arrival = _leg_instant(start_date, last, last.arrival_time, zone)

    report = _buffer(report_buffer, config.REPORT_BUFFER_MINUTES, "Report")
    release = _buffer(release_buffer, config.RELEASE_BUFFER_MINUTES, "Release")
    duty_start = _shift(departure, -report, zone)
    duty_end = _shift(arrival, release, zone)
    return DutyPeriod(duty_start=duty_start, duty_end=duty_end)


def compute_rest_hours(first: DutyPeriod, second: DutyPeriod) -> float:
    """Hours between the end of ``first`` and the start of ``second``.

    Negative when the periods overlap; judging legality is left to the caller.
    """

    return (second.duty_start - first.duty_end).total_seconds() / 3600.0
