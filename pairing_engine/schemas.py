"""Shared dataclasses and helpers for the pairing parsing engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, NamedTuple, Optional, Tuple


class PairingDataError(ValueError):
    """Raised when trip leg data cannot be turned into duty instants."""


def duration_to_minutes(value: Optional[str]) -> int:
    """Convert a printed ``H.MM`` or ``H:MM`` duration into minutes.

    Bid packages print durations as hours and minutes separated by a dot
    (``18.51`` is 18h51m, ``.57`` is 57 minutes), never as decimal hours.
    """

    if not value:
        return 0
    text = value.strip().replace(":", ".")
    if not text:
        return 0
    hours_text, _, minutes_text = text.partition(".")
    hours = int(hours_text) if hours_text else 0
    minutes = int(minutes_text) if minutes_text else 0
    return hours * 60 + minutes


def day_letter_to_offset(letter: str) -> int:
    """Return the zero-based day offset for a day marker (A=0, B=1, ...)."""

    if len(letter) != 1 or not ("A" <= letter.upper() <= "Z"):
        raise PairingDataError(f"Invalid day marker: {letter!r}")
    return ord(letter.upper()) - ord("A")


@dataclass(frozen=True)
class TripBlock:
    """Verbatim slice of a bid package belonging to one trip."""

    index: int
    line_number: int
    text: str

    @property
    def header(self) -> str:
        return self.text.splitlines()[0].strip() if self.text else ""


@dataclass(frozen=True)
class FlightLeg:
    day: str
    flight_number: str
    departure: str
    departure_time: str
    arrival: str
    arrival_time: str
    block_time: str
    is_deadhead: bool = False

    @property
    def day_offset(self) -> int:
        return day_letter_to_offset(self.day)

    @property
    def block_minutes(self) -> int:
        return duration_to_minutes(self.block_time)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "date": self.day,
            "flightNumber": self.flight_number,
            "departure": self.departure,
            "departureTime": self.departure_time,
            "arrival": self.arrival,
            "arrivalTime": self.arrival_time,
            "blockTime": self.block_time,
            "isDeadhead": self.is_deadhead,
        }


@dataclass(frozen=True)
class Layover:
    station: str
    duration: str
    hotel: Optional[str] = None
    after_leg_index: int = -1

    @property
    def duration_minutes(self) -> int:
        return duration_to_minutes(self.duration)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "city": self.station,
            "duration": self.duration,
            "hotel": self.hotel,
            "afterLegIndex": self.after_leg_index,
        }


@dataclass
class TripSummary:
    """Printed trip totals; absent fields keep their zero defaults."""

    credit_hours: str = "0.00"
    block_hours: str = "0.00"
    tafb: str = "0.00"
    fdp: str = "0.00"
    pay_hours: str = "0:00"
    sit_pay: str = "0.00"
    edp_pay: str = "0.00"
    hol_pay: str = "0.00"
    carveouts: str = "0.00"

    @property
    def tafb_minutes(self) -> int:
        return duration_to_minutes(self.tafb)

    def as_dict(self) -> Dict[str, str]:
        return {
            "creditHours": self.credit_hours,
            "blockHours": self.block_hours,
            "tafb": self.tafb,
            "fdp": self.fdp,
            "payHours": self.pay_hours,
            "sitPay": self.sit_pay,
            "edpPay": self.edp_pay,
            "holPay": self.hol_pay,
            "carveouts": self.carveouts,
        }


@dataclass
class ParsedTrip:
    """Structured view of one trip, as handed to storage collaborators."""

    trip_number: str
    day_code: str
    effective_dates: str
    full_text_block: str
    operating_days: Tuple[str, ...] = ()
    check_in_time: Optional[str] = None
    summary: TripSummary = field(default_factory=TripSummary)
    deadheads: int = 0
    legs: List[FlightLeg] = field(default_factory=list)
    layovers: List[Layover] = field(default_factory=list)

    @property
    def trip_days(self) -> int:
        if not self.legs:
            return 1
        return max(leg.day_offset for leg in self.legs) + 1

    @property
    def route(self) -> str:
        if not self.legs:
            return ""
        ordered = sorted(self.legs, key=lambda leg: (leg.day, leg.departure_time))
        stations = [ordered[0].departure] + [leg.arrival for leg in ordered]
        path: List[str] = []
        for station in stations:
            if not path or path[-1] != station:
                path.append(station)
        return "-".join(path)

    @property
    def layover_stations(self) -> List[str]:
        return [layover.station for layover in self.layovers]

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "tripNumber": self.trip_number,
            "dayCode": self.day_code,
            "operatingDays": list(self.operating_days),
            "effectiveDates": self.effective_dates,
            "checkInTime": self.check_in_time,
            "route": self.route,
        }
        payload.update(self.summary.as_dict())
        payload.update(
            {
                "deadheads": self.deadheads,
                "layovers": [layover.as_dict() for layover in self.layovers],
                "flightSegments": [leg.as_dict() for leg in self.legs],
                "tripDays": self.trip_days,
                "fullTextBlock": self.full_text_block,
            }
        )
        return payload


class DutyPeriod(NamedTuple):
    duty_start: datetime
    duty_end: datetime

    @property
    def duration_hours(self) -> float:
        return (self.duty_end - self.duty_start).total_seconds() / 3600.0
