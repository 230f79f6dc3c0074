"""Parse a single trip block into a :class:`ParsedTrip`.

Every line of a block is offered to a prioritized list of independent
matchers (flight leg, layover, summary). Each matcher either returns a tagged
fragment or ``None``; the first fragment wins and unmatched lines come back as
:class:`Unrecognized`. Folding the fragments into a trip happens afterwards in
:func:`parse_trip_block`, so no matcher touches shared trip state.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from .date_resolver import MONTHS
from .schemas import FlightLeg, Layover, ParsedTrip, TripBlock, TripSummary

LOGGER = logging.getLogger(__name__)

WEEKDAY_CODES: Tuple[str, ...] = ("MO", "TU", "WE", "TH", "FR", "SA", "SU")
_WEEKDAY_ALT = "|".join(WEEKDAY_CODES)
_MONTH_ALT = "|".join(MONTHS)
_DATE_TOKEN = r"(?:[A-Z]{3}\.?\s*\d{1,2}|\d{1,2}[A-Z]{3})"

HEADER_RE = re.compile(r"^#(?P<number>\d{4,5})\s+(?P<code>[A-Z]{2})\b")
HEADER_DAY_CODE_RE = re.compile(rf"\b({_WEEKDAY_ALT})\b")
EFFECTIVE_RE = re.compile(
    rf"(?P<prefix>\b(?:EXCPT|EXCEPT)\s+(?:(?:{_WEEKDAY_ALT})\b[\s,]*)+)?\bEFFECTIVE\b(?P<value>.*)$"
)
WEEKDAY_CLAUSE_RE = re.compile(rf"\b(?:EXCPT|EXCEPT)\s+(?:(?:{_WEEKDAY_ALT})\b[\s,]*)+$")
EXCEPT_CLAUSE_RE = re.compile(
    rf"\b(?:EXCEPT|EXCPT)\b(?:[\s,]+(?:{_DATE_TOKEN}|{_WEEKDAY_ALT})\b)+"
)
VALUE_STOP_RE = re.compile(r"CHECK-IN|\s{3,}|\b(?:EXCEPT|EXCPT)\b")
VALUE_CONTINUATION_RE = re.compile(rf"^(?:{_MONTH_ALT})\.?\s*\d{{1,2}}\b|^\d{{1,2}}(?:{_MONTH_ALT})\b")
_DANGLING_SEPARATORS = (",", "-")
CHECK_IN_RE = re.compile(r"CHECK-IN\s+AT\s+(\d{1,2}[.:]\d{2})")

LEG_RE = re.compile(
    r"^(?:(?P<day>[A-Z])\s+)?"
    r"(?:(?P<deadhead>DH)\s+)?"
    r"(?:(?P<flight>\d{1,5})\s+)?"
    r"(?P<departure>[A-Z]{3})\s+(?P<departure_time>\d{4})\s+"
    r"(?P<arrival>[A-Z]{3})\s+(?P<arrival_time>\d{4})\*?\s+"
    r"(?P<block>\d{0,2}\.\d{2})"
)
DEADHEAD_TOKEN_RE = re.compile(r"\bDH\b")
LAYOVER_RE = re.compile(
    r"^(?P<station>[A-Z]{3})\s+(?P<duration>\d{0,2}\.\d{2})/"
    r"(?P<hotel>[A-Z][A-Z&'.,\- ]*?)?\s*(?=\.?\d|\s{2,}|$)"
)

_SUMMARY_FIELD_PATTERNS: Sequence[Tuple[str, "re.Pattern[str]"]] = (
    ("credit_hours", re.compile(r"TOTAL CREDIT\s+(\d{0,3}\.\d{2})(?:TL)?")),
    ("block_hours", re.compile(r"TOTAL CREDIT\s+\d{0,3}\.\d{2}(?:TL)?\s+(\d{0,3}\.\d{2})BL")),
    ("fdp", re.compile(r"(\d{0,3}\.\d{2})FDP\b")),
    ("tafb", re.compile(r"\bTAFB\s+(\d{1,3}\.\d{2})")),
    ("pay_hours", re.compile(r"TOTAL PAY\s+(\d{1,3}:\d{2})(?:TL)?")),
    ("sit_pay", re.compile(r"(\d{0,3}\.\d{2})SIT\b")),
    ("edp_pay", re.compile(r"(\d{0,3}\.\d{2})EDP\b")),
    ("hol_pay", re.compile(r"(\d{0,3}\.\d{2})HOL\b")),
    ("carveouts", re.compile(r"(\d{0,3}\.\d{2})CARVE\b")),
)


@dataclass(frozen=True)
class LegFragment:
    """Flight-leg line before day/flight-number inheritance is applied."""

    day: Optional[str]
    flight_number: Optional[str]
    departure: str
    departure_time: str
    arrival: str
    arrival_time: str
    block_time: str
    is_deadhead: bool


@dataclass(frozen=True)
class SummaryFragment:
    fields: Dict[str, str]


@dataclass(frozen=True)
class Unrecognized:
    line: str


LineResult = Union[LegFragment, Layover, SummaryFragment, Unrecognized]


def _normalize_decimal(value: str) -> str:
    """Restore the leading zero dropped by the printer (``.57`` -> ``0.57``)."""

    return f"0{value}" if value.startswith(".") else value


def match_flight_leg(line: str) -> Optional[LegFragment]:
    match = LEG_RE.match(line)
    if not match:
        return None
    is_deadhead = match.group("deadhead") is not None or bool(DEADHEAD_TOKEN_RE.search(line))
    return LegFragment(
        day=match.group("day"),
        flight_number=match.group("flight"),
        departure=match.group("departure"),
        departure_time=match.group("departure_time"),
        arrival=match.group("arrival"),
        arrival_time=match.group("arrival_time"),
        block_time=_normalize_decimal(match.group("block")),
        is_deadhead=is_deadhead,
    )


def match_layover(line: str) -> Optional[Layover]:
    match = LAYOVER_RE.match(line)
    if not match:
        return None
    hotel = (match.group("hotel") or "").strip() or None
    return Layover(
        station=match.group("station"),
        duration=_normalize_decimal(match.group("duration")),
        hotel=hotel,
    )


def match_summary(line: str) -> Optional[SummaryFragment]:
    fields: Dict[str, str] = {}
    for name, pattern in _SUMMARY_FIELD_PATTERNS:
        match = pattern.search(line)
        if match:
            fields[name] = _normalize_decimal(match.group(1))
    if not fields:
        return None
    return SummaryFragment(fields=fields)


LINE_MATCHERS: Sequence[Callable[[str], Optional[LineResult]]] = (
    match_flight_leg,
    match_layover,
    match_summary,
)


def classify_line(line: str) -> LineResult:
    """Return the first tagged fragment produced for ``line``."""

    text = line.strip()
    if text:
        for matcher in LINE_MATCHERS:
            result = matcher(text)
            if result is not None:
                return result
    return Unrecognized(line=line)


def _cut_effective_value(value: str) -> str:
    text = value.strip()
    stop = VALUE_STOP_RE.search(text)
    if stop:
        text = text[: stop.start()]
    return text.strip()


def _join_wrapped_value(value: str, following: Sequence[str]) -> str:
    """Append continuation lines while the value ends with ``,`` or ``-``."""

    for raw in following:
        if not value.endswith(_DANGLING_SEPARATORS):
            return value
        line = raw.strip()
        if not VALUE_CONTINUATION_RE.match(line):
            break
        value = f"{value} {_cut_effective_value(line)}"
    if value.endswith(_DANGLING_SEPARATORS):
        LOGGER.debug("Effective-date value ends with a dangling separator: %r", value)
    return value


def extract_date_expression(lines: Sequence[str]) -> str:
    """Build the raw effective-date expression for a block.

    The expression is the optional weekday prefix (``EXCPT MO SA SU``), the
    ``EFFECTIVE`` value, and every later ``EXCEPT`` clause found anywhere in the
    block, joined by single spaces.
    """

    effective_index: Optional[int] = None
    prefix = ""
    pending_prefix = ""
    value = ""
    for index, raw in enumerate(lines):
        line = raw.strip()
        match = EFFECTIVE_RE.search(line)
        if match:
            effective_index = index
            prefix = (match.group("prefix") or pending_prefix).strip()
            value = _join_wrapped_value(_cut_effective_value(match.group("value")), lines[index + 1:])
            break
        weekday_clause = WEEKDAY_CLAUSE_RE.search(line)
        if weekday_clause:
            pending_prefix = weekday_clause.group(0)

    if effective_index is None:
        return ""

    clauses: List[str] = []
    for index, raw in enumerate(lines):
        line = raw.strip()
        for clause in EXCEPT_CLAUSE_RE.finditer(line):
            trailing = line[clause.end():].lstrip()
            if trailing.startswith("EFFECTIVE"):
                continue
            if index < effective_index and WEEKDAY_CLAUSE_RE.search(clause.group(0)):
                continue
            clauses.append(clause.group(0).strip())

    parts = [prefix, f"EFFECTIVE {value}".strip()] + clauses
    return " ".join(part for part in parts if part)


def _parse_header(header: str) -> Optional[Tuple[str, str, Tuple[str, ...]]]:
    match = HEADER_RE.match(header.strip())
    if not match:
        return None
    remainder = header.strip()[match.end("number"):]
    stop = re.search(r"\b(?:EXCPT|EXCEPT|EFFECTIVE)\b", remainder)
    if stop:
        remainder = remainder[: stop.start()]
    operating_days = tuple(HEADER_DAY_CODE_RE.findall(remainder))
    return match.group("number"), match.group("code"), operating_days


def parse_trip_block(block: Union[TripBlock, str]) -> Optional[ParsedTrip]:
    """Parse one trip block, returning ``None`` when the header is not a trip."""

    text = block.text if isinstance(block, TripBlock) else block
    lines = text.splitlines()
    if not lines:
        return None

    header = _parse_header(lines[0])
    if header is None:
        LOGGER.debug("Skipping block without trip header: %r", lines[0][:40])
        return None
    trip_number, day_code, operating_days = header

    check_in = CHECK_IN_RE.search(text)
    summary = TripSummary()
    legs: List[FlightLeg] = []
    layovers: List[Layover] = []
    seen: set[Tuple[str, str, str, str]] = set()
    deadheads = 0
    current_day = "A"
    last_flight = ""

    for line in lines[1:]:
        result = classify_line(line)
        if isinstance(result, LegFragment):
            if result.day:
                current_day = result.day
            flight_number = result.flight_number or last_flight
            last_flight = flight_number
            key = (current_day, flight_number, result.departure, result.departure_time)
            if key in seen:
                continue
            seen.add(key)
            legs.append(
                FlightLeg(
                    day=current_day,
                    flight_number=flight_number,
                    departure=result.departure,
                    departure_time=result.departure_time,
                    arrival=result.arrival,
                    arrival_time=result.arrival_time,
                    block_time=result.block_time,
                    is_deadhead=result.is_deadhead,
                )
            )
            if result.is_deadhead:
                deadheads += 1
        elif isinstance(result, Layover):
            layovers.append(
                Layover(
                    station=result.station,
                    duration=result.duration,
                    hotel=result.hotel,
                    after_leg_index=len(legs) - 1,
                )
            )
        elif isinstance(result, SummaryFragment):
            for name, value in result.fields.items():
                setattr(summary, name, value)

    return ParsedTrip(
        trip_number=trip_number,
        day_code=day_code,
        operating_days=operating_days,
        effective_dates=extract_date_expression(lines),
        check_in_time=check_in.group(1) if check_in else None,
        summary=summary,
        deadheads=deadheads,
        legs=legs,
        layovers=layovers,
        full_text_block=text,
    )
