"""Resolve free-text effective-date expressions into calendar start dates.

Expressions are parsed into a small tagged union (:class:`SingleDate`,
:class:`DateList`, :class:`DateRange`) wrapped in :class:`EffectiveDates`
together with any weekday and specific-date exclusions. Recognized forms, in
the order they are tried:

1. a single date, ``AUG04`` or ``04AUG``;
2. a comma separated list, ``SEP17,SEP24``;
3. a range, ``AUG11-AUG28`` or ``01SEP-30SEP``;
4. ``EXCPT MO SA SU`` before ``EFFECTIVE`` drops those weekdays from a range;
5. ``EXCEPT AUG14 AUG18`` after a range drops those dates;
6. ``ONLY`` forces form 1 using the first date token.

Dates are built in the requested year and never roll into the next one, so a
range ending before it starts enumerates nothing. Anything unrecognized
resolves to an empty list.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import FrozenSet, List, Optional, Tuple, Union

from . import config

LOGGER = logging.getLogger(__name__)

MONTHS = {
    "JAN": 1,
    "FEB": 2,
    "MAR": 3,
    "APR": 4,
    "MAY": 5,
    "JUN": 6,
    "JUL": 7,
    "AUG": 8,
    "SEP": 9,
    "OCT": 10,
    "NOV": 11,
    "DEC": 12,
}
WEEKDAYS = {"MO": 0, "TU": 1, "WE": 2, "TH": 3, "FR": 4, "SA": 5, "SU": 6}

_MONTH_ALT = "|".join(MONTHS)
_WEEKDAY_ALT = "|".join(WEEKDAYS)
_TOKEN = rf"(?:\d{{1,2}}(?:{_MONTH_ALT})|(?:{_MONTH_ALT})\d{{1,2}})"

_MONTH_FIRST_SPACED_RE = re.compile(rf"\b({_MONTH_ALT})\.?\s*(\d{{1,2}})\b")
_EFFECTIVE_RE = re.compile(r"\bEFFECTIVE\b")
_EXCEPT_SPLIT_RE = re.compile(r"\b(?:EXCEPT|EXCPT)\b")
_WEEKDAY_PREFIX_RE = re.compile(rf"\b(?:EXCPT|EXCEPT)\b((?:[\s,]+(?:{_WEEKDAY_ALT})\b)+)")
_WEEKDAY_CODE_RE = re.compile(rf"\b({_WEEKDAY_ALT})\b")
_TOKEN_RE = re.compile(rf"\b{_TOKEN}\b")
_TOKEN_PARTS_RE = re.compile(rf"^(?:(?P<day_first>\d{{1,2}})(?P<month_last>{_MONTH_ALT})|(?P<month_first>{_MONTH_ALT})(?P<day_last>\d{{1,2}}))$")
_ONLY_RE = re.compile(r"\bONLY\b")
_SINGLE_RE = re.compile(rf"^({_TOKEN})$")
_LIST_RE = re.compile(rf"^{_TOKEN}(?:\s*,\s*{_TOKEN})+$")
_RANGE_RE = re.compile(rf"^({_TOKEN})\s*-\s*({_TOKEN})$")


@dataclass(frozen=True)
class SingleDate:
    day: date


@dataclass(frozen=True)
class DateList:
    days: Tuple[date, ...]


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date


DateForm = Union[SingleDate, DateList, DateRange]


@dataclass(frozen=True)
class EffectiveDates:
    """Parsed effective-date expression."""

    form: DateForm
    excluded_weekdays: FrozenSet[int] = frozenset()
    excluded_dates: FrozenSet[date] = frozenset()


def normalize_expression(expression: str) -> str:
    """Upper-case, unify dashes and glue ``AUG. 28``/``AUG 28`` into ``AUG28``."""

    text = expression.upper().replace("\u2013", "-").replace("\u2014", "-")
    text = _MONTH_FIRST_SPACED_RE.sub(r"\1\2", text)
    return " ".join(text.split())


def token_to_date(token: str, year: int) -> Optional[date]:
    match = _TOKEN_PARTS_RE.match(token.strip())
    if not match:
        return None
    month_name = match.group("month_first") or match.group("month_last")
    day_text = match.group("day_last") or match.group("day_first")
    try:
        return date(year, MONTHS[month_name], int(day_text))
    except ValueError:
        return None


def _parse_form(range_part: str, year: int) -> Optional[DateForm]:
    if _ONLY_RE.search(range_part):
        first = _TOKEN_RE.search(range_part)
        if not first:
            return None
        day = token_to_date(first.group(0), year)
        return SingleDate(day) if day else None

    single = _SINGLE_RE.match(range_part)
    if single:
        day = token_to_date(single.group(1), year)
        return SingleDate(day) if day else None

    if _LIST_RE.match(range_part):
        days = [token_to_date(token, year) for token in range_part.split(",")]
        if any(day is None for day in days):
            return None
        return DateList(tuple(sorted(set(days))))  # type: ignore[arg-type]

    span = _RANGE_RE.match(range_part)
    if span:
        start = token_to_date(span.group(1), year)
        end = token_to_date(span.group(2), year)
        if start is None or end is None:
            return None
        return DateRange(start, end)

    return None


def parse_date_expression(expression: Optional[str], year: int) -> Optional[EffectiveDates]:
    """Parse ``expression`` into :class:`EffectiveDates` or ``None``."""

    if not expression or not expression.strip():
        return None

    text = normalize_expression(expression)
    effective = _EFFECTIVE_RE.search(text)
    if effective:
        prefix, body = text[: effective.start()], text[effective.end():]
    else:
        prefix, body = "", text

    excluded_weekdays = set()
    weekday_prefix = _WEEKDAY_PREFIX_RE.search(prefix)
    if weekday_prefix:
        excluded_weekdays.update(WEEKDAYS[code] for code in _WEEKDAY_CODE_RE.findall(weekday_prefix.group(1)))

    parts = _EXCEPT_SPLIT_RE.split(body)
    range_part = parts[0].strip().strip(",").strip()
    excluded_dates = set()
    for clause in parts[1:]:
        excluded_weekdays.update(WEEKDAYS[code] for code in _WEEKDAY_CODE_RE.findall(clause))
        for token in _TOKEN_RE.findall(clause):
            day = token_to_date(token, year)
            if day is not None:
                excluded_dates.add(day)

    form = _parse_form(range_part, year)
    if form is None:
        LOGGER.debug("Unrecognized effective-date expression: %r", expression)
        return None
    return EffectiveDates(
        form=form,
        excluded_weekdays=frozenset(excluded_weekdays),
        excluded_dates=frozenset(excluded_dates),
    )


def _enumerate_range(parsed: EffectiveDates, span: DateRange, weekday_mode: str) -> List[date]:
    if span.end < span.start:
        return []
    if parsed.excluded_weekdays and weekday_mode == config.WEEKDAY_MODE_ENDPOINTS:
        return sorted({span.start, span.end})

    days: List[date] = []
    current = span.start
    while current <= span.end:
        if current.weekday() not in parsed.excluded_weekdays and current not in parsed.excluded_dates:
            days.append(current)
        current += timedelta(days=1)
    return days


def enumerate_start_dates(parsed: EffectiveDates, *, weekday_mode: Optional[str] = None) -> List[date]:
    mode = weekday_mode or config.WEEKDAY_RESTRICTION_MODE
    if mode not in config.WEEKDAY_MODES:
        raise ValueError(f"Unknown weekday restriction mode: {mode!r}")

    form = parsed.form
    if isinstance(form, SingleDate):
        return [form.day]
    if isinstance(form, DateList):
        return list(form.days)
    if isinstance(form, DateRange):
        return _enumerate_range(parsed, form, mode)
    raise TypeError(f"Unsupported date form: {type(form).__name__}")


def resolve_start_dates(
    expression: Optional[str],
    year: int,
    trip_days: int = 1,
    *,
    weekday_mode: Optional[str] = None,
) -> List[date]:
    """Return every calendar date in ``year`` on which the trip can start.

    ``trip_days`` is accepted for callers that pass a whole trip through; the
    start dates do not depend on it. The result is ascending and free of
    duplicates, and empty when ``expression`` is not understood.
    """

    parsed = parse_date_expression(expression, year)
    if parsed is None:
        return []
    return enumerate_start_dates(parsed, weekday_mode=weekday_mode)
