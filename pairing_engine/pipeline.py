"""Entry points chaining segmentation, extraction, date resolution and duty times."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Iterable, List, Optional, Tuple

import pandas as pd

from . import config
from .date_resolver import resolve_start_dates
from .duty import TimezoneLike, compute_duty_period
from .extractor import parse_trip_block
from .schemas import DutyPeriod, ParsedTrip
from .segmenter import iter_trip_blocks, split_trip_blocks

LOGGER = logging.getLogger(__name__)

TRIP_COLUMNS: Tuple[str, ...] = (
    "tripNumber",
    "dayCode",
    "operatingDays",
    "effectiveDates",
    "checkInTime",
    "route",
    "creditHours",
    "blockHours",
    "tafb",
    "fdp",
    "payHours",
    "sitPay",
    "edpPay",
    "holPay",
    "carveouts",
    "deadheads",
    "layovers",
    "flightSegments",
    "tripDays",
    "fullTextBlock",
)


def parse_trips(raw_text: str) -> List[ParsedTrip]:
    """Parse every trip in a bid-package text dump, in document order.

    Blocks whose header cannot be parsed are dropped; nothing here raises for a
    single malformed trip.
    """

    trips: List[ParsedTrip] = []
    block_count = 0
    for block in iter_trip_blocks(raw_text):
        block_count += 1
        trip = parse_trip_block(block)
        if trip is not None:
            trips.append(trip)
    LOGGER.info("Parsed %d trips from %d blocks", len(trips), block_count)
    return trips


def parse_trips_parallel(raw_text: str, *, max_workers: Optional[int] = None) -> List[ParsedTrip]:
    """Same result as :func:`parse_trips`, with blocks parsed on a thread pool."""

    blocks = split_trip_blocks(raw_text)
    workers = max_workers or config.PARSE_MAX_WORKERS
    with ThreadPoolExecutor(max_workers=workers) as executor:
        parsed = list(executor.map(parse_trip_block, blocks))
    trips = [trip for trip in parsed if trip is not None]
    LOGGER.info("Parsed %d trips from %d blocks", len(trips), len(blocks))
    return trips


def duty_periods_for_trip(
    trip: ParsedTrip,
    year: int,
    *,
    tz: TimezoneLike = None,
    weekday_mode: Optional[str] = None,
) -> List[Tuple[date, DutyPeriod]]:
    """Return ``(start_date, duty_period)`` for every resolved occurrence of ``trip``."""

    starts = resolve_start_dates(trip.effective_dates, year, trip.trip_days, weekday_mode=weekday_mode)
    if not trip.legs:
        return []
    return [
        (start, compute_duty_period(start, trip.legs, trip_days=trip.trip_days, tz=tz))
        for start in starts
    ]


def trips_to_frame(trips: Iterable[ParsedTrip]) -> pd.DataFrame:
    """Tabulate trips with one column per storage field."""

    records = [trip.as_dict() for trip in trips]
    if not records:
        return pd.DataFrame(columns=list(TRIP_COLUMNS))
    return pd.DataFrame.from_records(records, columns=list(TRIP_COLUMNS))
