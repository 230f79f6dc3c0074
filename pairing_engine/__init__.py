"""Pairing text parsing and schedule resolution engine."""

from .availability import conflicts_with_days_off, covered_dates, date_ranges_overlap, trip_date_span
from .date_resolver import parse_date_expression, resolve_start_dates
from .duty import compute_duty_period, compute_rest_hours
from .extractor import parse_trip_block
from .pipeline import duty_periods_for_trip, parse_trips, parse_trips_parallel, trips_to_frame
from .schemas import DutyPeriod, FlightLeg, Layover, PairingDataError, ParsedTrip, TripBlock, TripSummary
from .segmenter import iter_trip_blocks, split_trip_blocks

__all__ = [
    "DutyPeriod",
    "FlightLeg",
    "Layover",
    "PairingDataError",
    "ParsedTrip",
    "TripBlock",
    "TripSummary",
    "compute_duty_period",
    "compute_rest_hours",
    "conflicts_with_days_off",
    "covered_dates",
    "date_ranges_overlap",
    "duty_periods_for_trip",
    "iter_trip_blocks",
    "parse_date_expression",
    "parse_trip_block",
    "parse_trips",
    "parse_trips_parallel",
    "resolve_start_dates",
    "split_trip_blocks",
    "trip_date_span",
    "trips_to_frame",
]
