from pathlib import Path
import sys

if str(Path(__file__).resolve().parents[1]) not in sys.path:
    sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import importlib
from datetime import date, datetime, time, timedelta

import pytest
import pytz

from pairing_engine import config
from pairing_engine.duty import compute_duty_period, compute_rest_hours, parse_clock
from pairing_engine.schemas import DutyPeriod, FlightLeg, PairingDataError


def _leg(day: str, dep_time: str, arr_time: str, flight: str = "100") -> FlightLeg:
    return FlightLeg(day, flight, "LGA", dep_time, "ORD", arr_time, "1.40")


def test_single_leg_duty_boundaries() -> None:
    start, end = compute_duty_period(date(2025, 10, 1), [_leg("A", "1130", "1310")])

    assert start == datetime(2025, 10, 1, 10, 30)
    assert end == datetime(2025, 10, 1, 13, 40)


def test_multi_day_trip_uses_last_leg_day_offset() -> None:
    legs = [_leg("A", "1130", "1310"), _leg("B", "1700", "2031"), _leg("C", "0715", "0851")]

    period = compute_duty_period(date(2025, 8, 30), legs, trip_days=3)

    assert period.duty_start == datetime(2025, 8, 30, 10, 30)
    assert period.duty_end == datetime(2025, 9, 1, 9, 21)
    assert period.duration_hours == pytest.approx((datetime(2025, 9, 1, 9, 21) - datetime(2025, 8, 30, 10, 30)).total_seconds() / 3600)


def test_datetime_start_is_truncated_to_date() -> None:
    period = compute_duty_period(datetime(2025, 10, 1, 23, 59), [_leg("A", "0600", "0700")])

    assert period.duty_start == datetime(2025, 10, 1, 5, 0)


def test_custom_buffers() -> None:
    period = compute_duty_period(
        date(2025, 10, 1),
        [_leg("A", "1130", "1310")],
        report_buffer=timedelta(minutes=45),
        release_buffer=timedelta(minutes=15),
    )

    assert period == DutyPeriod(datetime(2025, 10, 1, 10, 45), datetime(2025, 10, 1, 13, 25))


def test_timezone_localizes_instants() -> None:
    period = compute_duty_period(date(2025, 10, 1), [_leg("A", "1130", "1310")], tz="America/New_York")

    assert period.duty_start.utcoffset() == timedelta(hours=-4)
    assert period.duty_start.astimezone(pytz.UTC) == datetime(2025, 10, 1, 14, 30, tzinfo=pytz.UTC)


def test_report_buffer_crosses_dst_change_in_absolute_time() -> None:
    period = compute_duty_period(date(2025, 11, 2), [_leg("A", "0330", "0500")], tz="America/New_York")

    assert period.duty_start.astimezone(pytz.UTC) == datetime(2025, 11, 2, 7, 30, tzinfo=pytz.UTC)
    assert period.duty_start.utcoffset() == timedelta(hours=-5)


def test_unknown_timezone_is_rejected() -> None:
    with pytest.raises(PairingDataError):
        compute_duty_period(date(2025, 10, 1), [_leg("A", "1130", "1310")], tz="Mars/Olympus")


def test_day_letter_beyond_trip_length_is_an_error() -> None:
    legs = [_leg("A", "1130", "1310"), _leg("D", "0800", "0900")]

    with pytest.raises(PairingDataError):
        compute_duty_period(date(2025, 10, 1), legs, trip_days=2)


@pytest.mark.parametrize(
    "legs",
    [
        [],
        [_leg("A", "2460", "0100")],
        [_leg("A", "11:30", "1310")],
        [_leg("1", "1130", "1310")],
    ],
)
def test_malformed_legs_raise(legs: list[FlightLeg]) -> None:
    with pytest.raises(PairingDataError):
        compute_duty_period(date(2025, 10, 1), legs)


def test_parse_clock() -> None:
    assert parse_clock("0005") == time(0, 5)
    assert parse_clock(" 2359 ") == time(23, 59)
    with pytest.raises(PairingDataError):
        parse_clock("0760")


def test_rest_hours_between_periods() -> None:
    first = DutyPeriod(datetime(2025, 10, 1, 10, 30), datetime(2025, 10, 1, 13, 40))
    second = DutyPeriod(datetime(2025, 10, 2, 8, 40), datetime(2025, 10, 2, 15, 0))

    assert compute_rest_hours(first, second) == pytest.approx(19.0)
    assert compute_rest_hours(second, first) < 0


def test_default_buffers_are_read_from_config_at_call_time(monkeypatch) -> None:
    monkeypatch.setattr(config, "REPORT_BUFFER_MINUTES", 45)
    monkeypatch.setattr(config, "RELEASE_BUFFER_MINUTES", 15)

    period = compute_duty_period(date(2025, 10, 1), [_leg("A", "1130", "1310")])

    assert period == DutyPeriod(datetime(2025, 10, 1, 10, 45), datetime(2025, 10, 1, 13, 25))


@pytest.mark.parametrize(
    "buffers",
    [
        {"report_buffer": timedelta(minutes=-5)},
        {"release_buffer": timedelta(minutes=-1)},
    ],
)
def test_negative_buffers_are_rejected(buffers: dict) -> None:
    with pytest.raises(PairingDataError):
        compute_duty_period(date(2025, 10, 1), [_leg("A", "1130", "1310")], **buffers)


def test_negative_buffer_minutes_in_environment_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("PAIRING_REPORT_BUFFER_MIN", "-30")
    monkeypatch.setenv("PAIRING_RELEASE_BUFFER_MIN", "0")
    try:
        reloaded = importlib.reload(config)
        assert reloaded.REPORT_BUFFER_MINUTES == 60
        assert reloaded.RELEASE_BUFFER_MINUTES == 0

        period = compute_duty_period(date(2025, 10, 1), [_leg("A", "1130", "1310")])
        assert period.duty_end == datetime(2025, 10, 1, 13, 10)
    finally:
        monkeypatch.delenv("PAIRING_REPORT_BUFFER_MIN")
        monkeypatch.delenv("PAIRING_RELEASE_BUFFER_MIN")
        importlib.reload(config)
