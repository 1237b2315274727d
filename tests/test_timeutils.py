from datetime import datetime, timedelta, timezone
import pytest

from roomres.utils.timeutils import (
    add_days,
    add_minutes,
    default_end,
    default_start,
    duration_minutes,
    end_of_day,
    reservation_window,
    round_to_increment,
    start_of_day,
    to_utc_naive,
)


def test_round_to_increment_rounds_up():
    assert round_to_increment(datetime(2025, 3, 4, 10, 1), 30) == datetime(2025, 3, 4, 10, 30)


def test_round_to_increment_keeps_aligned_value():
    assert round_to_increment(datetime(2025, 3, 4, 10, 30), 30) == datetime(2025, 3, 4, 10, 30)


def test_round_to_increment_counts_seconds():
    assert round_to_increment(datetime(2025, 3, 4, 10, 30, 0, 1), 30) == datetime(2025, 3, 4, 11, 0)


def test_round_to_increment_crosses_midnight():
    assert round_to_increment(datetime(2025, 3, 4, 23, 45), 30) == datetime(2025, 3, 5, 0, 0)


def test_round_to_increment_keeps_timezone():
    value = datetime(2025, 3, 4, 10, 1, tzinfo=timezone.utc)
    rounded = round_to_increment(value, 15)
    assert rounded == datetime(2025, 3, 4, 10, 15, tzinfo=timezone.utc)
    assert rounded.tzinfo is not None


@pytest.mark.parametrize("increment", [0, -30])
def test_round_to_increment_rejects_non_positive(increment):
    with pytest.raises(ValueError):
        round_to_increment(datetime(2025, 3, 4, 10, 1), increment)


def test_day_boundaries():
    value = datetime(2025, 3, 4, 15, 42, 7)
    assert start_of_day(value) == datetime(2025, 3, 4)
    assert end_of_day(value) == datetime(2025, 3, 4, 23, 59, 59, 999999)


def test_minute_and_day_arithmetic():
    value = datetime(2025, 3, 4, 23, 30)
    assert add_minutes(value, 45) == datetime(2025, 3, 5, 0, 15)
    assert add_days(value, 2) == datetime(2025, 3, 6, 23, 30)
    assert duration_minutes(value, add_minutes(value, 90)) == 90


def test_reservation_window_covers_today_and_seven_days():
    range_start, range_end = reservation_window(datetime(2025, 3, 4, 15, 0))
    assert range_start == datetime(2025, 3, 4)
    assert range_end == datetime(2025, 3, 11, 23, 59, 59, 999999)


def test_default_start_and_end():
    start = default_start(datetime(2025, 3, 4, 10, 5))
    assert start == datetime(2025, 3, 4, 11, 0)
    assert default_end(start) == datetime(2025, 3, 4, 12, 0)


def test_to_utc_naive():
    eastern = timezone(timedelta(hours=-5))
    assert to_utc_naive(datetime(2025, 3, 4, 10, 0, tzinfo=eastern)) == datetime(2025, 3, 4, 15, 0)
    assert to_utc_naive(datetime(2025, 3, 4, 10, 0)) == datetime(2025, 3, 4, 10, 0)
