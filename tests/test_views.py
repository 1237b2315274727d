from dataclasses import dataclass
from datetime import datetime, timedelta

from roomres.models.reservation import ReservationStatus
from roomres.utils.views import format_range, partition_user_reservations, split_by_status

NOW = datetime(2025, 3, 4, 12, 0)


@dataclass
class FakeReservation:
    name: str
    start: datetime
    end: datetime
    status: ReservationStatus = ReservationStatus.CONFIRMED


def test_partition_user_reservations():
    a = FakeReservation("A", NOW - timedelta(days=1, hours=1), NOW - timedelta(days=1))
    b = FakeReservation("B", NOW + timedelta(days=1), NOW + timedelta(days=1, hours=1))
    c = FakeReservation(
        "C", NOW + timedelta(days=1), NOW + timedelta(days=1, hours=1), ReservationStatus.CANCELLED
    )

    upcoming, past = partition_user_reservations([a, b, c], NOW)

    assert [r.name for r in upcoming] == ["B"]
    assert [r.name for r in past] == ["A", "C"]


def test_partition_keeps_in_progress_reservation_upcoming():
    ongoing = FakeReservation("ongoing", NOW - timedelta(minutes=30), NOW + timedelta(minutes=30))
    ends_now = FakeReservation("ends-now", NOW - timedelta(hours=1), NOW)

    result = partition_user_reservations([ongoing, ends_now], NOW)

    assert [r.name for r in result.upcoming] == ["ongoing", "ends-now"]
    assert result.past == []


def test_split_by_status_preserves_order():
    first = FakeReservation("first", NOW, NOW + timedelta(hours=1), ReservationStatus.CANCELLED)
    second = FakeReservation("second", NOW + timedelta(hours=1), NOW + timedelta(hours=2))
    third = FakeReservation("third", NOW + timedelta(hours=2), NOW + timedelta(hours=3))

    confirmed, cancelled = split_by_status([first, second, third])

    assert [r.name for r in confirmed] == ["second", "third"]
    assert [r.name for r in cancelled] == ["first"]


def test_format_range_same_day():
    assert (
        format_range(datetime(2025, 3, 4, 9, 0), datetime(2025, 3, 4, 10, 30))
        == "Tue Mar 4 · 9:00 AM - 10:30 AM"
    )


def test_format_range_afternoon_and_noon():
    assert (
        format_range(datetime(2025, 3, 4, 12, 0), datetime(2025, 3, 4, 13, 5))
        == "Tue Mar 4 · 12:00 PM - 1:05 PM"
    )


def test_format_range_multi_day():
    assert (
        format_range(datetime(2025, 3, 4, 23, 0), datetime(2025, 3, 5, 0, 30))
        == "Tue Mar 4 · 11:00 PM → 12:30 AM"
    )
