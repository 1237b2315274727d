from datetime import datetime
from typing import Iterable, List, NamedTuple
from roomres.models.reservation import ReservationStatus


class UserReservations(NamedTuple):
    upcoming: List
    past: List


def _is_confirmed(reservation) -> bool:
    return reservation.status == ReservationStatus.CONFIRMED


def partition_user_reservations(reservations: Iterable, now: datetime) -> UserReservations:
    """
    Split a user's reservations for the bookings screen.

    Upcoming holds confirmed reservations that have not ended yet; everything
    else, ended or cancelled, is past. Both keep the order of the input.
    """
    upcoming, past = [], []
    for reservation in reservations:
        if _is_confirmed(reservation) and reservation.end >= now:
            upcoming.append(reservation)
        else:
            past.append(reservation)
    return UserReservations(upcoming=upcoming, past=past)


def split_by_status(reservations: Iterable):
    """Return (confirmed, cancelled), preserving order."""
    confirmed, cancelled = [], []
    for reservation in reservations:
        (confirmed if _is_confirmed(reservation) else cancelled).append(reservation)
    return confirmed, cancelled


def _day_label(value: datetime) -> str:
    return f"{value:%a %b} {value.day}"


def _time_label(value: datetime) -> str:
    return f"{value.hour % 12 or 12}:{value:%M %p}"


def format_range(start: datetime, end: datetime) -> str:
    """
    Render a reservation interval, e.g. ``Mon Oct 5 · 9:00 AM - 10:00 AM``.
    Intervals crossing midnight use an arrow instead of a dash.
    """
    separator = "-" if start.date() == end.date() else "→"
    return f"{_day_label(start)} · {_time_label(start)} {separator} {_time_label(end)}"
