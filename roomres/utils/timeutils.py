from datetime import datetime, time, timedelta, timezone
from roomres.config import RESERVATION_INCREMENT_MINUTES, RESERVATION_WINDOW_DAYS

_UTC_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_NAIVE_EPOCH = datetime(1970, 1, 1)
_MICROSECOND = timedelta(microseconds=1)


def utcnow():
    """Current time as a naive UTC datetime, the form the store keeps."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: datetime) -> datetime:
    """Normalize an aware datetime to naive UTC. Naive values are assumed UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def round_to_increment(value: datetime, increment_minutes: int) -> datetime:
    """
    Round up to the next multiple of ``increment_minutes`` counted from the
    epoch. Values already on a boundary are returned unchanged.
    """
    if increment_minutes <= 0:
        raise ValueError("Increment must be a positive number of minutes")

    epoch = _NAIVE_EPOCH if value.tzinfo is None else _UTC_EPOCH
    elapsed = (value - epoch) // _MICROSECOND
    step = increment_minutes * 60 * 1_000_000
    rounded = epoch + timedelta(microseconds=-(-elapsed // step) * step)
    if value.tzinfo is not None:
        return rounded.astimezone(value.tzinfo)
    return rounded


def start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min, tzinfo=value.tzinfo)


def end_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.max, tzinfo=value.tzinfo)


def add_minutes(value: datetime, minutes: int) -> datetime:
    return value + timedelta(minutes=minutes)


def add_days(value: datetime, days: int) -> datetime:
    return value + timedelta(days=days)


def duration_minutes(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 60


def reservation_window(now: datetime, days: int = RESERVATION_WINDOW_DAYS):
    """Return the (start, end) range a room calendar shows: today plus ``days``."""
    range_start = start_of_day(now)
    range_end = end_of_day(add_days(range_start, days))
    return range_start, range_end


def default_start(now: datetime) -> datetime:
    """Suggested start for a new request: at least 30 minutes out, on a slot boundary."""
    return round_to_increment(add_minutes(now, 30), RESERVATION_INCREMENT_MINUTES)


def default_end(start: datetime) -> datetime:
    return add_minutes(start, 60)
