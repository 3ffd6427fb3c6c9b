import re
from datetime import datetime, date, timedelta, timezone


# Check rows and plan bounds are stored as calendar dates in this fixed offset.
SCHEDULE_TZ = timezone(timedelta(hours=9), name="KST")

_DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_date_key(value: str) -> date:
    """Parse a strict zero-padded ``YYYY-MM-DD`` key."""
    raw = str(value or "").strip()
    if not _DATE_KEY_RE.match(raw):
        raise ValueError(f"Invalid date key: {value!r}")
    return date.fromisoformat(raw)


def is_date_key(value) -> bool:
    if not isinstance(value, str):
        return False
    try:
        parse_date_key(value)
    except ValueError:
        return False
    return True


def normalize(instant: datetime | date | str) -> str:
    """
    Convert a timestamp to its UTC+9 calendar date key.

    Naive datetimes are treated as UTC. A plain ``date`` is already a calendar
    date and is formatted as-is; strings may be a date key or an ISO timestamp.
    """
    if isinstance(instant, datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        return instant.astimezone(SCHEDULE_TZ).date().isoformat()
    if isinstance(instant, date):
        return instant.isoformat()
    if isinstance(instant, str):
        raw = instant.strip()
        if _DATE_KEY_RE.match(raw):
            return parse_date_key(raw).isoformat()
        return normalize(datetime.fromisoformat(raw.replace("Z", "+00:00")))
    raise ValueError(f"Cannot normalize {type(instant).__name__} to a date key")


def today(now: datetime | None = None) -> str:
    """Return today's date key in UTC+9, independent of the host offset."""
    return normalize(now if now is not None else utcnow())


def _as_date(day: date | str) -> date:
    if isinstance(day, datetime):
        return day.date()
    if isinstance(day, date):
        return day
    return parse_date_key(day)


def week_start(day: date | str) -> str:
    """
    Return the Sunday on or before ``day``.

    The input is a wall-clock calendar date and is not shifted to UTC+9.
    """
    d = _as_date(day)
    return (d - timedelta(days=(d.weekday() + 1) % 7)).isoformat()


def month_key(day: date | str) -> str:
    return _as_date(day).isoformat()[:7]


def days_in_month(year: int, month: int) -> list[str]:
    first = date(year, month, 1)
    next_first = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return [(first + timedelta(days=i)).isoformat() for i in range((next_first - first).days)]


def cell_key(cell_date: date | str) -> str:
    """
    Date key of a calendar cell, read in wall-clock terms.

    Unlike ``normalize``, a datetime keeps its own calendar date and is never
    shifted to UTC+9.
    """
    if isinstance(cell_date, (date, datetime)):
        return _as_date(cell_date).isoformat()
    return parse_date_key(cell_date).isoformat()
