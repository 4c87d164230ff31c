# pitcrew-backend/events/datetime_utils.py
"""
Centralized datetime handling for PitCrew.

All "now" lookups and calendar window math go through these helpers so
that views, services and tests agree on boundaries.
"""
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

from django.utils import timezone


VIEW_MONTH = "month"
VIEW_WEEK = "week"
VIEW_DAY = "day"
VIEW_AGENDA = "agenda"

CALENDAR_VIEWS = (VIEW_MONTH, VIEW_WEEK, VIEW_DAY, VIEW_AGENDA)

AGENDA_DAYS = 30


def now() -> datetime:
    """
    Get current datetime (timezone-aware).
    """
    return timezone.now()


def today() -> date:
    return timezone.localdate()


def parse_iso(iso_string: str) -> Optional[datetime]:
    """
    Parse ISO 8601 datetime string.

    Returns None if parsing fails.
    """
    if not iso_string:
        return None
    try:
        return datetime.fromisoformat(iso_string.replace('Z', '+00:00'))
    except (ValueError, AttributeError):
        return None


def parse_iso_date(value: str) -> Optional[date]:
    """
    Parse the date part of an ISO date or datetime string ("2025-03-01",
    "2025-03-01T09:00:00"). Returns None if parsing fails.
    """
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def start_of_day(day: date) -> datetime:
    """Aware datetime at local midnight of `day`."""
    return timezone.make_aware(datetime.combine(day, time.min))


def as_aware(value) -> Optional[datetime]:
    """
    Coerce a date or naive datetime into an aware datetime in the current
    timezone. Aware datetimes are returned unchanged.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if timezone.is_naive(value):
            return timezone.make_aware(value)
        return value
    return start_of_day(value)


def calendar_window(view: str, anchor: date) -> Tuple[datetime, datetime]:
    """
    Half-open [start, end) window for a calendar view.

    - month: the calendar month containing anchor
    - week: the Sunday-start week containing anchor
    - day: the anchor day
    - agenda: AGENDA_DAYS days starting at anchor
    """
    if view == VIEW_MONTH:
        first = anchor.replace(day=1)
        if first.month == 12:
            next_first = first.replace(year=first.year + 1, month=1)
        else:
            next_first = first.replace(month=first.month + 1)
        return start_of_day(first), start_of_day(next_first)

    if view == VIEW_WEEK:
        # weekday(): Monday=0 .. Sunday=6
        sunday = anchor - timedelta(days=(anchor.weekday() + 1) % 7)
        return start_of_day(sunday), start_of_day(sunday + timedelta(days=7))

    if view == VIEW_DAY:
        return start_of_day(anchor), start_of_day(anchor + timedelta(days=1))

    if view == VIEW_AGENDA:
        return start_of_day(anchor), start_of_day(anchor + timedelta(days=AGENDA_DAYS))

    raise ValueError(f"Unknown calendar view: {view}")


def event_duration_hours(event) -> Optional[float]:
    """Get event duration in hours."""
    if not event.start_time or not event.end_time:
        return None
    return (event.end_time - event.start_time).total_seconds() / 3600
