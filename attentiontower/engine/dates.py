"""Day arithmetic for the urgency engine.

All functions take "now" explicitly; nothing here reads the system clock.

Rounding is fixed and shared by the classifier, ranker and explanations:
- days until a date rounds UP (a deadline 36 hours out is 2 days away)
- days since a moment rounds DOWN (25 hours untouched is 1 day stale)
"""

import math
from datetime import date, datetime, time, timezone
from typing import Optional, Union

from attentiontower.models.tower_item import TowerItem

SECONDS_PER_DAY = 24 * 60 * 60

Moment = Union[date, datetime]


def to_naive_utc(moment: Moment) -> datetime:
    """Normalize a date or datetime to a naive UTC datetime.

    Dates are interpreted as midnight; aware datetimes are converted to UTC.
    """
    if not isinstance(moment, datetime):
        return datetime.combine(moment, time.min)
    if moment.tzinfo is not None:
        return moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def days_until(expects_by: Optional[date], now: Moment) -> Optional[int]:
    """Whole days from now until the start of expects_by (ceiling).

    Args:
        expects_by: Target calendar date, or None
        now: Current date/time

    Returns:
        Signed day count (negative when the date has passed), or None if no date
    """
    if expects_by is None:
        return None
    delta = to_naive_utc(expects_by) - to_naive_utc(now)
    return int(math.ceil(delta.total_seconds() / SECONDS_PER_DAY))


def days_since(moment: Optional[Moment], now: Moment) -> int:
    """Whole days elapsed since a moment (floor), clamped at zero.

    Clock skew (a moment in the future) reads as zero rather than negative.
    """
    if moment is None:
        return 0
    delta = to_naive_utc(now) - to_naive_utc(moment)
    return max(0, int(math.floor(delta.total_seconds() / SECONDS_PER_DAY)))


def staleness(item: TowerItem, now: Moment) -> int:
    """Days since the item was last touched."""
    return days_since(item.last_touched, now)


def age_in_days(item: TowerItem, now: Moment) -> int:
    """Days since the item was captured."""
    return days_since(item.created_at, now)


def today_of(now: Moment) -> date:
    """Calendar date (UTC) of a moment."""
    return to_naive_utc(now).date()
