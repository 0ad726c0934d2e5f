"""Urgency bucket assignment for attentiontower.

Implements the fixed, asymmetric bucket hierarchy for active tower items.
Actions are pull-forward: they escalate as the deadline nears and harder once
missed, and an undated action is treated as actionable right now. Events are
wait-until: only today's and tomorrow's events surface, everything further
out is parked in the far-future bucket.

The bucket is derived, never stored: it is recomputed from `is_event`,
`expects_by` and the injected "now" every time the view is built.
"""

from typing import Optional

from attentiontower.models.tower_item import TowerItem
from attentiontower.models.constants import (
    DUE_SOON_MAX_DAYS,
    DUE_THIS_WEEK_MAX_DAYS,
    EVENT_ADVANCE_NOTICE_DAYS,
)
from attentiontower.engine.dates import Moment, days_until


# Fixed urgency buckets (0 = most urgent)
BUCKET_OVERDUE = 0
BUCKET_DUE_TODAY = 1
BUCKET_OPEN_CALL = 2
BUCKET_EVENT_TODAY = 3
BUCKET_DUE_SOON = 4
BUCKET_EVENT_TOMORROW = 5
BUCKET_DUE_THIS_WEEK = 6
BUCKET_FAR_FUTURE = 7


def assign_bucket(item: TowerItem, now: Moment) -> int:
    """Assign an urgency bucket to an active item.

    This function is deterministic - same item and "now" always produce the
    same bucket.

    Args:
        item: The item to classify
        now: Current date/time (injected)

    Returns:
        Bucket number (0-7, where 0 is most urgent)
    """
    return bucket_for(bool(item.is_event), days_until(item.expects_by, now))


def bucket_for(is_event: bool, days: Optional[int]) -> int:
    """Bucket for an action/event flag and a days-until value (None = no date)."""
    if days is None:
        # Open call: undated actions compete with "due today", not "far future"
        return BUCKET_OPEN_CALL

    if not is_event:
        if days < 0:
            return BUCKET_OVERDUE
        if days == 0:
            return BUCKET_DUE_TODAY
        if days <= DUE_SOON_MAX_DAYS:
            return BUCKET_DUE_SOON
        if days <= DUE_THIS_WEEK_MAX_DAYS:
            return BUCKET_DUE_THIS_WEEK
        return BUCKET_FAR_FUTURE

    if days <= 0:
        return BUCKET_EVENT_TODAY
    if days == EVENT_ADVANCE_NOTICE_DAYS:
        return BUCKET_EVENT_TOMORROW
    return BUCKET_FAR_FUTURE


def get_bucket_name(bucket: int) -> str:
    """Get human-readable name for a bucket.

    Args:
        bucket: Bucket number (0-7)

    Returns:
        Bucket name string
    """
    bucket_names = {
        BUCKET_OVERDUE: "Overdue Action",
        BUCKET_DUE_TODAY: "Action Due Today",
        BUCKET_OPEN_CALL: "Open Call",
        BUCKET_EVENT_TODAY: "Event Today",
        BUCKET_DUE_SOON: "Action Due Soon",
        BUCKET_EVENT_TOMORROW: "Event Tomorrow",
        BUCKET_DUE_THIS_WEEK: "Action Due This Week",
        BUCKET_FAR_FUTURE: "Far Future",
    }
    return bucket_names.get(bucket, "Unknown")
