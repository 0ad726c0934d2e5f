"""Stack ranking logic for attentiontower.

Sorts active items by urgency bucket, then by a bucket-specific secondary key.
This produces a deterministic ordering for the tower view.
"""

import logging
from typing import Iterable, List, Tuple

from attentiontower.models.tower_item import TowerItem, TowerStatus
from attentiontower.engine.classifier import assign_bucket
from attentiontower.engine.dates import Moment, days_until, staleness

logger = logging.getLogger(__name__)


def stack_rank(items: Iterable[TowerItem], now: Moment) -> List[TowerItem]:
    """Stack-rank active items by bucket and secondary urgency.

    Items are sorted:
    1. By bucket (lowest bucket number = most urgent)
    2. Within bucket, dated items before undated items
    3. Dated items by days until expects_by (soonest first)
    4. Undated items by staleness (longest untouched first)

    Non-active items are dropped. Ties keep their input order (stable sort),
    so this function is deterministic - same inputs always produce same outputs.

    Args:
        items: Items to rank (any status)
        now: Current date/time (injected)

    Returns:
        Active items sorted by attention priority (highest first)
    """
    return [item for item, _ in rank_with_buckets(items, now)]


def rank_with_buckets(items: Iterable[TowerItem], now: Moment) -> List[Tuple[TowerItem, int]]:
    """Stack-rank active items and keep each item's bucket alongside it.

    Args:
        items: Items to rank (any status)
        now: Current date/time (injected)

    Returns:
        List of (item, bucket) pairs in ranked order
    """
    active = filter_active(items)
    items_with_buckets = [(item, assign_bucket(item, now)) for item in active]

    return sorted(
        items_with_buckets,
        key=lambda x: (x[1], _secondary_sort_key(x[0], now))
    )


def filter_active(items: Iterable[TowerItem]) -> List[TowerItem]:
    """Keep only active items, silently skipping anything else."""
    active = []
    for item in items:
        if item.status == TowerStatus.ACTIVE:
            active.append(item)
        else:
            logger.debug(f"Skipping non-active item {item.id} ({item.status}) in ranking")
    return active


def _secondary_sort_key(item: TowerItem, now: Moment) -> tuple:
    """Get the within-bucket sort key.

    Args:
        item: Item to get sort key for
        now: Current date/time

    Returns:
        Tuple for sorting: (has_date: 0 or 1, days until date or negated staleness)
    """
    days = days_until(item.expects_by, now)
    if days is not None:
        # Dated items first, soonest first
        return (0, days)
    # Undated items: more stale = higher priority
    return (1, -staleness(item, now))
