"""Presentation tiers for the tower view.

Slices the ranked active list into hero / queue / overflow, and collects the
parked follow-up and someday lists from the full item set.
"""

from typing import Iterable, List, Optional

from attentiontower.models.tower_item import TowerItem, TowerStatus
from attentiontower.models.constants import HERO_SIZE, QUEUE_SIZE
from attentiontower.engine.dates import Moment, to_naive_utc
from attentiontower.engine.ranking import rank_with_buckets


class TowerPartition:
    """Result of partitioning a snapshot of tower items."""

    def __init__(self):
        self.hero: Optional[TowerItem] = None
        self.queue: List[TowerItem] = []
        self.overflow: List[TowerItem] = []
        self.follow_up: List[TowerItem] = []
        self.someday: List[TowerItem] = []
        # Bucket of each ranked item, keyed by item id
        self.buckets: dict = {}

    @property
    def overflow_count(self) -> int:
        return len(self.overflow)

    @property
    def ranked(self) -> List[TowerItem]:
        """Hero, queue and overflow in rank order."""
        head = [self.hero] if self.hero is not None else []
        return head + self.queue + self.overflow


def split_ranked(ranked: List[TowerItem]) -> tuple:
    """Split a ranked list into (hero, queue, overflow)."""
    hero = ranked[0] if ranked else None
    queue = ranked[HERO_SIZE:HERO_SIZE + QUEUE_SIZE]
    overflow = ranked[HERO_SIZE + QUEUE_SIZE:]
    return hero, queue, overflow


def follow_up_items(items: Iterable[TowerItem]) -> List[TowerItem]:
    """Waiting items, least recently touched first (stable)."""
    waiting = [item for item in items if item.status == TowerStatus.WAITING]
    return sorted(waiting, key=lambda item: to_naive_utc(item.last_touched))


def someday_items(items: Iterable[TowerItem]) -> List[TowerItem]:
    """Someday items in input order."""
    return [item for item in items if item.status == TowerStatus.SOMEDAY]


def build_tower_view(items: Iterable[TowerItem], now: Moment) -> TowerPartition:
    """Rank and partition a snapshot of items.

    Done items appear nowhere. Only active items are ranked.

    Args:
        items: Full item snapshot (any status, any order)
        now: Current date/time (injected)

    Returns:
        TowerPartition with hero, queue, overflow, follow-up and someday lists
    """
    items = list(items)
    ranked_pairs = rank_with_buckets(items, now)

    result = TowerPartition()
    result.hero, result.queue, result.overflow = split_ranked([item for item, _ in ranked_pairs])
    result.buckets = {item.id: bucket for item, bucket in ranked_pairs}
    result.follow_up = follow_up_items(items)
    result.someday = someday_items(items)
    return result
