"""Item state transitions exposed to the tower view's consumer.

Every transition is pure: it returns an updated copy of the item and stamps
`last_touched` with the injected "now". Buckets are never stored, so edits to
`is_event` / `expects_by` simply re-classify on the next render.
"""

import logging
from datetime import date, datetime
from typing import Optional

from attentiontower.models.tower_item import TowerItem, TowerStatus
from attentiontower.models.date_parsing import coerce_expects_by
from attentiontower.models.constants import DEFAULT_WAITING_ON

logger = logging.getLogger(__name__)

# Sentinel for "field not provided" (None is a meaningful value for expects_by)
_UNSET = object()


class InvalidTransition(ValueError):
    """Raised when a status transition does not apply to an item."""


def _touch(item: TowerItem, now: datetime, **changes) -> TowerItem:
    changes["last_touched"] = now
    status = changes.get("status", item.status)
    if status != TowerStatus.DONE:
        changes["done_at"] = None
    return item.model_copy(update=changes)


def mark_done(item: TowerItem, now: datetime) -> TowerItem:
    """Mark an item done (sets done_at)."""
    if item.status == TowerStatus.DONE:
        raise InvalidTransition(f"Item {item.id} is already done")
    return _touch(item, now, status=TowerStatus.DONE.value, done_at=now)


def hold(item: TowerItem, now: datetime, waiting_on: Optional[str] = None) -> TowerItem:
    """Move an item to the follow-up list, blocked on someone/something."""
    if item.status == TowerStatus.DONE:
        raise InvalidTransition(f"Item {item.id} is done and cannot be held")
    reason = (waiting_on or "").strip() or DEFAULT_WAITING_ON
    return _touch(item, now, status=TowerStatus.WAITING.value, waiting_on=reason)


def defer(item: TowerItem, now: datetime) -> TowerItem:
    """Move an item to the someday list."""
    if item.status == TowerStatus.DONE:
        raise InvalidTransition(f"Item {item.id} is done and cannot be deferred")
    return _touch(item, now, status=TowerStatus.SOMEDAY.value, waiting_on=None)


def reactivate(item: TowerItem, now: datetime) -> TowerItem:
    """Bring a waiting or someday item back into the ranked view."""
    if item.status not in (TowerStatus.WAITING, TowerStatus.SOMEDAY):
        raise InvalidTransition(f"Item {item.id} is {item.status}; only waiting or someday items can be reactivated")
    return _touch(item, now, status=TowerStatus.ACTIVE.value, waiting_on=None)


def edit_text(item: TowerItem, now: datetime, text: str) -> TowerItem:
    """Replace the item's text (no status change)."""
    if not text or not text.strip():
        raise ValueError("Tower item text must not be blank")
    return _touch(item, now, text=text.strip())


def edit_schedule(
    item: TowerItem,
    now: datetime,
    is_event=_UNSET,
    expects_by=_UNSET,
) -> TowerItem:
    """Change the action/event flag and/or expects_by date.

    Pass `expects_by=None` to clear the date. Malformed dates are treated as
    "no date" rather than rejected.
    """
    changes = {}
    if is_event is not _UNSET:
        changes["is_event"] = bool(is_event)
    if expects_by is not _UNSET:
        parsed: Optional[date] = coerce_expects_by(expects_by)
        if expects_by is not None and parsed is None:
            logger.warning(f"Ignoring malformed expects_by {expects_by!r} for item {item.id}")
        changes["expects_by"] = parsed
    return _touch(item, now, **changes)
