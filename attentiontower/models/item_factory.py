"""Tower item creation factory for attentiontower.

This module centralizes item creation logic so that items created from the
API, from capture, and from tests all get consistent default values.
"""

import uuid
from datetime import date, datetime
from typing import Optional, Dict, Any

from attentiontower.models.tower_item import TowerItem, TowerStatus, TowerEffort
from attentiontower.models.constants import DEFAULT_STATUS, DEFAULT_IS_EVENT


def create_item_defaults() -> Dict[str, Any]:
    """Get default item values as a dictionary.

    Returns:
        Dictionary with default item field values using constants
    """
    return {
        "status": DEFAULT_STATUS,
        "is_event": DEFAULT_IS_EVENT,
        "expects_by": None,
        "waiting_on": None,
        "effort": None,
        "done_at": None,
    }


def create_item_base(
    user_id: str,
    text: str,
    status: Optional[TowerStatus] = None,
    is_event: Optional[bool] = None,
    expects_by: Optional[date] = None,
    waiting_on: Optional[str] = None,
    effort: Optional[TowerEffort] = None,
    now: Optional[datetime] = None,
) -> TowerItem:
    """Create a tower item with defaults, allowing overrides.

    `waiting_on` is only kept when the resulting status is waiting, and
    `done_at` is stamped when an item is created already done.

    Args:
        user_id: User ID who owns this item (required)
        text: Item text (required, non-blank)
        status: Lifecycle status (defaults to active)
        is_event: Action/event flag (defaults to action)
        expects_by: Deadline or occurrence date
        waiting_on: Who/what blocks progress
        effort: Advisory effort estimate
        now: Creation timestamp (defaults to current UTC time)

    Returns:
        TowerItem with defaults applied

    Raises:
        ValueError: If text is blank
    """
    if not text or not text.strip():
        raise ValueError("Tower item text must not be blank")

    now = now or datetime.utcnow()
    defaults = create_item_defaults()
    status = status if status is not None else defaults["status"]

    return TowerItem(
        id=str(uuid.uuid4()),
        user_id=user_id,
        text=text.strip(),
        status=status,
        is_event=is_event if is_event is not None else defaults["is_event"],
        expects_by=expects_by if expects_by is not None else defaults["expects_by"],
        waiting_on=waiting_on if status == TowerStatus.WAITING else defaults["waiting_on"],
        effort=effort if effort is not None else defaults["effort"],
        last_touched=now,
        created_at=now,
        done_at=now if status == TowerStatus.DONE else defaults["done_at"],
    )
