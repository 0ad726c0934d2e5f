"""'Why this?' explanations for surfaced tower items.

The deterministic explanation is the source of truth: it needs no network and
no model, so it always works. An optional text-generation collaborator may
phrase the explanation instead, but any failure falls back to it.
"""

import logging
from datetime import date
from typing import Optional

from attentiontower.models.tower_item import TowerItem
from attentiontower.models.constants import (
    RECENT_CAPTURE_MAX_DAYS,
    OPEN_LOOP_MAX_DAYS,
    OVERDUE_MODERATE_DAYS,
    OVERDUE_SEVERE_DAYS,
)
from attentiontower.engine.dates import Moment, age_in_days, days_since, days_until, today_of
from attentiontower.engine.ai_exclusion import is_ai_excluded

logger = logging.getLogger(__name__)

_WEEKDAYS = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]
_MONTHS = ["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"]


def _plural_days(n: int) -> str:
    return f"{n} day" if n == 1 else f"{n} days"


def explain_why_this(item: TowerItem, queue_position: int, now: Moment) -> str:
    """Explain why an item surfaced where it did.

    Rules, first match wins:
    1. Event with a date: happening today / tomorrow / in N days / N days ago
    2. Action with a date: due today / tomorrow / in N days / overdue, with
       language escalating the longer it is overdue
    3. Otherwise: how long the item has been sitting since capture

    Args:
        item: The surfaced item
        queue_position: Rank position (0 = hero)
        now: Current date/time (injected)

    Returns:
        One or two sentences of plain text
    """
    days = days_until(item.expects_by, now)

    if item.is_event and days is not None:
        return _explain_event(days)

    if days is not None:
        return _explain_deadline(days)

    return _explain_age(age_in_days(item, now), queue_position)


def _explain_event(days: int) -> str:
    if days < 0:
        return f"This was {_plural_days(-days)} ago. Did you miss it, or should this be cleared?"
    if days == 0:
        return "Happening today. This is your reminder."
    if days == 1:
        return "Tomorrow. Heads up so you can prepare."
    return f"Coming up in {days} days. Showing early so it doesn't surprise you."


def _explain_deadline(days: int) -> str:
    if days < 0:
        overdue = -days
        if overdue >= OVERDUE_SEVERE_DAYS:
            return (
                f"This was expected {_plural_days(overdue)} ago. "
                "It needs a decision now: do it, renegotiate it, or let it go."
            )
        if overdue >= OVERDUE_MODERATE_DAYS:
            return (
                f"This was expected {_plural_days(overdue)} ago. "
                "Every extra day makes it heavier to pick back up."
            )
        return (
            f"This was expected {_plural_days(overdue)} ago. "
            "The longer it waits, the harder the conversation becomes."
        )
    if days == 0:
        return "Expected today. Better to act while the context is fresh."
    if days == 1:
        return "Due tomorrow. Handling it now means one less thing weighing on you."
    return f"Due in {days} days. Early action prevents last-minute stress."


def _explain_age(days_old: int, queue_position: int) -> str:
    if days_old == 0:
        if queue_position == 0:
            return "Fresh capture. Strike while the intent is clear."
        return "Added today. Still has momentum from when you captured it."
    if days_old == 1:
        return "From yesterday. The gap between intention and action is still small."
    if days_old <= RECENT_CAPTURE_MAX_DAYS:
        return f"Waiting {days_old} days. Each day it sits, the activation energy grows."
    if days_old <= OPEN_LOOP_MAX_DAYS:
        return "A week-old open loop. Your brain is spending cycles remembering this exists."
    return f"{days_old} days in limbo. Either do it, delegate it, or delete it."


def explain_with_fallback(
    item: TowerItem,
    queue_position: int,
    now: Moment,
    client=None,
) -> str:
    """Explain an item, letting an optional text-generation client phrase it.

    The deterministic explanation is computed first and passed to the client
    as context. Returns it unchanged if the client is missing, the item is
    AI-excluded, or the client returns nothing.

    Args:
        item: The surfaced item
        queue_position: Rank position (0 = hero)
        now: Current date/time (injected)
        client: Object with `explain_item(text, reason) -> str`, or None
    """
    fallback = explain_why_this(item, queue_position, now)
    if client is None:
        return fallback

    if is_ai_excluded(item.text):
        logger.debug(f"Item {item.id} is AI-excluded. Using deterministic explanation.")
        return fallback

    try:
        phrased = client.explain_item(item.text, fallback)
    except Exception as e:
        # Any client failure degrades to the deterministic text
        logger.warning(f"Explanation client failed for item {item.id}: {type(e).__name__}")
        return fallback

    return phrased or fallback


def format_age(created_at: Moment, now: Moment) -> str:
    """Short capture age label ("today", "3d ago", "2w ago", "1mo ago")."""
    diff_days = days_since(created_at, now)
    if diff_days <= 0:
        return "today"
    if diff_days < 7:
        return f"{diff_days}d ago"
    if diff_days < 30:
        return f"{diff_days // 7}w ago"
    return f"{diff_days // 30}mo ago"


def format_expects_by(expects_by: Optional[date], now: Moment, is_event: bool = False) -> str:
    """Short label for an expects_by date relative to today.

    Events get more context ("sat 24 jan") than actions ("sat").
    """
    if expects_by is None:
        return ""
    days = (expects_by - today_of(now)).days
    if days == 0:
        return "today"
    if days == 1:
        return "tomorrow"

    weekday = _WEEKDAYS[expects_by.weekday()]
    if is_event:
        return f"{weekday} {expects_by.day} {_MONTHS[expects_by.month - 1]}"
    return weekday
