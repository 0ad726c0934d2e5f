"""Capture boundary: free text in, validated proto tower items out.

The text-generation collaborator returns loosely typed JSON. Nothing from it
reaches the engine unchecked: every field is validated here, and the result
is always one of two variants:
- a validated item (`fallback=False`)
- the raw-text fallback item (`fallback=True`, status active, action)

Rules:
1. Check AI exclusion BEFORE any collaborator call
2. Blank input produces no items
3. Any collaborator failure produces exactly one fallback item
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from attentiontower.models.tower_item import TowerStatus, TowerEffort
from attentiontower.models.date_parsing import is_iso_date_string
from attentiontower.models.constants import MAX_CAPTURE_TEXT_LENGTH
from attentiontower.engine.ai_exclusion import is_ai_excluded
from attentiontower.engine.dates import Moment, today_of
from attentiontower.integrations.openai_client import OpenAIClient

logger = logging.getLogger(__name__)

# Statuses a capture may produce (never "done")
CAPTURE_STATUSES = (TowerStatus.ACTIVE.value, TowerStatus.WAITING.value, TowerStatus.SOMEDAY.value)
EFFORT_VALUES = tuple(e.value for e in TowerEffort)

# Initialize OpenAI client (singleton pattern)
_openai_client: Optional[OpenAIClient] = None

# Default for `client` arguments: use the shared OpenAI client
SHARED_CLIENT = object()


def _get_openai_client() -> OpenAIClient:
    """Get or create OpenAI client instance."""
    global _openai_client
    if _openai_client is None:
        _openai_client = OpenAIClient()
    return _openai_client


class ParsedTowerItem(BaseModel):
    """A proto tower item produced by capture."""

    text: str = Field(..., description="Item text")
    status: TowerStatus = Field(TowerStatus.ACTIVE, description="Initial status (never done)")
    waiting_on: Optional[str] = Field(None, description="Blocker (waiting items only)")
    expects_by: Optional[date] = Field(None, description="Deadline or occurrence date")
    effort: Optional[TowerEffort] = Field(None, description="Advisory effort estimate")
    is_event: bool = Field(False, description="Action (False) or event (True)")
    fallback: bool = Field(False, description="True when this is the raw-text fallback item")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


def fallback_item(text: str) -> ParsedTowerItem:
    """The minimal raw-text item used whenever parsing fails."""
    return ParsedTowerItem(text=text.strip(), fallback=True)


def validate_parsed_item(raw: Any, fallback_text: str) -> ParsedTowerItem:
    """Validate one loosely typed item dict from the collaborator.

    Unknown or mistyped fields fall back to defaults field by field; the item
    as a whole is never rejected.

    Args:
        raw: Untrusted value (expected to be a dict)
        fallback_text: Text to use if the item has none

    Returns:
        Validated ParsedTowerItem
    """
    if not isinstance(raw, dict):
        return fallback_item(fallback_text)

    text = raw.get("text")
    text = text.strip() if isinstance(text, str) and text.strip() else fallback_text.strip()

    status = raw.get("status")
    if status not in CAPTURE_STATUSES:
        status = TowerStatus.ACTIVE.value

    waiting_on = None
    raw_waiting_on = raw.get("waitingOn", raw.get("waiting_on"))
    if status == TowerStatus.WAITING.value and isinstance(raw_waiting_on, str) and raw_waiting_on.strip():
        waiting_on = raw_waiting_on.strip()

    expects_by = None
    raw_expects_by = raw.get("expectsBy", raw.get("expects_by"))
    if is_iso_date_string(raw_expects_by):
        expects_by = date.fromisoformat(raw_expects_by)
    elif raw_expects_by is not None:
        logger.debug(f"Dropping invalid expectsBy {raw_expects_by!r} from parsed item")

    effort = raw.get("effort")
    if effort not in EFFORT_VALUES:
        effort = None

    # Only an explicit boolean true marks an event
    is_event = raw.get("isEvent", raw.get("is_event")) is True

    return ParsedTowerItem(
        text=text,
        status=status,
        waiting_on=waiting_on,
        expects_by=expects_by,
        effort=effort,
        is_event=is_event,
    )


def parse_tower_input(text: str, now: Moment, client=SHARED_CLIENT) -> List[ParsedTowerItem]:
    """Parse a brain dump into zero or more proto tower items.

    Args:
        text: Raw capture text
        now: Current date/time, used to resolve relative dates
        client: Text-generation collaborator. Defaults to the shared OpenAI
            client; None disables parsing and yields the fallback item

    Returns:
        Validated items; a single fallback item if parsing is unavailable or fails
    """
    trimmed = (text or "").strip()
    if not trimmed:
        return []
    trimmed = trimmed[:MAX_CAPTURE_TEXT_LENGTH]

    # Check AI exclusion BEFORE any inference calls
    if is_ai_excluded(trimmed):
        logger.debug("Capture text is AI-excluded. Saving as-is.")
        return [fallback_item(trimmed)]

    if client is None:
        logger.debug("No capture collaborator. Saving as-is.")
        return [fallback_item(trimmed)]

    try:
        if client is SHARED_CLIENT:
            client = _get_openai_client()
        raw_items = client.parse_brain_dump(trimmed, today_of(now))
    except Exception as e:
        logger.error(f"Error parsing capture text: {type(e).__name__}")
        return [fallback_item(trimmed)]

    if not raw_items:
        logger.debug("Capture collaborator returned nothing. Saving as-is.")
        return [fallback_item(trimmed)]

    return [validate_parsed_item(raw, trimmed) for raw in raw_items]


def to_item_fields(parsed: ParsedTowerItem) -> Dict[str, Any]:
    """Map a parsed item to keyword arguments for `create_item_base`."""
    return {
        "text": parsed.text,
        "status": parsed.status,
        "waiting_on": parsed.waiting_on,
        "expects_by": parsed.expects_by,
        "effort": parsed.effort,
        "is_event": parsed.is_event,
    }
