"""Tower item data model for attentiontower."""

import logging
from datetime import date, datetime
from typing import Optional
from enum import Enum
from pydantic import BaseModel, Field, field_validator

from attentiontower.models.date_parsing import coerce_expects_by

logger = logging.getLogger(__name__)


class TowerStatus(str, Enum):
    """Tower item lifecycle status."""
    ACTIVE = "active"
    WAITING = "waiting"  # Blocked on someone/something
    SOMEDAY = "someday"  # Not now, but don't forget
    DONE = "done"


class TowerEffort(str, Enum):
    """Advisory effort estimate (never affects ranking)."""
    QUICK = "quick"
    MEDIUM = "medium"
    DEEP = "deep"


class TowerItem(BaseModel):
    """Canonical tower item model."""

    id: str = Field(..., description="Unique item identifier (UUID v4)")
    user_id: str = Field(..., description="User ID who owns this item")
    text: str = Field(..., description="Free-form description")
    status: TowerStatus = Field(TowerStatus.ACTIVE, description="Lifecycle status")
    is_event: bool = Field(
        False,
        description="False = action (something you DO), True = event (something you SHOW UP to)",
    )
    expects_by: Optional[date] = Field(
        None,
        description="Deadline for actions, occurrence date for events (date-only)",
    )
    waiting_on: Optional[str] = Field(None, description="Who/what blocks progress (waiting items only)")
    effort: Optional[TowerEffort] = Field(None, description="Advisory effort estimate")
    last_touched: datetime = Field(..., description="Last mutation timestamp (drives staleness)")
    created_at: datetime = Field(..., description="Item creation timestamp")
    done_at: Optional[datetime] = Field(None, description="Completion timestamp (set iff status is done)")

    @field_validator("expects_by", mode="before")
    @classmethod
    def _coerce_expects_by(cls, v):
        coerced = coerce_expects_by(v)
        if v not in (None, "") and coerced is None:
            # Captured data is only partially trusted: treat as "no date"
            logger.warning(f"Ignoring malformed expects_by value {v!r}")
        return coerced

    @field_validator("effort", mode="before")
    @classmethod
    def _coerce_effort(cls, v):
        if v in (None, ""):
            return None
        try:
            return TowerEffort(str(getattr(v, "value", v)).lower())
        except ValueError:
            logger.warning(f"Ignoring unknown effort value {v!r}")
            return None

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
