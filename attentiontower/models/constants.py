"""Constants for attentiontower.

This module centralizes the magic numbers and default values used by the
urgency engine and the capture boundary.
"""

from attentiontower.models.tower_item import TowerStatus


# Item defaults
DEFAULT_STATUS = TowerStatus.ACTIVE
DEFAULT_IS_EVENT = False
DEFAULT_WAITING_ON = "unspecified"  # Used when an item is held without a reason

# Partitioning
HERO_SIZE = 1
QUEUE_SIZE = 2  # Items shown directly below the hero

# Action deadline windows (days until expects_by)
DUE_SOON_MAX_DAYS = 3
DUE_THIS_WEEK_MAX_DAYS = 7

# Event reminder window (days until the event)
EVENT_ADVANCE_NOTICE_DAYS = 1

# Explanation age thresholds (days since capture)
RECENT_CAPTURE_MAX_DAYS = 3
OPEN_LOOP_MAX_DAYS = 7

# Explanation overdue escalation thresholds (days overdue)
OVERDUE_MODERATE_DAYS = 3
OVERDUE_SEVERE_DAYS = 7

# Capture
MAX_CAPTURE_TEXT_LENGTH = 2000
