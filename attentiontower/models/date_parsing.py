"""Defensive date parsing for loosely-trusted item data.

Captured items may carry anything in `expects_by` (LLM output, hand-edited
JSON, legacy rows). Parsing never raises: anything that is not a real
calendar date becomes None, which the engine treats as "no date".
"""

import re
from datetime import date, datetime
from typing import Any, Optional

# Strict calendar date format accepted at the capture boundary
ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_iso_date_string(value: Any) -> bool:
    """Check whether a value is a `YYYY-MM-DD` string naming a real date."""
    if not isinstance(value, str) or not ISO_DATE_PATTERN.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def coerce_expects_by(value: Any) -> Optional[date]:
    """Coerce a raw expects_by value to a date, or None if malformed.

    Args:
        value: date, datetime, ISO date string, or anything else

    Returns:
        Calendar date, or None for missing/malformed input
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        candidate = value.strip()
        # Accept full ISO timestamps by keeping the date part
        if len(candidate) > 10 and candidate[10] in ("T", " "):
            candidate = candidate[:10]
        if is_iso_date_string(candidate):
            return date.fromisoformat(candidate)
    return None
