"""Shared utilities used across the salon scheduler."""

import re
from datetime import date
from typing import Optional

from salon_scheduler.config import WEEKDAY_KEYS


def normalize_phone(value: Optional[str]) -> Optional[str]:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Blank input yields ``None`` so optional phone columns stay empty.

    Examples:
        >>> normalize_phone("0888 123 456")
        '0888123456'
        >>> normalize_phone("+359 (88) 812-3456")
        '+359888123456'
    """
    if value is None or not value.strip():
        return None
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def weekday_key(day: date) -> str:
    """Lowercase English weekday name used to key working hours."""
    return WEEKDAY_KEYS[day.weekday()]
