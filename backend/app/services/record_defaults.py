"""
ProgressLog Backend — Record Defaulting Rules
===============================================

What:  Pure functions that fill in the values a client may leave out.
Who:   RecordService (create and update); unit-tested directly.

Rules:
    unit       absent or empty → looked up from frequency in UNIT_BY_FREQUENCY,
               falling back to DEFAULT_UNIT for any other frequency
    timestamp  absent → current time in epoch milliseconds
    quantity   absent → 0 (create only)
    kind       absent or empty → "record"
"""

import time
from typing import Dict, Optional

from app.models.record import DEFAULT_KIND

# Monthly activities are counted in juz', everything else in pages
UNIT_BY_FREQUENCY: Dict[str, str] = {
    "monthly": "جزء",
}
DEFAULT_UNIT = "صفحة"

DEFAULT_QUANTITY = 0


def default_unit(frequency: Optional[str]) -> str:
    """Unit implied by a frequency."""
    return UNIT_BY_FREQUENCY.get(frequency or "", DEFAULT_UNIT)


def resolve_unit(unit: Optional[str], frequency: Optional[str]) -> str:
    """The supplied unit, or the one implied by the frequency."""
    return unit or default_unit(frequency)


def current_timestamp_ms() -> int:
    return int(time.time() * 1000)


def resolve_timestamp(timestamp: Optional[int]) -> int:
    if timestamp is None:
        return current_timestamp_ms()
    return timestamp


def resolve_kind(kind: Optional[str]) -> str:
    return kind or DEFAULT_KIND


def resolve_quantity(quantity: Optional[int]) -> int:
    return DEFAULT_QUANTITY if quantity is None else quantity
