# backend/trialdesk/core/time_slots.py
"""Helpers for the "HH:MM" teacher slot grid."""

import re
from typing import List

from .config import settings

DAY_START = "08:00"
DAY_END = "22:00"

_TIME_SLOT_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def to_minutes(time_slot: str) -> int:
    hours, minutes = time_slot.split(":")
    return int(hours) * 60 + int(minutes)


def from_minutes(total: int) -> str:
    return f"{total // 60:02d}:{total % 60:02d}"


def is_valid_time_slot(value: str, interval_minutes: int = 0) -> bool:
    """True for a zero-padded 24h "HH:MM" aligned to the slot interval."""
    if not isinstance(value, str) or not _TIME_SLOT_RE.match(value):
        return False
    interval = interval_minutes or settings.slot_interval_minutes
    return to_minutes(value) % interval == 0


def daily_time_slots(interval_minutes: int = 0) -> List[str]:
    """Every bookable slot start between DAY_START and DAY_END (exclusive)."""
    interval = interval_minutes or settings.slot_interval_minutes
    return [
        from_minutes(m) for m in range(to_minutes(DAY_START), to_minutes(DAY_END), interval)
    ]
