"""
Timezone utilities for TrialDesk.

Slots are stored as naive local dates and "HH:MM" strings in the business
timezone; "today" for availability locks is evaluated there too.
"""

from datetime import date, datetime
from typing import Optional

import pytz

from .config import settings


def get_business_timezone(name: Optional[str] = None) -> pytz.BaseTzInfo:
    return pytz.timezone(name or settings.business_timezone)


def get_business_now(name: Optional[str] = None) -> datetime:
    return datetime.now(get_business_timezone(name))


def get_business_today(name: Optional[str] = None) -> date:
    """Today's date in the business timezone."""
    return get_business_now(name).date()
