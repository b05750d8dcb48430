# backend/trialdesk/api/dependencies/__init__.py
"""
Central export point for all dependencies.
"""

from .auth import get_current_actor, require_roles
from .database import get_db
from .services import (
    get_reschedule_service,
    get_session_ledger_service,
    get_slot_service,
    get_status_service,
    get_trial_booking_service,
)

__all__ = [
    # Auth
    "get_current_actor",
    "require_roles",
    # Database
    "get_db",
    # Services
    "get_reschedule_service",
    "get_session_ledger_service",
    "get_slot_service",
    "get_status_service",
    "get_trial_booking_service",
]
