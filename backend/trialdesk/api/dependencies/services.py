# backend/trialdesk/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

Each request gets service instances bound to its own database session.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.reschedule_service import RescheduleService
from ...services.session_ledger_service import SessionLedgerService
from ...services.slot_service import SlotService
from ...services.status_service import StatusService
from ...services.trial_booking_service import TrialBookingService
from .database import get_db


def get_trial_booking_service(db: Session = Depends(get_db)) -> TrialBookingService:
    return TrialBookingService(db)


def get_status_service(db: Session = Depends(get_db)) -> StatusService:
    return StatusService(db)


def get_reschedule_service(db: Session = Depends(get_db)) -> RescheduleService:
    return RescheduleService(db)


def get_slot_service(db: Session = Depends(get_db)) -> SlotService:
    return SlotService(db)


def get_session_ledger_service(db: Session = Depends(get_db)) -> SessionLedgerService:
    return SessionLedgerService(db)
