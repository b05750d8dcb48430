# backend/trialdesk/services/slot_service.py
"""
Slot Service for TrialDesk

Owns teacher slot state: atomic reservation, idempotent release, the
availability grid teachers publish, and the per-time counts shown when
booking a trial.
"""

from datetime import date
import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from ..core.actor import Actor
from ..core.enums import RoleName
from ..core.exceptions import (
    ConflictException,
    NotFoundException,
    PermissionDeniedException,
    SlotConflictException,
    ValidationException,
)
from ..core.time_slots import is_valid_time_slot
from ..core.timezone_utils import get_business_today
from ..models.teacher_slot import TeacherSlot
from ..repositories.factory import RepositoryFactory
from ..repositories.slot_repository import SlotRepository
from .base import BaseService

logger = logging.getLogger(__name__)


class SlotService(BaseService):
    """Service for teacher slot reservation and availability."""

    def __init__(self, db: Session, slot_repository: Optional[SlotRepository] = None):
        super().__init__(db)
        self.repository = slot_repository or RepositoryFactory.create_slot_repository(db)

    # Reservation primitives. These run inside the caller's transaction.

    def reserve_in_transaction(
        self, teacher_id: str, slot_date: date, time_slot: str, occupant_id: str
    ) -> None:
        """
        Claim a slot or raise.

        The claim is a single conditional UPDATE; the row is only read
        afterwards to report why the claim failed.
        """
        if self.repository.reserve(teacher_id, slot_date, time_slot, occupant_id):
            return
        slot = self.repository.get_slot(teacher_id, slot_date, time_slot)
        if slot is None:
            raise NotFoundException(
                f"Teacher {teacher_id} has no slot on {slot_date.isoformat()} at {time_slot}"
            )
        raise SlotConflictException(
            details={
                "teacher_id": teacher_id,
                "date": slot_date.isoformat(),
                "time_slot": time_slot,
                "is_available": bool(slot.is_available),
                "is_booked": bool(slot.is_booked),
            }
        )

    def free_in_transaction(self, teacher_id: str, slot_date: date, time_slot: str) -> None:
        if not self.repository.free(teacher_id, slot_date, time_slot):
            raise NotFoundException(
                f"Teacher {teacher_id} has no slot on {slot_date.isoformat()} at {time_slot}"
            )

    @BaseService.measure_operation("reserve_slot")
    def reserve(self, teacher_id: str, slot_date: date, time_slot: str, occupant_id: str) -> TeacherSlot:
        with self.transaction():
            self.reserve_in_transaction(teacher_id, slot_date, time_slot, occupant_id)
        self.log_operation(
            "reserve_slot", teacher_id=teacher_id, slot_date=str(slot_date), time_slot=time_slot
        )
        return self.repository.get_slot(teacher_id, slot_date, time_slot)

    @BaseService.measure_operation("free_slot")
    def free(self, teacher_id: str, slot_date: date, time_slot: str) -> TeacherSlot:
        with self.transaction():
            self.free_in_transaction(teacher_id, slot_date, time_slot)
        return self.repository.get_slot(teacher_id, slot_date, time_slot)

    def list_available(self, teacher_id: str, slot_date: date) -> List[TeacherSlot]:
        return self.repository.list_available(teacher_id, slot_date)

    # Availability editing

    def _check_can_edit(self, actor: Actor, teacher_id: str, slot_date: date) -> None:
        if actor.is_staff:
            return
        if actor.role != RoleName.TEACHER:
            raise PermissionDeniedException(
                "Only teachers, admins and supervisors can edit availability",
                details={"role": actor.role.value},
            )
        if actor.user_id != teacher_id:
            raise PermissionDeniedException(
                "Teachers can only edit their own availability",
                details={"teacher_id": teacher_id},
            )
        today = get_business_today()
        if slot_date <= today:
            raise PermissionDeniedException(
                "Teachers cannot modify availability for today or past dates",
                details={"date": slot_date.isoformat(), "today": today.isoformat()},
            )

    @staticmethod
    def _validate_time_slots(time_slots: Iterable[str]) -> List[str]:
        slots = list(time_slots)
        if not slots:
            raise ValidationException("At least one time slot is required")
        invalid = [s for s in slots if not is_valid_time_slot(s)]
        if invalid:
            raise ValidationException(
                "Time slots must be HH:MM on the slot grid", details={"invalid": invalid}
            )
        return slots

    @BaseService.measure_operation("publish_availability")
    def publish_availability(
        self, actor: Actor, teacher_id: str, slot_date: date, time_slots: Iterable[str]
    ) -> List[TeacherSlot]:
        """Create or re-enable slots for a teacher on a date."""
        slots = self._validate_time_slots(time_slots)
        self._check_can_edit(actor, teacher_id, slot_date)
        with self.transaction():
            result = self.repository.set_availability(teacher_id, slot_date, slots, True)
        self.log_operation(
            "publish_availability", teacher_id=teacher_id, slot_date=str(slot_date), count=len(result)
        )
        return result

    @BaseService.measure_operation("withdraw_availability")
    def withdraw_availability(
        self, actor: Actor, teacher_id: str, slot_date: date, time_slots: Iterable[str]
    ) -> List[TeacherSlot]:
        """Disable free slots. Booked slots must be rescheduled or cancelled first."""
        slots = self._validate_time_slots(time_slots)
        self._check_can_edit(actor, teacher_id, slot_date)
        with self.transaction():
            booked = self.repository.find_booked(teacher_id, slot_date, slots)
            if booked:
                raise ConflictException(
                    "Cannot withdraw booked slots",
                    code="SLOT_BOOKED",
                    details={"time_slots": sorted(s.time_slot for s in booked)},
                )
            result = self.repository.set_availability(teacher_id, slot_date, slots, False)
        self.log_operation(
            "withdraw_availability", teacher_id=teacher_id, slot_date=str(slot_date), count=len(result)
        )
        return result

    def find_open_slots(self, teacher_type: str, slot_date: date) -> List[Dict[str, Any]]:
        """Times on ``slot_date`` with at least one free teacher of ``teacher_type``."""
        counts = self.repository.count_open_by_time(teacher_type, slot_date)
        return [
            {"time_slot": time_slot, "available_teachers": count}
            for time_slot, count in counts.items()
        ]
