# backend/trialdesk/repositories/slot_repository.py
"""
Slot Repository for TrialDesk

Data access for TeacherSlot rows. Reservation is a single conditional
UPDATE so two concurrent bookers can never both claim the same slot; the
database decides the winner and the loser sees a rowcount of zero.
"""

from datetime import date
import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.teacher import TeacherProfile
from ..models.teacher_slot import TeacherSlot
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class SlotRepository(BaseRepository[TeacherSlot]):
    """Repository for teacher slot reservation and availability."""

    def __init__(self, db: Session):
        super().__init__(db, TeacherSlot)
        self.logger = logging.getLogger(__name__)

    def _identity_filter(self, teacher_id: str, slot_date: date, time_slot: str):
        return (
            TeacherSlot.teacher_id == teacher_id,
            TeacherSlot.slot_date == slot_date,
            TeacherSlot.time_slot == time_slot,
        )

    def get_slot(self, teacher_id: str, slot_date: date, time_slot: str) -> Optional[TeacherSlot]:
        try:
            return (
                self.db.query(TeacherSlot)
                .filter(*self._identity_filter(teacher_id, slot_date, time_slot))
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting slot {teacher_id} {slot_date} {time_slot}: {str(e)}")
            raise RepositoryException(f"Failed to get slot: {str(e)}")

    def reserve(self, teacher_id: str, slot_date: date, time_slot: str, occupant_id: str) -> bool:
        """
        Atomically claim a free published slot for ``occupant_id``.

        Returns True when exactly one row changed. False means the slot does
        not exist, is not published, or is already booked.
        """
        try:
            changed = (
                self.db.query(TeacherSlot)
                .filter(
                    *self._identity_filter(teacher_id, slot_date, time_slot),
                    TeacherSlot.is_available.is_(True),
                    TeacherSlot.is_booked.is_(False),
                )
                .update(
                    {TeacherSlot.is_booked: True, TeacherSlot.occupant_id: occupant_id},
                    synchronize_session="fetch",
                )
            )
            if changed != 1:
                self.logger.warning(
                    f"Reserve lost for {teacher_id} on {slot_date} {time_slot} (occupant {occupant_id})"
                )
            return changed == 1
        except SQLAlchemyError as e:
            self.logger.error(f"Error reserving slot {teacher_id} {slot_date} {time_slot}: {str(e)}")
            raise RepositoryException(f"Failed to reserve slot: {str(e)}")

    def free(self, teacher_id: str, slot_date: date, time_slot: str) -> bool:
        """
        Release a slot. Freeing an already free slot is a no-op.

        Returns False only when the slot row does not exist.
        """
        try:
            changed = (
                self.db.query(TeacherSlot)
                .filter(*self._identity_filter(teacher_id, slot_date, time_slot))
                .update(
                    {TeacherSlot.is_booked: False, TeacherSlot.occupant_id: None},
                    synchronize_session="fetch",
                )
            )
            return changed > 0
        except SQLAlchemyError as e:
            self.logger.error(f"Error freeing slot {teacher_id} {slot_date} {time_slot}: {str(e)}")
            raise RepositoryException(f"Failed to free slot: {str(e)}")

    def list_available(self, teacher_id: str, slot_date: date) -> List[TeacherSlot]:
        """Published slots for a teacher on a date, booked or not, by time."""
        try:
            return (
                self.db.query(TeacherSlot)
                .filter(
                    TeacherSlot.teacher_id == teacher_id,
                    TeacherSlot.slot_date == slot_date,
                    TeacherSlot.is_available.is_(True),
                )
                .order_by(TeacherSlot.time_slot.asc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing slots for {teacher_id} on {slot_date}: {str(e)}")
            raise RepositoryException(f"Failed to list slots: {str(e)}")

    def set_availability(
        self, teacher_id: str, slot_date: date, time_slots: Iterable[str], is_available: bool
    ) -> List[TeacherSlot]:
        """
        Create missing slot rows or toggle ``is_available`` on existing ones.

        Booked rows are never touched here; callers check for them first.
        """
        wanted = sorted(set(time_slots))
        try:
            existing = {
                slot.time_slot: slot
                for slot in self.db.query(TeacherSlot)
                .filter(
                    TeacherSlot.teacher_id == teacher_id,
                    TeacherSlot.slot_date == slot_date,
                    TeacherSlot.time_slot.in_(wanted),
                )
                .all()
            }
            result: List[TeacherSlot] = []
            for time_slot in wanted:
                slot = existing.get(time_slot)
                if slot is None:
                    if not is_available:
                        continue
                    slot = TeacherSlot(
                        teacher_id=teacher_id,
                        slot_date=slot_date,
                        time_slot=time_slot,
                        is_available=True,
                        is_booked=False,
                    )
                    self.db.add(slot)
                elif not slot.is_booked:
                    slot.is_available = is_available
                result.append(slot)
            self.db.flush()
            return result
        except SQLAlchemyError as e:
            self.logger.error(f"Error setting availability for {teacher_id} on {slot_date}: {str(e)}")
            raise RepositoryException(f"Failed to update availability: {str(e)}")

    def find_booked(self, teacher_id: str, slot_date: date, time_slots: Iterable[str]) -> List[TeacherSlot]:
        try:
            return (
                self.db.query(TeacherSlot)
                .filter(
                    TeacherSlot.teacher_id == teacher_id,
                    TeacherSlot.slot_date == slot_date,
                    TeacherSlot.time_slot.in_(list(time_slots)),
                    TeacherSlot.is_booked.is_(True),
                )
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error finding booked slots: {str(e)}")
            raise RepositoryException(f"Failed to find booked slots: {str(e)}")

    def count_open_by_time(self, teacher_type: str, slot_date: date) -> Dict[str, int]:
        """Number of active teachers of ``teacher_type`` free at each time on ``slot_date``."""
        try:
            rows = (
                self.db.query(TeacherSlot.time_slot, func.count(TeacherSlot.teacher_id))
                .join(TeacherProfile, TeacherProfile.id == TeacherSlot.teacher_id)
                .filter(
                    TeacherProfile.teacher_type == teacher_type,
                    TeacherProfile.is_active.is_(True),
                    TeacherSlot.slot_date == slot_date,
                    TeacherSlot.is_available.is_(True),
                    TeacherSlot.is_booked.is_(False),
                )
                .group_by(TeacherSlot.time_slot)
                .order_by(TeacherSlot.time_slot.asc())
                .all()
            )
            return {time_slot: count for time_slot, count in rows}
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting open slots for {teacher_type} on {slot_date}: {str(e)}")
            raise RepositoryException(f"Failed to count open slots: {str(e)}")
