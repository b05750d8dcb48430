# backend/trialdesk/services/assignment_service.py
"""
Assignment Service for TrialDesk

Round-robin teacher assignment. The teacher who has waited longest since
their last trial (or never had one) is offered the slot first; ties break
on teacher id. A lost reservation race excludes that teacher and selection
runs again, up to ``settings.assignment_max_attempts`` times.
"""

from datetime import date
import logging
from typing import Optional, Set

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import NoCandidateException, SlotConflictException
from ..repositories.factory import RepositoryFactory
from ..repositories.slot_repository import SlotRepository
from ..repositories.teacher_repository import TeacherRepository
from .base import BaseService

logger = logging.getLogger(__name__)


class AssignmentService(BaseService):
    def __init__(
        self,
        db: Session,
        teacher_repository: Optional[TeacherRepository] = None,
        slot_repository: Optional[SlotRepository] = None,
        max_attempts: Optional[int] = None,
    ):
        super().__init__(db)
        self.teacher_repository = teacher_repository or RepositoryFactory.create_teacher_repository(db)
        self.slot_repository = slot_repository or RepositoryFactory.create_slot_repository(db)
        self.max_attempts = max_attempts or settings.assignment_max_attempts

    @BaseService.measure_operation("assign_teacher")
    def assign(
        self,
        teacher_type: str,
        slot_date: date,
        time_slot: str,
        occupant_id: str,
        teacher_id: Optional[str] = None,
    ) -> str:
        """
        Pick a teacher and reserve their slot for ``occupant_id``.

        Runs inside the caller's transaction. ``teacher_id`` restricts the
        candidates to one teacher.

        Returns:
            The id of the teacher whose slot was reserved

        Raises:
            NoCandidateException: No qualified teacher could be reserved
            SlotConflictException: The pinned teacher's slot is already held
        """
        excluded: Set[str] = set()
        attempts = 0

        while attempts < self.max_attempts:
            candidates = self.teacher_repository.find_candidates(
                teacher_type, slot_date, time_slot, exclude_ids=excluded, teacher_id=teacher_id
            )
            if not candidates:
                break

            candidate = candidates[0]
            attempts += 1
            if self.slot_repository.reserve(candidate.id, slot_date, time_slot, occupant_id):
                self.teacher_repository.touch_last_assigned(candidate.id)
                self.log_operation(
                    "assign_teacher",
                    teacher_id=candidate.id,
                    occupant_id=occupant_id,
                    slot_date=slot_date.isoformat(),
                    time_slot=time_slot,
                    attempts=attempts,
                )
                return candidate.id

            self.logger.warning(
                f"Lost reservation race for teacher {candidate.id} on {slot_date} {time_slot} "
                f"(attempt {attempts}/{self.max_attempts})"
            )
            excluded.add(candidate.id)

        if teacher_id is not None:
            pinned = self.slot_repository.get_slot(teacher_id, slot_date, time_slot)
            if pinned is not None and pinned.is_available and pinned.is_booked:
                raise SlotConflictException(
                    details={
                        "teacher_id": teacher_id,
                        "date": slot_date.isoformat(),
                        "time_slot": time_slot,
                    }
                )
        raise NoCandidateException(teacher_type, slot_date.isoformat(), time_slot, attempts)
