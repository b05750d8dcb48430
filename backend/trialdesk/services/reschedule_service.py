# backend/trialdesk/services/reschedule_service.py
"""
Reschedule Service for TrialDesk

Moves a booked trial to another slot of the same teacher. The old slot is
freed and the new one reserved in one transaction; if the new reservation
is lost the old slot is re-reserved before the error propagates, and a
failed re-reservation is reported as an inconsistent state that needs
manual reconciliation.

The trial occurrence keeps the first position the trial ever held in
``original_date``/``original_time``.
"""

from datetime import date
import logging
from typing import Optional, Tuple, Union

from sqlalchemy.orm import Session

from ..core.actor import Actor
from ..core.enums import RescheduleReason, RoleName, SessionStatus, SessionType, TrialStatus
from ..core.exceptions import (
    BusinessRuleException,
    InconsistentStateException,
    NotFoundException,
    PermissionDeniedException,
    RepositoryException,
    SlotConflictException,
    SlotUnavailableException,
    UnchangedScheduleException,
    ValidationException,
)
from ..core.time_slots import is_valid_time_slot
from ..events import EventPublisher, TrialRescheduled
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .status_service import TrialEntity, load_trial_entity

logger = logging.getLogger(__name__)

RESCHEDULABLE_STATUSES = frozenset({TrialStatus.PENDING.value, TrialStatus.CONFIRMED.value})
RESCHEDULE_ROLES = frozenset({RoleName.SALES, RoleName.ADMIN, RoleName.SUPERVISOR})


class RescheduleService(BaseService):
    """Service for moving booked trials between slots."""

    def __init__(self, db: Session, event_publisher: Optional[EventPublisher] = None):
        super().__init__(db)
        self.student_repository = RepositoryFactory.create_trial_student_repository(db)
        self.family_repository = RepositoryFactory.create_family_group_repository(db)
        self.slot_repository = RepositoryFactory.create_slot_repository(db)
        self.session_repository = RepositoryFactory.create_session_repository(db)
        self.event_publisher = event_publisher or EventPublisher(
            RepositoryFactory.create_job_repository(db)
        )

    def _check_can_reschedule(self, actor: Actor, entity: TrialEntity) -> None:
        if actor.role in RESCHEDULE_ROLES or actor.is_teacher(entity.assigned_teacher_id):
            return
        raise PermissionDeniedException(
            "Only sales, admins, supervisors or the assigned teacher can reschedule this trial",
            details={"entity_id": entity.id, "role": actor.role.value},
        )

    def _compensate(
        self, teacher_id: str, old_date: date, old_time: str, occupant_id: str
    ) -> None:
        """Re-reserve the slot freed earlier in this transaction."""
        try:
            restored = self.slot_repository.reserve(teacher_id, old_date, old_time, occupant_id)
        except RepositoryException as exc:
            self.logger.error(f"Compensation for {occupant_id} raised: {exc}")
            restored = False
        if not restored:
            self.logger.error(
                f"Could not restore slot {teacher_id} {old_date} {old_time} for {occupant_id}; "
                "manual reconciliation required"
            )
            raise InconsistentStateException(
                "Reschedule failed and the original slot could not be restored",
                details={
                    "occupant_id": occupant_id,
                    "teacher_id": teacher_id,
                    "date": old_date.isoformat(),
                    "time_slot": old_time,
                },
            )

    @BaseService.measure_operation("reschedule_trial")
    def reschedule(
        self,
        actor: Actor,
        entity_id: str,
        new_date: date,
        new_time_slot: str,
        reason: Union[RescheduleReason, str],
        is_family: bool = False,
    ) -> TrialEntity:
        """
        Move a pending or confirmed trial to ``new_date`` at ``new_time_slot``.

        Raises:
            SlotUnavailableException: The teacher has no free slot there
            UnchangedScheduleException: The trial already holds that slot
            NotFoundException: The slot the trial holds has no row
            SlotConflictException: The slot was taken during the move
            InconsistentStateException: The old slot could not be restored
        """
        try:
            reason = RescheduleReason(reason)
        except ValueError as exc:
            raise ValidationException(f"Unknown reschedule reason: {reason}") from exc
        if not is_valid_time_slot(new_time_slot):
            raise ValidationException(f"Invalid time slot: {new_time_slot}")

        with self.transaction():
            entity = load_trial_entity(
                self.student_repository, self.family_repository, entity_id, is_family
            )
            teacher_id = entity.assigned_teacher_id
            if not teacher_id:
                raise BusinessRuleException(
                    "Trial has no assigned teacher", code="NO_ASSIGNED_TEACHER"
                )
            if entity.status not in RESCHEDULABLE_STATUSES:
                raise BusinessRuleException(
                    f"Trials in status {entity.status} cannot be rescheduled",
                    code="RESCHEDULE_NOT_ALLOWED",
                    details={"status": entity.status},
                )
            self._check_can_reschedule(actor, entity)

            old_date, old_time = entity.trial_date, entity.trial_time
            if old_date == new_date and old_time == new_time_slot:
                raise UnchangedScheduleException(new_date.isoformat(), new_time_slot)

            target = self.slot_repository.get_slot(teacher_id, new_date, new_time_slot)
            if target is not None and target.is_booked and target.occupant_id == entity.id:
                raise UnchangedScheduleException(new_date.isoformat(), new_time_slot)
            if target is None or not target.is_available or target.is_booked:
                raise SlotUnavailableException(teacher_id, new_date.isoformat(), new_time_slot)

            had_position = old_date is not None and old_time is not None
            if had_position and not self.slot_repository.free(teacher_id, old_date, old_time):
                raise NotFoundException(
                    f"Slot {teacher_id} {old_date} {old_time} held by {entity.id} does not exist"
                )

            if not self.slot_repository.reserve(teacher_id, new_date, new_time_slot, entity.id):
                if had_position:
                    self._compensate(teacher_id, old_date, old_time, entity.id)
                raise SlotConflictException(
                    details={
                        "teacher_id": teacher_id,
                        "date": new_date.isoformat(),
                        "time_slot": new_time_slot,
                    }
                )

            if is_family:
                entity.apply_schedule(new_date, new_time_slot)
            else:
                entity.trial_date = new_date
                entity.trial_time = new_time_slot

            self._move_trial_occurrence(
                entity, is_family, teacher_id, (old_date, old_time), (new_date, new_time_slot), reason
            )

            self.event_publisher.publish(
                TrialRescheduled(
                    entity_id=entity.id,
                    is_family=is_family,
                    teacher_id=teacher_id,
                    old_date=old_date,
                    old_time=old_time,
                    new_date=new_date,
                    new_time=new_time_slot,
                    reason=reason.value,
                    actor_id=actor.user_id,
                )
            )
            self.db.flush()

        self.log_operation(
            "reschedule_trial",
            entity_id=entity_id,
            is_family=is_family,
            old=f"{old_date} {old_time}",
            new=f"{new_date} {new_time_slot}",
            reason=reason.value,
        )
        return entity

    def _move_trial_occurrence(
        self,
        entity: TrialEntity,
        is_family: bool,
        teacher_id: str,
        old_position: Tuple[Optional[date], Optional[str]],
        new_position: Tuple[date, str],
        reason: RescheduleReason,
    ) -> None:
        old_date, old_time = old_position
        new_date, new_time_slot = new_position
        if is_family:
            occurrence = self.session_repository.get_trial_occurrence(family_group_id=entity.id)
        else:
            occurrence = self.session_repository.get_trial_occurrence(student_id=entity.id)

        if occurrence is None:
            self.logger.warning(f"Trial {entity.id} had no session occurrence; creating one")
            occurrence = self.session_repository.create(
                student_id=None if is_family else entity.id,
                family_group_id=entity.id if is_family else None,
                teacher_id=teacher_id,
                session_type=SessionType.TRIAL.value,
                session_number=1,
                scheduled_date=old_date or new_date,
                scheduled_time=old_time or new_time_slot,
                status=SessionStatus.SCHEDULED.value,
            )
        occurrence.record_reschedule(new_date, new_time_slot, reason.value)
