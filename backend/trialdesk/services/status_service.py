# backend/trialdesk/services/status_service.py
"""
Status Service for TrialDesk

Applies lifecycle transitions to individual trials and family groups.
The transition table in ``domain.status_transitions`` decides what is
legal; this service loads the record, enforces ownership, applies the
change together with its side effects and writes the audit row and events
in the same transaction.

Family groups change as a unit: the group and every member move together
or, on any failure, none of them move.
"""

from dataclasses import dataclass
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from sqlalchemy.orm import Session

from ..core.actor import Actor
from ..core.config import settings
from ..core.enums import EntityType, RoleName, SessionStatus, TrialOutcome, TrialStatus
from ..core.exceptions import (
    BusinessRuleException,
    NotFoundException,
    PermissionDeniedException,
    ValidationException,
)
from ..domain import status_transitions
from ..events import EventPublisher, SessionCompleted, TrialOutcomeRecorded, TrialStatusChanged
from ..models.family import FamilyGroup
from ..models.trial import TrialStudent
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

TrialEntity = Union[TrialStudent, FamilyGroup]

OUTCOME_STATUSES = frozenset(
    {TrialStatus.TRIAL_COMPLETED, TrialStatus.TRIAL_GHOSTED, TrialStatus.PAID}
)
SLOT_HOLDING_STATUSES = frozenset({TrialStatus.PENDING, TrialStatus.CONFIRMED})
TRIAL_RESULT_STATUSES = frozenset({TrialStatus.TRIAL_COMPLETED, TrialStatus.TRIAL_GHOSTED})


@dataclass
class StatusChangeResult:
    entity: Any
    is_family: bool
    from_status: str
    to_status: str


def load_trial_entity(
    student_repository: Any, family_repository: Any, entity_id: str, is_family: bool
) -> TrialEntity:
    """
    Fetch the record a trial operation targets.

    A family member is never a valid target on its own; callers must go
    through the family group.
    """
    if is_family:
        family = family_repository.get_by_id(entity_id)
        if family is None:
            raise NotFoundException(f"Family group {entity_id} not found")
        return family

    student = student_repository.get_by_id(entity_id, load_relationships=False)
    if student is None:
        raise NotFoundException(f"Student {entity_id} not found")
    if student.is_family_member:
        raise BusinessRuleException(
            "Family members are updated through their family group",
            code="FAMILY_MEMBER",
            details={"student_id": student.id, "family_group_id": student.family_group_id},
        )
    return student


class StatusService(BaseService):
    """Service for trial lifecycle transitions."""

    def __init__(self, db: Session, event_publisher: Optional[EventPublisher] = None):
        super().__init__(db)
        self.student_repository = RepositoryFactory.create_trial_student_repository(db)
        self.family_repository = RepositoryFactory.create_family_group_repository(db)
        self.slot_repository = RepositoryFactory.create_slot_repository(db)
        self.session_repository = RepositoryFactory.create_session_repository(db)
        self.status_change_repository = RepositoryFactory.create_status_change_repository(db)
        self.event_publisher = event_publisher or EventPublisher(
            RepositoryFactory.create_job_repository(db)
        )

    def _load(self, entity_id: str, is_family: bool) -> TrialEntity:
        return load_trial_entity(
            self.student_repository, self.family_repository, entity_id, is_family
        )

    @staticmethod
    def _check_teacher_owns(actor: Actor, entity: TrialEntity) -> None:
        if actor.role == RoleName.TEACHER and entity.assigned_teacher_id != actor.user_id:
            raise PermissionDeniedException(
                "Teachers can only update their own trials",
                details={"entity_id": entity.id},
            )

    def _release_trial_slot(self, entity: TrialEntity, is_family: bool) -> None:
        if entity.assigned_teacher_id and entity.trial_date and entity.trial_time:
            if not self.slot_repository.free(
                entity.assigned_teacher_id, entity.trial_date, entity.trial_time
            ):
                self.logger.warning(
                    f"No slot row to free for {entity.id} at {entity.trial_date} {entity.trial_time}"
                )
        occurrence = self._trial_occurrence(entity, is_family)
        if occurrence is not None and occurrence.status == SessionStatus.SCHEDULED.value:
            occurrence.cancel()

    def _trial_occurrence(self, entity: TrialEntity, is_family: bool):
        if is_family:
            return self.session_repository.get_trial_occurrence(family_group_id=entity.id)
        return self.session_repository.get_trial_occurrence(student_id=entity.id)

    def _close_trial_occurrence(
        self,
        entity: TrialEntity,
        is_family: bool,
        to_status: TrialStatus,
        notes: Optional[str],
        actual_minutes: Optional[int],
    ) -> None:
        occurrence = self._trial_occurrence(entity, is_family)
        if occurrence is None or occurrence.status != SessionStatus.SCHEDULED.value:
            return
        if to_status == TrialStatus.TRIAL_GHOSTED:
            occurrence.cancel(notes)
            return
        minutes = actual_minutes if actual_minutes is not None else settings.slot_interval_minutes
        occurrence.complete(minutes, notes)
        self.event_publisher.publish(
            SessionCompleted(
                session_id=occurrence.id,
                actual_minutes=minutes,
                notes=notes,
                completed_at=occurrence.completed_at,
            )
        )

    def _apply_transition(
        self,
        actor: Actor,
        entity_id: str,
        target: Union[TrialStatus, str],
        is_family: bool,
        notes: Optional[str] = None,
        actual_minutes: Optional[int] = None,
    ) -> Tuple[TrialEntity, str]:
        """
        Validate and apply one transition. Runs inside the caller's transaction.

        Reaching trial-completed or trial-ghosted also closes the trial
        occurrence, whichever endpoint the change came through.
        """
        entity = self._load(entity_id, is_family)
        from_status = entity.status
        rule = status_transitions.check_transition(actor.role, from_status, target)
        self._check_teacher_owns(actor, entity)
        to_status = rule.to_status

        if to_status == TrialStatus.CANCELLED and rule.from_status in SLOT_HOLDING_STATUSES:
            self._release_trial_slot(entity, is_family)
        if to_status in TRIAL_RESULT_STATUSES:
            self._close_trial_occurrence(entity, is_family, to_status, notes, actual_minutes)

        if is_family:
            entity.apply_status(to_status.value)
        else:
            entity.status = to_status.value

        self.status_change_repository.record(
            entity_type=EntityType.FAMILY.value if is_family else EntityType.STUDENT.value,
            entity_id=entity.id,
            from_status=from_status,
            to_status=to_status.value,
            actor_id=actor.user_id,
            actor_role=actor.role.value,
        )
        self.event_publisher.publish(
            TrialStatusChanged(
                entity_id=entity.id,
                is_family=is_family,
                from_status=from_status,
                to_status=to_status.value,
                actor_id=actor.user_id,
                actor_role=actor.role.value,
            )
        )
        if to_status in OUTCOME_STATUSES:
            self.event_publisher.publish(
                TrialOutcomeRecorded(
                    entity_id=entity.id,
                    is_family=is_family,
                    outcome=to_status.value,
                    from_status=from_status,
                    actor_id=actor.user_id,
                )
            )
        self.db.flush()
        return entity, from_status

    @BaseService.measure_operation("change_status")
    def change_status(
        self,
        actor: Actor,
        entity_id: str,
        target: Union[TrialStatus, str],
        is_family: bool = False,
    ) -> StatusChangeResult:
        """
        Move a trial or family group to ``target``.

        Raises:
            InvalidTransitionException: The pair is not in the table
            PermissionDeniedException: The actor may not perform it
            BusinessRuleException: ``entity_id`` is a family member
        """
        with self.transaction():
            entity, from_status = self._apply_transition(actor, entity_id, target, is_family)

        self.log_operation(
            "change_status",
            entity_id=entity_id,
            is_family=is_family,
            from_status=from_status,
            to_status=entity.status,
            actor_id=actor.user_id,
        )
        return StatusChangeResult(
            entity=entity, is_family=is_family, from_status=from_status, to_status=entity.status
        )

    @BaseService.measure_operation("record_trial_outcome")
    def record_trial_outcome(
        self,
        actor: Actor,
        entity_id: str,
        outcome: Union[TrialOutcome, str],
        is_family: bool = False,
        notes: Optional[str] = None,
        actual_minutes: Optional[int] = None,
    ) -> TrialEntity:
        """
        Record what happened at a confirmed trial.

        ``completed`` moves to trial-completed and ``ghosted`` to
        trial-ghosted; ``notes`` and ``actual_minutes`` go onto the closed
        trial occurrence.
        """
        try:
            outcome = TrialOutcome(outcome)
        except ValueError as exc:
            raise ValidationException(f"Unknown trial outcome: {outcome}") from exc
        if actual_minutes is not None and actual_minutes < 0:
            raise ValidationException("actual_minutes cannot be negative")

        target = (
            TrialStatus.TRIAL_COMPLETED
            if outcome == TrialOutcome.COMPLETED
            else TrialStatus.TRIAL_GHOSTED
        )

        with self.transaction():
            entity, _ = self._apply_transition(
                actor, entity_id, target, is_family, notes=notes, actual_minutes=actual_minutes
            )
            if notes:
                entity.notes = notes

        self.log_operation(
            "record_trial_outcome",
            entity_id=entity_id,
            is_family=is_family,
            outcome=outcome.value,
            actor_id=actor.user_id,
        )
        return entity

    def available_transitions(
        self, actor: Actor, entity_id: str, is_family: bool = False
    ) -> Dict[str, Any]:
        """Statuses the actor may move this record to, with labels and prompts."""
        entity = self._load(entity_id, is_family)
        options: List[Dict[str, Any]] = []
        for option in status_transitions.available_transitions(actor.role, entity.status):
            confirmation = status_transitions.requires_confirmation(entity.status, option["status"])
            options.append(
                {
                    **option,
                    "requires_confirmation": confirmation["required"],
                    "confirmation_message": confirmation["message"],
                }
            )
        return {
            "current_status": entity.status,
            "current_label": status_transitions.status_label(entity.status),
            "transitions": options,
        }
