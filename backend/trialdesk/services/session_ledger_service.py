# backend/trialdesk/services/session_ledger_service.py
"""
Session Ledger Service for TrialDesk

History of trial and paid sessions per student. Family trials are stored
once on the family group and appear in every member's history.
"""

from datetime import date
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import SessionStatus, SessionType, TrialStatus
from ..core.exceptions import BusinessRuleException, NotFoundException, ValidationException
from ..core.time_slots import is_valid_time_slot
from ..events import EventPublisher, SessionCompleted
from ..models.session_occurrence import SessionOccurrence
from ..models.trial import TrialStudent
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

PAID_SESSION_STATUSES = frozenset({TrialStatus.PAID.value, TrialStatus.ACTIVE.value})


class SessionLedgerService(BaseService):
    def __init__(self, db: Session, event_publisher: Optional[EventPublisher] = None):
        super().__init__(db)
        self.session_repository = RepositoryFactory.create_session_repository(db)
        self.student_repository = RepositoryFactory.create_trial_student_repository(db)
        self.event_publisher = event_publisher or EventPublisher(
            RepositoryFactory.create_job_repository(db)
        )

    def _get_session(self, session_id: str) -> SessionOccurrence:
        occurrence = self.session_repository.get_by_id(session_id)
        if occurrence is None:
            raise NotFoundException(f"Session {session_id} not found")
        return occurrence

    def _get_student(self, student_id: str) -> TrialStudent:
        student = self.student_repository.get_by_id(student_id, load_relationships=False)
        if student is None:
            raise NotFoundException(f"Student {student_id} not found")
        return student

    @staticmethod
    def _require_scheduled(occurrence: SessionOccurrence) -> None:
        if occurrence.status != SessionStatus.SCHEDULED.value:
            raise BusinessRuleException(
                f"Session is already {occurrence.status}",
                code="SESSION_NOT_SCHEDULED",
                details={"session_id": occurrence.id, "status": occurrence.status},
            )

    @BaseService.measure_operation("complete_session")
    def complete(
        self, session_id: str, actual_minutes: int, notes: Optional[str] = None
    ) -> SessionOccurrence:
        """Mark a scheduled session completed and emit SessionCompleted."""
        if actual_minutes is None or actual_minutes < 0:
            raise ValidationException("actual_minutes must be zero or more")

        with self.transaction():
            occurrence = self._get_session(session_id)
            self._require_scheduled(occurrence)
            occurrence.complete(actual_minutes, notes)
            self.event_publisher.publish(
                SessionCompleted(
                    session_id=occurrence.id,
                    actual_minutes=actual_minutes,
                    notes=notes,
                    completed_at=occurrence.completed_at,
                )
            )
            self.db.flush()

        self.log_operation("complete_session", session_id=session_id, actual_minutes=actual_minutes)
        return occurrence

    @BaseService.measure_operation("cancel_session")
    def cancel(self, session_id: str, notes: Optional[str] = None) -> SessionOccurrence:
        with self.transaction():
            occurrence = self._get_session(session_id)
            self._require_scheduled(occurrence)
            occurrence.cancel(notes)
            self.db.flush()
        return occurrence

    @BaseService.measure_operation("schedule_paid_session")
    def schedule_paid_session(
        self, student_id: str, teacher_id: str, scheduled_date: date, scheduled_time: str
    ) -> SessionOccurrence:
        """Append the next numbered paid session for a paying student."""
        if not is_valid_time_slot(scheduled_time):
            raise ValidationException(f"Invalid time slot: {scheduled_time}")

        with self.transaction():
            student = self._get_student(student_id)
            if student.status not in PAID_SESSION_STATUSES:
                raise BusinessRuleException(
                    f"Paid sessions require a paid or active student (status {student.status})",
                    code="STUDENT_NOT_PAID",
                    details={"student_id": student_id, "status": student.status},
                )
            occurrence = self.session_repository.create(
                student_id=student.id,
                teacher_id=teacher_id,
                session_type=SessionType.PAID.value,
                session_number=self.session_repository.next_session_number(
                    student.id, student.family_group_id
                ),
                scheduled_date=scheduled_date,
                scheduled_time=scheduled_time,
                status=SessionStatus.SCHEDULED.value,
            )

        self.log_operation(
            "schedule_paid_session",
            student_id=student_id,
            session_number=occurrence.session_number,
        )
        return occurrence

    def history(self, student_id: str) -> List[SessionOccurrence]:
        """The student's sessions, including shared family trials, in session order."""
        student = self._get_student(student_id)
        return self.session_repository.list_for_student(student.id, student.family_group_id)

    def progress(self, student_id: str, package_sessions: Optional[int] = None) -> Dict[str, Any]:
        """Paid-package progress for a student."""
        if package_sessions is not None and package_sessions < 1:
            raise ValidationException("package_sessions must be at least 1")

        paid = [o for o in self.history(student_id) if o.session_type == SessionType.PAID.value]
        completed = sum(1 for o in paid if o.status == SessionStatus.COMPLETED.value)
        total = package_sessions or settings.default_package_sessions

        return {
            "student_id": student_id,
            "total": total,
            "completed": completed,
            "percentage": min(100, round(completed / total * 100)) if total else 0,
            "package_complete": completed >= total,
        }
