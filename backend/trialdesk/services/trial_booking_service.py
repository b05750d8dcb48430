# backend/trialdesk/services/trial_booking_service.py
"""
Trial Booking Service for TrialDesk

Books trials for individual students and family groups. One booking is
one transaction: the record, the teacher assignment and slot reservation,
the first session occurrence and the TrialAssigned event commit together
or not at all.
"""

import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session
import ulid

from ..core.actor import Actor
from ..core.enums import RoleName, SessionStatus, SessionType, TrialStatus
from ..core.exceptions import NotFoundException, PermissionDeniedException, ServiceException
from ..events import EventPublisher, TrialAssigned
from ..models.family import FamilyGroup
from ..models.trial import TrialStudent
from ..repositories.factory import RepositoryFactory
from ..schemas.trial import FamilyTrialCreate, TrialStudentCreate
from .assignment_service import AssignmentService
from .base import BaseService

logger = logging.getLogger(__name__)

BOOKING_ROLES = frozenset({RoleName.SALES, RoleName.ADMIN})
STUDENT_CODE_PREFIX = "ST"
FAMILY_CODE_PREFIX = "FM"
MAX_CODE_ATTEMPTS = 5


def generate_code(prefix: str) -> str:
    """Human-readable reference such as ``ST-7Q2M9KXD``."""
    return f"{prefix}-{str(ulid.ULID())[-8:]}"


class TrialBookingService(BaseService):
    """Service for booking trial lessons."""

    def __init__(
        self,
        db: Session,
        assignment_service: Optional[AssignmentService] = None,
        event_publisher: Optional[EventPublisher] = None,
    ):
        super().__init__(db)
        self.student_repository = RepositoryFactory.create_trial_student_repository(db)
        self.family_repository = RepositoryFactory.create_family_group_repository(db)
        self.session_repository = RepositoryFactory.create_session_repository(db)
        self.assignment_service = assignment_service or AssignmentService(db)
        self.event_publisher = event_publisher or EventPublisher(
            RepositoryFactory.create_job_repository(db)
        )

    def _check_can_book(self, actor: Actor) -> None:
        if actor.role not in BOOKING_ROLES:
            raise PermissionDeniedException(
                "Only sales agents and admins can book trials",
                details={"role": actor.role.value},
            )

    def _unique_code(self, prefix: str, exists: Callable[[str], bool]) -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            code = generate_code(prefix)
            if not exists(code):
                return code
        raise ServiceException(f"Could not allocate a unique {prefix} code")

    @BaseService.measure_operation("book_individual_trial")
    def book_individual_trial(self, actor: Actor, request: TrialStudentCreate) -> TrialStudent:
        """
        Book a trial for one student.

        Raises:
            PermissionDeniedException: Actor is not sales or admin
            NoCandidateException: No qualified teacher is free at that time
        """
        self._check_can_book(actor)
        student_id = str(ulid.ULID())

        with self.transaction():
            teacher_id = self.assignment_service.assign(
                request.teacher_type.value,
                request.trial_date,
                request.trial_time,
                student_id,
                teacher_id=request.teacher_id,
            )
            student = self.student_repository.create(
                id=student_id,
                unique_id=self._unique_code(
                    STUDENT_CODE_PREFIX, self.student_repository.unique_id_exists
                ),
                name=request.name,
                age=request.age,
                phone=request.phone,
                country=request.country,
                platform=request.platform.value,
                teacher_type=request.teacher_type.value,
                assigned_teacher_id=teacher_id,
                assigned_sales_agent_id=actor.user_id if actor.role == RoleName.SALES else None,
                trial_date=request.trial_date,
                trial_time=request.trial_time,
                status=TrialStatus.PENDING.value,
                notes=request.notes,
            )
            self.session_repository.create(
                student_id=student.id,
                teacher_id=teacher_id,
                session_type=SessionType.TRIAL.value,
                session_number=1,
                scheduled_date=request.trial_date,
                scheduled_time=request.trial_time,
                status=SessionStatus.SCHEDULED.value,
            )
            self.event_publisher.publish(
                TrialAssigned(
                    occupant_id=student.id,
                    teacher_id=teacher_id,
                    trial_date=request.trial_date,
                    trial_time=request.trial_time,
                    is_family=False,
                )
            )

        self.log_operation(
            "book_individual_trial",
            student_id=student.id,
            teacher_id=teacher_id,
            actor_id=actor.user_id,
        )
        return student

    @BaseService.measure_operation("book_family_trial")
    def book_family_trial(self, actor: Actor, request: FamilyTrialCreate) -> FamilyGroup:
        """Book one shared trial slot for every student in a family."""
        self._check_can_book(actor)
        family_id = str(ulid.ULID())

        with self.transaction():
            teacher_id = self.assignment_service.assign(
                request.teacher_type.value,
                request.trial_date,
                request.trial_time,
                family_id,
                teacher_id=request.teacher_id,
            )
            family = FamilyGroup(
                id=family_id,
                unique_id=self._unique_code(
                    FAMILY_CODE_PREFIX, self.family_repository.unique_id_exists
                ),
                parent_name=request.parent_name,
                phone=request.phone,
                country=request.country,
                platform=request.platform.value,
                teacher_type=request.teacher_type.value,
                assigned_teacher_id=teacher_id,
                assigned_sales_agent_id=actor.user_id if actor.role == RoleName.SALES else None,
                trial_date=request.trial_date,
                trial_time=request.trial_time,
                status=TrialStatus.PENDING.value,
                student_count=0,
                notes=request.notes,
            )
            self.db.add(family)

            for member in request.students:
                family.add_member(
                    TrialStudent(
                        id=str(ulid.ULID()),
                        unique_id=self._unique_code(
                            STUDENT_CODE_PREFIX, self.student_repository.unique_id_exists
                        ),
                        name=member.name,
                        age=member.age,
                        phone=request.phone,
                        country=request.country,
                        platform=request.platform.value,
                        teacher_type=request.teacher_type.value,
                        assigned_sales_agent_id=family.assigned_sales_agent_id,
                    )
                )
            self.db.flush()

            self.session_repository.create(
                family_group_id=family.id,
                teacher_id=teacher_id,
                session_type=SessionType.TRIAL.value,
                session_number=1,
                scheduled_date=request.trial_date,
                scheduled_time=request.trial_time,
                status=SessionStatus.SCHEDULED.value,
            )
            self.event_publisher.publish(
                TrialAssigned(
                    occupant_id=family.id,
                    teacher_id=teacher_id,
                    trial_date=request.trial_date,
                    trial_time=request.trial_time,
                    is_family=True,
                )
            )

        self.log_operation(
            "book_family_trial",
            family_group_id=family.id,
            teacher_id=teacher_id,
            students=family.student_count,
            actor_id=actor.user_id,
        )
        return family

    def get_student(self, student_id: str) -> TrialStudent:
        student = self.student_repository.get_by_id(student_id, load_relationships=False)
        if student is None:
            raise NotFoundException(f"Student {student_id} not found")
        return student

    def get_family(self, family_group_id: str) -> FamilyGroup:
        family = self.family_repository.get_by_id(family_group_id)
        if family is None:
            raise NotFoundException(f"Family group {family_group_id} not found")
        return family
