"""Tests for RescheduleService, including compensation on a lost reservation."""

from datetime import date
from unittest.mock import patch

import pytest

from trialdesk.core.exceptions import (
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
from trialdesk.models.family import FamilyGroup
from trialdesk.models.session_occurrence import SessionOccurrence
from trialdesk.models.trial import TrialStudent
from trialdesk.repositories.job_repository import JobRepository
from trialdesk.repositories.slot_repository import SlotRepository
from trialdesk.services.reschedule_service import RescheduleService
from trialdesk.services.status_service import StatusService

JUNE_21 = date(2025, 6, 21)
JUNE_22 = date(2025, 6, 22)
JUNE_23 = date(2025, 6, 23)

CLIENT = "by-student-client"
TEACHER_DONE = "trial-completed-by-teacher"


@pytest.fixture
def teacher(make_teacher, make_slots):
    make_teacher("t-1")
    make_teacher("t-2")
    make_slots("t-1", JUNE_21, ["14:00", "16:00"])
    make_slots("t-1", JUNE_22, ["15:00"])
    make_slots("t-1", JUNE_23, ["10:00"])
    make_slots("t-1", JUNE_23, ["11:00"], is_available=False)
    return "t-1"


@pytest.fixture
def service(db) -> RescheduleService:
    return RescheduleService(db)


@pytest.fixture
def student(teacher, book_student) -> TrialStudent:
    return book_student("t-1", JUNE_21, "14:00")


def _slot(db, slot_date, time_slot):
    return SlotRepository(db).get_slot("t-1", slot_date, time_slot)


def _trial_occurrence(db, student_id):
    return db.query(SessionOccurrence).filter_by(student_id=student_id).one()


class TestReschedule:
    def test_two_moves_keep_first_position(self, db, service, student, sales) -> None:
        service.reschedule(sales, student.id, JUNE_22, "15:00", CLIENT)

        assert _slot(db, JUNE_21, "14:00").is_booked is False
        assert _slot(db, JUNE_22, "15:00").occupant_id == student.id
        occurrence = _trial_occurrence(db, student.id)
        assert (occurrence.original_date, occurrence.original_time) == (JUNE_21, "14:00")
        assert occurrence.reschedule_count == 1

        moved = service.reschedule(sales, student.id, JUNE_23, "10:00", TEACHER_DONE)

        assert (moved.trial_date, moved.trial_time) == (JUNE_23, "10:00")
        assert _slot(db, JUNE_22, "15:00").is_booked is False
        assert _slot(db, JUNE_23, "10:00").occupant_id == student.id
        occurrence = _trial_occurrence(db, student.id)
        assert (occurrence.scheduled_date, occurrence.scheduled_time) == (JUNE_23, "10:00")
        assert (occurrence.original_date, occurrence.original_time) == (JUNE_21, "14:00")
        assert occurrence.reschedule_count == 2
        assert occurrence.reschedule_reason == TEACHER_DONE

    def test_publishes_trial_rescheduled(self, db, service, student, sales) -> None:
        service.reschedule(sales, student.id, JUNE_22, "15:00", CLIENT)

        job = JobRepository(db).list_by_type("event:TrialRescheduled")[0]
        assert job.payload["old_date"] == "2025-06-21"
        assert job.payload["old_time"] == "14:00"
        assert job.payload["new_date"] == "2025-06-22"
        assert job.payload["new_time"] == "15:00"
        assert job.payload["reason"] == "by-student-client"

    def test_assigned_teacher_can_reschedule(self, service, student, as_teacher) -> None:
        moved = service.reschedule(as_teacher("t-1"), student.id, JUNE_21, "16:00", TEACHER_DONE)
        assert moved.trial_time == "16:00"

    def test_other_teacher_is_denied(self, db, service, student, as_teacher) -> None:
        with pytest.raises(PermissionDeniedException):
            service.reschedule(as_teacher("t-2"), student.id, JUNE_22, "15:00", CLIENT)
        assert _slot(db, JUNE_21, "14:00").occupant_id == student.id


class TestRejectedMoves:
    def test_unpublished_slot(self, db, service, student, sales) -> None:
        with pytest.raises(SlotUnavailableException):
            service.reschedule(sales, student.id, JUNE_23, "11:00", CLIENT)
        assert _slot(db, JUNE_21, "14:00").occupant_id == student.id

    def test_missing_slot(self, service, student, sales) -> None:
        with pytest.raises(SlotUnavailableException):
            service.reschedule(sales, student.id, JUNE_23, "18:00", CLIENT)

    def test_slot_held_by_someone_else(self, db, service, student, book_student, sales) -> None:
        other = book_student("t-1", JUNE_22, "15:00", name="Other")

        with pytest.raises(SlotUnavailableException):
            service.reschedule(sales, student.id, JUNE_22, "15:00", CLIENT)

        assert _slot(db, JUNE_22, "15:00").occupant_id == other.id
        assert _slot(db, JUNE_21, "14:00").occupant_id == student.id

    def test_same_position(self, service, student, sales) -> None:
        with pytest.raises(UnchangedScheduleException):
            service.reschedule(sales, student.id, JUNE_21, "14:00", CLIENT)

    def test_status_must_hold_a_slot(self, db, service, student, admin, sales) -> None:
        StatusService(db).change_status(admin, student.id, "cancelled")

        with pytest.raises(BusinessRuleException) as exc_info:
            service.reschedule(sales, student.id, JUNE_22, "15:00", CLIENT)
        assert exc_info.value.code == "RESCHEDULE_NOT_ALLOWED"

    def test_missing_old_slot_row(self, db, service, student, sales) -> None:
        db.delete(_slot(db, JUNE_21, "14:00"))
        db.commit()

        with patch.object(service.slot_repository, "reserve") as reserve:
            with pytest.raises(NotFoundException):
                service.reschedule(sales, student.id, JUNE_22, "15:00", CLIENT)

        reserve.assert_not_called()
        assert _slot(db, JUNE_22, "15:00").is_booked is False
        assert db.get(TrialStudent, student.id).trial_time == "14:00"

    def test_bad_reason(self, service, student, sales) -> None:
        with pytest.raises(ValidationException):
            service.reschedule(sales, student.id, JUNE_22, "15:00", "felt-like-it")

    def test_bad_time(self, service, student, sales) -> None:
        with pytest.raises(ValidationException):
            service.reschedule(sales, student.id, JUNE_22, "3pm", CLIENT)


class TestCompensation:
    def test_lost_race_restores_old_slot(self, db, service, student, sales) -> None:
        real_reserve = service.slot_repository.reserve
        calls = []

        def flaky_reserve(teacher_id, slot_date, time_slot, occupant_id):
            calls.append((slot_date, time_slot))
            if (slot_date, time_slot) == (JUNE_22, "15:00"):
                return False
            return real_reserve(teacher_id, slot_date, time_slot, occupant_id)

        with patch.object(service.slot_repository, "reserve", side_effect=flaky_reserve):
            with pytest.raises(SlotConflictException):
                service.reschedule(sales, student.id, JUNE_22, "15:00", CLIENT)

        assert calls == [(JUNE_22, "15:00"), (JUNE_21, "14:00")]
        db.expire_all()
        assert _slot(db, JUNE_21, "14:00").occupant_id == student.id
        assert _slot(db, JUNE_22, "15:00").is_booked is False
        reloaded = db.get(TrialStudent, student.id)
        assert (reloaded.trial_date, reloaded.trial_time) == (JUNE_21, "14:00")
        assert _trial_occurrence(db, student.id).reschedule_count == 0

    def test_failed_restore_is_inconsistent(self, service, student, sales) -> None:
        with patch.object(service.slot_repository, "reserve", return_value=False):
            with pytest.raises(InconsistentStateException) as exc_info:
                service.reschedule(sales, student.id, JUNE_22, "15:00", CLIENT)

        assert exc_info.value.code == "INCONSISTENT_STATE"
        assert exc_info.value.details["occupant_id"] == student.id
        assert exc_info.value.details["time_slot"] == "14:00"

    def test_restore_error_is_inconsistent(self, service, student, sales) -> None:
        with patch.object(
            service.slot_repository,
            "reserve",
            side_effect=[False, RepositoryException("connection reset")],
        ):
            with pytest.raises(InconsistentStateException):
                service.reschedule(sales, student.id, JUNE_22, "15:00", CLIENT)


class TestFamilyReschedule:
    def test_family_and_members_move_together(self, db, service, teacher, book_family, sales) -> None:
        family = book_family("t-1", JUNE_21, "16:00", member_names=("Adam", "Laila"))

        service.reschedule(sales, family.id, JUNE_23, "10:00", CLIENT, is_family=True)

        db.expire_all()
        loaded = db.get(FamilyGroup, family.id)
        assert (loaded.trial_date, loaded.trial_time) == (JUNE_23, "10:00")
        assert {(m.trial_date, m.trial_time) for m in loaded.members} == {(JUNE_23, "10:00")}
        assert _slot(db, JUNE_23, "10:00").occupant_id == family.id
        assert _slot(db, JUNE_21, "16:00").is_booked is False
        occurrence = db.query(SessionOccurrence).filter_by(family_group_id=family.id).one()
        assert (occurrence.original_date, occurrence.original_time) == (JUNE_21, "16:00")

    def test_member_cannot_be_rescheduled_alone(self, service, teacher, book_family, sales) -> None:
        family = book_family("t-1", JUNE_21, "16:00", member_names=("Adam", "Laila"))

        with pytest.raises(BusinessRuleException) as exc_info:
            service.reschedule(sales, family.members[0].id, JUNE_23, "10:00", CLIENT)
        assert exc_info.value.code == "FAMILY_MEMBER"
