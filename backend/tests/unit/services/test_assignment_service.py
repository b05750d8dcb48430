"""Tests for round-robin teacher assignment."""

from datetime import date, datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from trialdesk.core.exceptions import NoCandidateException, SlotConflictException
from trialdesk.models.teacher import TeacherProfile
from trialdesk.repositories.slot_repository import SlotRepository
from trialdesk.services.assignment_service import AssignmentService

DAY = date(2030, 5, 4)


def _ts(hour: int) -> datetime:
    return datetime(2030, 5, 1, hour, 0, tzinfo=timezone.utc)


class TestRoundRobin:
    def test_never_assigned_teachers_go_first_in_id_order(
        self, db, make_teacher, make_slots
    ) -> None:
        make_teacher("t-c", last_assigned_at=_ts(8))
        make_teacher("t-b")
        make_teacher("t-a")
        for teacher_id in ("t-a", "t-b", "t-c"):
            make_slots(teacher_id, DAY, ["10:00"])

        service = AssignmentService(db)
        picked = [service.assign("kids", DAY, "10:00", f"student-{i}") for i in range(3)]
        db.commit()

        assert picked == ["t-a", "t-b", "t-c"]

    def test_oldest_last_assignment_wins(self, db, make_teacher, make_slots) -> None:
        make_teacher("t-a", last_assigned_at=_ts(12))
        make_teacher("t-b", last_assigned_at=_ts(9))
        make_teacher("t-c", last_assigned_at=_ts(10))
        for teacher_id in ("t-a", "t-b", "t-c"):
            make_slots(teacher_id, DAY, ["10:00"])

        teacher_id = AssignmentService(db).assign("kids", DAY, "10:00", "student-1")

        assert teacher_id == "t-b"

    def test_assignment_moves_the_cursor(self, db, make_teacher, make_slots) -> None:
        make_teacher("t-a")
        make_teacher("t-b")
        make_slots("t-a", DAY, ["10:00", "11:00"])
        make_slots("t-b", DAY, ["10:00", "11:00"])

        service = AssignmentService(db)
        assert service.assign("kids", DAY, "10:00", "student-1") == "t-a"
        assert service.assign("kids", DAY, "11:00", "student-2") == "t-b"

        t_a = db.get(TeacherProfile, "t-a")
        assert t_a.last_assigned_at is not None

    def test_reserves_the_chosen_slot(self, db, make_teacher, make_slots) -> None:
        make_teacher("t-a")
        make_slots("t-a", DAY, ["10:00"])

        AssignmentService(db).assign("kids", DAY, "10:00", "student-1")

        slot = SlotRepository(db).get_slot("t-a", DAY, "10:00")
        assert slot.is_booked is True
        assert slot.occupant_id == "student-1"


class TestCandidateFiltering:
    def test_category_must_match_exactly(self, db, make_teacher, make_slots) -> None:
        make_teacher("t-adult", teacher_type="adult")
        make_teacher("t-mixed", teacher_type="mixed")
        make_slots("t-adult", DAY, ["10:00"])
        make_slots("t-mixed", DAY, ["10:00"])

        with pytest.raises(NoCandidateException) as exc_info:
            AssignmentService(db).assign("kids", DAY, "10:00", "student-1")

        assert exc_info.value.code == "NO_CANDIDATE"
        assert exc_info.value.details["attempts"] == 0

    def test_booked_unpublished_and_inactive_are_skipped(
        self, db, make_teacher, make_slots
    ) -> None:
        make_teacher("t-a")
        make_teacher("t-b")
        make_teacher("t-c", is_active=False)
        make_teacher("t-d")
        make_slots("t-a", DAY, ["10:00"])
        make_slots("t-b", DAY, ["10:00"], is_available=False)
        make_slots("t-c", DAY, ["10:00"])
        make_slots("t-d", DAY, ["10:00"])
        SlotRepository(db).reserve("t-a", DAY, "10:00", "someone-else")

        assert AssignmentService(db).assign("kids", DAY, "10:00", "student-1") == "t-d"

    def test_pinned_teacher(self, db, make_teacher, make_slots) -> None:
        make_teacher("t-a")
        make_teacher("t-b")
        make_slots("t-a", DAY, ["10:00"])
        make_slots("t-b", DAY, ["10:00"])

        teacher_id = AssignmentService(db).assign(
            "kids", DAY, "10:00", "student-1", teacher_id="t-b"
        )

        assert teacher_id == "t-b"

    def test_pinned_teacher_without_slot(self, db, make_teacher, make_slots) -> None:
        make_teacher("t-a")
        make_teacher("t-b")
        make_slots("t-a", DAY, ["10:00"])

        with pytest.raises(NoCandidateException):
            AssignmentService(db).assign("kids", DAY, "10:00", "student-1", teacher_id="t-b")

    def test_pinned_teacher_already_booked(self, db, make_teacher, make_slots) -> None:
        make_teacher("t-a")
        make_teacher("t-b")
        make_slots("t-a", DAY, ["10:00"])
        make_slots("t-b", DAY, ["10:00"])
        SlotRepository(db).reserve("t-b", DAY, "10:00", "student-0")

        with pytest.raises(SlotConflictException):
            AssignmentService(db).assign("kids", DAY, "10:00", "student-1", teacher_id="t-b")

        assert SlotRepository(db).get_slot("t-a", DAY, "10:00").is_booked is False


class TestRetry:
    def _service(self, candidates_side_effect, reserve_side_effect, max_attempts=3):
        teacher_repo = MagicMock()
        teacher_repo.find_candidates.side_effect = candidates_side_effect
        slot_repo = MagicMock()
        slot_repo.reserve.side_effect = reserve_side_effect
        service = AssignmentService(
            MagicMock(),
            teacher_repository=teacher_repo,
            slot_repository=slot_repo,
            max_attempts=max_attempts,
        )
        return service, teacher_repo, slot_repo

    def test_lost_race_excludes_teacher_and_retries(self) -> None:
        t1, t2 = SimpleNamespace(id="t-1"), SimpleNamespace(id="t-2")
        service, teacher_repo, slot_repo = self._service([[t1, t2], [t2]], [False, True])

        assert service.assign("kids", DAY, "10:00", "student-1") == "t-2"

        second_call = teacher_repo.find_candidates.call_args_list[1]
        assert second_call.kwargs["exclude_ids"] == {"t-1"}
        teacher_repo.touch_last_assigned.assert_called_once_with("t-2")

    def test_attempts_are_bounded(self) -> None:
        candidates = [[SimpleNamespace(id=f"t-{i}")] for i in range(10)]
        service, teacher_repo, slot_repo = self._service(
            candidates, [False] * 10, max_attempts=3
        )

        with pytest.raises(NoCandidateException) as exc_info:
            service.assign("kids", DAY, "10:00", "student-1")

        assert exc_info.value.details["attempts"] == 3
        assert slot_repo.reserve.call_count == 3
        teacher_repo.touch_last_assigned.assert_not_called()

    def test_stops_when_candidates_run_out(self) -> None:
        service, teacher_repo, slot_repo = self._service(
            [[SimpleNamespace(id="t-1")], []], [False]
        )

        with pytest.raises(NoCandidateException) as exc_info:
            service.assign("kids", DAY, "10:00", "student-1")

        assert exc_info.value.details["attempts"] == 1
        assert teacher_repo.find_candidates.call_count == 2
