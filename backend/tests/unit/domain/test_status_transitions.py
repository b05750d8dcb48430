"""Tests for the trial lifecycle transition table."""

import pytest

from trialdesk.core.enums import RoleName, TrialStatus
from trialdesk.core.exceptions import InvalidTransitionException, PermissionDeniedException
from trialdesk.domain import status_transitions
from trialdesk.domain.status_transitions import TRANSITIONS

TEACHER_ADMIN = {"teacher", "admin"}
SALES_ADMIN = {"sales", "admin"}
ADMIN_ONLY = {"admin"}

EXPECTED_RULES = {
    ("pending", "confirmed"): TEACHER_ADMIN,
    ("confirmed", "trial-completed"): TEACHER_ADMIN,
    ("confirmed", "trial-ghosted"): TEACHER_ADMIN,
    ("trial-completed", "awaiting-payment"): SALES_ADMIN,
    ("trial-completed", "dropped"): SALES_ADMIN,
    ("trial-ghosted", "awaiting-payment"): SALES_ADMIN,
    ("trial-ghosted", "dropped"): SALES_ADMIN,
    ("awaiting-payment", "paid"): SALES_ADMIN,
    ("awaiting-payment", "dropped"): SALES_ADMIN,
    ("awaiting-payment", "trial-completed"): SALES_ADMIN,
    ("paid", "active"): SALES_ADMIN,
    ("expired", "awaiting-payment"): SALES_ADMIN,
    ("pending", "cancelled"): ADMIN_ONLY,
    ("confirmed", "cancelled"): ADMIN_ONLY,
    ("active", "expired"): ADMIN_ONLY,
    ("active", "cancelled"): ADMIN_ONLY,
}

ALL_PAIRS = [(source.value, target.value) for source in TrialStatus for target in TrialStatus]


@pytest.mark.unit
class TestTransitionClosure:
    def test_table_matches_expected_rules(self) -> None:
        table = {
            (rule.from_status.value, rule.to_status.value): {role.value for role in rule.allowed_roles}
            for rule in TRANSITIONS
        }
        assert table == EXPECTED_RULES

    @pytest.mark.parametrize("role", list(RoleName))
    @pytest.mark.parametrize("from_status, to_status", ALL_PAIRS)
    def test_every_pair(self, from_status: str, to_status: str, role: RoleName) -> None:
        allowed_roles = EXPECTED_RULES.get((from_status, to_status))

        if allowed_roles is None:
            with pytest.raises(InvalidTransitionException):
                status_transitions.check_transition(role, from_status, to_status)
        elif role.value in allowed_roles:
            rule = status_transitions.check_transition(role, from_status, to_status)
            assert (rule.from_status.value, rule.to_status.value) == (from_status, to_status)
        else:
            with pytest.raises(PermissionDeniedException):
                status_transitions.check_transition(role, from_status, to_status)

        assert status_transitions.is_transition_allowed(role, from_status, to_status) is (
            allowed_roles is not None and role.value in allowed_roles
        )


@pytest.mark.unit
class TestTransitionTable:

    @pytest.mark.parametrize(
        "role, from_status, to_status",
        [
            (RoleName.TEACHER, "pending", "confirmed"),
            (RoleName.TEACHER, "confirmed", "trial-completed"),
            (RoleName.TEACHER, "confirmed", "trial-ghosted"),
            (RoleName.SALES, "trial-completed", "awaiting-payment"),
            (RoleName.SALES, "trial-ghosted", "dropped"),
            (RoleName.SALES, "awaiting-payment", "paid"),
            (RoleName.SALES, "awaiting-payment", "trial-completed"),
            (RoleName.SALES, "paid", "active"),
            (RoleName.SALES, "expired", "awaiting-payment"),
            (RoleName.ADMIN, "pending", "cancelled"),
            (RoleName.ADMIN, "active", "expired"),
            (RoleName.ADMIN, "confirmed", "trial-completed"),
            (RoleName.ADMIN, "paid", "active"),
        ],
    )
    def test_allowed(self, role: RoleName, from_status: str, to_status: str) -> None:
        assert status_transitions.is_transition_allowed(role, from_status, to_status)

    @pytest.mark.parametrize(
        "role, from_status, to_status",
        [
            (RoleName.SALES, "pending", "confirmed"),
            (RoleName.TEACHER, "trial-completed", "awaiting-payment"),
            (RoleName.TEACHER, "pending", "cancelled"),
            (RoleName.SALES, "active", "expired"),
            (RoleName.SUPERVISOR, "pending", "confirmed"),
            (RoleName.ADMIN, "pending", "paid"),
            (RoleName.ADMIN, "cancelled", "pending"),
        ],
    )
    def test_not_allowed(self, role: RoleName, from_status: str, to_status: str) -> None:
        assert not status_transitions.is_transition_allowed(role, from_status, to_status)

    def test_string_roles_are_accepted(self) -> None:
        assert status_transitions.is_transition_allowed("teacher", "pending", "confirmed")
        assert not status_transitions.is_transition_allowed("janitor", "pending", "confirmed")


@pytest.mark.unit
class TestCheckTransition:
    def test_returns_rule(self) -> None:
        rule = status_transitions.check_transition(
            RoleName.TEACHER, TrialStatus.PENDING, TrialStatus.CONFIRMED
        )
        assert rule.to_status == TrialStatus.CONFIRMED
        assert not rule.requires_confirmation

    def test_unknown_pair_names_both_states(self) -> None:
        with pytest.raises(InvalidTransitionException) as exc_info:
            status_transitions.check_transition(RoleName.ADMIN, "pending", "paid")
        assert exc_info.value.details == {"from_status": "pending", "to_status": "paid"}
        assert "pending" in exc_info.value.message
        assert "paid" in exc_info.value.message

    def test_unknown_status_is_invalid_transition(self) -> None:
        with pytest.raises(InvalidTransitionException):
            status_transitions.check_transition(RoleName.ADMIN, "pending", "archived")

    def test_wrong_role_is_permission_denied(self) -> None:
        with pytest.raises(PermissionDeniedException) as exc_info:
            status_transitions.check_transition(RoleName.SALES, "pending", "confirmed")
        assert (
            exc_info.value.message
            == "You don't have permission to change status from pending to confirmed"
        )
        assert exc_info.value.code == "PERMISSION_DENIED"

    def test_invalid_pair_checked_before_role(self) -> None:
        with pytest.raises(InvalidTransitionException):
            status_transitions.check_transition(RoleName.SUPERVISOR, "dropped", "active")


@pytest.mark.unit
class TestAvailableTransitions:
    def test_teacher_on_confirmed(self) -> None:
        options = status_transitions.available_transitions(RoleName.TEACHER, "confirmed")
        assert options == [
            {"status": "trial-completed", "label": "Trial Completed"},
            {"status": "trial-ghosted", "label": "Trial Ghosted"},
        ]

    def test_admin_on_confirmed_includes_cancel(self) -> None:
        statuses = [
            o["status"] for o in status_transitions.available_transitions(RoleName.ADMIN, "confirmed")
        ]
        assert statuses == ["trial-completed", "trial-ghosted", "cancelled"]

    def test_supervisor_has_none(self) -> None:
        for status in TrialStatus:
            assert status_transitions.available_transitions(RoleName.SUPERVISOR, status) == []

    def test_terminal_statuses_have_none(self) -> None:
        assert status_transitions.available_transitions(RoleName.ADMIN, "cancelled") == []
        assert status_transitions.available_transitions(RoleName.ADMIN, "dropped") == []


@pytest.mark.unit
class TestConfirmationAndLabels:
    def test_completion_requires_confirmation(self) -> None:
        assert status_transitions.requires_confirmation("confirmed", "trial-completed") == {
            "required": True,
            "message": "Mark this trial as completed?",
        }
        assert status_transitions.requires_confirmation("confirmed", "trial-ghosted") == {
            "required": True,
            "message": "Mark this trial as ghosted?",
        }

    def test_plain_transition_needs_no_confirmation(self) -> None:
        assert status_transitions.requires_confirmation("pending", "confirmed") == {
            "required": False,
            "message": None,
        }

    def test_labels(self) -> None:
        assert status_transitions.status_label("awaiting-payment") == "Awaiting Payment"
        assert status_transitions.status_label(TrialStatus.TRIAL_GHOSTED) == "Trial Ghosted"
        assert status_transitions.status_label("mystery") == "mystery"

    @pytest.mark.parametrize(
        "status, terminal",
        [("cancelled", True), ("dropped", True), ("pending", False), ("active", False)],
    )
    def test_is_terminal(self, status: str, terminal: bool) -> None:
        assert status_transitions.is_terminal(status) is terminal

    def test_is_valid_status(self) -> None:
        assert status_transitions.is_valid_status("trial-completed")
        assert not status_transitions.is_valid_status("completed")
