"""
Trial lifecycle transition table.

Pure functions over a closed table of ``(from, to, roles)`` rules. Nothing
here touches the database; the status service applies the result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Tuple, Union

from ..core.enums import RoleName, TrialStatus
from ..core.exceptions import InvalidTransitionException, PermissionDeniedException

StatusLike = Union[TrialStatus, str]
RoleLike = Union[RoleName, str]

_TEACHER_ADMIN = frozenset({RoleName.TEACHER, RoleName.ADMIN})
_SALES_ADMIN = frozenset({RoleName.SALES, RoleName.ADMIN})
_ADMIN = frozenset({RoleName.ADMIN})


@dataclass(frozen=True)
class TransitionRule:
    from_status: TrialStatus
    to_status: TrialStatus
    allowed_roles: FrozenSet[RoleName]
    confirmation_message: Optional[str] = None

    @property
    def requires_confirmation(self) -> bool:
        return self.confirmation_message is not None


TRANSITIONS: Tuple[TransitionRule, ...] = (
    # Teacher
    TransitionRule(TrialStatus.PENDING, TrialStatus.CONFIRMED, _TEACHER_ADMIN),
    TransitionRule(
        TrialStatus.CONFIRMED,
        TrialStatus.TRIAL_COMPLETED,
        _TEACHER_ADMIN,
        "Mark this trial as completed?",
    ),
    TransitionRule(
        TrialStatus.CONFIRMED,
        TrialStatus.TRIAL_GHOSTED,
        _TEACHER_ADMIN,
        "Mark this trial as ghosted?",
    ),
    # Sales, after the trial
    TransitionRule(TrialStatus.TRIAL_COMPLETED, TrialStatus.AWAITING_PAYMENT, _SALES_ADMIN),
    TransitionRule(TrialStatus.TRIAL_COMPLETED, TrialStatus.DROPPED, _SALES_ADMIN),
    TransitionRule(TrialStatus.TRIAL_GHOSTED, TrialStatus.AWAITING_PAYMENT, _SALES_ADMIN),
    TransitionRule(TrialStatus.TRIAL_GHOSTED, TrialStatus.DROPPED, _SALES_ADMIN),
    TransitionRule(TrialStatus.AWAITING_PAYMENT, TrialStatus.PAID, _SALES_ADMIN),
    TransitionRule(TrialStatus.AWAITING_PAYMENT, TrialStatus.DROPPED, _SALES_ADMIN),
    TransitionRule(TrialStatus.AWAITING_PAYMENT, TrialStatus.TRIAL_COMPLETED, _SALES_ADMIN),
    TransitionRule(TrialStatus.PAID, TrialStatus.ACTIVE, _SALES_ADMIN),
    TransitionRule(TrialStatus.EXPIRED, TrialStatus.AWAITING_PAYMENT, _SALES_ADMIN),
    # Admin only
    TransitionRule(TrialStatus.PENDING, TrialStatus.CANCELLED, _ADMIN),
    TransitionRule(TrialStatus.CONFIRMED, TrialStatus.CANCELLED, _ADMIN),
    TransitionRule(TrialStatus.ACTIVE, TrialStatus.EXPIRED, _ADMIN),
    TransitionRule(TrialStatus.ACTIVE, TrialStatus.CANCELLED, _ADMIN),
)

_RULES: Dict[Tuple[TrialStatus, TrialStatus], TransitionRule] = {
    (rule.from_status, rule.to_status): rule for rule in TRANSITIONS
}

STATUS_LABELS: Dict[TrialStatus, str] = {
    TrialStatus.PENDING: "Pending",
    TrialStatus.CONFIRMED: "Confirmed",
    TrialStatus.TRIAL_COMPLETED: "Trial Completed",
    TrialStatus.TRIAL_GHOSTED: "Trial Ghosted",
    TrialStatus.AWAITING_PAYMENT: "Awaiting Payment",
    TrialStatus.PAID: "Paid",
    TrialStatus.ACTIVE: "Active",
    TrialStatus.EXPIRED: "Expired",
    TrialStatus.CANCELLED: "Cancelled",
    TrialStatus.DROPPED: "Dropped",
}


def is_valid_status(value: str) -> bool:
    return value in {status.value for status in TrialStatus}


def _status(value: StatusLike) -> Optional[TrialStatus]:
    if isinstance(value, TrialStatus):
        return value
    return TrialStatus(value) if is_valid_status(value) else None


def _role(value: RoleLike) -> Optional[RoleName]:
    if isinstance(value, RoleName):
        return value
    try:
        return RoleName(value)
    except ValueError:
        return None


def get_rule(from_status: StatusLike, to_status: StatusLike) -> Optional[TransitionRule]:
    source, target = _status(from_status), _status(to_status)
    if source is None or target is None:
        return None
    return _RULES.get((source, target))


def is_transition_allowed(role: RoleLike, from_status: StatusLike, to_status: StatusLike) -> bool:
    """True iff the pair is in the table and ``role`` is one of its allowed roles."""
    rule = get_rule(from_status, to_status)
    return rule is not None and _role(role) in rule.allowed_roles


def check_transition(role: RoleLike, from_status: StatusLike, to_status: StatusLike) -> TransitionRule:
    """
    Return the matching rule or raise.

    An unknown pair raises InvalidTransitionException naming both states.
    A known pair the role may not perform raises PermissionDeniedException.
    """
    source = from_status.value if isinstance(from_status, TrialStatus) else str(from_status)
    target = to_status.value if isinstance(to_status, TrialStatus) else str(to_status)

    rule = get_rule(from_status, to_status)
    if rule is None:
        raise InvalidTransitionException(source, target)

    actor_role = _role(role)
    if actor_role not in rule.allowed_roles:
        raise PermissionDeniedException(
            f"You don't have permission to change status from {source} to {target}",
            details={
                "from_status": source,
                "to_status": target,
                "role": role.value if isinstance(role, RoleName) else str(role),
            },
        )
    return rule


def available_transitions(role: RoleLike, current_status: StatusLike) -> List[Dict[str, str]]:
    """Targets ``role`` may move ``current_status`` to, with display labels."""
    source = _status(current_status)
    actor_role = _role(role)
    return [
        {"status": rule.to_status.value, "label": status_label(rule.to_status)}
        for rule in TRANSITIONS
        if rule.from_status == source and actor_role in rule.allowed_roles
    ]


def requires_confirmation(from_status: StatusLike, to_status: StatusLike) -> Dict[str, object]:
    rule = get_rule(from_status, to_status)
    return {
        "required": bool(rule and rule.requires_confirmation),
        "message": rule.confirmation_message if rule else None,
    }


def status_label(status: StatusLike) -> str:
    parsed = _status(status)
    if parsed is None:
        return str(status)
    return STATUS_LABELS[parsed]


def is_terminal(status: StatusLike) -> bool:
    """A status with no outgoing transition for any role."""
    source = _status(status)
    return not any(rule.from_status == source for rule in TRANSITIONS)
