"""Trial domain events."""
from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional


@dataclass
class TrialAssigned:
    """Fired after a trial is booked and a teacher slot reserved."""

    occupant_id: str
    teacher_id: str
    trial_date: date
    trial_time: str
    is_family: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TrialStatusChanged:
    """Fired for every applied lifecycle transition."""

    entity_id: str
    is_family: bool
    from_status: str
    to_status: str
    actor_id: str
    actor_role: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TrialOutcomeRecorded:
    """Fired when a trial reaches trial-completed, trial-ghosted or paid."""

    entity_id: str
    is_family: bool
    outcome: str
    from_status: str
    actor_id: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TrialRescheduled:
    """Fired after a trial moves to a new slot."""

    entity_id: str
    is_family: bool
    teacher_id: str
    old_date: Optional[date]
    old_time: Optional[str]
    new_date: date
    new_time: str
    reason: str
    actor_id: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SessionCompleted:
    """Fired after a session occurrence is marked complete."""

    session_id: str
    actual_minutes: int
    notes: Optional[str]
    completed_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
