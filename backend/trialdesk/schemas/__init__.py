"""Pydantic request and response schemas for the HTTP API."""

from .reschedule import RescheduleRequest
from .session import (
    PaidSessionCreate,
    ProgressResponse,
    SessionCompleteRequest,
    SessionHistoryResponse,
    SessionResponse,
)
from .slot import AvailabilityUpdate, OpenSlotResponse, SlotResponse
from .status import (
    AvailableTransitionsResponse,
    StatusChangeRequest,
    StatusChangeResponse,
    TransitionOption,
    TrialOutcomeRequest,
)
from .trial import (
    FamilyGroupResponse,
    FamilyMemberCreate,
    FamilyTrialCreate,
    TrialStudentCreate,
    TrialStudentResponse,
)

__all__ = [
    "AvailabilityUpdate",
    "AvailableTransitionsResponse",
    "FamilyGroupResponse",
    "FamilyMemberCreate",
    "FamilyTrialCreate",
    "OpenSlotResponse",
    "PaidSessionCreate",
    "ProgressResponse",
    "RescheduleRequest",
    "SessionCompleteRequest",
    "SessionHistoryResponse",
    "SessionResponse",
    "SlotResponse",
    "StatusChangeRequest",
    "StatusChangeResponse",
    "TransitionOption",
    "TrialOutcomeRequest",
    "TrialStudentCreate",
    "TrialStudentResponse",
]
