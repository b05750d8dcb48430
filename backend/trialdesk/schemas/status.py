"""Status change and trial outcome schemas."""

from typing import List, Optional

from pydantic import Field

from ..core.enums import TrialOutcome, TrialStatus
from ._strict_base import StrictModel, StrictRequestModel


class StatusChangeRequest(StrictRequestModel):
    status: TrialStatus


class TrialOutcomeRequest(StrictRequestModel):
    outcome: TrialOutcome
    notes: Optional[str] = Field(None, max_length=2000)
    actual_minutes: Optional[int] = Field(None, ge=0, le=240)


class StatusChangeResponse(StrictModel):
    entity_id: str
    is_family: bool
    from_status: str
    to_status: str


class TransitionOption(StrictModel):
    status: str
    label: str
    requires_confirmation: bool = False
    confirmation_message: Optional[str] = None


class AvailableTransitionsResponse(StrictModel):
    current_status: str
    current_label: str
    transitions: List[TransitionOption]
