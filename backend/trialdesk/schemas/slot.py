"""Teacher availability schemas."""

from datetime import date
from typing import List, Optional

from pydantic import Field, field_validator

from ._strict_base import StrictModel, StrictRequestModel
from .common import validate_time_slot


class AvailabilityUpdate(StrictRequestModel):
    slot_date: date
    time_slots: List[str] = Field(..., min_length=1)

    @field_validator("time_slots")
    @classmethod
    def _check_slots(cls, v: List[str]) -> List[str]:
        return [validate_time_slot(s) for s in v]


class SlotResponse(StrictModel):
    teacher_id: str
    slot_date: date
    time_slot: str
    is_available: bool
    is_booked: bool
    occupant_id: Optional[str] = None


class OpenSlotResponse(StrictModel):
    time_slot: str
    available_teachers: int
