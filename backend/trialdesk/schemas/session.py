"""Session ledger schemas."""

from datetime import date, datetime
from typing import List, Optional

from pydantic import Field, field_validator

from ._strict_base import StrictModel, StrictRequestModel
from .common import validate_time_slot


class SessionCompleteRequest(StrictRequestModel):
    actual_minutes: int = Field(..., ge=0, le=240)
    notes: Optional[str] = Field(None, max_length=2000)


class PaidSessionCreate(StrictRequestModel):
    teacher_id: str = Field(..., max_length=26)
    scheduled_date: date
    scheduled_time: str

    check_scheduled_time = field_validator("scheduled_time")(validate_time_slot)


class SessionResponse(StrictModel):
    id: str
    student_id: Optional[str] = None
    family_group_id: Optional[str] = None
    teacher_id: Optional[str] = None
    session_type: str
    session_number: int
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[str] = None
    status: str
    reschedule_count: int
    original_date: Optional[date] = None
    original_time: Optional[str] = None
    reschedule_reason: Optional[str] = None
    actual_minutes: Optional[int] = None
    completion_notes: Optional[str] = None
    completed_at: Optional[datetime] = None


class SessionHistoryResponse(StrictModel):
    student_id: str
    sessions: List[SessionResponse]


class ProgressResponse(StrictModel):
    student_id: str
    total: int
    completed: int
    percentage: int
    package_complete: bool
