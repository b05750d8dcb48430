# backend/trialdesk/schemas/trial.py
"""
Trial booking schemas.

A booking request names the teacher category and the wanted position;
the assignment engine chooses the teacher unless ``teacher_id`` pins one.
"""

from datetime import date
from typing import List, Optional

from pydantic import Field, field_validator

from ..core.enums import Platform, TeacherType
from ._strict_base import StrictModel, StrictRequestModel
from .common import validate_time_slot


class TrialStudentCreate(StrictRequestModel):
    """Book a trial for one student."""

    name: str = Field(..., min_length=1, max_length=255)
    age: Optional[int] = Field(None, ge=3, le=100)
    phone: Optional[str] = Field(None, max_length=32)
    country: Optional[str] = Field(None, max_length=64)
    platform: Platform = Platform.ZOOM
    teacher_type: TeacherType
    trial_date: date
    trial_time: str = Field(..., description="Slot start as HH:MM")
    teacher_id: Optional[str] = Field(None, max_length=26, description="Book this teacher only")
    notes: Optional[str] = Field(None, max_length=2000)

    check_trial_time = field_validator("trial_time")(validate_time_slot)


class FamilyMemberCreate(StrictRequestModel):
    name: str = Field(..., min_length=1, max_length=255)
    age: Optional[int] = Field(None, ge=3, le=100)


class FamilyTrialCreate(StrictRequestModel):
    """Book one shared trial for siblings."""

    parent_name: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=32)
    country: Optional[str] = Field(None, max_length=64)
    platform: Platform = Platform.ZOOM
    teacher_type: TeacherType
    trial_date: date
    trial_time: str
    teacher_id: Optional[str] = Field(None, max_length=26)
    notes: Optional[str] = Field(None, max_length=2000)
    students: List[FamilyMemberCreate] = Field(..., min_length=2)

    check_trial_time = field_validator("trial_time")(validate_time_slot)


class TrialStudentResponse(StrictModel):
    id: str
    unique_id: str
    name: str
    age: Optional[int] = None
    phone: Optional[str] = None
    country: Optional[str] = None
    platform: Optional[str] = None
    assigned_teacher_id: Optional[str] = None
    assigned_sales_agent_id: Optional[str] = None
    assigned_supervisor_id: Optional[str] = None
    teacher_type: str
    trial_date: Optional[date] = None
    trial_time: Optional[str] = None
    status: str
    notes: Optional[str] = None
    family_group_id: Optional[str] = None


class FamilyGroupResponse(StrictModel):
    id: str
    unique_id: str
    parent_name: str
    phone: Optional[str] = None
    country: Optional[str] = None
    platform: Optional[str] = None
    assigned_teacher_id: Optional[str] = None
    assigned_sales_agent_id: Optional[str] = None
    teacher_type: str
    trial_date: Optional[date] = None
    trial_time: Optional[str] = None
    status: str
    student_count: int
    notes: Optional[str] = None
    members: List[TrialStudentResponse] = Field(default_factory=list)
