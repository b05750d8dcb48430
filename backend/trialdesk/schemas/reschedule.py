"""Reschedule request schema."""

from datetime import date

from pydantic import field_validator

from ..core.enums import RescheduleReason
from ._strict_base import StrictRequestModel
from .common import validate_time_slot


class RescheduleRequest(StrictRequestModel):
    new_date: date
    new_time_slot: str
    reason: RescheduleReason

    check_new_time_slot = field_validator("new_time_slot")(validate_time_slot)
