# backend/trialdesk/routes/v1/families.py
"""
Family trial routes - API v1

A family group is booked, confirmed, completed and rescheduled as one
unit; member records are never addressed directly here.

Endpoints:
    POST / - Book one shared trial for siblings
    GET /{family_id} - Family group with members
    GET /{family_id}/transitions - Statuses the caller may move it to
    POST /{family_id}/status - Apply a status transition to the group
    POST /{family_id}/outcome - Record the trial outcome
    POST /{family_id}/reschedule - Move the shared trial
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, status

from ...api.dependencies import (
    get_current_actor,
    get_reschedule_service,
    get_status_service,
    get_trial_booking_service,
)
from ...core.actor import Actor
from ...core.exceptions import DomainException
from ...schemas.reschedule import RescheduleRequest
from ...schemas.status import (
    AvailableTransitionsResponse,
    StatusChangeRequest,
    StatusChangeResponse,
    TrialOutcomeRequest,
)
from ...schemas.trial import FamilyGroupResponse, FamilyTrialCreate
from ...services.reschedule_service import RescheduleService
from ...services.status_service import StatusService
from ...services.trial_booking_service import TrialBookingService
from ._errors import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["families-v1"])


@router.post("", response_model=FamilyGroupResponse, status_code=status.HTTP_201_CREATED)
async def book_family_trial(
    payload: FamilyTrialCreate,
    actor: Actor = Depends(get_current_actor),
    booking_service: TrialBookingService = Depends(get_trial_booking_service),
) -> FamilyGroupResponse:
    try:
        family = await asyncio.to_thread(booking_service.book_family_trial, actor, payload)
        return FamilyGroupResponse.model_validate(family)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{family_id}", response_model=FamilyGroupResponse)
async def get_family(
    family_id: str,
    actor: Actor = Depends(get_current_actor),
    booking_service: TrialBookingService = Depends(get_trial_booking_service),
) -> FamilyGroupResponse:
    try:
        family = await asyncio.to_thread(booking_service.get_family, family_id)
        return FamilyGroupResponse.model_validate(family)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{family_id}/transitions", response_model=AvailableTransitionsResponse)
async def get_family_transitions(
    family_id: str,
    actor: Actor = Depends(get_current_actor),
    status_service: StatusService = Depends(get_status_service),
) -> AvailableTransitionsResponse:
    try:
        result = await asyncio.to_thread(
            status_service.available_transitions, actor, family_id, True
        )
        return AvailableTransitionsResponse.model_validate(result)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{family_id}/status", response_model=StatusChangeResponse)
async def change_family_status(
    family_id: str,
    payload: StatusChangeRequest,
    actor: Actor = Depends(get_current_actor),
    status_service: StatusService = Depends(get_status_service),
) -> StatusChangeResponse:
    try:
        result = await asyncio.to_thread(
            status_service.change_status, actor, family_id, payload.status, True
        )
        return StatusChangeResponse(
            entity_id=result.entity.id,
            is_family=True,
            from_status=result.from_status,
            to_status=result.to_status,
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{family_id}/outcome", response_model=FamilyGroupResponse)
async def record_family_outcome(
    family_id: str,
    payload: TrialOutcomeRequest,
    actor: Actor = Depends(get_current_actor),
    status_service: StatusService = Depends(get_status_service),
) -> FamilyGroupResponse:
    try:
        family = await asyncio.to_thread(
            status_service.record_trial_outcome,
            actor,
            family_id,
            payload.outcome,
            is_family=True,
            notes=payload.notes,
            actual_minutes=payload.actual_minutes,
        )
        return FamilyGroupResponse.model_validate(family)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{family_id}/reschedule", response_model=FamilyGroupResponse)
async def reschedule_family_trial(
    family_id: str,
    payload: RescheduleRequest,
    actor: Actor = Depends(get_current_actor),
    reschedule_service: RescheduleService = Depends(get_reschedule_service),
) -> FamilyGroupResponse:
    try:
        family = await asyncio.to_thread(
            reschedule_service.reschedule,
            actor,
            family_id,
            payload.new_date,
            payload.new_time_slot,
            payload.reason,
            is_family=True,
        )
        return FamilyGroupResponse.model_validate(family)
    except DomainException as e:
        handle_domain_exception(e)
