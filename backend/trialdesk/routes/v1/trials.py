# backend/trialdesk/routes/v1/trials.py
"""
Individual trial routes - API v1

Endpoints:
    POST / - Book a trial for one student
    GET /{student_id} - Trial details
    GET /{student_id}/transitions - Statuses the caller may move it to
    POST /{student_id}/status - Apply a status transition
    POST /{student_id}/outcome - Record the trial outcome (completed / ghosted)
    POST /{student_id}/reschedule - Move the trial to another slot
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
from ...schemas.trial import TrialStudentCreate, TrialStudentResponse
from ...services.reschedule_service import RescheduleService
from ...services.status_service import StatusService
from ...services.trial_booking_service import TrialBookingService
from ._errors import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["trials-v1"])


@router.post("", response_model=TrialStudentResponse, status_code=status.HTTP_201_CREATED)
async def book_trial(
    payload: TrialStudentCreate,
    actor: Actor = Depends(get_current_actor),
    booking_service: TrialBookingService = Depends(get_trial_booking_service),
) -> TrialStudentResponse:
    try:
        student = await asyncio.to_thread(booking_service.book_individual_trial, actor, payload)
        return TrialStudentResponse.model_validate(student)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{student_id}", response_model=TrialStudentResponse)
async def get_trial(
    student_id: str,
    actor: Actor = Depends(get_current_actor),
    booking_service: TrialBookingService = Depends(get_trial_booking_service),
) -> TrialStudentResponse:
    try:
        student = await asyncio.to_thread(booking_service.get_student, student_id)
        return TrialStudentResponse.model_validate(student)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{student_id}/transitions", response_model=AvailableTransitionsResponse)
async def get_available_transitions(
    student_id: str,
    actor: Actor = Depends(get_current_actor),
    status_service: StatusService = Depends(get_status_service),
) -> AvailableTransitionsResponse:
    try:
        result = await asyncio.to_thread(status_service.available_transitions, actor, student_id)
        return AvailableTransitionsResponse.model_validate(result)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{student_id}/status", response_model=StatusChangeResponse)
async def change_trial_status(
    student_id: str,
    payload: StatusChangeRequest,
    actor: Actor = Depends(get_current_actor),
    status_service: StatusService = Depends(get_status_service),
) -> StatusChangeResponse:
    try:
        result = await asyncio.to_thread(
            status_service.change_status, actor, student_id, payload.status
        )
        return StatusChangeResponse(
            entity_id=result.entity.id,
            is_family=False,
            from_status=result.from_status,
            to_status=result.to_status,
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{student_id}/outcome", response_model=TrialStudentResponse)
async def record_trial_outcome(
    student_id: str,
    payload: TrialOutcomeRequest,
    actor: Actor = Depends(get_current_actor),
    status_service: StatusService = Depends(get_status_service),
) -> TrialStudentResponse:
    try:
        student = await asyncio.to_thread(
            status_service.record_trial_outcome,
            actor,
            student_id,
            payload.outcome,
            notes=payload.notes,
            actual_minutes=payload.actual_minutes,
        )
        return TrialStudentResponse.model_validate(student)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{student_id}/reschedule", response_model=TrialStudentResponse)
async def reschedule_trial(
    student_id: str,
    payload: RescheduleRequest,
    actor: Actor = Depends(get_current_actor),
    reschedule_service: RescheduleService = Depends(get_reschedule_service),
) -> TrialStudentResponse:
    try:
        student = await asyncio.to_thread(
            reschedule_service.reschedule,
            actor,
            student_id,
            payload.new_date,
            payload.new_time_slot,
            payload.reason,
        )
        return TrialStudentResponse.model_validate(student)
    except DomainException as e:
        handle_domain_exception(e)
