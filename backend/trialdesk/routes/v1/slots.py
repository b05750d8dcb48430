# backend/trialdesk/routes/v1/slots.py
"""
Teacher slot routes - API v1

Endpoints:
    GET /open - Times with free teachers of a category on a date
    GET /teachers/{teacher_id} - A teacher's published slots on a date
    POST /teachers/{teacher_id}/publish - Publish or re-enable slots
    POST /teachers/{teacher_id}/withdraw - Withdraw free slots
"""

import asyncio
from datetime import date
import logging
from typing import List

from fastapi import APIRouter, Depends, Query

from ...api.dependencies import get_current_actor, get_slot_service
from ...core.actor import Actor
from ...core.enums import TeacherType
from ...core.exceptions import DomainException
from ...schemas.slot import AvailabilityUpdate, OpenSlotResponse, SlotResponse
from ...services.slot_service import SlotService
from ._errors import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["slots-v1"])


@router.get("/open", response_model=List[OpenSlotResponse])
async def get_open_slots(
    teacher_type: TeacherType = Query(...),
    slot_date: date = Query(...),
    actor: Actor = Depends(get_current_actor),
    slot_service: SlotService = Depends(get_slot_service),
) -> List[OpenSlotResponse]:
    try:
        rows = await asyncio.to_thread(slot_service.find_open_slots, teacher_type.value, slot_date)
        return [OpenSlotResponse(**row) for row in rows]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/teachers/{teacher_id}", response_model=List[SlotResponse])
async def list_teacher_slots(
    teacher_id: str,
    slot_date: date = Query(...),
    actor: Actor = Depends(get_current_actor),
    slot_service: SlotService = Depends(get_slot_service),
) -> List[SlotResponse]:
    try:
        slots = await asyncio.to_thread(slot_service.list_available, teacher_id, slot_date)
        return [SlotResponse.model_validate(slot) for slot in slots]
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/teachers/{teacher_id}/publish", response_model=List[SlotResponse])
async def publish_teacher_slots(
    teacher_id: str,
    payload: AvailabilityUpdate,
    actor: Actor = Depends(get_current_actor),
    slot_service: SlotService = Depends(get_slot_service),
) -> List[SlotResponse]:
    try:
        slots = await asyncio.to_thread(
            slot_service.publish_availability,
            actor,
            teacher_id,
            payload.slot_date,
            payload.time_slots,
        )
        return [SlotResponse.model_validate(slot) for slot in slots]
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/teachers/{teacher_id}/withdraw", response_model=List[SlotResponse])
async def withdraw_teacher_slots(
    teacher_id: str,
    payload: AvailabilityUpdate,
    actor: Actor = Depends(get_current_actor),
    slot_service: SlotService = Depends(get_slot_service),
) -> List[SlotResponse]:
    try:
        slots = await asyncio.to_thread(
            slot_service.withdraw_availability,
            actor,
            teacher_id,
            payload.slot_date,
            payload.time_slots,
        )
        return [SlotResponse.model_validate(slot) for slot in slots]
    except DomainException as e:
        handle_domain_exception(e)
