# backend/trialdesk/routes/v1/sessions.py
"""
Session ledger routes - API v1

Endpoints:
    POST /sessions/{session_id}/complete - Mark a session completed
    POST /sessions/{session_id}/cancel - Cancel a scheduled session
    POST /students/{student_id}/sessions - Schedule the next paid session
    GET /students/{student_id}/sessions - Session history
    GET /students/{student_id}/progress - Package progress
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ...api.dependencies import get_current_actor, get_session_ledger_service, require_roles
from ...core.actor import Actor
from ...core.enums import RoleName
from ...core.exceptions import DomainException
from ...schemas.session import (
    PaidSessionCreate,
    ProgressResponse,
    SessionCompleteRequest,
    SessionHistoryResponse,
    SessionResponse,
)
from ...services.session_ledger_service import SessionLedgerService
from ._errors import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["sessions-v1"])

teacher_or_staff = require_roles(RoleName.TEACHER, RoleName.ADMIN, RoleName.SUPERVISOR)
sales_or_admin = require_roles(RoleName.SALES, RoleName.ADMIN)


@router.post("/sessions/{session_id}/complete", response_model=SessionResponse)
async def complete_session(
    session_id: str,
    payload: SessionCompleteRequest,
    actor: Actor = Depends(teacher_or_staff),
    ledger: SessionLedgerService = Depends(get_session_ledger_service),
) -> SessionResponse:
    try:
        occurrence = await asyncio.to_thread(
            ledger.complete, session_id, payload.actual_minutes, payload.notes
        )
        return SessionResponse.model_validate(occurrence)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/sessions/{session_id}/cancel", response_model=SessionResponse)
async def cancel_session(
    session_id: str,
    actor: Actor = Depends(teacher_or_staff),
    ledger: SessionLedgerService = Depends(get_session_ledger_service),
) -> SessionResponse:
    try:
        occurrence = await asyncio.to_thread(ledger.cancel, session_id)
        return SessionResponse.model_validate(occurrence)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/students/{student_id}/sessions",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def schedule_paid_session(
    student_id: str,
    payload: PaidSessionCreate,
    actor: Actor = Depends(sales_or_admin),
    ledger: SessionLedgerService = Depends(get_session_ledger_service),
) -> SessionResponse:
    try:
        occurrence = await asyncio.to_thread(
            ledger.schedule_paid_session,
            student_id,
            payload.teacher_id,
            payload.scheduled_date,
            payload.scheduled_time,
        )
        return SessionResponse.model_validate(occurrence)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/students/{student_id}/sessions", response_model=SessionHistoryResponse)
async def get_session_history(
    student_id: str,
    actor: Actor = Depends(get_current_actor),
    ledger: SessionLedgerService = Depends(get_session_ledger_service),
) -> SessionHistoryResponse:
    try:
        sessions = await asyncio.to_thread(ledger.history, student_id)
        return SessionHistoryResponse(
            student_id=student_id,
            sessions=[SessionResponse.model_validate(s) for s in sessions],
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/students/{student_id}/progress", response_model=ProgressResponse)
async def get_progress(
    student_id: str,
    package_sessions: Optional[int] = Query(None, ge=1, le=100),
    actor: Actor = Depends(get_current_actor),
    ledger: SessionLedgerService = Depends(get_session_ledger_service),
) -> ProgressResponse:
    try:
        result = await asyncio.to_thread(ledger.progress, student_id, package_sessions)
        return ProgressResponse(**result)
    except DomainException as e:
        handle_domain_exception(e)
