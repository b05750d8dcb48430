# backend/trialdesk/core/exceptions.py
"""
Domain-specific exceptions for the TrialDesk scheduling engine.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific scheduling exceptions


class SlotConflictException(ConflictException):
    """Raised when a reservation targets a slot another occupant already holds."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "This time slot has already been booked",
            code="SLOT_CONFLICT",
            details=details or {},
        )


class SlotUnavailableException(ConflictException):
    """Raised when the requested slot is not published or is taken."""

    def __init__(self, teacher_id: str, slot_date: str, time_slot: str):
        super().__init__(
            message=f"Teacher {teacher_id} has no open slot on {slot_date} at {time_slot}",
            code="SLOT_UNAVAILABLE",
            details={"teacher_id": teacher_id, "date": slot_date, "time_slot": time_slot},
        )


class UnchangedScheduleException(BusinessRuleException):
    """Raised when a reschedule targets the position the trial already holds."""

    def __init__(self, slot_date: str, time_slot: str):
        super().__init__(
            message=f"Trial is already scheduled on {slot_date} at {time_slot}",
            code="SCHEDULE_UNCHANGED",
            details={"date": slot_date, "time_slot": time_slot},
        )


class InvalidTransitionException(BusinessRuleException):
    """Raised when a status change is not in the transition table."""

    def __init__(self, from_status: str, to_status: str):
        super().__init__(
            message=f"Invalid status transition from {from_status} to {to_status}",
            code="INVALID_TRANSITION",
            details={"from_status": from_status, "to_status": to_status},
        )


class PermissionDeniedException(ForbiddenException):
    """Raised when the acting role may not perform the requested change."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="PERMISSION_DENIED", details=details or {})


class NoCandidateException(ConflictException):
    """Raised when no qualified teacher has an open slot."""

    def __init__(self, teacher_type: str, slot_date: str, time_slot: str, attempts: int):
        super().__init__(
            message=(
                f"No {teacher_type} teacher is available on {slot_date} at {time_slot}"
            ),
            code="NO_CANDIDATE",
            details={
                "teacher_type": teacher_type,
                "date": slot_date,
                "time_slot": time_slot,
                "attempts": attempts,
            },
        )


class InconsistentStateException(ServiceException):
    """
    Raised when a compensating action fails after a partial mutation.

    The store may hold a trial with no reserved slot; manual reconciliation
    is required.
    """

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INCONSISTENT_STATE", details=details or {})


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
