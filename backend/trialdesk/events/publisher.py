"""Event publisher - queues events in the outbox for background delivery."""
from datetime import date, datetime
from typing import Any, Dict, Protocol

from trialdesk.repositories.job_repository import JobRepository


class Event(Protocol):
    """Protocol for event types."""

    def to_dict(self) -> Dict[str, Any]:
        ...


class EventPublisher:
    """Publishes domain events to the job queue for async processing."""

    def __init__(self, job_repository: JobRepository):
        self.job_repo = job_repository

    def publish(self, event: Event) -> str:
        """
        Queue an event in the caller's transaction.

        The outbox row commits or rolls back together with the state change
        the event describes.
        """
        event_type = type(event).__name__
        payload = event.to_dict()

        # Dates and datetimes are stored as ISO strings in the JSON payload
        for key, value in payload.items():
            if isinstance(value, (datetime, date)):
                payload[key] = value.isoformat()

        return self.job_repo.enqueue(type=f"event:{event_type}", payload=payload)
