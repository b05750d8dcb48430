# backend/trialdesk/repositories/job_repository.py
"""Repository for the background job outbox."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import ulid

from ..core.exceptions import RepositoryException
from ..models.background_job import BackgroundJob

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobRepository:
    """Data access helpers for background_jobs table."""

    def __init__(self, db: Session):
        self.db = db
        self.logger = logger

    def enqueue(
        self,
        *,
        type: str,
        payload: dict[str, Any],
        available_at: datetime | None = None,
    ) -> str:
        """Persist a new job ready for processing. Does not commit."""

        try:
            job_id = str(ulid.ULID())
            job = BackgroundJob(
                id=job_id,
                type=type,
                payload=payload,
                status="queued",
                attempts=0,
                available_at=available_at or _utcnow(),
            )
            self.db.add(job)
            self.db.flush()
            return job_id
        except SQLAlchemyError as exc:
            self.logger.error("Failed to enqueue job %s: %s", type, str(exc))
            raise RepositoryException("Failed to enqueue background job") from exc

    def list_by_type(self, type: str) -> List[BackgroundJob]:
        try:
            return (
                self.db.query(BackgroundJob)
                .filter(BackgroundJob.type == type)
                .order_by(BackgroundJob.created_at.asc(), BackgroundJob.id.asc())
                .all()
            )
        except SQLAlchemyError as exc:
            self.logger.error("Failed to list jobs %s: %s", type, str(exc))
            raise RepositoryException("Failed to list background jobs") from exc
