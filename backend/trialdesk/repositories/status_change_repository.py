"""Audit trail of applied status transitions."""

import logging

from sqlalchemy.orm import Session

from ..models.status_change import StatusChange
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class StatusChangeRepository(BaseRepository[StatusChange]):
    def __init__(self, db: Session):
        super().__init__(db, StatusChange)

    def record(
        self,
        *,
        entity_type: str,
        entity_id: str,
        from_status: str,
        to_status: str,
        actor_id: str,
        actor_role: str,
    ) -> StatusChange:
        return self.create(
            entity_type=entity_type,
            entity_id=entity_id,
            from_status=from_status,
            to_status=to_status,
            actor_id=actor_id,
            actor_role=actor_role,
        )
