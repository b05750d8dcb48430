# backend/trialdesk/repositories/trial_repository.py
"""
Trial Repository for TrialDesk

Data access for individual trial students and family groups.
"""

import logging

from sqlalchemy.orm import Query, Session, selectinload

from ..models.family import FamilyGroup
from ..models.trial import TrialStudent
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TrialStudentRepository(BaseRepository[TrialStudent]):
    """Repository for individual trial records."""

    def __init__(self, db: Session):
        super().__init__(db, TrialStudent)
        self.logger = logging.getLogger(__name__)

    def unique_id_exists(self, unique_id: str) -> bool:
        return self.exists(unique_id=unique_id)


class FamilyGroupRepository(BaseRepository[FamilyGroup]):
    """Repository for family groups; members are always loaded with the group."""

    def __init__(self, db: Session):
        super().__init__(db, FamilyGroup)
        self.logger = logging.getLogger(__name__)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(selectinload(FamilyGroup.members))

    def unique_id_exists(self, unique_id: str) -> bool:
        return self.exists(unique_id=unique_id)
