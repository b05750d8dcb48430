"""Append-only audit trail of lifecycle transitions."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Index, String
from sqlalchemy.sql import func
import ulid

from ..database import Base


class StatusChange(Base):
    """One accepted status transition for a student or family group."""

    __tablename__ = "status_changes"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    entity_type = Column(String(10), nullable=False)  # student | family
    entity_id = Column(String(26), nullable=False)
    from_status = Column(String(20), nullable=False)
    to_status = Column(String(20), nullable=False)
    actor_id = Column(String(26), nullable=True)
    actor_role = Column(String(20), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (Index("ix_status_changes_entity", "entity_type", "entity_id", "created_at"),)
