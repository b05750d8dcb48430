# backend/trialdesk/routes/health.py
"""Health check endpoint."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from .. import __version__
from ..api.dependencies import get_db
from ..core.config import settings

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/health")
def health_check(db: Session = Depends(get_db)) -> dict:
    try:
        db.execute(text("SELECT 1"))
        status = "healthy"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        status = "degraded"
    return {
        "status": status,
        "service": "trialdesk",
        "version": __version__,
        "environment": settings.environment,
    }
