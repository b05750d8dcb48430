# backend/trialdesk/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import families, sessions, slots, trials

__all__ = [
    "families",
    "sessions",
    "slots",
    "trials",
]
