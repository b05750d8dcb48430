# backend/trialdesk/api/dependencies/auth.py
"""
Actor resolution.

Authentication happens upstream; the gateway forwards the verified user id
and role in ``X-User-Id`` and ``X-User-Role``.
"""

import logging

from fastapi import Depends, Header, HTTPException, status

from ...core.actor import Actor
from ...core.enums import RoleName

logger = logging.getLogger(__name__)


def get_current_actor(
    x_user_id: str = Header(..., max_length=26),
    x_user_role: str = Header(...),
) -> Actor:
    try:
        role = RoleName(x_user_role.strip().lower())
    except ValueError:
        logger.warning(f"Rejected request with unknown role {x_user_role!r}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": f"Unknown role: {x_user_role}", "code": "UNKNOWN_ROLE"},
        )
    return Actor(user_id=x_user_id, role=role)


def require_roles(*roles: RoleName):
    """Dependency factory that admits only the listed roles."""
    allowed = frozenset(roles)

    def dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "message": "Your role cannot perform this action",
                    "code": "PERMISSION_DENIED",
                    "details": {"role": actor.role.value},
                },
            )
        return actor

    return dependency
