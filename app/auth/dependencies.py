"""ADBOARD — Request identity and role-gate dependencies.

Authentication happens upstream: the identity provider / gateway stamps
the authenticated account id on each request as `X-User-Id`. Here we only
resolve that id to a user profile and apply the permission model.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status

from app.auth.permissions import Permission, has_permission
from app.core.errors import NotFound
from app.database import get_store
from app.models.domain_models import User
from app.store.base import RecordStore
from app.core.logging import get_logger

logger = get_logger("auth")


def get_optional_user(
    x_user_id: Optional[str] = Header(default=None),
    store: RecordStore = Depends(get_store),
) -> Optional[User]:
    """Resolve the caller, or None when unauthenticated / unknown."""
    if not x_user_id:
        return None
    try:
        return store.get("users", x_user_id)
    except NotFound:
        logger.warning("Unknown user id on request", extra={"user_id": x_user_id})
        return None


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """Resolve the caller or reject with 401."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user


class RoleGate:
    """Dependency that admits callers satisfying a Permission."""

    def __init__(self, required: Permission):
        self.required = required

    def __call__(
        self, request: Request, user: User = Depends(get_current_user)
    ) -> User:
        if not has_permission(user, self.required):
            logger.warning(
                "Access denied",
                extra={
                    "user_id": user.id,
                    "role": getattr(user.role, "value", user.role),
                    "required": sorted(r.value for r in self.required.roles),
                    "endpoint": request.url.path,
                    "method": request.method,
                },
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You don't have permission to perform this action",
            )
        return user


def require_role(*roles) -> RoleGate:
    """Build a gate for one or more roles. Admin always passes."""
    if len(roles) == 1:
        return RoleGate(Permission.of(roles[0]))
    return RoleGate(Permission.of(roles))
