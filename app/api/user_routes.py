"""ADBOARD — User, Role and Theme API Routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from app.auth.dependencies import get_current_user, get_optional_user, require_role
from app.auth.permissions import ADMIN_ONLY
from app.config import settings
from app.database import get_store
from app.models.api_models import ThemeUpdate, UserCreate, UserUpdate
from app.models.domain_models import Theme, User, UserRole
from app.services.assignment_registry import CustomerAssignmentRegistry
from app.store.base import RecordStore
from app.core.logging import get_logger

logger = get_logger("api.users")

router = APIRouter(tags=["Users"])

require_admin = require_role(ADMIN_ONLY)


# ── Current user ──


@router.get("/users/me", response_model=User)
def get_me(user: User = Depends(get_current_user)):
    return user


@router.get("/user/theme")
def get_theme(user: Optional[User] = Depends(get_optional_user)):
    """Stored theme preference; unauthenticated callers get the default."""
    if user is None:
        return {"theme": settings.default_theme}
    theme = user.theme_preference or settings.default_theme
    return {"theme": getattr(theme, "value", theme)}


@router.put("/user/theme")
def update_theme(
    request: ThemeUpdate,
    user: Optional[User] = Depends(get_optional_user),
    store: RecordStore = Depends(get_store),
):
    """Persist the theme preference.

    Unauthenticated callers get a 200 with success=false; the browser keeps
    the choice locally.
    """
    if user is None:
        return {"success": False, "message": "Not authenticated, theme saved locally only"}
    store.update("users", user.id, {"theme_preference": request.theme})
    return {"success": True, "theme": request.theme.value}


# ── Admin: user management ──


@router.get("/users", response_model=List[User])
def list_users(
    role: Optional[UserRole] = None,
    admin: User = Depends(require_admin),
    store: RecordStore = Depends(get_store),
):
    filters = {"role": role} if role else None
    return store.list("users", filters, order_by=["name"])


@router.post("/users", response_model=User, status_code=201)
def create_user(
    request: UserCreate,
    admin: User = Depends(require_admin),
    store: RecordStore = Depends(get_store),
):
    """Create the profile row for an identity-provider account."""
    if store.list("users", {"email": request.email}):
        raise HTTPException(status_code=409, detail="A user with this email already exists")
    record = request.model_dump()
    record["theme_preference"] = Theme(settings.default_theme)
    user = store.insert("users", record)
    logger.info(
        f"User created with role {user.role.value}",
        extra={"entity_id": user.id, "user_id": admin.id},
    )
    return user


@router.put("/users/{user_id}", response_model=User)
def update_user(
    user_id: str,
    request: UserUpdate,
    admin: User = Depends(require_admin),
    store: RecordStore = Depends(get_store),
):
    """Update name and/or role. A role change is a single write, effective on the next request."""
    existing = store.get("users", user_id)
    patch = request.model_dump(exclude_none=True)

    if "role" in patch and patch["role"] != existing.role:
        if existing.role == UserRole.CLIENT:
            CustomerAssignmentRegistry(store).release_all(user_id)
        logger.info(
            f"Role changed from {existing.role.value} to {patch['role'].value}",
            extra={"entity_id": user_id, "user_id": admin.id},
        )

    return store.update("users", user_id, patch)


@router.delete("/users/{user_id}")
def delete_user(
    user_id: str,
    admin: User = Depends(require_admin),
    store: RecordStore = Depends(get_store),
):
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")
    store.get("users", user_id)
    released = CustomerAssignmentRegistry(store).release_all(user_id)
    store.delete("users", user_id)
    logger.info("User deleted", extra={"entity_id": user_id, "user_id": admin.id})
    return {"success": True, "released_customers": released}
