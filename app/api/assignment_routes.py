"""ADBOARD — Customer Assignment API Routes (admin only)."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.auth.dependencies import require_role
from app.auth.permissions import ADMIN_ONLY
from app.database import get_store
from app.models.api_models import AssignmentRequest
from app.models.domain_models import Customer, User
from app.services.assignment_registry import CustomerAssignmentRegistry
from app.store.base import RecordStore

router = APIRouter(prefix="/admin/assignments", tags=["Assignments"])

require_admin = require_role(ADMIN_ONLY)


def get_registry(store: RecordStore = Depends(get_store)) -> CustomerAssignmentRegistry:
    return CustomerAssignmentRegistry(store)


@router.get("/available", response_model=List[Customer])
def list_available(
    user_id: Optional[str] = Query(
        None,
        description="Customers not assigned to this user. Omit for globally unassigned.",
    ),
    admin: User = Depends(require_admin),
    registry: CustomerAssignmentRegistry = Depends(get_registry),
):
    return registry.list_available(for_user_id=user_id)


@router.get("/{user_id}", response_model=List[Customer])
def list_assigned(
    user_id: str,
    admin: User = Depends(require_admin),
    registry: CustomerAssignmentRegistry = Depends(get_registry),
):
    return registry.list_assigned(user_id)


@router.post("", response_model=Customer)
def assign_customer(
    request: AssignmentRequest,
    admin: User = Depends(require_admin),
    registry: CustomerAssignmentRegistry = Depends(get_registry),
):
    """Assign a customer to a client user, replacing any previous owner."""
    return registry.assign(
        request.customer_id,
        request.user_id,
        expected_updated_at=request.expected_updated_at,
    )


@router.delete("/{customer_id}", response_model=Customer)
def unassign_customer(
    customer_id: str,
    admin: User = Depends(require_admin),
    registry: CustomerAssignmentRegistry = Depends(get_registry),
):
    return registry.unassign(customer_id)
