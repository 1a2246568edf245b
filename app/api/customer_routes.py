"""ADBOARD — Customer API Routes."""

from typing import List

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user, require_role
from app.auth.permissions import STAFF, can_view_customer, has_permission
from app.core.errors import NotFound
from app.database import get_store
from app.models.api_models import CustomerCreate, CustomerUpdate
from app.models.domain_models import Customer, User
from app.store.base import RecordStore
from app.core.logging import get_logger

logger = get_logger("api.customers")

router = APIRouter(prefix="/customers", tags=["Customers"])

require_staff = require_role(STAFF)


def get_visible_customer(store: RecordStore, user: User, customer_id: str) -> Customer:
    """Fetch a customer, hiding ones a client is not assigned to."""
    customer = store.get("customers", customer_id)
    if not can_view_customer(user, customer):
        raise NotFound("customers", customer_id)
    return customer


@router.get("", response_model=List[Customer])
def list_customers(
    user: User = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    """All customers for staff; assigned customers only for clients."""
    if has_permission(user, STAFF):
        return store.list("customers", order_by=["name"])
    return store.list("customers", {"user_id": user.id}, order_by=["name"])


@router.get("/{customer_id}", response_model=Customer)
def get_customer(
    customer_id: str,
    user: User = Depends(get_current_user),
    store: RecordStore = Depends(get_store),
):
    return get_visible_customer(store, user, customer_id)


@router.post("", response_model=Customer, status_code=201)
def create_customer(
    request: CustomerCreate,
    user: User = Depends(require_staff),
    store: RecordStore = Depends(get_store),
):
    customer = store.insert("customers", request.model_dump())
    logger.info(
        f"Customer '{customer.name}' created",
        extra={"entity_id": customer.id, "user_id": user.id},
    )
    return customer


@router.put("/{customer_id}", response_model=Customer)
def update_customer(
    customer_id: str,
    request: CustomerUpdate,
    user: User = Depends(require_staff),
    store: RecordStore = Depends(get_store),
):
    """Edit contact details or status. Ownership changes go through /admin/assignments."""
    return store.update("customers", customer_id, request.model_dump(exclude_none=True))


@router.delete("/{customer_id}")
def delete_customer(
    customer_id: str,
    user: User = Depends(require_staff),
    store: RecordStore = Depends(get_store),
):
    """Delete a customer together with its metrics."""
    store.get("customers", customer_id)
    metrics = store.list("metrics", {"customer_id": customer_id})
    for m in metrics:
        store.delete("metrics", m.id)
    store.delete("customers", customer_id)
    logger.info(
        f"Customer deleted with {len(metrics)} metric rows",
        extra={"entity_id": customer_id, "user_id": user.id},
    )
    return {"success": True, "deleted_metrics": len(metrics)}
