"""ADBOARD — Customer Assignment Registry.

Maintains which client-role user owns which customers. Each customer has
at most one owner; assigning to a new owner replaces the previous one.

Writes are last-write-wins. Two admins reassigning the same customer at
the same time race, and the later write silently replaces the earlier.
Callers that care pass `expected_updated_at` (the customer's `updated_at`
as they last read it) and get AssignmentConflict if it moved. That check
is read-then-write in the application, not a database-level compare-and-swap.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional

from app.core.errors import AssignmentConflict, AssignmentError, NotFound
from app.models.domain_models import UserRole
from app.auth.permissions import role_of
from app.store.base import RecordStore
from app.core.logging import get_logger

logger = get_logger("services.assignment")


def _utc(ts: datetime) -> datetime:
    """Normalize to aware UTC; SQLite hands back naive timestamps."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


class CustomerAssignmentRegistry:
    """Single-owner relation between customers and client-role users."""

    def __init__(self, store: RecordStore):
        self.store = store

    # ── Lookups ──

    def _customer(self, customer_id: str) -> Any:
        try:
            return self.store.get("customers", customer_id)
        except NotFound:
            raise AssignmentError(f"Customer '{customer_id}' does not exist")

    def _client_user(self, user_id: str) -> Any:
        try:
            user = self.store.get("users", user_id)
        except NotFound:
            raise AssignmentError(f"User '{user_id}' does not exist")
        role = role_of(user)
        if role is not UserRole.CLIENT:
            raise AssignmentError(
                f"User '{user_id}' has role '{role.value if role else 'unknown'}'; "
                "only client users can be assigned customers"
            )
        return user

    # ── Writes ──

    def assign(
        self,
        customer_id: str,
        user_id: str,
        expected_updated_at: Optional[datetime] = None,
    ) -> Any:
        """Make `user_id` the owner of `customer_id`, replacing any prior owner.

        Re-assigning to the current owner is a no-op.
        """
        customer = self._customer(customer_id)
        self._client_user(user_id)

        if customer.user_id == user_id:
            logger.debug(
                "Customer already assigned to this user; nothing to do",
                extra={"entity_id": customer_id, "user_id": user_id},
            )
            return customer

        if expected_updated_at is not None and _utc(customer.updated_at) != _utc(
            expected_updated_at
        ):
            raise AssignmentConflict(
                f"Customer '{customer_id}' was modified since it was read; reload and retry"
            )

        previous = customer.user_id
        updated = self.store.update("customers", customer_id, {"user_id": user_id})
        logger.info(
            f"Assigned customer (previous owner: {previous or 'none'})",
            extra={"entity_id": customer_id, "user_id": user_id},
        )
        return updated

    def unassign(self, customer_id: str) -> Any:
        """Clear the owner of `customer_id`. Already-unassigned is a no-op."""
        customer = self._customer(customer_id)
        if customer.user_id is None:
            return customer

        previous = customer.user_id
        updated = self.store.update("customers", customer_id, {"user_id": None})
        logger.info(
            "Unassigned customer",
            extra={"entity_id": customer_id, "user_id": previous},
        )
        return updated

    def release_all(self, user_id: str) -> int:
        """Unassign every customer owned by `user_id`.

        Used when a client user is deleted or moved to another role, so no
        customer is left pointing at a non-client owner.
        """
        released = 0
        for customer in self.list_assigned(user_id):
            self.store.update("customers", customer.id, {"user_id": None})
            released += 1
        if released:
            logger.info(
                f"Released {released} customer(s) from user",
                extra={"user_id": user_id},
            )
        return released

    # ── Reads ──

    def list_assigned(self, user_id: str) -> List[Any]:
        """Customers owned by `user_id`, by name."""
        return self.store.list("customers", {"user_id": user_id}, order_by=["name"])

    def list_available(self, for_user_id: Optional[str] = None) -> List[Any]:
        """Candidates for assignment, by name.

        Without `for_user_id`: customers nobody owns. With it: every customer
        not already owned by that user, including ones owned by someone else
        (assigning one of those moves it).
        """
        if for_user_id is None:
            return self.store.list("customers", {"user_id": None}, order_by=["name"])
        return [
            c
            for c in self.store.list("customers", order_by=["name"])
            if c.user_id != for_user_id
        ]
