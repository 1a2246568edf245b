"""Tests for the SQLModel record store."""

import pytest

from app.core.errors import NotFound, ValidationError
from app.models.domain_models import UserRole


class TestSQLRecordStore:
    def test_get_unknown_id_raises_not_found(self, store):
        with pytest.raises(NotFound) as exc:
            store.get("customers", "missing")

        assert exc.value.table == "customers"
        assert exc.value.status_code == 404

    def test_unknown_table(self, store):
        with pytest.raises(ValidationError):
            store.list("campaigns")

    def test_insert_generates_id_and_timestamps(self, store):
        customer = store.insert("customers", {"name": "Initech"})

        assert customer.id
        assert customer.created_at is not None
        assert customer.user_id is None
        assert customer.status.value == "active"

    def test_filter_on_null(self, store, acme, globex, client_user):
        store.update("customers", acme.id, {"user_id": client_user.id})

        unassigned = store.list("customers", {"user_id": None})

        assert [c.id for c in unassigned] == [globex.id]

    def test_filter_on_enum(self, store, admin_user, client_user, other_client_user):
        clients = store.list("users", {"role": UserRole.CLIENT}, order_by=["name"])

        assert [u.email for u in clients] == ["client@example.com", "client2@example.com"]

    def test_descending_order(self, store, acme, globex):
        names = [c.name for c in store.list("customers", order_by=["-name"])]

        assert names == ["Globex", "Acme Corp"]

    def test_update_bumps_updated_at_and_keeps_id(self, store, acme):
        before = store.get("customers", acme.id).updated_at

        updated = store.update("customers", acme.id, {"id": "hijack", "phone": "555-0100"})

        assert updated.id == acme.id
        assert updated.phone == "555-0100"
        assert updated.updated_at > before

    def test_update_unknown_field(self, store, acme):
        with pytest.raises(ValidationError):
            store.update("customers", acme.id, {"favourite_colour": "blue"})

    def test_delete(self, store, acme):
        store.delete("customers", acme.id)

        with pytest.raises(NotFound):
            store.get("customers", acme.id)
        with pytest.raises(NotFound):
            store.delete("customers", acme.id)
