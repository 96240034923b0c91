"""Tests for admin discount management"""

from decimal import Decimal
import uuid

import pytest

from dealcart.core.config import settings

from conftest import seed_discount

COUPON = {
    "kind": "coupon",
    "name": "Welcome 10",
    "code": "WELCOME10",
    "value_type": "percentage",
    "discount_value": "10",
    "coupon_code": "WELCOME10",
    "is_first_order_only": True,
    "minimum_quantity": 4,
}

async def _create(client, payload):
    response = await client.post("/api/v1/admin/discounts", json=payload)
    assert response.status_code == 201, response.text
    return response.json()

class TestCreate:

    async def test_create_coupon(self, client):
        body = await _create(client, COUPON)

        assert body["kind"] == "coupon"
        assert body["target"] == "cart"
        assert Decimal(body["discount_value"]) == Decimal("10")
        assert body["uses_count"] == 0
        assert body["is_active"] is True
        assert body["is_first_order_only"] is True
        # Bulk-only fields are dropped for coupons
        assert body["minimum_quantity"] is None

    async def test_create_bulk_requires_minimum_quantity(self, client):
        response = await client.post("/api/v1/admin/discounts", json={
            "kind": "bulk_discount",
            "name": "Bulk",
            "value_type": "percentage",
            "discount_value": "5",
        })
        assert response.status_code == 422

    async def test_create_bulk(self, client):
        product_id = str(uuid.uuid4())
        body = await _create(client, {
            "kind": "bulk_discount",
            "name": "Bulk",
            "value_type": "fixed_amount",
            "discount_value": "5.00",
            "minimum_quantity": 3,
            "product_id": product_id,
            "excluded_categories": [str(uuid.uuid4())],
        })

        assert body["minimum_quantity"] == 3
        assert body["product_id"] == product_id
        assert len(body["excluded_categories"]) == 1
        assert body["coupon_code"] is None

    async def test_window_must_be_ordered(self, client):
        response = await client.post("/api/v1/admin/discounts", json={
            **COUPON,
            "start_date": "2025-02-01T00:00:00",
            "end_date": "2025-01-01T00:00:00",
        })
        assert response.status_code == 422

    async def test_negative_value_rejected(self, client):
        response = await client.post("/api/v1/admin/discounts", json={**COUPON, "discount_value": "-5"})
        assert response.status_code == 422

class TestReadUpdateDelete:

    async def test_get_and_list(self, client):
        created = await _create(client, COUPON)
        await _create(client, {**COUPON, "name": "Paused", "code": "PAUSED", "is_active": False})

        response = await client.get(f"/api/v1/admin/discounts/{created['id']}")
        assert response.status_code == 200
        assert response.json()["code"] == "WELCOME10"

        everything = await client.get("/api/v1/admin/discounts")
        active = await client.get("/api/v1/admin/discounts", params={"is_active": "true"})
        assert len(everything.json()) == 2
        assert [d["code"] for d in active.json()] == ["WELCOME10"]

    async def test_get_unknown(self, client):
        response = await client.get(f"/api/v1/admin/discounts/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    async def test_update(self, client):
        created = await _create(client, COUPON)

        response = await client.put(f"/api/v1/admin/discounts/{created['id']}", json={
            "discount_value": "15",
            "max_uses": 100,
            "is_stackable": True,
        })

        assert response.status_code == 200
        body = response.json()
        assert Decimal(body["discount_value"]) == Decimal("15")
        assert body["max_uses"] == 100
        assert body["is_stackable"] is True
        assert body["name"] == "Welcome 10"

    async def test_update_cannot_invert_window(self, client):
        created = await _create(client, {**COUPON, "end_date": "2025-01-01T00:00:00"})

        response = await client.put(f"/api/v1/admin/discounts/{created['id']}", json={
            "start_date": "2025-06-01T00:00:00",
        })

        assert response.status_code == 400

    async def test_offsets_stored_as_utc_on_create(self, client):
        body = await _create(client, {**COUPON, "start_date": "2024-06-15T14:00:00+05:00"})
        assert body["start_date"] == "2024-06-15T09:00:00"

    async def test_offsets_stored_as_utc_on_update(self, client):
        created = await _create(client, {**COUPON, "end_date": "2025-01-01T00:00:00"})

        response = await client.put(f"/api/v1/admin/discounts/{created['id']}", json={
            "start_date": "2024-01-01T00:00:00Z",
        })

        assert response.status_code == 200
        assert response.json()["start_date"] == "2024-01-01T00:00:00"

    async def test_update_with_offset_cannot_invert_window(self, client):
        created = await _create(client, {**COUPON, "end_date": "2025-01-01T00:00:00"})

        response = await client.put(f"/api/v1/admin/discounts/{created['id']}", json={
            "start_date": "2025-01-01T01:30:00+01:00",
        })

        assert response.status_code == 400

    @pytest.mark.parametrize("field", ["name", "value_type", "target", "is_active", "is_stackable", "is_exclusive"])
    async def test_null_for_required_column_rejected(self, client, field):
        created = await _create(client, COUPON)

        response = await client.put(f"/api/v1/admin/discounts/{created['id']}", json={field: None})

        assert response.status_code == 422

    async def test_null_clears_optional_column(self, client):
        created = await _create(client, {**COUPON, "max_uses": 10})

        response = await client.put(f"/api/v1/admin/discounts/{created['id']}", json={"max_uses": None})

        assert response.status_code == 200
        assert response.json()["max_uses"] is None

    async def test_max_uses_below_recorded_uses(self, client, session_factory):
        async with session_factory() as db:
            record = await seed_discount(db, uses_count=5, max_uses=10)
            await db.commit()

        response = await client.put(f"/api/v1/admin/discounts/{record.id}", json={"max_uses": 2})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "BAD_REQUEST"

        unchanged = await client.get(f"/api/v1/admin/discounts/{record.id}")
        assert unchanged.json()["max_uses"] == 10

    async def test_delete(self, client):
        created = await _create(client, COUPON)

        response = await client.delete(f"/api/v1/admin/discounts/{created['id']}")
        assert response.status_code == 200
        assert response.json()["success"] is True

        response = await client.get(f"/api/v1/admin/discounts/{created['id']}")
        assert response.status_code == 404

class TestBulkAction:

    async def test_deactivate_reports_skipped_ids(self, client, session_factory):
        async with session_factory() as db:
            first = await seed_discount(db, name="First", code="FIRST")
            second = await seed_discount(db, name="Second", code="SECOND")
            await db.commit()

        unknown = str(uuid.uuid4())
        response = await client.post("/api/v1/admin/discounts/bulk-action", json={
            "discount_ids": [str(first.id), str(second.id), unknown, "not-a-uuid"],
            "action": "deactivate",
        })

        assert response.status_code == 200
        body = response.json()
        assert body["affected_count"] == 2
        assert body["skipped_ids"] == [unknown, "not-a-uuid"]

        active = await client.get("/api/v1/admin/discounts", params={"is_active": "true"})
        assert active.json() == []

    async def test_delete_action(self, client):
        created = await _create(client, COUPON)

        response = await client.post("/api/v1/admin/discounts/bulk-action", json={
            "discount_ids": [created["id"]],
            "action": "delete",
        })

        assert response.json()["affected_count"] == 1
        listing = await client.get("/api/v1/admin/discounts")
        assert listing.json() == []

    async def test_unknown_action(self, client):
        response = await client.post("/api/v1/admin/discounts/bulk-action", json={
            "discount_ids": [str(uuid.uuid4())],
            "action": "archive",
        })

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_ACTION"

class TestAdminKey:

    @pytest.fixture(autouse=True)
    def admin_key(self, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_API_KEY", "s3cret")

    async def test_missing_key_is_forbidden(self, client):
        response = await client.get("/api/v1/admin/discounts")

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "ADMIN_KEY_INVALID"

    async def test_wrong_key_is_forbidden(self, client):
        response = await client.get("/api/v1/admin/discounts", headers={"X-Admin-Key": "guess"})
        assert response.status_code == 403

    async def test_matching_key(self, client):
        response = await client.get("/api/v1/admin/discounts", headers={"X-Admin-Key": "s3cret"})
        assert response.status_code == 200
