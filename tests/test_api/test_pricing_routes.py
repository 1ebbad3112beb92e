"""Tests for pricing endpoints."""

import pytest

BASE = "/api/pricing"


@pytest.fixture
def create_product(client, category, public_headers):
    counter = {"n": 0}

    async def _create(unit_price: str = "100.00"):
        counter["n"] += 1
        response = await client.post(
            "/api/products/lifecycle",
            json={
                "name": f"Priced {counter['n']}",
                "category_id": category.id,
                "unit_price": unit_price,
                "sku": f"price-{counter['n']}",
            },
            headers=public_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create


class TestCalculate:
    @pytest.mark.asyncio
    async def test_quote_with_rule(self, client, create_product, admin_headers, public_headers):
        product = await create_product()
        rule = await client.post(
            f"{BASE}/rules",
            json={
                "rule_name": "Launch offer",
                "rule_type": "percentage",
                "product_id": product["id"],
                "discount_percentage": "10",
            },
            headers=admin_headers,
        )
        assert rule.status_code == 201

        response = await client.post(
            f"{BASE}/calculate",
            json={"productId": product["id"], "quantity": 2},
            headers=public_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["subtotal"] == 200.0
        assert data["total"] == 180.0
        assert data["applied_discounts"][0]["rule_name"] == "Launch offer"

    @pytest.mark.asyncio
    async def test_unknown_product_is_404(self, client):
        response = await client.post(f"{BASE}/calculate", json={"productId": 12345})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_quantity_must_be_positive(self, client, create_product):
        product = await create_product()

        response = await client.post(
            f"{BASE}/calculate", json={"productId": product["id"], "quantity": 0}
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_bundle(self, client, create_product):
        products = [await create_product() for _ in range(3)]

        response = await client.post(
            f"{BASE}/calculate-bundle",
            json={"items": [{"productId": p["id"], "quantity": 1} for p in products]},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["subtotal"] == 300.0
        assert data["bundle_discount"] == 15.0
        assert data["total"] == 285.0

    @pytest.mark.asyncio
    async def test_compare(self, client, create_product):
        product = await create_product()

        response = await client.post(
            f"{BASE}/compare",
            json={
                "productId": product["id"],
                "competitorPrices": [{"name": "Rival", "price": "80.00"}],
            },
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["position"] == "above_market"
        assert data["competitors"][0]["difference"] == 20.0
        assert data["competitors"][0]["difference_percentage"] == 25.0


class TestRules:
    @pytest.mark.asyncio
    async def test_public_cannot_create_rule(self, client, public_headers):
        response = await client.post(
            f"{BASE}/rules",
            json={"rule_name": "x", "rule_type": "percentage", "discount_percentage": "5"},
            headers=public_headers,
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_invalid_rule_is_400(self, client, admin_headers):
        response = await client.post(
            f"{BASE}/rules",
            json={"rule_name": "bulk", "rule_type": "bulk", "discount_percentage": "5"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert "min_quantity" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_list_and_update(self, client, admin_headers, public_headers):
        created = await client.post(
            f"{BASE}/rules",
            json={
                "rule_name": "Crate deal",
                "rule_type": "bulk",
                "min_quantity": 12,
                "discount_percentage": "8",
            },
            headers=admin_headers,
        )
        rule_id = created.json()["data"]["id"]

        updated = await client.put(
            f"{BASE}/rules/{rule_id}", json={"is_active": False}, headers=admin_headers
        )
        active = await client.get(
            f"{BASE}/rules", params={"is_active": "true"}, headers=public_headers
        )
        bulk = await client.get(f"{BASE}/rules", params={"rule_type": "bulk"})

        assert updated.status_code == 200
        assert updated.json()["data"]["is_active"] is False
        assert active.json()["data"] == []
        assert [r["id"] for r in bulk.json()["data"]] == [rule_id]

    @pytest.mark.asyncio
    async def test_unknown_rule_type_filter_is_400(self, client):
        response = await client.get(f"{BASE}/rules", params={"rule_type": "flash_sale"})

        assert response.status_code == 400


class TestPriceHistory:
    @pytest.mark.asyncio
    async def test_price_change_recorded(self, client, create_product, admin_headers):
        product = await create_product("10.00")

        changed = await client.put(
            f"{BASE}/products/{product['id']}/price",
            json={"unit_price": "12.50", "reason": "new supplier"},
            headers=admin_headers,
        )
        history = await client.get(f"{BASE}/history/{product['id']}", params={"days": 7})

        assert changed.status_code == 200
        assert changed.json()["data"]["unit_price"] == 12.5
        entries = history.json()["data"]
        assert [(e["old_price"], e["new_price"]) for e in entries] == [
            (10.0, 12.5),
            (None, 10.0),
        ]
        assert entries[0]["changed_by"] == "admin-1"

    @pytest.mark.asyncio
    async def test_public_cannot_change_price(self, client, create_product, public_headers):
        product = await create_product()

        response = await client.put(
            f"{BASE}/products/{product['id']}/price",
            json={"unit_price": "1.00"},
            headers=public_headers,
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_days_out_of_range(self, client, create_product):
        product = await create_product()

        response = await client.get(f"{BASE}/history/{product['id']}", params={"days": 0})

        assert response.status_code == 400
